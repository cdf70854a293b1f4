"""Show the link for a session."""

import sys

import cyclopts
import httpx

from idlink.cli.console import get_console

app = cyclopts.App(name="show", help="Show the link for a session token")


@app.default
def show(token: str, /, *, server: str = "http://127.0.0.1:8000") -> None:
    """Show the link belonging to the GitHub account in a session token.

    Args:
        token: Session token (see `idlink token`).
        server: Base URL of the idlink server.
    """
    console = get_console()

    try:
        response = httpx.get(
            f"{server.rstrip('/')}/api/v1/links/me",
            headers={"Authorization": f"Bearer {token}"},
            timeout=10.0,
        )
    except httpx.RequestError as e:
        console.error(
            f"Cannot reach {server}: {e}", hint="Is the server running? Try 'idlink serve'"
        )
        sys.exit(1)

    if response.status_code == 404:
        console.warning("This GitHub account is not linked")
        sys.exit(1)
    if response.status_code != 200:
        body = response.json() if response.content else {}
        message = body.get("message") or body.get("detail") or response.text
        console.error(f"Request failed ({response.status_code}): {message}")
        sys.exit(1)

    console.link_detail(response.json())
