"""Mint a session token for local development."""

import sys

import cyclopts

from idlink.cli.console import get_console
from idlink.config import Config
from idlink.domain.link.model.value import CorporateIdentity, GitHubIdentity
from idlink.domain.link.service.session import SessionTokenService

app = cyclopts.App(name="token", help="Create a signed session token (development)")


@app.default
def token(
    *,
    github_id: str | None = None,
    github_login: str | None = None,
    aad_id: str | None = None,
    aad_upn: str | None = None,
    aad_name: str | None = None,
) -> None:
    """Print a session token carrying the given identities.

    Signed with the configured session secret (IDLINK_SESSION__SECRET).

    Args:
        github_id: GitHub account id.
        github_login: GitHub login.
        aad_id: Corporate directory object id.
        aad_upn: Corporate user principal name.
        aad_name: Corporate display name.
    """
    console = get_console()
    config = Config()  # type: ignore[call-arg]
    if not config.session.secret:
        console.error("No session secret configured", hint="Set IDLINK_SESSION__SECRET")
        sys.exit(1)

    github = None
    if github_id:
        github = GitHubIdentity(id=github_id, login=github_login or github_id)
    corporate = None
    if aad_id:
        corporate = CorporateIdentity(id=aad_id, upn=aad_upn, display_name=aad_name)
    if github is None and corporate is None:
        console.error("Nothing to sign", hint="Pass --github-id and/or --aad-id")
        sys.exit(1)

    service = SessionTokenService(_config=config.session)
    console.print(service.create_session_token(github=github, corporate=corporate), soft_wrap=True)
