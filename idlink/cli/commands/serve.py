"""Run the API server in the foreground."""

import cyclopts
import logfire
import uvicorn

from idlink.cli.console import get_console

app = cyclopts.App(name="serve", help="Run the idlink API server")


@app.default
def serve(host: str = "127.0.0.1", port: int = 8000, reload: bool = False) -> None:
    """Start the API server.

    Args:
        host: Host to bind to.
        port: Port to listen on.
        reload: Restart on code changes (development only).
    """
    # Logfire must be configured before the app is created
    logfire.configure(send_to_logfire="if-token-present", service_name="idlink")

    get_console().info(f"Serving idlink on http://{host}:{port}")
    uvicorn.run(
        "idlink.application.api.rest.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )
