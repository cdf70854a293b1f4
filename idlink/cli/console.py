"""Console output for the CLI.

Wraps rich for consistent output. All CLI output should go through this module.
"""

from typing import Any

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.table import Table


class Console:
    """CLI output manager wrapping rich."""

    def __init__(self, *, force_terminal: bool | None = None, quiet: bool = False) -> None:
        self._console = RichConsole(force_terminal=force_terminal, stderr=False)
        self._err_console = RichConsole(force_terminal=force_terminal, stderr=True)
        self._quiet = quiet

    def success(self, message: str) -> None:
        self._console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {message}")
        if hint:
            self._err_console.print(f"  [dim]{hint}[/dim]")

    def warning(self, message: str) -> None:
        self._console.print(f"[yellow]⚠[/yellow] {message}")

    def info(self, message: str) -> None:
        """Print an info message (suppressed in quiet mode)."""
        if not self._quiet:
            self._console.print(f"[dim]{message}[/dim]")

    def print(self, *args: Any, **kwargs: Any) -> None:
        self._console.print(*args, **kwargs)

    def link_detail(self, link: dict[str, Any]) -> None:
        """Print a link as a two-column table inside a panel."""
        table = Table(show_header=False, box=None, padding=(0, 2))
        table.add_column(style="cyan")
        table.add_column()

        rows = [
            ("GitHub", f"{link.get('github_login')} ({link.get('github_id')})"),
            ("Corporate", link.get("aad_upn") or "-"),
            ("Name", link.get("aad_name") or "-"),
            ("Directory id", link.get("aad_id") or "-"),
            ("Created", link.get("created_at") or "-"),
            ("Updated", link.get("updated_at") or "-"),
        ]
        if link.get("is_service_account"):
            rows.append(("Service account", link.get("service_account_mail") or "-"))
        if link.get("hub_import"):
            rows.append(("Imported", "yes"))

        for label, value in rows:
            table.add_row(label, str(value))

        self._console.print(
            Panel(
                table,
                title=f"[bold]{link.get('github_login')}[/bold]",
                border_style="blue",
                padding=(1, 2),
            )
        )


# Module-level default instance for convenience
_default: Console | None = None


def get_console() -> Console:
    """Get the default console instance."""
    global _default
    if _default is None:
        _default = Console()
    return _default
