"""Jinja2 adapter for MailRenderer."""

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from idlink.domain.link.port.mail import MailRenderer
from idlink.domain.shared.error import NotificationError

TEMPLATE_DIR = Path(__file__).parent / "templates"


class JinjaMailRenderer(MailRenderer):
    """Renders `<name>.html.j2` templates from a directory."""

    def __init__(self, template_dir: Path = TEMPLATE_DIR) -> None:
        self._env = Environment(
            loader=FileSystemLoader(searchpath=str(template_dir)),
            autoescape=select_autoescape(["html", "j2"]),
            enable_async=True,
        )

    async def render(self, template: str, context: dict[str, Any]) -> str:
        try:
            tpl = self._env.get_template(f"{template}.html.j2")
            return await tpl.render_async(**context)
        except TemplateError as e:
            raise NotificationError(
                f"Failed to render mail template '{template}': {e}", code="mail_render_failed"
            ) from e
