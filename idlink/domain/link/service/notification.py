"""Welcome mail sent once a link is stored."""

import logging
from typing import Any

import logfire

from idlink.config import BrandConfig
from idlink.domain.link.model.link import Link
from idlink.domain.link.port.mail import Mail, MailReceipt, MailRenderer, MailTransport
from idlink.domain.shared.error import NotificationError
from idlink.domain.shared.service import Service

logger = logging.getLogger(__name__)

LINK_TEMPLATE = "link"
LINK_CATEGORIES = ("link", "repos")


class WelcomeMailService(Service):
    """Renders and sends the one-time welcome mail.

    Best effort: without a transport or a recipient nothing happens, and
    rendering or delivery failures are logged and dropped.
    """

    _renderer: MailRenderer
    _brand: BrandConfig
    _transport: MailTransport | None = None

    def recipients(self, link: Link, recipient: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
        """Return (to, cc). Operations is copied on service-account links only."""
        cc: tuple[str, ...] = ()
        if self._brand.operations_email and link.is_service_account:
            cc = (self._brand.operations_email,)
        return (recipient,), cc

    def content_options(
        self, link: Link, to: tuple[str, ...], correlation_id: str | None
    ) -> dict[str, Any]:
        return {
            "reason": (
                "You are receiving this one-time e-mail because you have linked your account. "
                "To stop receiving these mails, you can unlink your account. "
                f"This mail was sent to: {', '.join(to)}"
            ),
            "headline": f"Welcome to GitHub, {link.github_login}",
            "notification": "information",
            "app": f"{self._brand.company_name} GitHub",
            "correlation_id": correlation_id,
            "link": link.model_dump(exclude={"github_token"}),
        }

    async def send_welcome(
        self,
        link: Link,
        recipient: str | None,
        correlation_id: str | None = None,
    ) -> MailReceipt | None:
        if self._transport is None or not recipient:
            logger.debug("Welcome mail skipped: github_id=%s", link.github_id)
            return None

        to, cc = self.recipients(link, recipient)
        options = self.content_options(link, to, correlation_id)

        try:
            content = await self._renderer.render(LINK_TEMPLATE, options)
        except NotificationError as e:
            logger.error(
                "Welcome mail render failed: github_id=%s, error=%s", link.github_id, e.message
            )
            logfire.error("LinkMailRenderFailure", github_id=link.github_id, error=e.message)
            return None

        mail = Mail(
            to=to,
            cc=cc,
            subject=f"{link.aad_upn} linked to {link.github_login}",
            content=content,
            categories=LINK_CATEGORIES,
            correlation_id=correlation_id,
        )

        try:
            receipt = await self._transport.send(mail)
        except NotificationError as e:
            logger.error(
                "Welcome mail send failed: github_id=%s, transport=%s, error=%s",
                link.github_id,
                self._transport.name,
                e.message,
            )
            logfire.error("LinkMailFailure", github_id=link.github_id, error=e.message)
            return None

        logger.info(
            "Welcome mail sent: github_id=%s, transport=%s, message_id=%s",
            link.github_id,
            receipt.transport,
            receipt.message_id,
        )
        logfire.info("LinkMailSuccess", github_id=link.github_id, message_id=receipt.message_id)
        return receipt
