"""Mail transports: an HTTP mail API and plain SMTP."""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from email.utils import make_msgid

import httpx

from idlink.config import HttpMailConfig, SmtpMailConfig
from idlink.domain.link.port.mail import Mail, MailReceipt, MailTransport
from idlink.domain.shared.error import NotificationError

logger = logging.getLogger(__name__)


class HttpMailTransport(MailTransport):
    """Posts messages as JSON to a mail service endpoint."""

    def __init__(self, config: HttpMailConfig, sender: str, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._sender = sender
        self._http = http_client

    @property
    def name(self) -> str:
        return "http"

    async def send(self, mail: Mail) -> MailReceipt:
        payload = {
            "from": self._sender,
            "to": list(mail.to),
            "cc": list(mail.cc),
            "subject": mail.subject,
            "content": mail.content,
            "categories": list(mail.categories),
            "correlationId": mail.correlation_id,
        }
        headers = {"Accept": "application/json"}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"

        try:
            response = await self._http.post(self._config.url, json=payload, headers=headers)
        except httpx.RequestError as e:
            raise NotificationError(
                f"Failed to connect to the mail service: {e}", code="mail_unavailable"
            ) from e

        if response.status_code >= 300:
            logger.error(
                "Mail service rejected message: status=%d, body=%s",
                response.status_code,
                response.text,
            )
            raise NotificationError(
                f"Mail service rejected message: {response.status_code}", code="mail_rejected"
            )

        try:
            body = response.json() if response.content else {}
        except ValueError:
            # Delivered; the service just did not answer with JSON
            logger.warning("Mail service returned a non-JSON body: status=%d", response.status_code)
            body = {}
        return MailReceipt(
            transport=self.name,
            message_id=body.get("id") if isinstance(body, dict) else None,
            details={"status": response.status_code},
        )


class SmtpMailTransport(MailTransport):
    """Sends HTML mail over SMTP. The blocking client runs in a worker thread."""

    def __init__(self, config: SmtpMailConfig, sender: str) -> None:
        self._config = config
        self._sender = sender

    @property
    def name(self) -> str:
        return "smtp"

    def build_message(self, mail: Mail) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self._sender
        msg["To"] = ", ".join(mail.to)
        if mail.cc:
            msg["Cc"] = ", ".join(mail.cc)
        msg["Subject"] = mail.subject
        msg["Message-ID"] = make_msgid()
        if mail.categories:
            msg["X-Categories"] = ", ".join(mail.categories)
        if mail.correlation_id:
            msg["X-Correlation-ID"] = mail.correlation_id
        msg.set_content(mail.content, subtype="html")
        return msg

    async def send(self, mail: Mail) -> MailReceipt:
        msg = self.build_message(mail)
        try:
            await asyncio.to_thread(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"SMTP delivery failed: {e}", code="mail_unavailable") from e
        return MailReceipt(transport=self.name, message_id=msg["Message-ID"])

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self._config.host, self._config.port) as server:
            if self._config.use_tls:
                server.starttls()
            if self._config.username:
                server.login(self._config.username, self._config.password)
            server.send_message(msg)
