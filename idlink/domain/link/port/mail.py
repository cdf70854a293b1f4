"""Mail ports: template rendering and transport."""

from abc import abstractmethod
from dataclasses import dataclass, field
from typing import Any, Protocol

from idlink.domain.shared.port import Port


@dataclass(frozen=True)
class Mail:
    """An outgoing message, rendered and ready to send."""

    to: tuple[str, ...]
    subject: str
    content: str
    cc: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    correlation_id: str | None = None


@dataclass(frozen=True)
class MailReceipt:
    """What the transport reported back after accepting a message."""

    transport: str
    message_id: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


class MailRenderer(Port, Protocol):
    @abstractmethod
    async def render(self, template: str, context: dict[str, Any]) -> str:
        """Render a named mail template to HTML.

        Raises:
            NotificationError: If the template is missing or fails to render
        """
        ...


class MailTransport(Port, Protocol):
    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def send(self, mail: Mail) -> MailReceipt:
        """Deliver a message.

        Raises:
            NotificationError: If the transport rejects or cannot deliver the message
        """
        ...
