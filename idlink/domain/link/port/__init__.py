"""Link domain ports."""

from .cache import LinkCache
from .directory import DirectoryClient
from .mail import Mail, MailReceipt, MailRenderer, MailTransport
from .repository import LinkRepository

__all__ = [
    "DirectoryClient",
    "LinkCache",
    "LinkRepository",
    "Mail",
    "MailReceipt",
    "MailRenderer",
    "MailTransport",
]
