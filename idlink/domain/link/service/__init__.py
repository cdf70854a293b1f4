"""Link domain services."""

from .guest_gate import GuestGate
from .lifecycle import LinkCreation, LinkLifecycle
from .lookup import LinkLookup
from .notification import WelcomeMailService
from .session import SessionTokenService

__all__ = [
    "GuestGate",
    "LinkCreation",
    "LinkLifecycle",
    "LinkLookup",
    "SessionTokenService",
    "WelcomeMailService",
]
