"""Link domain commands."""

from .link_account import LinkAccount, LinkAccountHandler, LinkAccountResult
from .update_link import UpdateLink, UpdateLinkHandler, UpdateLinkResult, UpdateLinkStatus

__all__ = [
    "LinkAccount",
    "LinkAccountHandler",
    "LinkAccountResult",
    "UpdateLink",
    "UpdateLinkHandler",
    "UpdateLinkResult",
    "UpdateLinkStatus",
]
