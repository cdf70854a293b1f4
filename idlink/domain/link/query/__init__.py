"""Link domain queries."""

from .check_reconnect import CheckReconnect, CheckReconnectHandler, ReconnectCheck, ReconnectStatus
from .get_link import GetMyLink, GetMyLinkHandler, LinkView
from .get_link_page import GetLinkPage, GetLinkPageHandler, LinkPage, LinkPageState

__all__ = [
    "CheckReconnect",
    "CheckReconnectHandler",
    "GetLinkPage",
    "GetLinkPageHandler",
    "GetMyLink",
    "GetMyLinkHandler",
    "LinkPage",
    "LinkPageState",
    "LinkView",
    "ReconnectCheck",
    "ReconnectStatus",
]
