"""Link domain models."""

from .link import Link
from .value import (
    CorporateIdentity,
    DirectoryUser,
    GitHubIdentity,
    GuestDecision,
    GuestOutcome,
    LinkContext,
    LinkOutcome,
    LinkRequest,
)

__all__ = [
    "CorporateIdentity",
    "DirectoryUser",
    "GitHubIdentity",
    "GuestDecision",
    "GuestOutcome",
    "Link",
    "LinkContext",
    "LinkOutcome",
    "LinkRequest",
]
