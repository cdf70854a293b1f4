"""Value objects for the link domain."""

from enum import Enum

from idlink.domain.shared.model.value import ValueObject

GUEST_USER_TYPE = "Guest"


class GitHubIdentity(ValueObject):
    """The signed-in GitHub account."""

    id: str
    login: str
    avatar_url: str | None = None
    access_token: str | None = None


class CorporateIdentity(ValueObject):
    """The signed-in corporate directory identity."""

    id: str  # Directory object id
    upn: str | None = None  # userPrincipalName, doubles as the corporate username
    display_name: str | None = None


class LinkContext(ValueObject):
    """Everything a link operation knows about the caller.

    Built once per request from the session and passed explicitly into
    every operation; nothing in the domain reads session state directly.
    """

    github: GitHubIdentity | None = None
    corporate: CorporateIdentity | None = None
    correlation_id: str | None = None

    @property
    def has_both_identities(self) -> bool:
        return self.github is not None and self.corporate is not None

    def with_principal_name(self, principal_name: str) -> "LinkContext":
        """Return a copy whose corporate username is replaced."""
        if self.corporate is None:
            return self
        corporate = self.corporate.model_copy(update={"upn": principal_name})
        return self.model_copy(update={"corporate": corporate})


class DirectoryUser(ValueObject):
    """Profile attributes resolved from the corporate directory."""

    id: str
    user_type: str | None = None  # "Member" or "Guest"
    display_name: str | None = None
    user_principal_name: str | None = None
    mail: str | None = None
    manager: "DirectoryUser | None" = None

    @property
    def is_guest(self) -> bool:
        return self.user_type == GUEST_USER_TYPE


class GuestOutcome(Enum):
    ALLOWED = "allowed"
    ALLOWED_VIA_OVERRIDE = "allowed_via_override"
    BLOCKED = "blocked"


class GuestDecision(ValueObject):
    """Per-request verdict of the guest gate. Never persisted."""

    aad_id: str
    outcome: GuestOutcome
    user_type: str | None = None
    principal_name: str | None = None
    display_name: str | None = None
    message: str | None = None  # User-facing explanation when blocked

    @property
    def is_blocked(self) -> bool:
        return self.outcome is GuestOutcome.BLOCKED

    @property
    def principal_name_override(self) -> str | None:
        """Canonical corporate username for the rest of the request, if overridden."""
        if self.outcome is GuestOutcome.ALLOWED_VIA_OVERRIDE:
            return self.principal_name
        return None


class LinkRequest(ValueObject):
    """What the user submitted on the link form."""

    is_service_account: bool = False
    service_account_mail: str | None = None  # Maintainer contact for service accounts
    linked_account_mail: str | None = None  # Welcome mail recipient


class LinkOutcome(Enum):
    CREATED = "created"
    RECOVERED_VIA_UPDATE = "recovered_via_update"
    BLOCKED = "blocked"
    INVALID = "invalid"
