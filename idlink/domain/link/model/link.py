"""Link aggregate: the durable association of a GitHub account with a corporate identity."""

from datetime import UTC, datetime

from pydantic import model_validator
from typing_extensions import Self

from idlink.domain.link.model.value import LinkContext
from idlink.domain.shared.error import ValidationError
from idlink.domain.shared.model.aggregate import Aggregate


class Link(Aggregate):
    """A link between one GitHub account and one corporate identity.

    Invariants:
    - At most one Link exists per `github_id`; the store enforces this
    - `github_id` is immutable after creation
    - `service_account_mail` is set iff `is_service_account`
    """

    github_id: str
    github_login: str
    github_avatar: str | None = None
    github_token: str | None = None
    aad_id: str
    aad_upn: str | None = None
    aad_name: str | None = None
    is_service_account: bool = False
    service_account_mail: str | None = None
    hub_import: bool = False  # Imported from the legacy open source hub
    created_at: datetime
    updated_at: datetime | None = None

    @model_validator(mode="after")
    def _check_service_account_mail(self) -> Self:
        if self.is_service_account and not self.service_account_mail:
            raise ValueError("service accounts require a maintainer mail address")
        if not self.is_service_account and self.service_account_mail:
            raise ValueError("only service accounts carry a maintainer mail address")
        return self

    @classmethod
    def from_context(
        cls,
        context: LinkContext,
        *,
        is_service_account: bool = False,
        service_account_mail: str | None = None,
    ) -> "Link":
        """Build a link record from the caller's identities."""
        if context.github is None or context.corporate is None:
            raise ValidationError(
                "Both a GitHub and a corporate identity are required to link accounts",
                field="context",
            )
        return cls(
            github_id=context.github.id,
            github_login=context.github.login,
            github_avatar=context.github.avatar_url,
            github_token=context.github.access_token,
            aad_id=context.corporate.id,
            aad_upn=context.corporate.upn,
            aad_name=context.corporate.display_name,
            is_service_account=is_service_account,
            service_account_mail=service_account_mail if is_service_account else None,
            created_at=datetime.now(UTC),
        )

    @property
    def needs_reconnect(self) -> bool:
        """A link with a known login but no GitHub token must be re-authorized."""
        return bool(self.github_login) and not self.github_token

    def touch(self) -> None:
        self.updated_at = datetime.now(UTC)
