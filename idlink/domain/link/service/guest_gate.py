"""Guest policy gate, evaluated before any link mutation."""

import logging

import logfire

from idlink.config import ActiveDirectoryConfig
from idlink.domain.link.model.value import GUEST_USER_TYPE, GuestDecision, GuestOutcome
from idlink.domain.link.port.directory import DirectoryClient
from idlink.domain.shared.error import (
    ConfigurationError,
    DirectoryLookupError,
    ValidationError,
)
from idlink.domain.shared.service import Service

logger = logging.getLogger(__name__)

_blocked_guests = logfire.metric_counter(
    "links_blocked_for_guests",
    unit="1",
    description="Link attempts rejected because the corporate identity is a guest",
)


def _blocked_message(display_name: str | None, principal_name: str | None) -> str:
    signed_in_as = " ".join(part for part in (display_name, principal_name) if part)
    return (
        "This system is not available to guests. "
        f"You are currently signed in as {signed_in_as}. "
        "Please sign out or try a private browser window."
    )


class GuestGate(Service):
    """Decides whether a corporate identity may be linked.

    With `block_guest_user_types` off this is a no-op that never touches the
    directory. With it on, exactly one directory lookup is made per call and
    guests are blocked unless their id is listed in `authorized_guest_ids`.
    Authorized guests get their directory principal name back as the
    canonical username for the rest of the request.
    """

    _config: ActiveDirectoryConfig
    _directory: DirectoryClient | None = None

    @property
    def enabled(self) -> bool:
        return self._config.block_guest_user_types

    async def evaluate(self, aad_id: str) -> GuestDecision:
        """Evaluate the guest policy for one corporate identity.

        Raises:
            ValidationError: If aad_id is empty
            ConfigurationError: If gating is enabled but no directory is configured
            DirectoryLookupError: If the directory lookup fails
        """
        if not aad_id:
            raise ValidationError("A corporate identity is required", field="aad_id")

        if not self.enabled:
            return GuestDecision(aad_id=aad_id, outcome=GuestOutcome.ALLOWED)

        if self._directory is None:
            raise ConfigurationError(
                "User type validation cannot be performed because there is no "
                "directory client configured for this type of account",
                code="directory_not_configured",
            )

        logger.info("Guest check started: aad_id=%s", aad_id)
        with logfire.span("GuestGate", aad_id=aad_id):
            try:
                user = await self._directory.get_user_by_id(aad_id)
            except DirectoryLookupError:
                logger.exception("Guest check directory lookup failed: aad_id=%s", aad_id)
                raise

            decision = self._decide(
                aad_id, user.user_type, user.display_name, user.user_principal_name
            )

            logfire.info(
                "Guest check completed",
                aad_id=aad_id,
                user_type=user.user_type,
                outcome=decision.outcome.value,
            )

        logger.info(
            "Guest check completed: aad_id=%s, user_type=%s, outcome=%s",
            aad_id,
            user.user_type,
            decision.outcome.value,
        )
        if decision.is_blocked:
            _blocked_guests.add(1)
        return decision

    def _decide(
        self,
        aad_id: str,
        user_type: str | None,
        display_name: str | None,
        principal_name: str | None,
    ) -> GuestDecision:
        fields = dict(
            aad_id=aad_id,
            user_type=user_type,
            principal_name=principal_name,
            display_name=display_name,
        )
        if user_type != GUEST_USER_TYPE:
            return GuestDecision(outcome=GuestOutcome.ALLOWED, **fields)

        if aad_id in self._config.authorized_guest_ids:
            logger.info(
                "Specifically authorized guest: aad_id=%s, upn=%s", aad_id, principal_name
            )
            return GuestDecision(outcome=GuestOutcome.ALLOWED_VIA_OVERRIDE, **fields)

        return GuestDecision(
            outcome=GuestOutcome.BLOCKED,
            message=_blocked_message(display_name, principal_name),
            **fields,
        )
