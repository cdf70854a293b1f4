"""Account-change command: point an existing link at the current corporate identity."""

from enum import Enum

from idlink.config import AuthenticationConfig
from idlink.domain.link.event import LinkUpdated
from idlink.domain.link.model.link import Link
from idlink.domain.link.model.value import LinkContext
from idlink.domain.link.service.guest_gate import GuestGate
from idlink.domain.link.service.lifecycle import LinkLifecycle
from idlink.domain.link.service.lookup import LinkLookup
from idlink.domain.shared.command import Command, CommandHandler, Result
from idlink.domain.shared.error import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    PolicyBlockedError,
)
from idlink.domain.shared.port.event_bus import EventBus


class UpdateLinkStatus(Enum):
    UPDATED = "updated"
    NEEDS_CORPORATE_SIGN_IN = "needs_corporate_sign_in"


class UpdateLink(Command):
    pass


class UpdateLinkResult(Result):
    status: UpdateLinkStatus
    message: str


class UpdateLinkHandler(CommandHandler[UpdateLink, UpdateLinkResult]):
    """Rebuilds the link from the current session and overwrites the stored one.

    Only available when users sign in with GitHub first; under the "aad"
    scheme changing the GitHub account is not supported.
    """

    context: LinkContext
    auth_config: AuthenticationConfig
    guest_gate: GuestGate
    lifecycle: LinkLifecycle
    lookup: LinkLookup
    event_bus: EventBus

    async def run(self, cmd: UpdateLink) -> UpdateLinkResult:
        if self.auth_config.scheme == "aad":
            raise InvalidStateError(
                "Changing a GitHub account is not yet supported.", code="change_unsupported"
            )

        github = self.context.github
        if github is None:
            raise AuthorizationError("Sign in with GitHub first", code="missing_identity")

        if self.context.corporate is None or not self.context.corporate.upn:
            return UpdateLinkResult(
                status=UpdateLinkStatus.NEEDS_CORPORATE_SIGN_IN,
                message=(
                    f"Update your account {github.login} by signing in with corporate credentials."
                ),
            )

        decision = await self.guest_gate.evaluate(self.context.corporate.id)
        if decision.is_blocked:
            raise PolicyBlockedError(
                decision.message or "Guests may not link", code="guest_blocked"
            )
        context = self.context
        if decision.principal_name_override is not None:
            context = context.with_principal_name(decision.principal_name_override)

        existing = await self.lookup.find(github.id)
        if existing is None:
            raise NotFoundError(f"No link exists for GitHub account {github.login}", code="no_link")

        link = Link.from_context(
            context,
            is_service_account=existing.is_service_account,
            service_account_mail=existing.service_account_mail,
        )
        link.hub_import = existing.hub_import
        link = await self.lifecycle.update(link)

        await self.event_bus.publish(
            LinkUpdated(github_id=link.github_id, aad_id=link.aad_id, aad_upn=link.aad_upn)
        )
        return UpdateLinkResult(
            status=UpdateLinkStatus.UPDATED,
            message=(
                "Your GitHub account is now associated with the corporate identity for "
                f"{link.aad_upn}."
            ),
        )
