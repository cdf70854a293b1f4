"""Link command: gate the corporate identity, then create the link."""

import logging

from idlink.domain.link.model.value import LinkContext, LinkOutcome, LinkRequest
from idlink.domain.link.service.guest_gate import GuestGate
from idlink.domain.link.service.lifecycle import LinkLifecycle
from idlink.domain.shared.command import Command, CommandHandler, Result
from idlink.domain.shared.error import AuthorizationError, ValidationError

logger = logging.getLogger(__name__)


class LinkAccount(Command):
    """Command to link the signed-in GitHub account to the signed-in corporate identity."""

    is_service_account: bool = False
    service_account_mail: str | None = None
    linked_account_mail: str | None = None


class LinkAccountResult(Result):
    """Outcome of a link attempt.

    `created` and `recovered_via_update` are both successes; `blocked` and
    `invalid` carry a user-facing message.
    """

    outcome: LinkOutcome
    message: str | None = None
    github_id: str | None = None
    aad_upn: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome in (LinkOutcome.CREATED, LinkOutcome.RECOVERED_VIA_UPDATE)


class LinkAccountHandler(CommandHandler[LinkAccount, LinkAccountResult]):
    """Handler for LinkAccount command."""

    context: LinkContext
    guest_gate: GuestGate
    lifecycle: LinkLifecycle

    async def run(self, cmd: LinkAccount) -> LinkAccountResult:
        context = self.context
        if context.github is None or context.corporate is None:
            raise AuthorizationError(
                "Sign in with both GitHub and corporate credentials to link accounts",
                code="missing_identity",
            )

        decision = await self.guest_gate.evaluate(context.corporate.id)
        if decision.is_blocked:
            logger.info("Link blocked for guest: aad_id=%s", context.corporate.id)
            return LinkAccountResult(outcome=LinkOutcome.BLOCKED, message=decision.message)

        override = decision.principal_name_override
        if override is not None:
            context = context.with_principal_name(override)

        request = LinkRequest(
            is_service_account=cmd.is_service_account,
            service_account_mail=cmd.service_account_mail,
            linked_account_mail=cmd.linked_account_mail,
        )
        try:
            creation = await self.lifecycle.create(context, request)
        except ValidationError as e:
            return LinkAccountResult(outcome=LinkOutcome.INVALID, message=e.message)

        return LinkAccountResult(
            outcome=creation.outcome,
            github_id=creation.link.github_id,
            aad_upn=creation.link.aad_upn,
        )
