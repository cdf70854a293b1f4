from enum import Enum

from idlink.config import AuthenticationConfig
from idlink.domain.link.model.value import LinkContext
from idlink.domain.link.service.lookup import LinkLookup
from idlink.domain.shared.error import InvalidStateError
from idlink.domain.shared.query import Query, QueryHandler, Result


class ReconnectStatus(Enum):
    RECONNECTED = "reconnected"
    NEEDS_RECONNECT = "needs_reconnect"


class CheckReconnect(Query):
    pass


class ReconnectCheck(Result):
    status: ReconnectStatus
    expected_login: str | None = None
    migrated_hub_user: bool = False


class CheckReconnectHandler(QueryHandler[CheckReconnect, ReconnectCheck]):
    """Tells corporate-first users whether their link still needs a GitHub sign-in."""

    context: LinkContext
    auth_config: AuthenticationConfig
    lookup: LinkLookup

    async def run(self, query: CheckReconnect) -> ReconnectCheck:
        if self.auth_config.scheme != "aad":
            raise InvalidStateError(
                "Account reconnection is only needed for Active Directory "
                "authentication applications.",
                code="reconnect_unsupported",
            )

        if self.context.github is not None:
            return ReconnectCheck(status=ReconnectStatus.RECONNECTED)

        link = None
        if self.context.corporate is not None:
            link = await self.lookup.find_by_aad_id(self.context.corporate.id)
        if link is None or not link.needs_reconnect:
            return ReconnectCheck(status=ReconnectStatus.RECONNECTED)

        return ReconnectCheck(
            status=ReconnectStatus.NEEDS_RECONNECT,
            expected_login=link.github_login,
            migrated_hub_user=link.hub_import,
        )
