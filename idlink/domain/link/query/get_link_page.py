"""What to show on the link page for the current session."""

import logging
from enum import Enum

from idlink.config import AuthenticationConfig
from idlink.domain.link.model.link import Link
from idlink.domain.link.model.value import DirectoryUser, LinkContext
from idlink.domain.link.port.directory import DirectoryClient
from idlink.domain.link.service.guest_gate import GuestGate
from idlink.domain.link.service.lookup import LinkLookup
from idlink.domain.shared.error import DirectoryLookupError
from idlink.domain.shared.query import Query, QueryHandler, Result

logger = logging.getLogger(__name__)


class LinkPageState(Enum):
    NEEDS_SIGN_IN = "needs_sign_in"
    BLOCKED = "blocked"
    ALREADY_LINKED = "already_linked"
    SHOW_LINK_PAGE = "show_link_page"


class GetLinkPage(Query):
    pass


class LinkPage(Result):
    state: LinkPageState
    message: str | None = None
    link: Link | None = None
    directory_user: DirectoryUser | None = None
    is_service_account_candidate: bool = False


class GetLinkPageHandler(QueryHandler[GetLinkPage, LinkPage]):
    context: LinkContext
    auth_config: AuthenticationConfig
    guest_gate: GuestGate
    lookup: LinkLookup
    directory: DirectoryClient | None = None

    async def run(self, query: GetLinkPage) -> LinkPage:
        github, corporate = self.context.github, self.context.corporate
        if github is None or corporate is None or not corporate.upn:
            return LinkPage(state=LinkPageState.NEEDS_SIGN_IN)

        decision = await self.guest_gate.evaluate(corporate.id)
        if decision.is_blocked:
            return LinkPage(state=LinkPageState.BLOCKED, message=decision.message)

        link = await self.lookup.find(github.id)
        if link is not None:
            return LinkPage(state=LinkPageState.ALREADY_LINKED, link=link)

        if self.auth_config.scheme != "aad" or self.directory is None:
            return LinkPage(state=LinkPageState.SHOW_LINK_PAGE)

        # Lookup problems must not stop anyone from linking; new hires may not
        # be fully present in the directory yet.
        try:
            user = await self.directory.get_user_and_manager_by_id(corporate.id)
        except DirectoryLookupError as e:
            logger.warning(
                "Link page directory lookup failed: aad_id=%s, error=%s", corporate.id, e
            )
            return LinkPage(state=LinkPageState.SHOW_LINK_PAGE)

        return LinkPage(
            state=LinkPageState.SHOW_LINK_PAGE,
            directory_user=user,
            is_service_account_candidate=user.manager is None,
        )
