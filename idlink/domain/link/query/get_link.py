from datetime import datetime

from idlink.domain.link.model.value import LinkContext
from idlink.domain.link.service.lookup import LinkLookup
from idlink.domain.shared.error import AuthorizationError, NotFoundError
from idlink.domain.shared.query import Query, QueryHandler, Result


class GetMyLink(Query):
    pass


class LinkView(Result):
    github_id: str
    github_login: str
    aad_id: str
    aad_upn: str | None
    aad_name: str | None
    is_service_account: bool
    service_account_mail: str | None
    hub_import: bool
    created_at: datetime
    updated_at: datetime | None


class GetMyLinkHandler(QueryHandler[GetMyLink, LinkView]):
    context: LinkContext
    lookup: LinkLookup

    async def run(self, query: GetMyLink) -> LinkView:
        if self.context.github is None:
            raise AuthorizationError("Sign in with GitHub first", code="missing_identity")

        link = await self.lookup.find(self.context.github.id)
        if link is None:
            raise NotFoundError(
                f"GitHub account {self.context.github.login} is not linked", code="no_link"
            )
        return LinkView.model_validate(link.model_dump(exclude={"github_token", "github_avatar"}))
