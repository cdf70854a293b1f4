"""Link routes: link page, link creation, reconnect and account change."""

import logging

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from idlink.config import Config
from idlink.domain.link.command.link_account import LinkAccount, LinkAccountHandler
from idlink.domain.link.command.update_link import (
    UpdateLink,
    UpdateLinkHandler,
    UpdateLinkStatus,
)
from idlink.domain.link.model.value import LinkOutcome
from idlink.domain.link.query.check_reconnect import (
    CheckReconnect,
    CheckReconnectHandler,
    ReconnectCheck,
)
from idlink.domain.link.query.get_link import GetMyLink, GetMyLinkHandler, LinkView
from idlink.domain.link.query.get_link_page import GetLinkPage, GetLinkPageHandler

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Links"], route_class=DishkaRoute)

# HTTP status per link outcome; both success outcomes look the same to callers
LINK_OUTCOME_STATUS: dict[LinkOutcome, int] = {
    LinkOutcome.CREATED: 201,
    LinkOutcome.RECOVERED_VIA_UPDATE: 201,
    LinkOutcome.BLOCKED: 403,
    LinkOutcome.INVALID: 400,
}


class LinkRequestBody(BaseModel):
    """Request body for linking the signed-in accounts."""

    is_service_account: bool = False
    service_account_mail: str | None = None
    linked_account_mail: str | None = None


class DirectoryUserResponse(BaseModel):
    id: str
    display_name: str | None
    user_principal_name: str | None
    mail: str | None
    has_manager: bool


class LinkPageResponse(BaseModel):
    state: str
    message: str | None = None
    link: LinkView | None = None
    directory_user: DirectoryUserResponse | None = None
    is_service_account_candidate: bool = False


class LinkCreatedResponse(BaseModel):
    outcome: str
    github_id: str | None
    aad_upn: str | None
    redirect: str


class LinkRejectedResponse(BaseModel):
    outcome: str
    message: str | None


class UpdateLinkResponse(BaseModel):
    status: str
    message: str
    redirect: str


@router.get("/link", response_model=LinkPageResponse)
async def get_link_page(handler: FromDishka[GetLinkPageHandler]) -> LinkPageResponse:
    """Decide what the link page shows for the current session."""
    page = await handler.run(GetLinkPage())

    link = None
    if page.link is not None:
        link = LinkView.model_validate(
            page.link.model_dump(exclude={"github_token", "github_avatar"})
        )
    directory_user = None
    if page.directory_user is not None:
        user = page.directory_user
        directory_user = DirectoryUserResponse(
            id=user.id,
            display_name=user.display_name,
            user_principal_name=user.user_principal_name,
            mail=user.mail,
            has_manager=user.manager is not None,
        )

    return LinkPageResponse(
        state=page.state.value,
        message=page.message,
        link=link,
        directory_user=directory_user,
        is_service_account_candidate=page.is_service_account_candidate,
    )


@router.post(
    "/link",
    status_code=201,
    response_model=LinkCreatedResponse,
    responses={400: {"model": LinkRejectedResponse}, 403: {"model": LinkRejectedResponse}},
)
async def create_link(
    body: LinkRequestBody,
    config: FromDishka[Config],
    handler: FromDishka[LinkAccountHandler],
) -> JSONResponse:
    """Link the session's GitHub account to its corporate identity."""
    result = await handler.run(
        LinkAccount(
            is_service_account=body.is_service_account,
            service_account_mail=body.service_account_mail,
            linked_account_mail=body.linked_account_mail,
        )
    )
    status_code = LINK_OUTCOME_STATUS[result.outcome]

    if not result.succeeded:
        content = LinkRejectedResponse(outcome=result.outcome.value, message=result.message)
        return JSONResponse(status_code=status_code, content=content.model_dump())

    content = LinkCreatedResponse(
        outcome=result.outcome.value,
        github_id=result.github_id,
        aad_upn=result.aad_upn,
        redirect=config.links.onboarding_url,
    )
    return JSONResponse(status_code=status_code, content=content.model_dump())


@router.get("/link/reconnect", response_model=ReconnectCheck)
async def check_reconnect(handler: FromDishka[CheckReconnectHandler]) -> ReconnectCheck:
    """Whether a corporate-first user still has to sign in to their linked GitHub account."""
    return await handler.run(CheckReconnect())


@router.post("/link/update", response_model=UpdateLinkResponse)
async def update_link(
    config: FromDishka[Config],
    handler: FromDishka[UpdateLinkHandler],
) -> UpdateLinkResponse:
    """Associate the session's GitHub account with the current corporate identity."""
    result = await handler.run(UpdateLink())
    if result.status is UpdateLinkStatus.NEEDS_CORPORATE_SIGN_IN:
        redirect = config.links.sign_in_url
    else:
        redirect = config.links.home_url
    return UpdateLinkResponse(status=result.status.value, message=result.message, redirect=redirect)


@router.get("/links/me", response_model=LinkView)
async def get_my_link(handler: FromDishka[GetMyLinkHandler]) -> LinkView:
    """The link for the session's GitHub account."""
    return await handler.run(GetMyLink())
