"""DI provider for the link domain."""

import logging
import uuid

import jwt
from dishka import from_context, provide
from fastapi import HTTPException
from starlette.requests import Request

from idlink.config import AuthenticationConfig, Config
from idlink.domain.link.command.link_account import LinkAccountHandler
from idlink.domain.link.command.update_link import UpdateLinkHandler
from idlink.domain.link.model.value import LinkContext
from idlink.domain.link.port.cache import LinkCache
from idlink.domain.link.port.directory import DirectoryClient
from idlink.domain.link.port.repository import LinkRepository
from idlink.domain.link.query.check_reconnect import CheckReconnectHandler
from idlink.domain.link.query.get_link import GetMyLinkHandler
from idlink.domain.link.query.get_link_page import GetLinkPageHandler
from idlink.domain.link.service.guest_gate import GuestGate
from idlink.domain.link.service.lifecycle import LinkLifecycle
from idlink.domain.link.service.lookup import LinkLookup
from idlink.domain.link.service.notification import WelcomeMailService
from idlink.domain.link.service.session import SessionTokenService
from idlink.domain.shared.port.dispatcher import BackgroundDispatcher
from idlink.domain.shared.port.event_bus import EventBus
from idlink.util.di.base import Provider
from idlink.util.di.scope import Scope

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class LinkProvider(Provider):
    """DI provider for link domain services and handlers."""

    request = from_context(provides=Request, scope=Scope.UOW)

    # Command Handlers
    link_account_handler = provide(LinkAccountHandler, scope=Scope.UOW)
    update_link_handler = provide(UpdateLinkHandler, scope=Scope.UOW)

    # Query Handlers
    check_reconnect_handler = provide(CheckReconnectHandler, scope=Scope.UOW)
    get_my_link_handler = provide(GetMyLinkHandler, scope=Scope.UOW)

    @provide(scope=Scope.APP)
    def get_authentication_config(self, config: Config) -> AuthenticationConfig:
        return config.authentication

    @provide(scope=Scope.APP)
    def get_session_token_service(self, config: Config) -> SessionTokenService:
        return SessionTokenService(_config=config.session)

    @provide(scope=Scope.APP)
    def get_guest_gate(self, config: Config, directory: DirectoryClient) -> GuestGate:
        return GuestGate(
            _config=config.active_directory,
            _directory=directory if config.graph.is_configured else None,
        )

    @provide(scope=Scope.UOW)
    def get_link_lookup(self, repo: LinkRepository, cache: LinkCache) -> LinkLookup:
        return LinkLookup(_repo=repo, _cache=cache)

    @provide(scope=Scope.UOW)
    def get_link_lifecycle(
        self,
        repo: LinkRepository,
        cache: LinkCache,
        event_bus: EventBus,
        mailer: WelcomeMailService,
        dispatcher: BackgroundDispatcher,
    ) -> LinkLifecycle:
        return LinkLifecycle(
            _repo=repo,
            _cache=cache,
            _event_bus=event_bus,
            _mailer=mailer,
            _dispatcher=dispatcher,
        )

    @provide(scope=Scope.UOW)
    def get_link_page_handler(
        self,
        config: Config,
        context: LinkContext,
        guest_gate: GuestGate,
        lookup: LinkLookup,
        directory: DirectoryClient,
    ) -> GetLinkPageHandler:
        return GetLinkPageHandler(
            context=context,
            auth_config=config.authentication,
            guest_gate=guest_gate,
            lookup=lookup,
            directory=directory if config.graph.is_configured else None,
        )

    @provide(scope=Scope.UOW)
    def get_link_context(
        self,
        request: Request,
        session_tokens: SessionTokenService,
    ) -> LinkContext:
        """Build the caller's LinkContext from the Bearer session token.

        A request without a token gets an empty context; the operations decide
        what a missing identity means.

        Raises:
            HTTPException: If a token is present but expired or invalid
        """
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())

        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return LinkContext(correlation_id=correlation_id)

        token = auth_header[7:]  # Remove "Bearer " prefix

        try:
            return session_tokens.read_context(token, correlation_id=correlation_id)
        except jwt.ExpiredSignatureError as e:
            raise HTTPException(
                status_code=401,
                detail={"code": "token_expired", "message": "Session has expired"},
                headers={"WWW-Authenticate": "Bearer"},
            ) from e
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected session token: %s", e)
            raise HTTPException(
                status_code=401,
                detail={"code": "invalid_token", "message": "Invalid session token"},
                headers={"WWW-Authenticate": "Bearer"},
            ) from e
