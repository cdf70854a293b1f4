"""DI provider for welcome mail rendering and delivery."""

import logging

import httpx
from dishka import provide

from idlink.config import Config
from idlink.domain.link.port.mail import MailRenderer, MailTransport
from idlink.domain.link.service.notification import WelcomeMailService
from idlink.infrastructure.mail.renderer import JinjaMailRenderer
from idlink.infrastructure.mail.transport import HttpMailTransport, SmtpMailTransport
from idlink.util.di.base import Provider
from idlink.util.di.scope import Scope

logger = logging.getLogger(__name__)


def build_mail_transport(config: Config, http_client: httpx.AsyncClient) -> MailTransport | None:
    """Build the configured transport, or None when mail is switched off."""
    mail = config.mail
    if mail.transport == "http":
        if not mail.http.url:
            logger.warning("Mail transport 'http' selected without a url; welcome mail disabled")
            return None
        return HttpMailTransport(config=mail.http, sender=mail.sender, http_client=http_client)
    if mail.transport == "smtp":
        return SmtpMailTransport(config=mail.smtp, sender=mail.sender)
    return None


class MailProvider(Provider):
    @provide(scope=Scope.APP)
    def get_mail_renderer(self) -> MailRenderer:
        return JinjaMailRenderer()

    @provide(scope=Scope.APP)
    def get_welcome_mail_service(
        self,
        config: Config,
        renderer: MailRenderer,
        http_client: httpx.AsyncClient,
    ) -> WelcomeMailService:
        return WelcomeMailService(
            _renderer=renderer,
            _brand=config.brand,
            _transport=build_mail_transport(config, http_client),
        )
