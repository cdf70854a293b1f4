"""Link lifecycle: create (with conflict recovery) and update.

    NoLink --create--> Linked
    Linked --update--> Linked

A create that finds an existing record for the GitHub account falls back to
updating it. This is a compensating action, not a transaction: two
concurrent submissions for the same account can still interleave, and the
store's primary key is the only arbiter of uniqueness.
"""

import logging
from dataclasses import dataclass

import logfire
from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from idlink.domain.link.event import LinkCreated
from idlink.domain.link.model.link import Link
from idlink.domain.link.model.value import LinkContext, LinkOutcome, LinkRequest
from idlink.domain.link.port.cache import LinkCache
from idlink.domain.link.port.repository import LinkRepository
from idlink.domain.link.service.notification import WelcomeMailService
from idlink.domain.shared.error import (
    ConflictError,
    IdLinkError,
    PersistenceError,
    ValidationError,
)
from idlink.domain.shared.port.dispatcher import BackgroundDispatcher
from idlink.domain.shared.port.event_bus import EventBus
from idlink.domain.shared.service import Service

logger = logging.getLogger(__name__)

_email_adapter: TypeAdapter[str] = TypeAdapter(EmailStr)

INVALID_SERVICE_ACCOUNT_MAIL = (
    "Please enter a valid e-mail address for the Service Account maintainer."
)
RECOVERY_FAILED = (
    "We had trouble storing the corporate identity link information after 2 tries. "
    "Please file this issue and we will have an administrator take a look."
)


def validate_service_account_mail(mail: str | None) -> str:
    """Return the address if it is a syntactically valid email, else raise ValidationError."""
    if not mail:
        raise ValidationError(INVALID_SERVICE_ACCOUNT_MAIL, field="service_account_mail")
    try:
        return _email_adapter.validate_python(mail)
    except PydanticValidationError as e:
        raise ValidationError(INVALID_SERVICE_ACCOUNT_MAIL, field="service_account_mail") from e


@dataclass(frozen=True)
class LinkCreation:
    """A successfully stored link and how it got stored."""

    link: Link
    outcome: LinkOutcome

    @property
    def recovered(self) -> bool:
        return self.outcome is LinkOutcome.RECOVERED_VIA_UPDATE


class LinkLifecycle(Service):
    """Creates and updates links and runs their downstream effects in order.

    Effects of a successful write, in order: cache invalidation, LinkCreated
    event, welcome mail dispatch. None of them run for a failed write.
    """

    _repo: LinkRepository
    _cache: LinkCache
    _event_bus: EventBus
    _mailer: WelcomeMailService
    _dispatcher: BackgroundDispatcher

    async def create(self, context: LinkContext, request: LinkRequest) -> LinkCreation:
        """Create the link described by the caller's context and form submission.

        Raises:
            ValidationError: If a service account has no valid maintainer mail
                (raised before any store access)
            PersistenceError: If the link could not be stored
        """
        service_account_mail = None
        if request.is_service_account:
            service_account_mail = validate_service_account_mail(request.service_account_mail)

        link = Link.from_context(
            context,
            is_service_account=request.is_service_account,
            service_account_mail=service_account_mail,
        )
        logger.info(
            "Linking started: github_id=%s, aad_id=%s, service_account=%s",
            link.github_id,
            link.aad_id,
            link.is_service_account,
        )

        try:
            await self._repo.insert(link)
        except ConflictError as insert_error:
            # Legacy upgrade: some users reach the link flow while already linked.
            logger.warning(
                "Link insert conflict, recovering via update: github_id=%s, error=%s",
                link.github_id,
                insert_error.message,
            )
            link = await self._recover(link, insert_error)
            outcome = LinkOutcome.RECOVERED_VIA_UPDATE
        except IdLinkError as insert_error:
            logger.error(
                "Link insert failed: github_id=%s, error=%s", link.github_id, insert_error.message
            )
            raise PersistenceError(
                "We had trouble linking your corporate and GitHub accounts: "
                f"{insert_error.message}",
                code="link_insert_failed",
            ) from insert_error
        else:
            await self._cache.invalidate(link.github_id)
            outcome = LinkOutcome.CREATED

        await self._event_bus.publish(
            LinkCreated(
                github_id=link.github_id,
                github_login=link.github_login,
                aad_id=link.aad_id,
                aad_upn=link.aad_upn,
                aad_name=link.aad_name,
                service_account=link.is_service_account,
            )
        )
        self._dispatcher.submit(
            self._mailer.send_welcome(link, request.linked_account_mail, context.correlation_id),
            name=f"welcome-mail-{link.github_id}",
        )

        logfire.info(
            "Link stored",
            github_id=link.github_id,
            aad_id=link.aad_id,
            outcome=outcome.value,
        )
        return LinkCreation(link=link, outcome=outcome)

    async def update(self, link: Link) -> Link:
        """Overwrite the stored link for link.github_id and invalidate its cached view.

        The cache invalidation has completed when this returns, so callers may
        redirect straight away.

        Raises:
            PersistenceError: If the store rejects the update (not retried)
        """
        link.touch()
        try:
            await self._repo.update(link)
        except IdLinkError as e:
            logger.error("Link update failed: github_id=%s, error=%s", link.github_id, e.message)
            raise PersistenceError(
                f"We had trouble updating the link using a data store API: {e.message}",
                code="link_update_failed",
            ) from e

        await self._cache.invalidate(link.github_id)
        logger.info("Link updated: github_id=%s, aad_id=%s", link.github_id, link.aad_id)
        return link

    async def _recover(self, link: Link, insert_error: ConflictError) -> Link:
        try:
            return await self.update(link)
        except PersistenceError as update_error:
            logger.error(
                "Link recovery update failed: github_id=%s, insert_error=%s, update_error=%s",
                link.github_id,
                insert_error.message,
                update_error.message,
            )
            raise PersistenceError(
                RECOVERY_FAILED,
                code="link_recovery_failed",
                original=insert_error,
            ) from update_error
