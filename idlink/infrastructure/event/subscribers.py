"""In-process subscribers for link events."""

import logging

import logfire

from idlink.domain.link.event import LinkCreated, LinkUpdated
from idlink.domain.shared.event import Event

logger = logging.getLogger(__name__)


async def record_link_event(event: Event) -> None:
    """Write link events to the log and to logfire."""
    if isinstance(event, LinkCreated):
        logger.info(
            "Link created: github_id=%s, github_login=%s, aad_id=%s, aad_upn=%s, "
            "service_account=%s",
            event.github_id,
            event.github_login,
            event.aad_id,
            event.aad_upn,
            event.service_account,
        )
        logfire.info(
            "PortalUserLink",
            github_id=event.github_id,
            aad_id=event.aad_id,
            service_account=event.service_account,
        )
    elif isinstance(event, LinkUpdated):
        logger.info(
            "Link updated: github_id=%s, aad_id=%s, aad_upn=%s",
            event.github_id,
            event.aad_id,
            event.aad_upn,
        )
        logfire.info("PortalUserLinkUpdated", github_id=event.github_id, aad_id=event.aad_id)
