"""Domain events for the link domain."""

from idlink.domain.shared.event import Event


class LinkCreated(Event):
    """Emitted once a link has been durably stored by the link flow.

    Also emitted when an insert conflict was recovered by updating the
    existing record; consumers cannot tell the two apart.
    """

    github_id: str
    github_login: str
    aad_id: str
    aad_upn: str | None
    aad_name: str | None
    service_account: bool


class LinkUpdated(Event):
    """Emitted when a user re-associates their GitHub account with a corporate identity."""

    github_id: str
    aad_id: str
    aad_upn: str | None
