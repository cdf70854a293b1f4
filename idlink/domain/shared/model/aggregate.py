from idlink.domain.shared.model.entity import Entity


class Aggregate(Entity):
    """Base class for aggregate roots. Repositories load and save whole aggregates."""

    pass
