"""Link domain events."""

from .events import LinkCreated, LinkUpdated

__all__ = ["LinkCreated", "LinkUpdated"]
