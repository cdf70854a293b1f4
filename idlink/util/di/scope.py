"""Custom Dishka scopes for idlink."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """idlink dependency injection scopes.

    Hierarchy: APP -> UOW

    - APP: Application lifetime (engine, HTTP clients, cache, dispatcher)
    - UOW: Unit of Work (one HTTP request: session, caller context, handlers)
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
