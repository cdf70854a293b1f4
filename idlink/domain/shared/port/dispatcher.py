"""Background dispatch port."""

from abc import abstractmethod
from collections.abc import Coroutine
from typing import Any, Protocol

from idlink.domain.shared.port import Port


class BackgroundDispatcher(Port, Protocol):
    """Runs work after the caller has moved on.

    Used for effects that must not hold up the HTTP response, such as
    welcome mail. Submitted jobs are never awaited by the submitter.
    """

    @abstractmethod
    def submit(self, job: Coroutine[Any, Any, Any], *, name: str | None = None) -> None:
        """Schedule a coroutine to run in the background."""
        ...
