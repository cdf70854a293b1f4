"""Corporate directory port."""

from abc import abstractmethod
from typing import Protocol

from idlink.domain.link.model.value import DirectoryUser
from idlink.domain.shared.port import Port


class DirectoryClient(Port, Protocol):
    """Resolves corporate identity ids to directory profiles.

    Implementations are adapters in infrastructure/ (e.g., GraphDirectoryClient).
    """

    @abstractmethod
    async def get_user_by_id(self, aad_id: str) -> DirectoryUser:
        """Look up a user's type, display name and principal name.

        Raises:
            DirectoryLookupError: If the directory request fails or the user is unknown
        """
        ...

    @abstractmethod
    async def get_user_and_manager_by_id(self, aad_id: str) -> DirectoryUser:
        """Look up a user together with their manager (None when there is none).

        Raises:
            DirectoryLookupError: If the directory request fails or the user is unknown
        """
        ...
