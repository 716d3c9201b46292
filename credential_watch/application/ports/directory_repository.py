"""Port for directory retrieval - driven/secondary port."""

from typing import Protocol

from ...domain.entities import DirectoryObject


class DirectoryRepository(Protocol):
    """
    Port for reading credential-bearing objects from the identity directory.

    Each listing returns the complete collection or raises; partial results
    are never returned.
    """

    async def list_service_principals(self) -> list[DirectoryObject]:
        """
        Retrieve every service principal with its credentials.

        Raises:
            AuthError: If a token cannot be acquired.
            DirectoryError: If any page request fails.
        """
        ...

    async def list_applications(self) -> list[DirectoryObject]:
        """
        Retrieve every application registration with its credentials.

        Raises:
            AuthError: If a token cannot be acquired.
            DirectoryError: If any page request fails.
        """
        ...
