"""Abstract base class for link store implementations."""

from abc import ABC, abstractmethod
from typing import Optional

from .models import LinkRecord


class LinkStoreBase(ABC):
    """Abstract base class for token to URL storage.

    Implementations must be safe for concurrent readers and writers and
    must never expose a token whose record is not fully inserted.
    """

    @abstractmethod
    def try_insert(self, token: str, original_url: str) -> bool:
        """Insert a mapping only if the token is not taken yet.

        Args:
            token: The token to use
            original_url: The canonical URL the token resolves to

        Returns:
            True if inserted, False if the token already exists (nothing is changed)
        """
        pass

    @abstractmethod
    def get_record(self, token: str) -> Optional[LinkRecord]:
        """Get the complete record for a token.

        Args:
            token: The token to lookup

        Returns:
            The record if found, None otherwise
        """
        pass

    def lookup(self, token: str) -> Optional[str]:
        """Get the original URL for a token.

        Args:
            token: The token to lookup

        Returns:
            The original URL if found, None otherwise
        """
        record = self.get_record(token)
        return record.original_url if record else None

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and self.get_record(token) is not None

    @abstractmethod
    def __len__(self) -> int:
        pass
