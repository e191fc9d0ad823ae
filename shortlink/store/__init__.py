"""Storage layer for short links."""

from .base import LinkStoreBase
from .memory import InMemoryLinkStore
from .models import LinkRecord, ShortLink

__all__ = ["LinkStoreBase", "InMemoryLinkStore", "LinkRecord", "ShortLink"]
