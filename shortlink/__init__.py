"""Local short links served from an embedded redirect server."""

from .config import Config, load_config
from .exceptions import (
    EmptyURLError,
    InvalidURLError,
    PortAllocationError,
    ServerError,
    ServerStartError,
    ShortLinkError,
)
from .lifecycle import ServerLifecycleManager, ServerState
from .service import ShortLinkService
from .store import InMemoryLinkStore, LinkRecord, LinkStoreBase, ShortLink
from .tokens import TokenGenerator

__all__ = [
    "Config",
    "load_config",
    "EmptyURLError",
    "InvalidURLError",
    "PortAllocationError",
    "ServerError",
    "ServerStartError",
    "ShortLinkError",
    "ServerLifecycleManager",
    "ServerState",
    "ShortLinkService",
    "InMemoryLinkStore",
    "LinkRecord",
    "LinkStoreBase",
    "ShortLink",
    "TokenGenerator",
]
