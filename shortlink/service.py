"""Business logic service for short links."""

import logging
from typing import Callable, Optional

from .config import Config
from .common.url_builder import build_base_url, build_short_url
from .common.validators import normalize_url
from .exceptions import EmptyURLError
from .lifecycle import ServerLifecycleManager
from .store.base import LinkStoreBase
from .store.memory import InMemoryLinkStore
from .store.models import ShortLink
from .tokens import TokenGenerator
from .web_app import create_app


class ShortLinkService:
    """Service layer used by front ends: shorten a URL, shut the server down."""

    def __init__(
        self,
        config: Optional[Config] = None,
        store: Optional[LinkStoreBase] = None,
        generator: Optional[TokenGenerator] = None,
        logger: Optional[logging.Logger] = None,
        on_server_started: Optional[Callable[[int], None]] = None,
    ):
        """Initialize short link service.

        Args:
            config: Optional configuration (loaded from the environment if omitted)
            store: Optional link store
            generator: Optional token generator
            logger: Optional logger
            on_server_started: Optional callback invoked with the port whenever
                the redirect server starts
        """
        self.config = config or Config()
        self.store = store if store is not None else InMemoryLinkStore()
        self.generator = generator or TokenGenerator(default_length=self.config.token_length)
        self.logger = logger or logging.getLogger(__name__)

        self.app = create_app(store=self.store, config=self.config)
        self.lifecycle = ServerLifecycleManager(
            app=self.app,
            config=self.config,
            logger=self.logger,
            on_started=on_server_started,
        )

    def __enter__(self) -> "ShortLinkService":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    @property
    def port(self) -> Optional[int]:
        """Port of the running redirect server, None while stopped."""
        return self.lifecycle.port

    def create_short_link(self, raw_url: str) -> ShortLink:
        """Create a new short link.

        Args:
            raw_url: URL as entered by the user; ``http://`` is assumed
                when no scheme is given

        Returns:
            The created short link

        Raises:
            EmptyURLError: If the input is blank
            InvalidURLError: If the input is not a valid http/https URL
            PortAllocationError: If the redirect server cannot get a port
            ServerStartError: If the redirect server fails to start
        """
        if not raw_url or not raw_url.strip():
            raise EmptyURLError("URL is required")

        original_url = normalize_url(raw_url)
        port = self.lifecycle.ensure_running()
        token = self._mint_token(original_url)
        record = self.store.get_record(token)

        short_url = build_short_url(
            token=token,
            base_url=build_base_url(self.config.public_host, port),
            path_prefix=self.config.route_prefix,
        )

        self.logger.info(f"Created short link: {short_url} -> {original_url}")

        return ShortLink(
            token=token,
            original_url=original_url,
            short_url=short_url,
            port=port,
            created_at=record.created_at,
        )

    def shorten(self, raw_url: str) -> str:
        """Shorten a URL and return the short URL string."""
        return self.create_short_link(raw_url).short_url

    def resolve(self, token: str) -> Optional[str]:
        """Get the original URL for a token, or None if unknown."""
        return self.store.lookup(token)

    def shutdown(self) -> None:
        """Stop the redirect server. Safe to call more than once."""
        self.lifecycle.stop()

    def _mint_token(self, original_url: str) -> str:
        """Generate tokens until one is inserted. No lock is held between attempts."""
        attempts = 1
        while True:
            token = self.generator.generate()
            if self.store.try_insert(token, original_url):
                if attempts > 1:
                    self.logger.debug(f"Minted token after {attempts} attempts: {token}")
                return token
            self.logger.warning(f"Token collision on {token}, retrying")
            attempts += 1
