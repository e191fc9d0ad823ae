"""Pytest configuration and fixtures."""

from typing import AsyncGenerator, Iterator

import httpx
import pytest

from shortlink.config import Config
from shortlink.service import ShortLinkService
from shortlink.store.memory import InMemoryLinkStore
from shortlink.tokens import TokenGenerator
from shortlink.common.logging_config import setup_logging
from shortlink.web_app import create_app


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def config() -> Config:
    """Configuration with short timeouts for tests."""
    return Config(
        host="127.0.0.1",
        port=0,
        public_host="localhost",
        route_prefix="wnk",
        token_length=6,
        startup_timeout=5.0,
        shutdown_timeout=5.0,
        drain_timeout=0.0,
        log_level="DEBUG",
    )


@pytest.fixture
def store() -> InMemoryLinkStore:
    """Create an empty link store."""
    return InMemoryLinkStore()


@pytest.fixture
def token_generator() -> TokenGenerator:
    """Create token generator."""
    return TokenGenerator(default_length=6)


@pytest.fixture
def app(store, config):
    """Create the redirect app backed by the test store."""
    return create_app(store=store, config=config)


@pytest.fixture
async def client(app) -> AsyncGenerator[httpx.AsyncClient, None]:
    """In-process client for the redirect app."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def service(config, store, token_generator, logger) -> Iterator[ShortLinkService]:
    """Create service instance; the redirect server is stopped afterwards."""
    svc = ShortLinkService(
        config=config,
        store=store,
        generator=token_generator,
        logger=logger,
    )
    yield svc
    svc.shutdown()


@pytest.fixture
def http() -> Iterator[httpx.Client]:
    """Client for requests against a live redirect server."""
    with httpx.Client(trust_env=False, follow_redirects=False, timeout=5.0) as c:
        yield c


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
