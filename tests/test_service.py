"""Tests for the shorten / shutdown service."""

import re
import threading
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest

from shortlink.exceptions import EmptyURLError, InvalidURLError, ServerStartError
from shortlink.lifecycle import ServerState
from shortlink.ports import open_listener
from shortlink.service import ShortLinkService
from shortlink.store.models import ShortLink
from shortlink.tokens import TokenGenerator


SHORT_URL = re.compile(r"^http://localhost:(\d+)/wnk/([A-Za-z0-9]{6})$")


def loopback(short_url: str) -> str:
    """Point a short URL at 127.0.0.1, the address the server binds."""
    return short_url.replace("://localhost:", "://127.0.0.1:", 1)


class ScriptedGenerator(TokenGenerator):
    """Token generator replaying a fixed sequence."""

    def __init__(self, tokens):
        super().__init__(default_length=6)
        self._tokens = iter(tokens)
        self.calls = 0

    def generate(self, length=None):
        self.calls += 1
        return next(self._tokens)


class TestShortLinkService:
    """Test the shorten operation."""

    def test_shorten_format(self, service):
        """Short URLs look like http://localhost:<port>/wnk/<token>."""
        short_url = service.shorten("https://example.com/test")

        match = SHORT_URL.match(short_url)
        assert match is not None
        assert int(match.group(1)) == service.port
        assert service.resolve(match.group(2)) == "https://example.com/test"

    def test_create_short_link(self, service):
        """The full result carries token, canonical URL and port."""
        link = service.create_short_link("example.com/page")

        assert isinstance(link, ShortLink)
        assert link.original_url == "http://example.com/page"
        assert link.port == service.port
        assert link.short_url == f"http://localhost:{link.port}/wnk/{link.token}"
        assert link.to_dict()["token"] == link.token

    def test_example_scenario(self, config, store, http):
        """example.com/page -> token -> short URL -> 302 to the canonical URL."""
        svc = ShortLinkService(
            config=config,
            store=store,
            generator=ScriptedGenerator(["aZ3k9Q"]),
        )
        try:
            short_url = svc.shorten("example.com/page")
            assert short_url == f"http://localhost:{svc.port}/wnk/aZ3k9Q"

            response = http.get(loopback(short_url))
            assert response.status_code == 302
            assert response.headers["location"] == "http://example.com/page"
        finally:
            svc.shutdown()

    def test_round_trip(self, service, http, sample_urls):
        """Every shortened URL redirects back to its original."""
        for url in sample_urls:
            response = http.get(loopback(service.shorten(url)))

            assert response.status_code == 302
            assert response.headers["location"] == url

    def test_unknown_token(self, service, http):
        """A token that was never issued answers 404."""
        service.shorten("https://example.com/test")

        response = http.get(f"http://127.0.0.1:{service.port}/wnk/Zz9Zz9")
        assert response.status_code == 404

    @pytest.mark.parametrize("raw", ["", "   "])
    def test_empty_input(self, service, raw):
        """Blank input is rejected before the server is started."""
        with pytest.raises(EmptyURLError):
            service.shorten(raw)

        assert service.lifecycle.state is ServerState.STOPPED

    def test_invalid_input(self, service):
        """Invalid URLs are rejected without touching the server or the store."""
        with pytest.raises(InvalidURLError):
            service.shorten("not a url ???")

        assert service.lifecycle.state is ServerState.STOPPED
        assert len(service.store) == 0

    def test_server_started_once(self, service):
        """All links created by one running server share its port."""
        first = service.create_short_link("https://example.com/1")
        second = service.create_short_link("https://example.com/2")

        assert first.port == second.port
        assert first.token != second.token

    def test_collision_retry(self, config, store):
        """A colliding token is retried until an unused one is found."""
        generator = ScriptedGenerator(["AAAAAA", "AAAAAA", "AAAAAA", "BBBBBB"])
        svc = ShortLinkService(config=config, store=store, generator=generator)
        try:
            first = svc.create_short_link("https://example.com/first")
            second = svc.create_short_link("https://example.com/second")
        finally:
            svc.shutdown()

        assert first.token == "AAAAAA"
        assert second.token == "BBBBBB"
        assert generator.calls == 4
        assert store.lookup("AAAAAA") == "https://example.com/first"
        assert store.lookup("BBBBBB") == "https://example.com/second"

    def test_start_failure_is_reported(self, config, store):
        """Server start errors reach the caller; a later retry can succeed."""
        taken = open_listener("127.0.0.1", 0)
        busy = config.model_copy(update={"port": taken.getsockname()[1]})
        svc = ShortLinkService(config=busy, store=store)
        try:
            with pytest.raises(ServerStartError):
                svc.shorten("https://example.com/test")
            assert svc.lifecycle.state is ServerState.STOPPED
            assert len(store) == 0

            taken.close()
            assert SHORT_URL.match(svc.shorten("https://example.com/test"))
        finally:
            taken.close()
            svc.shutdown()

    def test_concurrent_shorten_unique_tokens(self, service):
        """Concurrent shorten calls never give one token to two URLs."""
        urls = [f"https://example.com/page_{i}" for i in range(200)]
        barrier = threading.Barrier(8)

        def shorten_slice(offset):
            barrier.wait()
            return [service.create_short_link(url) for url in urls[offset::8]]

        with ThreadPoolExecutor(max_workers=8) as pool:
            links = [link for batch in pool.map(shorten_slice, range(8)) for link in batch]

        tokens = [link.token for link in links]
        assert len(tokens) == len(set(tokens)) == len(urls)
        assert {link.port for link in links} == {service.port}
        for link in links:
            assert service.resolve(link.token) == link.original_url

    def test_shutdown(self, service, http):
        """shutdown() releases the listener and is idempotent."""
        short_url = service.shorten("https://example.com/test")

        service.shutdown()
        service.shutdown()

        assert service.port is None
        with pytest.raises(httpx.ConnectError):
            http.get(loopback(short_url))

    def test_links_survive_restart(self, service, http):
        """Links stay resolvable after the server is restarted on a new port."""
        short_url = service.shorten("https://example.com/test")
        token = SHORT_URL.match(short_url).group(2)
        service.shutdown()

        service.shorten("https://example.com/other")
        response = http.get(f"http://127.0.0.1:{service.port}/wnk/{token}")

        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com/test"

    def test_context_manager(self, config):
        """Leaving the with-block shuts the server down."""
        with ShortLinkService(config=config) as svc:
            svc.shorten("https://example.com/test")
            assert svc.lifecycle.state is ServerState.RUNNING

        assert svc.lifecycle.state is ServerState.STOPPED
