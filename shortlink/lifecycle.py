"""Lifecycle management for the embedded redirect server.

The redirect server is a uvicorn ``Server`` running the FastAPI app on a
daemon thread. The manager owns the only reference to it: it starts at most
one instance at a time, lazily, and stops it on request.

Concurrency: ``ensure_running()`` and ``stop()`` are serialized by a lock,
so concurrent callers observe exactly one start and share its port. Request
handling happens on the server thread's event loop and never takes this
lock.
"""

import logging
import threading
import time
from enum import Enum
from typing import Callable, Optional

import uvicorn

from .common.url_builder import build_base_url, build_short_url
from .exceptions import ServerStartError
from .ports import open_listener


class ServerState(str, Enum):
    """Externally visible state of the redirect server."""

    STOPPED = "stopped"
    RUNNING = "running"


class ServerLifecycleManager:
    """Start, reuse and stop a single redirect server instance."""

    def __init__(
        self,
        app,
        config,
        logger: Optional[logging.Logger] = None,
        on_started: Optional[Callable[[int], None]] = None,
    ):
        """Initialize lifecycle manager.

        Args:
            app: ASGI application to serve
            config: Configuration instance
            logger: Optional logger
            on_started: Optional callback invoked with the port after each start
        """
        self.app = app
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.on_started = on_started

        self._lock = threading.Lock()
        self._server: Optional[uvicorn.Server] = None
        self._thread: Optional[threading.Thread] = None
        self._socket = None
        self._port: Optional[int] = None

    @property
    def is_running(self) -> bool:
        """True while a started instance is still serving."""
        thread = self._thread
        return self._server is not None and thread is not None and thread.is_alive()

    @property
    def state(self) -> ServerState:
        return ServerState.RUNNING if self.is_running else ServerState.STOPPED

    @property
    def port(self) -> Optional[int]:
        """Bound port, valid only while running."""
        return self._port if self.is_running else None

    def ensure_running(self) -> int:
        """Start the redirect server unless it is already running.

        Returns:
            Port the server listens on

        Raises:
            PortAllocationError: If no loopback port can be bound
            ServerStartError: If the server fails to start
        """
        with self._lock:
            if self.is_running:
                return self._port

            if self._server is not None:
                self.logger.warning(
                    f"Redirect server on port {self._port} exited unexpectedly, starting a new instance"
                )
                self._release()

            port = self._start()

        if self.on_started:
            self.on_started(port)
        return port

    def stop(self) -> None:
        """Stop the redirect server. A no-op when already stopped.

        In-flight requests are abandoned unless ``drain_timeout`` allows
        them to finish. Waits at most ``shutdown_timeout`` (plus the drain
        time) for the server thread.
        """
        with self._lock:
            if self._server is None:
                return

            server, thread, port = self._server, self._thread, self._port
            self.logger.info(f"Stopping redirect server on port {port}")

            if not self.config.drain_timeout:
                server.force_exit = True
            server.should_exit = True

            if thread is not None and thread is not threading.current_thread():
                thread.join(timeout=self.config.shutdown_timeout + self.config.drain_timeout)
                if thread.is_alive():
                    self.logger.warning(
                        f"Redirect server thread did not exit within "
                        f"{self.config.shutdown_timeout}s, abandoning it"
                    )

            self._release()
            self.logger.info(f"Redirect server on port {port} stopped")

    def _uvicorn_config(self) -> uvicorn.Config:
        return uvicorn.Config(
            self.app,
            loop="asyncio",
            log_config=None,
            log_level=self.config.log_level.lower(),
            access_log=False,
            lifespan="off",
            timeout_graceful_shutdown=self.config.drain_timeout or None,
        )

    def _start(self) -> int:
        """Bind the listener and run a new server thread. Caller holds the lock."""
        try:
            server = uvicorn.Server(self._uvicorn_config())
        except (KeyError, ValueError) as e:
            raise ServerStartError(f"Invalid redirect server configuration: {e}") from e

        sock = open_listener(self.config.host, self.config.port)
        port = sock.getsockname()[1]

        try:
            thread = threading.Thread(
                target=self._serve,
                args=(server, sock),
                name=f"shortlink-server-{port}",
                daemon=True,
            )
            thread.start()
        except BaseException:
            sock.close()
            raise

        deadline = time.monotonic() + self.config.startup_timeout
        while not server.started:
            if not thread.is_alive():
                sock.close()
                raise ServerStartError(f"Redirect server on port {port} failed to start")
            if time.monotonic() >= deadline:
                server.force_exit = True
                server.should_exit = True
                thread.join(timeout=self.config.shutdown_timeout)
                sock.close()
                raise ServerStartError(
                    f"Redirect server on port {port} did not start within "
                    f"{self.config.startup_timeout}s"
                )
            time.sleep(0.01)

        self._server = server
        self._thread = thread
        self._socket = sock
        self._port = port

        base_url = build_base_url(self.config.public_host, port)
        self.logger.info(
            f"Local server started on {base_url}/ - short links look like "
            f"{build_short_url('{token}', base_url, self.config.route_prefix)}"
        )
        return port

    def _serve(self, server: uvicorn.Server, sock) -> None:
        """Server thread body. The accept loop runs until the instance is told to exit."""
        try:
            server.run(sockets=[sock])
        except SystemExit:
            self.logger.error("Redirect server exited during startup")
        except Exception:
            self.logger.exception("Redirect server stopped with an error")

    def _release(self) -> None:
        """Forget the current instance and close its listener. Caller holds the lock."""
        if self._socket is not None:
            self._socket.close()
        self._server = None
        self._thread = None
        self._socket = None
        self._port = None
