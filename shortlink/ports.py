"""Loopback port allocation for the redirect server."""

import logging
import socket

from .exceptions import PortAllocationError, ServerStartError


logger = logging.getLogger("shortlink.ports")


def _family_for(host: str) -> int:
    return socket.AF_INET6 if ":" in host else socket.AF_INET


def allocate_port(host: str = "127.0.0.1") -> int:
    """Find a free loopback TCP port.

    Binds a transient listener on port 0, reads back the port the OS
    assigned and releases it. Another process may grab the port before it
    is bound again; prefer ``open_listener(host, 0)`` when the caller is
    going to listen on it anyway.

    Args:
        host: Loopback address to probe

    Returns:
        A port number that was free at the time of the call

    Raises:
        PortAllocationError: If no port can be bound
    """
    try:
        with socket.socket(_family_for(host), socket.SOCK_STREAM) as probe:
            probe.bind((host, 0))
            probe.listen(1)
            port = probe.getsockname()[1]
    except OSError as e:
        raise PortAllocationError(f"Unable to allocate a port on {host}: {e}") from e

    logger.debug(f"Allocated free port {port} on {host}")
    return port


def open_listener(host: str = "127.0.0.1", port: int = 0, backlog: int = 128) -> socket.socket:
    """Bind and listen on a loopback socket.

    With ``port=0`` the OS picks the port and the listener keeps it, so
    there is no window where another process can take it.

    Args:
        host: Loopback address to bind
        port: Port to bind, 0 for an OS-assigned port
        backlog: Listen backlog

    Returns:
        A bound, listening socket. Read the port with ``getsockname()[1]``.

    Raises:
        PortAllocationError: If no OS-assigned port can be bound
        ServerStartError: If the requested fixed port cannot be bound
    """
    sock = socket.socket(_family_for(host), socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(backlog)
    except OSError as e:
        sock.close()
        if port == 0:
            raise PortAllocationError(f"Unable to allocate a port on {host}: {e}") from e
        raise ServerStartError(f"Unable to bind {host}:{port}: {e}") from e

    sock.setblocking(False)
    logger.debug(f"Listening socket bound to {host}:{sock.getsockname()[1]}")
    return sock
