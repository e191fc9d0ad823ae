"""Exceptions raised by the short link engine.

Classes:
    ShortLinkError:
        Generic base class for every error the engine reports to callers.

    InvalidURLError:
        Raised when user input does not normalize to an absolute http/https URL.

    EmptyURLError:
        Raised when the user input is blank after trimming.

    ServerError:
        Base class for local resource failures of the redirect server.

    PortAllocationError:
        Raised when no loopback port can be bound.

    ServerStartError:
        Raised when the redirect server fails to start.

Example:
    >>> from shortlink.exceptions import InvalidURLError
    >>> raise InvalidURLError("not a url ???")
    Traceback (most recent call last):
        ...
    shortlink.exceptions.InvalidURLError: not a url ???
"""


class ShortLinkError(Exception):
    """Generic base class for short link errors."""

    pass


class InvalidURLError(ShortLinkError, ValueError):
    """Exception raised when input cannot be turned into an absolute http/https URL."""

    pass


class EmptyURLError(InvalidURLError):
    """Exception raised when the input is empty or whitespace only."""

    pass


class ServerError(ShortLinkError):
    """Exception raised when the local redirect server cannot acquire its resources."""

    pass


class PortAllocationError(ServerError):
    """Exception raised when no free loopback port can be bound."""

    pass


class ServerStartError(ServerError):
    """Exception raised when the redirect server fails to start.

    e.g. port race, permission denied, startup timeout.
    """

    pass
