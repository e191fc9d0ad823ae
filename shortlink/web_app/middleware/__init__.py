"""Middleware for the redirect server."""

from .logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
