"""FastAPI application factory for the redirect server."""

import logging
from typing import Optional

from fastapi import FastAPI

from .routes import router
from .middleware.logging import LoggingMiddleware


def create_app(
    store,
    config,
    logger: Optional[logging.Logger] = None,
) -> FastAPI:
    """Create and configure the redirect application.

    Docs and the OpenAPI schema are disabled so every path other than
    ``/<route_prefix>/<token>`` falls through to the 404 page.

    Args:
        store: Link store consulted by the redirect handler
        config: Configuration instance
        logger: Optional logger for request logging

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Short Link",
        description="Local redirect server for short links",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Store instances in app state for access in routes
    app.state.store = store
    app.state.config = config

    app.add_middleware(LoggingMiddleware, logger=logger)

    app.include_router(router)

    return app
