"""Redirect routes implementation."""

import html
import logging
from typing import Optional

from fastapi import APIRouter, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

router = APIRouter()
logger = logging.getLogger("shortlink.web")

# HttpListener-style: every method on every path goes through one handler
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

NOT_FOUND_TEMPLATE = (
    "<html><body><h2>Short Link - Not Found</h2>"
    "<p>Requested: {path}</p></body></html>"
)


def match_token(path: str, route_prefix: str) -> Optional[str]:
    """Return the token of a ``/<prefix>/<token>`` path, or None for any other shape.

    Empty segments are ignored and the prefix is compared case-insensitively.
    """
    segments = [segment for segment in path.split("/") if segment]
    if len(segments) == 2 and segments[0].lower() == route_prefix.lower():
        return segments[1]
    return None


def not_found_page(path: str) -> HTMLResponse:
    """Build the 404 page for a requested path."""
    return HTMLResponse(
        content=NOT_FOUND_TEMPLATE.format(path=html.escape(path)),
        status_code=status.HTTP_404_NOT_FOUND,
    )


@router.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
async def redirect_or_not_found(request: Request, path: str):
    """Redirect a known token to its original URL, answer 404 otherwise."""
    store = request.app.state.store
    config = request.app.state.config
    requested = request.url.path

    token = match_token(requested, config.route_prefix)
    if token is not None:
        original_url = store.lookup(token)
        if original_url:
            logger.debug(f"Redirecting {token} -> {original_url}")
            return RedirectResponse(url=original_url, status_code=status.HTTP_302_FOUND)
        logger.debug(f"Token not found: {token}")

    return not_found_page(requested)
