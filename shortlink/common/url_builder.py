"""URL building utilities for short links."""


def build_base_url(host: str, port: int, scheme: str = "http") -> str:
    """Build the base URL of the local redirect server.

    Args:
        host: Host name shown in short links (e.g., localhost)
        port: Port the redirect server listens on
        scheme: URL scheme

    Returns:
        Base URL without trailing slash (e.g., http://localhost:54321)
    """
    return f"{scheme}://{host}:{port}"


def build_short_url(
    token: str,
    base_url: str,
    path_prefix: str = "",
) -> str:
    """Build complete short URL.

    Args:
        token: The link token
        base_url: Base URL (e.g., http://localhost:54321)
        path_prefix: Optional path prefix (e.g., wnk)

    Returns:
        Complete short URL
    """
    base = base_url.rstrip("/")
    prefix = path_prefix.strip("/")

    if prefix:
        return f"{base}/{prefix}/{token}"
    return f"{base}/{token}"
