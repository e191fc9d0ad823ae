"""Validation and normalization utilities for short links."""

import ipaddress
import re
from typing import Optional, Tuple
from urllib.parse import quote, urlsplit, urlunsplit

from ..exceptions import EmptyURLError, InvalidURLError


ALLOWED_SCHEMES = ("http", "https")
DEFAULT_PORTS = {"http": 80, "https": 443}

_HOST_LABEL = re.compile(r"^[a-z0-9_-]{1,63}$")
_PORT = re.compile(r"^[0-9]{1,5}$")
_STRAY_PERCENT = re.compile(r"%(?![0-9A-Fa-f]{2})")

# '%' stays unescaped so existing escapes survive a second pass
_PATH_SAFE = "/:@!$&'()*+,;=%"
_QUERY_SAFE = "/?:@!$&'()*+,;=%"
_USERINFO_SAFE = ":!$&'()*+,;=%"


def _quote(component: str, safe: str) -> str:
    return quote(_STRAY_PERCENT.sub("%25", component), safe=safe)


def _normalize_host(host: str) -> Optional[str]:
    """Lowercase a registered name, converting IDN labels to punycode.

    Returns None if the host is not a usable DNS-style name.
    """
    if not host:
        return None

    if host.isascii():
        ascii_host = host.lower()
    else:
        try:
            ascii_host = host.encode("idna").decode("ascii").lower()
        except UnicodeError:
            return None

    if len(ascii_host) > 253:
        return None
    # a single trailing dot marks a fully qualified name
    labels = ascii_host[:-1] if ascii_host.endswith(".") else ascii_host
    if not all(_HOST_LABEL.match(label) for label in labels.split(".")):
        return None
    return ascii_host


def _canonical_authority(netloc: str, scheme: str) -> Optional[str]:
    """Rebuild ``[userinfo@]host[:port]`` in canonical form, or None if invalid."""
    userinfo, at, hostport = netloc.rpartition("@")

    if hostport.startswith("["):
        end = hostport.find("]")
        if end == -1:
            return None
        try:
            address = ipaddress.IPv6Address(hostport[1:end])
        except ValueError:
            return None
        host = f"[{address.compressed}]"
        remainder = hostport[end + 1:]
        if remainder and not remainder.startswith(":"):
            return None
        port_text = remainder[1:] if remainder else None
    else:
        raw_host, colon, port_text = hostport.partition(":")
        host = _normalize_host(raw_host)
        if host is None:
            return None
        if not colon:
            port_text = None

    if port_text is not None:
        if not _PORT.match(port_text) or int(port_text) > 65535:
            return None
        port = int(port_text)
        if port != DEFAULT_PORTS[scheme]:
            host = f"{host}:{port}"

    if at:
        host = f"{_quote(userinfo, _USERINFO_SAFE)}@{host}"
    return host


def _remove_dot_segments(path: str) -> str:
    """Resolve ``.`` and ``..`` segments of an absolute path (RFC 3986, 5.2.4)."""
    segments = path.split("/")[1:]
    output = []
    for index, segment in enumerate(segments):
        last = index == len(segments) - 1
        if segment in (".", ".."):
            if segment == ".." and output:
                output.pop()
            if last:
                output.append("")
        else:
            output.append(segment)
    return "/" + "/".join(output)


def _canonicalize(candidate: str) -> Tuple[Optional[str], str]:
    """Parse an absolute http/https URL and return (canonical_url, error_message)."""
    try:
        parts = urlsplit(candidate)
    except ValueError as e:
        return None, f"Invalid URL format: {e}"

    if parts.scheme not in ALLOWED_SCHEMES:
        return None, "URL must use http or https protocol"

    if not parts.netloc:
        return None, "URL must have a valid domain"

    authority = _canonical_authority(parts.netloc, parts.scheme)
    if authority is None:
        return None, "URL must have a valid domain"

    path = _remove_dot_segments(_quote(parts.path, _PATH_SAFE)) if parts.path else "/"
    query = _quote(parts.query, _QUERY_SAFE)
    fragment = _quote(parts.fragment, _QUERY_SAFE)

    return urlunsplit((parts.scheme, authority, path, query, fragment)), ""


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate an absolute http/https URL.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"

    canonical, error = _canonicalize(url.strip())
    return canonical is not None, error


def normalize_url(raw: str) -> str:
    """Turn user input into a canonical absolute http/https URL.

    Input that already carries an http or https scheme is canonicalized as
    is. Anything else is retried with ``http://`` prepended, so
    ``example.com/page`` becomes ``http://example.com/page``.

    Args:
        raw: The user-entered string

    Returns:
        Canonical absolute URL

    Raises:
        EmptyURLError: If the input is blank
        InvalidURLError: If neither form is a valid http/https URL
    """
    candidate = (raw or "").strip()
    if not candidate:
        raise EmptyURLError("URL is required")

    canonical, _ = _canonicalize(candidate)
    if canonical is not None:
        return canonical

    canonical, error = _canonicalize("http://" + candidate)
    if canonical is None:
        raise InvalidURLError(f"Invalid URL '{candidate}': {error}")
    return canonical
