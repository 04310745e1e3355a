from __future__ import annotations

import re
from urllib.parse import quote, urlparse

from .errors import TransportError

_ALLOWED_SCHEMES = {"http", "https"}

# RFC 7230 token characters; an HTTP method must consist of these only.
_METHOD_TOKEN = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


def validate_method(method: object) -> str:
    if not isinstance(method, str) or not _METHOD_TOKEN.fullmatch(method):
        raise TransportError(f"invalid HTTP method: {method!r}")
    return method


def join_url(base_url: str, path: str) -> str:
    """Join the service base URL and an endpoint path.

    The base URL must be absolute http(s); a trailing slash on it is
    dropped so that ``/tika`` never becomes ``//tika``.
    """

    base = (base_url or "").rstrip("/")
    try:
        parsed = urlparse(base)
        _ = parsed.port
    except ValueError as e:
        raise TransportError(f"invalid service URL {base_url!r}: {e}") from e

    if parsed.scheme.lower() not in _ALLOWED_SCHEMES or not parsed.hostname:
        raise TransportError(f"invalid service URL: {base_url!r}")
    # Empty or over-long host labels only fail later, inside urllib3.
    try:
        parsed.hostname.encode("idna")
    except UnicodeError as e:
        raise TransportError(f"invalid service URL {base_url!r}: {e}") from e
    if path and not path.startswith("/"):
        path = "/" + path
    return base + path


def path_segment(value: str) -> str:
    """Quote one path segment (metadata field names, language codes)."""
    return quote(value, safe="")


def port_of(url: str, default: int = 9998) -> int:
    parsed = urlparse(url)
    return parsed.port or default


def safe_filename_piece(text: str, *, max_len: int = 80) -> str:
    text = text.strip()
    text = re.sub(r"\s+", "-", text)
    text = re.sub(r"[^A-Za-z0-9._-]+", "-", text)
    text = re.sub(r"-+", "-", text).strip("-")
    if not text:
        return "untitled"
    return text[:max_len]
