from typing import Any, Mapping, Optional
from urllib.parse import urlsplit

from http_message_signatures.structures import CaseInsensitiveDict

from .error import InvalidURLError


def host_from_url(url: Optional[str]) -> str:
    """Returns the authority (host and optional port) of an absolute URL.

    Raises:
        InvalidURLError: if the URL is missing or not absolute.
    """
    if not url or not isinstance(url, str):
        raise InvalidURLError(f"Invalid URL: {url!r}")
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        raise InvalidURLError(f"Invalid URL: {url!r}") from None

    if not parts.scheme or not parts.hostname:
        raise InvalidURLError(f"Invalid URL: {url!r}")

    host = parts.hostname
    if ":" in host:
        host = f"[{host}]"
    if port is not None:
        host = f"{host}:{port}"
    return host


def request_target(method: str, url: Optional[str]) -> str:
    """Returns the value of the (request-target) pseudo header, the lower
    cased method followed by the path and query of the URL."""
    path = "/"
    if url:
        try:
            parts = urlsplit(url)
        except ValueError:
            parts = None
        if parts is not None:
            path = parts.path or "/"
            if parts.query:
                path = f"{path}?{parts.query}"
    return f"{method.lower()} {path}"


def normalize_headers(
    headers: Mapping[str, Any], url: Optional[str] = None
) -> dict[str, str]:
    """Returns a copy of the headers keyed by lower case names.

    Header names are case insensitive, so names that only differ by case
    collapse into one entry and the last one wins. Byte values are decoded
    as latin-1, the encoding of raw HTTP header fields. When the headers have no
    host, it is derived from the URL.

    Raises:
        TypeError: if headers is None.
        InvalidURLError: if there is no host header and the URL is not
            absolute.
    """
    if headers is None:
        raise TypeError("cannot convert None to a header mapping")

    normalized = CaseInsensitiveDict()
    for name, value in dict(headers).items():
        if isinstance(value, (bytes, bytearray)):
            value = bytes(value).decode("latin-1")
        normalized[name] = str(value)

    if "host" not in normalized:
        normalized["host"] = host_from_url(url)

    return {name.lower(): value for name, value in normalized.items()}
