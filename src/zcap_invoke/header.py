"""Signing strings and Authorization headers of HTTP signatures.

See the following draft for more details:
https://datatracker.ietf.org/doc/html/draft-cavage-http-signatures-12
"""

import re
from typing import Any, Mapping, Sequence

import http_sfv

from .headers import request_target

DEFAULT_ALGORITHM = "hs2019"

PSEUDO_HEADERS = ("(key-id)", "(created)", "(expires)", "(request-target)")

_PARAM = re.compile(r'\s*([A-Za-z]+)=("(?:[^"\\]|\\.)*"|[^,]*)\s*(?:,|$)')


def create_signature_string(
    include_headers: Sequence[str],
    *,
    method: str,
    url: str | None,
    headers: Mapping[str, str],
    key_id: str,
    created: int,
    expires: int,
) -> str:
    """Returns the string to sign, one "name: value" line per included
    header, in order.

    Raises:
        ValueError: if an included header is not present in headers.
    """
    lines = []
    for name in include_headers:
        match name:
            case "(key-id)":
                value = key_id
            case "(created)":
                value = str(created)
            case "(expires)":
                value = str(expires)
            case "(request-target)":
                value = request_target(method, url)
            case _:
                if name not in headers:
                    raise ValueError(f"header '{name}' is not present in the request")
                value = headers[name].strip()
        lines.append(f"{name}: {value}")
    return "\n".join(lines)


def create_authorization_header(
    include_headers: Sequence[str],
    *,
    key_id: str,
    signature: str,
    created: int,
    expires: int,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    params = [
        ("keyId", _quote(key_id)),
        ("algorithm", _quote(algorithm)),
        ("headers", _quote(" ".join(include_headers))),
        ("signature", _quote(signature)),
        ("created", str(created)),
        ("expires", str(expires)),
    ]
    return "Signature " + ",".join(f"{name}={value}" for name, value in params)


def parse_authorization_header(value: str) -> dict[str, Any]:
    """Parse the parameters of a Signature Authorization header.

    The headers parameter is split into a list and the created and expires
    parameters are converted to integers.
    """
    scheme, _, params = value.strip().partition(" ")
    if scheme != "Signature":
        raise ValueError(f"unsupported authorization scheme '{scheme}'")

    result: dict[str, Any] = {}
    position = 0
    params = params.strip()
    while position < len(params):
        match = _PARAM.match(params, position)
        if match is None:
            raise ValueError(f"malformed authorization header '{value}'")
        name, raw = match.groups()
        result[name] = _unquote(raw)
        position = match.end()

    for name in ("keyId", "signature"):
        if name not in result:
            raise ValueError(f"authorization header is missing {name}")

    result["headers"] = result.get("headers", "(created)").split()
    for name in ("created", "expires"):
        if name in result:
            result[name] = int(result[name])
    return result


def _quote(value: str) -> str:
    return str(http_sfv.Item(value))


def _unquote(value: str) -> str:
    if not value.startswith('"'):
        return value.strip()
    item = http_sfv.Item()
    item.parse(value.encode())
    if not isinstance(item.value, str):
        raise ValueError(f"expected a quoted string, got {value}")
    return item.value
