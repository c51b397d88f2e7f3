import base64
import hashlib
import hmac
import json
from typing import Any

from http_message_signatures import InvalidSignature

DEFAULT_ALGORITHM = "SHA-256"

# https://www.iana.org/assignments/http-dig-alg/http-dig-alg.xhtml
ALGORITHMS = {
    "SHA-256": hashlib.sha256,
    "SHA-512": hashlib.sha512,
}


def canonical_body(body: Any) -> bytes:
    """Returns the bytes that represent a request body on the wire.

    Bytes are used as is and strings are UTF-8 encoded. Any other value is
    serialized to compact JSON with sorted keys, so that the same structure
    always produces the same digest. Callers must send these exact bytes as
    the request body.
    """
    if isinstance(body, (bytes, bytearray, memoryview)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode()
    return json.dumps(
        body, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode()


def generate_digest(body: Any, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Returns a Digest header value for the body, according to
    https://datatracker.ietf.org/doc/html/rfc3230
    """
    algorithm = algorithm.upper()
    try:
        hash_function = ALGORITHMS[algorithm]
    except KeyError:
        raise ValueError(f"unsupported digest algorithm '{algorithm}'") from None

    digest = hash_function(canonical_body(body)).digest()
    return f"{algorithm}={base64.b64encode(digest).decode()}"


def verify_digest(digest_header: str, body: Any):
    """Verify a SHA-256 or SHA-512 Digest header matches a request body."""
    algorithm, sep, value = digest_header.partition("=")
    if not sep:
        raise ValueError(f"malformed digest header '{digest_header}'")

    algorithm = algorithm.strip().upper()
    if algorithm not in ALGORITHMS:
        raise ValueError(f"unsupported digest algorithm '{algorithm}'")

    expect_digest = generate_digest(body, algorithm).partition("=")[2]
    if not hmac.compare_digest(value.strip(), expect_digest):
        raise InvalidSignature(
            "digest of the request body does not match the Digest header"
        )
