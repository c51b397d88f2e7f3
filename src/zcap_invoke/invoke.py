import base64
import inspect
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime
from typing import Any, Mapping, Optional

from .capability import (
    CapabilityRef,
    check_parameter,
    format_capability_invocation,
    resolve_capability,
)
from .config import signature_ttl
from .digest import generate_digest
from .error import ValidationError
from .header import create_authorization_header, create_signature_string
from .headers import host_from_url, normalize_headers
from .key import Signer

# Headers signed on every invocation, in this order. The content-type and
# digest headers follow when present, then every other header of the request
# sorted by name.
BASE_HEADERS = (
    "(key-id)",
    "(created)",
    "(expires)",
    "(request-target)",
    "host",
    "date",
    "capability-invocation",
)

BODY_HEADERS = ("content-type", "digest")

UNSIGNED_HEADERS = {"authorization"}

logger = logging.getLogger(__name__)


@dataclass
class Invocation:
    """State of a capability invocation between the moment its signing
    string is built and the moment the signature is attached."""

    url: Optional[str]
    method: str
    headers: dict[str, str]
    capability: CapabilityRef
    include_headers: list[str]
    key_id: str
    created: int
    expires: int
    signing_string: str

    def assemble(self, signature: bytes) -> dict[str, str]:
        headers = dict(self.headers)
        headers["authorization"] = create_authorization_header(
            self.include_headers,
            key_id=self.key_id,
            signature=base64.b64encode(signature).decode(),
            created=self.created,
            expires=self.expires,
        )
        logger.debug(
            "signed %s %s invoking capability %s",
            self.method,
            self.url,
            self.capability.id,
        )
        return headers


def validate_request(
    *,
    url: Optional[str],
    method: Any,
    headers: Optional[Mapping[str, Any]],
    invocation_signer: Optional[Signer],
    capability_action: Optional[str] = None,
):
    """Check that a request has everything needed to be signed.

    Raises:
        ValidationError: if the method or the invocation signer is missing,
            or if the signer id or the action is not printable ASCII.
        TypeError: if headers is None.
        InvalidURLError: if the URL is not absolute and there is no host
            header.
    """
    if not isinstance(method, str) or not method:
        raise ValidationError("method must be a non-empty string")
    if headers is None:
        raise TypeError("cannot convert None to a header mapping")
    if invocation_signer is None:
        raise ValidationError("invocation_signer is required")
    if not isinstance(getattr(invocation_signer, "id", None), str):
        raise ValidationError("invocation_signer must have a string id")
    check_parameter("invocation_signer id", invocation_signer.id)
    if capability_action is not None:
        if not isinstance(capability_action, str):
            raise ValidationError("capability_action must be a string")
        check_parameter("capability_action", capability_action)

    if not any(str(name).lower() == "host" for name in headers):
        host_from_url(url)


def select_headers(headers: Mapping[str, str]) -> list[str]:
    """Returns the ordered list of headers covered by the signature."""
    include_headers = list(BASE_HEADERS)
    include_headers.extend(name for name in BODY_HEADERS if name in headers)
    skip = set(include_headers) | UNSIGNED_HEADERS
    include_headers.extend(sorted(name for name in headers if name not in skip))
    return include_headers


def prepare_invocation(
    *,
    url: Optional[str],
    method: Any,
    headers: Optional[Mapping[str, Any]],
    body: Any = None,
    invocation_signer: Optional[Signer],
    capability: Any = None,
    capability_action: Optional[str] = None,
    created: Optional[datetime] = None,
    expires: Optional[datetime] = None,
) -> Invocation:
    """Run every step of the signing process up to the signature itself."""
    validate_request(
        url=url,
        method=method,
        headers=headers,
        invocation_signer=invocation_signer,
        capability_action=capability_action,
    )
    assert headers is not None and invocation_signer is not None

    signed = normalize_headers(headers, url)
    if not url:
        url = f"https://{signed['host']}/"

    if created is None:
        created = datetime.now(timezone.utc)
    if expires is None:
        expires = created + timedelta(seconds=signature_ttl())
    date = format_datetime(created.astimezone(timezone.utc), usegmt=True)
    signed.setdefault("date", date)

    if body is not None:
        signed["digest"] = generate_digest(body)
        if not isinstance(body, (bytes, bytearray, memoryview, str)):
            signed.setdefault("content-type", "application/json")

    ref = resolve_capability(capability, url)
    signed["capability-invocation"] = format_capability_invocation(
        ref.id, capability_action, invocation_signer.id
    )

    include_headers = select_headers(signed)
    created_ts = int(created.timestamp())
    expires_ts = int(expires.timestamp())
    signing_string = create_signature_string(
        include_headers,
        method=method,
        url=url,
        headers=signed,
        key_id=invocation_signer.id,
        created=created_ts,
        expires=expires_ts,
    )
    logger.debug(
        "signing %s %s with key %s covering %s",
        method,
        url,
        invocation_signer.id,
        " ".join(include_headers),
    )
    return Invocation(
        url=url,
        method=method,
        headers=signed,
        capability=ref,
        include_headers=include_headers,
        key_id=invocation_signer.id,
        created=created_ts,
        expires=expires_ts,
        signing_string=signing_string,
    )


def sign_capability_invocation(
    *,
    url: Optional[str] = None,
    method: Any = None,
    headers: Optional[Mapping[str, Any]] = None,
    body: Any = None,
    invocation_signer: Optional[Signer] = None,
    capability: Any = None,
    capability_action: Optional[str] = None,
    created: Optional[datetime] = None,
    expires: Optional[datetime] = None,
) -> dict[str, str]:
    """Sign a request invoking a capability.

    The function returns the headers of the request with the Host and Date
    headers added when missing, a Digest header when the request has a body,
    and the Capability-Invocation and Authorization headers. See the
    following specs for more details:
    https://w3c-ccg.github.io/zcap-spec/
    https://datatracker.ietf.org/doc/html/draft-cavage-http-signatures-12

    Args:
        url: The absolute URL of the request.
        method: The HTTP method of the request.
        headers: The headers of the request, in any case.
        body: The request body. Bytes and strings are hashed as is, other
            values are serialized to JSON (see digest.canonical_body).
        invocation_signer: The key used to sign the request.
        capability: The capability to invoke. Defaults to the root
            capability of the URL. May be a capability id or object.
        capability_action: The action to perform with the capability.
        created: The time at which the signature is created. Defaults to now.
        expires: The time at which the signature expires. Defaults to
            created plus the configured signature lifetime.

    Raises:
        ValidationError: if the method or the invocation signer is missing.
        TypeError: if headers is None, or if the signer is asynchronous.
        InvalidURLError: if neither the URL nor the headers give the host.
    """
    invocation = prepare_invocation(
        url=url,
        method=method,
        headers=headers,
        body=body,
        invocation_signer=invocation_signer,
        capability=capability,
        capability_action=capability_action,
        created=created,
        expires=expires,
    )
    assert invocation_signer is not None

    signature = invocation_signer.sign(invocation.signing_string.encode())
    if inspect.isawaitable(signature):
        if inspect.iscoroutine(signature):
            signature.close()
        raise TypeError(
            "invocation_signer is asynchronous, use async_sign_capability_invocation"
        )
    return invocation.assemble(signature)


async def async_sign_capability_invocation(
    *,
    url: Optional[str] = None,
    method: Any = None,
    headers: Optional[Mapping[str, Any]] = None,
    body: Any = None,
    invocation_signer: Optional[Signer] = None,
    capability: Any = None,
    capability_action: Optional[str] = None,
    created: Optional[datetime] = None,
    expires: Optional[datetime] = None,
) -> dict[str, str]:
    """Sign a request invoking a capability with a signer that may be
    asynchronous. See sign_capability_invocation for the arguments."""
    invocation = prepare_invocation(
        url=url,
        method=method,
        headers=headers,
        body=body,
        invocation_signer=invocation_signer,
        capability=capability,
        capability_action=capability_action,
        created=created,
        expires=expires,
    )
    assert invocation_signer is not None

    signature = invocation_signer.sign(invocation.signing_string.encode())
    if inspect.isawaitable(signature):
        signature = await signature
    return invocation.assemble(signature)

