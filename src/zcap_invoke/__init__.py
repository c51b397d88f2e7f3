"""Sign HTTP requests that invoke authorization capabilities (zCaps)."""

from http_message_signatures import InvalidSignature

from zcap_invoke.capability import (
    ById,
    CapabilityRef,
    Embedded,
    Root,
    format_capability_invocation,
    parse_capability_invocation,
    resolve_capability,
)
from zcap_invoke.digest import canonical_body, generate_digest, verify_digest
from zcap_invoke.error import InvalidURLError, ValidationError, ZcapInvokeError
from zcap_invoke.header import (
    create_authorization_header,
    create_signature_string,
    parse_authorization_header,
)
from zcap_invoke.headers import normalize_headers
from zcap_invoke.invoke import (
    async_sign_capability_invocation,
    sign_capability_invocation,
)
from zcap_invoke.key import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
    Ed25519Signer,
    Signer,
    parse_private_key,
    private_key_from_bytes,
    private_key_from_pem,
    public_key_from_bytes,
    public_key_from_pem,
)

__all__ = [
    "ById",
    "CapabilityRef",
    "Ed25519PrivateKey",
    "Ed25519PublicKey",
    "Ed25519Signer",
    "Embedded",
    "InvalidSignature",
    "InvalidURLError",
    "Root",
    "Signer",
    "ValidationError",
    "ZcapInvokeError",
    "async_sign_capability_invocation",
    "canonical_body",
    "create_authorization_header",
    "create_signature_string",
    "format_capability_invocation",
    "generate_digest",
    "normalize_headers",
    "parse_authorization_header",
    "parse_capability_invocation",
    "parse_private_key",
    "private_key_from_bytes",
    "private_key_from_pem",
    "public_key_from_bytes",
    "public_key_from_pem",
    "resolve_capability",
    "sign_capability_invocation",
    "verify_digest",
]
