import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Awaitable, Optional, Protocol, Union, runtime_checkable

from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import (
    load_pem_private_key,
    load_pem_public_key,
)
from http_message_signatures.algorithms import ED25519

from .config import KEY_ID_ENVVAR, PRIVATE_KEY_ENVVAR, NamedValueFromEnvironment

logger = logging.getLogger(__name__)


@runtime_checkable
class Signer(Protocol):
    """Signer is the interface of the key used to sign capability
    invocations.

    Any object with an `id` attribute and a `sign` method satisfies it. The
    sign method may return the signature directly or an awaitable (for
    example when the key lives in a remote KMS or an HSM); the latter
    requires the async signing entrypoint.
    """

    id: str

    def sign(self, data: bytes) -> Union[bytes, Awaitable[bytes]]: ...


def public_key_from_pem(pem: str | bytes) -> Ed25519PublicKey:
    """Returns an Ed25519 public key given a PEM representation."""
    if isinstance(pem, str):
        pem = pem.encode()

    key = load_pem_public_key(pem)
    if not isinstance(key, Ed25519PublicKey):
        raise ValueError(f"unexpected public key type: {type(key)}")
    return key


def public_key_from_bytes(key: bytes) -> Ed25519PublicKey:
    """Returns an Ed25519 public key from 32 raw bytes."""
    return Ed25519PublicKey.from_public_bytes(key)


def private_key_from_pem(
    pem: str | bytes, password: bytes | None = None
) -> Ed25519PrivateKey:
    """Returns an Ed25519 private key given a PEM representation
    and optional password."""
    if isinstance(pem, str):
        pem = pem.encode()

    key = load_pem_private_key(pem, password=password)
    if not isinstance(key, Ed25519PrivateKey):
        raise ValueError(f"unexpected private key type: {type(key)}")
    return key


def private_key_from_bytes(key: bytes) -> Ed25519PrivateKey:
    """Returns an Ed25519 private key from 32 raw bytes."""
    return Ed25519PrivateKey.from_private_bytes(key)


def parse_private_key(
    value: Union[Ed25519PrivateKey, str, bytes],
    name: str = "private_key",
) -> Ed25519PrivateKey:
    """Returns an Ed25519 private key from a key object, a PEM document or
    the base64 encoding of the 32 raw key bytes.

    Environment variables often can't hold newlines, so escaped newlines in
    PEM strings are accepted too.
    """
    if isinstance(value, Ed25519PrivateKey):
        return value

    if isinstance(value, bytes):
        value = value.decode()
    value = value.replace("\\n", "\n").strip()

    try:
        if value.startswith("-----BEGIN"):
            return private_key_from_pem(value)
        return private_key_from_bytes(base64.b64decode(value, validate=True))
    except (ValueError, binascii.Error):
        raise ValueError(
            f"invalid {name}: expected a PEM document or a base64 encoded Ed25519 key"
        ) from None


@dataclass(slots=True)
class Ed25519Signer:
    """Ed25519Signer signs capability invocations with an Ed25519 private
    key held in memory.

    The id is the key identifier published to verifiers, typically a DID URL
    such as "did:key:z6Mk...#z6Mk...".
    """

    id: str
    private_key: Ed25519PrivateKey

    def sign(self, data: bytes) -> bytes:
        return ED25519(private_key=self.private_key).sign(data)

    def public_key(self) -> Ed25519PublicKey:
        return self.private_key.public_key()

    @classmethod
    def from_environment(
        cls,
        key_id: Optional[str] = None,
        private_key: Optional[str] = None,
    ) -> "Ed25519Signer":
        """Create a signer from explicit values or the environment.

        Args:
            key_id: Key identifier. Uses the value of the ZCAP_INVOKE_KEY_ID
                environment variable by default.

            private_key: PEM or base64 encoded Ed25519 private key. Uses the
                value of the ZCAP_INVOKE_PRIVATE_KEY environment variable by
                default.

        Raises:
            ValueError: if a value is missing or the key can't be parsed.
        """
        key_id_value = NamedValueFromEnvironment(KEY_ID_ENVVAR, "key_id", key_id)
        key = NamedValueFromEnvironment(PRIVATE_KEY_ENVVAR, "private_key", private_key)

        if not key_id_value:
            raise ValueError(
                f"missing key ID: set it with the {KEY_ID_ENVVAR} environment variable"
            )
        if not key:
            raise ValueError(
                f"missing private key: set it with the {PRIVATE_KEY_ENVVAR} environment variable"
            )

        logger.debug("loaded Ed25519 signer %s from %s", key_id_value.value, key.name)
        return cls(
            id=key_id_value.value,
            private_key=parse_private_key(key.value, key.name),
        )
