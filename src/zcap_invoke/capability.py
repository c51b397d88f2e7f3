from dataclasses import dataclass
from typing import Any, Mapping, Optional, TypeAlias, Union
from urllib.parse import quote

import http_sfv

from .error import ValidationError

ROOT_CAPABILITY_PREFIX = "urn:zcap:root:"

CAPABILITY_INVOCATION_SCHEME = "zcap"


@dataclass(frozen=True, slots=True)
class Root:
    """The root capability of a resource. The target URL is its own
    authority, so there is no delegation chain to present."""

    target: str

    @property
    def id(self) -> str:
        return ROOT_CAPABILITY_PREFIX + quote(self.target, safe="")


@dataclass(frozen=True, slots=True)
class ById:
    """A capability referenced by its identifier."""

    id: str


@dataclass(frozen=True, slots=True)
class Embedded:
    """A capability passed as a full object; only its id is referenced in
    the invocation."""

    id: str


CapabilityRef: TypeAlias = Union[Root, ById, Embedded]


def check_parameter(name: str, value: str):
    """Raises ValidationError unless the value can be carried in a quoted
    header parameter, which only allows printable ASCII."""
    if not (value.isascii() and value.isprintable()):
        raise ValidationError(f"{name} must only contain printable ASCII characters")


def resolve_capability(capability: Any, url: Optional[str]) -> CapabilityRef:
    """Resolve the capability being invoked.

    Args:
        capability: None to invoke the root capability of the URL, a
            capability id, or a capability object (a mapping or an object
            with an `id`).
        url: The target URL of the request.

    Raises:
        ValidationError: if the capability can't be resolved to an id.
    """
    if capability is None:
        if not url:
            raise ValidationError("url is required to invoke a root capability")
        return Root(url)

    if isinstance(capability, str):
        if not capability:
            raise ValidationError("capability id must be a non-empty string")
        check_parameter("capability", capability)
        return ById(capability)

    if isinstance(capability, Mapping):
        capability_id = capability.get("id")
    else:
        capability_id = getattr(capability, "id", None)
    if not isinstance(capability_id, str) or not capability_id:
        raise ValidationError(
            f"capability must be a string or have a string id, got {type(capability).__name__}"
        )
    check_parameter("capability id", capability_id)
    return Embedded(capability_id)


def format_capability_invocation(
    capability_id: str,
    action: Optional[str] = None,
    invoker: Optional[str] = None,
) -> str:
    """Returns the value of the capability-invocation header, for example:

        zcap id="urn:zcap:root:https%3A%2F%2Fexample.com%2F", action="read"

    The action is omitted when not given; verifiers then apply their own
    default, if any. The invoker is the id of the key signing the request.
    """
    params = {"id": capability_id}
    if action is not None:
        params["action"] = action
    if invoker is not None:
        params["invoker"] = invoker
    return CAPABILITY_INVOCATION_SCHEME + " " + str(http_sfv.Dictionary(params))


def parse_capability_invocation(value: str) -> dict[str, str]:
    """Parse a capability-invocation header into its parameters."""
    scheme, _, params = value.strip().partition(" ")
    if scheme != CAPABILITY_INVOCATION_SCHEME:
        raise ValueError(f"unsupported capability invocation scheme '{scheme}'")

    parsed = http_sfv.Dictionary()
    parsed.parse(params.encode())

    result = {}
    for name in ("id", "action", "invoker"):
        if name in parsed:
            item = parsed[name].value
            if not isinstance(item, str):
                raise ValueError(f"capability invocation {name} must be a string")
            result[name] = item
    if "id" not in result:
        raise ValueError("capability invocation is missing an id")
    return result
