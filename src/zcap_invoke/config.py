import os
from dataclasses import dataclass
from typing import Optional

KEY_ID_ENVVAR = "ZCAP_INVOKE_KEY_ID"
PRIVATE_KEY_ENVVAR = "ZCAP_INVOKE_PRIVATE_KEY"
SIGNATURE_TTL_ENVVAR = "ZCAP_INVOKE_SIGNATURE_TTL"

DEFAULT_SIGNATURE_TTL = 600
"""Number of seconds between the (created) and (expires) parameters of a
signature when neither the caller nor the environment sets it."""


@dataclass
class NamedValueFromEnvironment:
    """A setting that is either passed explicitly or read from an
    environment variable.

    The name reported in error messages is the name of the argument when
    the value was passed in, and the name of the environment variable
    otherwise, so callers know where to fix it.
    """

    _envvar: str
    _name: str
    _value: str
    _from_envvar: bool

    def __init__(self, envvar: str, name: str, value: Optional[str] = None):
        self._envvar = envvar
        self._name = name
        if value is None:
            self._value = os.environ.get(envvar) or ""
            self._from_envvar = True
        else:
            self._value = value
            self._from_envvar = False

    def __str__(self):
        return self.value

    def __bool__(self):
        return bool(self._value)

    @property
    def name(self) -> str:
        return self._envvar if self._from_envvar else self._name

    @property
    def value(self) -> str:
        return self._value

    @property
    def from_envvar(self) -> bool:
        return self._from_envvar


def signature_ttl(value: Optional[int] = None) -> int:
    """Returns the lifetime of a signature in seconds.

    Uses the value of the ZCAP_INVOKE_SIGNATURE_TTL environment variable when
    no value is passed, and DEFAULT_SIGNATURE_TTL when neither is set.

    Raises:
        ValueError: if the lifetime is not a positive integer.
    """
    setting = NamedValueFromEnvironment(
        SIGNATURE_TTL_ENVVAR,
        "signature_ttl",
        None if value is None else str(value),
    )
    if not setting:
        return DEFAULT_SIGNATURE_TTL

    try:
        ttl = int(setting.value)
    except ValueError:
        raise ValueError(f"invalid {setting.name} '{setting.value}'") from None
    if ttl <= 0:
        raise ValueError(f"invalid {setting.name} '{setting.value}'")
    return ttl
