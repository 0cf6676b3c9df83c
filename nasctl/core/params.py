"""Encoding of typed option values into wire parameters.

Each option field follows one of three conventions:

* ``ALWAYS``: the field is sent even at its zero value.
* ``OMIT_ZERO``: the field is left out when it is ``None``, ``""``, ``0`` or
  ``False``. Empty collections are still sent; leave the field as ``None`` to
  omit it.
* ``OPTIONAL``: three-state update field. ``UNSET`` leaves it out, any other
  value (including ``0`` and ``""``) is sent.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Final

ALWAYS: Final = "always"
OMIT_ZERO: Final = "omit_zero"
OPTIONAL: Final = "optional"


class Unset:
    _instance: Unset | None = None

    def __new__(cls) -> Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> Unset:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> Unset:
        return self


UNSET: Final = Unset()


def is_set(value: Any) -> bool:
    return value is not UNSET


@dataclass(frozen=True)
class Param:
    """Declares how one option attribute maps onto a wire key."""

    key: str
    attr: str | None = None
    rule: str = ALWAYS
    transform: Callable[[Any], Any] | None = None

    @property
    def source(self) -> str:
        return self.attr or self.key


def is_zero(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (int, float)) and value == 0:
        return True
    return isinstance(value, str) and value == ""


def _include(rule: str, value: Any) -> bool:
    if rule == ALWAYS:
        return True
    if rule == OMIT_ZERO:
        return not is_zero(value)
    if rule == OPTIONAL:
        return value is not UNSET
    raise ValueError(f"Unknown parameter rule '{rule}'")


def _copy(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return [_copy(item) for item in value]
    if isinstance(value, Mapping):
        return {k: _copy(v) for k, v in value.items()}
    return value


def encode_params(
    opts: Any,
    spec: Iterable[Param],
    *,
    fixed: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a fresh parameter mapping from *opts* according to *spec*.

    ``fixed`` entries are always sent and take precedence (create
    discriminants such as a dataset ``type``).
    """
    params: dict[str, Any] = {}
    for param in spec:
        value = getattr(opts, param.source)
        if not _include(param.rule, value):
            continue
        if param.transform is not None:
            value = param.transform(value)
        params[param.key] = _copy(value)
    if fixed:
        params.update(fixed)
    return params


def negate(value: bool) -> bool:
    return not value
