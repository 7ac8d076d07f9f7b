"""Normalize fact graph results into plain Python scalars.

The fact graph hands back results in several shapes depending on the fact
type and on how far the graph got with its derivation:

- ``None`` when the fact is not yet derivable
- a bare ``bool``, ``str`` or number
- a wrapper exposing the scalar as ``v``, ``get`` or ``value``
- a fixed-point decimal: an unscaled integer split into a low 32-bit word and
  a high word, plus a separate scale

``decode`` classifies a raw result into a ``ResultKind`` and ``normalize``
returns the plain value, with ``"Incomplete"`` standing in for missing results.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Union

from credit_calculator.errors import UnrecognizedResultError

INCOMPLETE = "Incomplete"

# Checked in this order; the first exposed property wins.
WRAPPER_PROPERTIES = ("v", "get", "value")

DECIMAL_CARRIER = "unscaled"
DECIMAL_LOW = "low"
DECIMAL_HIGH = "high"
DECIMAL_SCALE = "scale"

WORD = 2**32

# Wrappers nested deeper than this are left unrecognized
MAX_DEPTH = 8


class ResultKind(Enum):
    """What a raw fact graph result turned out to be."""

    ABSENT = "absent"
    BOOL = "bool"
    STR = "str"
    NUM = "num"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class DecodedResult:
    """A classified fact graph result."""

    kind: ResultKind
    value: Any

    @property
    def incomplete(self) -> bool:
        return self.kind == ResultKind.ABSENT

    @property
    def recognized(self) -> bool:
        return self.kind != ResultKind.UNRECOGNIZED


def _property(raw: Any, name: str) -> Any:
    """Read a named property from a mapping or an attribute object.

    Returns None when the property is missing. A callable ``get`` on an
    attribute object is an accessor and is called; one that needs arguments
    is treated as missing.
    """
    if isinstance(raw, Mapping):
        return raw.get(name)
    value = getattr(raw, name, None)
    if name == "get" and callable(value):
        try:
            return value()
        except TypeError:
            # Keyed lookup such as get(key), not an accessor
            return None
    return value


def decode_fixed_point(low: int, high: int = 0, scale: int = 0) -> Union[int, float]:
    """Rebuild a decimal from its unscaled words and scale.

    >>> decode_fixed_point(715200, scale=2)
    7152
    """
    unscaled = Decimal(int(low) + int(high) * WORD)
    value = unscaled.scaleb(-int(scale))
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _decode_decimal(raw: Any):
    carrier = _property(raw, DECIMAL_CARRIER)
    if carrier is None:
        return None
    low = _property(carrier, DECIMAL_LOW)
    if low is None:
        return None
    high = _property(carrier, DECIMAL_HIGH) or 0
    scale = _property(raw, DECIMAL_SCALE) or 0
    try:
        return decode_fixed_point(low, high, scale)
    except (TypeError, ValueError, ArithmeticError):
        return None


def decode(raw: Any, _depth: int = 0) -> DecodedResult:
    """Classify a raw fact graph result."""
    if raw is None:
        return DecodedResult(ResultKind.ABSENT, INCOMPLETE)

    # bool before numbers: bool is an int subclass
    if isinstance(raw, bool):
        return DecodedResult(ResultKind.BOOL, raw)
    if isinstance(raw, str):
        return DecodedResult(ResultKind.STR, raw)
    if isinstance(raw, (int, float, Decimal)):
        return DecodedResult(ResultKind.NUM, raw)

    if _depth >= MAX_DEPTH:
        return DecodedResult(ResultKind.UNRECOGNIZED, raw)

    for name in WRAPPER_PROPERTIES:
        inner = _property(raw, name)
        if inner is not None:
            return decode(inner, _depth + 1)

    number = _decode_decimal(raw)
    if number is not None:
        return DecodedResult(ResultKind.NUM, number)

    return DecodedResult(ResultKind.UNRECOGNIZED, raw)


def normalize(raw: Any, strict: bool = False) -> Any:
    """Return the plain value of a fact graph result.

    Args:
        raw: Whatever the fact graph returned for a path.
        strict: Raise instead of passing unrecognized shapes through.

    Returns:
        A bool, str or number, or ``"Incomplete"`` for a missing result.
        Unrecognized shapes are returned unchanged unless ``strict`` is set.

    Raises:
        UnrecognizedResultError: If ``strict`` and the shape is unrecognized.
    """
    decoded = decode(raw)
    if strict and not decoded.recognized:
        raise UnrecognizedResultError(decoded.value)
    return decoded.value
