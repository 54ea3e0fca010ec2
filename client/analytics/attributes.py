"""
Attribute values attached to analytics events.

Rules:
- An AttributeValue is a tagged union: NUMERIC or TEXT.
- The tag alone decides whether the encoded JSON value is quoted.
- NUMERIC values keep the caller's text form of the number.
- No encoding happens here; see protocol.encoder.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping


class ValueKind(str, Enum):
    """Discriminant for AttributeValue."""

    NUMERIC = "numeric"
    TEXT = "text"


@dataclass(frozen=True)
class AttributeValue:
    """Tagged attribute value."""

    kind: ValueKind
    text: str

    @classmethod
    def numeric(cls, value: int | float | str) -> AttributeValue:
        """
        Build a numeric value.

        Ints are kept exact, floats use their shortest round-tripping repr.
        Strings are taken verbatim; invalid numeric text is handled at
        encode time.
        """
        if isinstance(value, bool):
            raise TypeError("bool is not a numeric attribute value")
        if isinstance(value, float):
            return cls(ValueKind.NUMERIC, repr(value))
        return cls(ValueKind.NUMERIC, str(value))

    @classmethod
    def of_text(cls, value: str) -> AttributeValue:
        return cls(ValueKind.TEXT, value)

    @property
    def is_numeric(self) -> bool:
        return self.kind is ValueKind.NUMERIC


@dataclass(frozen=True)
class Attribute:
    """Name/value pair. Names are not required to be unique within an event."""

    name: str
    value: AttributeValue

    @classmethod
    def of(cls, name: str, value: Any) -> Attribute:
        """
        Build an attribute from a plain Python value.

        int/float -> NUMERIC, everything else (bool included) -> TEXT.
        """
        if isinstance(value, AttributeValue):
            return cls(name, value)
        if isinstance(value, bool):
            return cls(name, AttributeValue.of_text("true" if value else "false"))
        if isinstance(value, (int, float)):
            return cls(name, AttributeValue.numeric(value))
        return cls(name, AttributeValue.of_text(str(value)))


def attributes_from(values: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> tuple[Attribute, ...]:
    """Build an ordered attribute tuple from a mapping or (name, value) pairs."""
    items = values.items() if isinstance(values, Mapping) else values
    return tuple(Attribute.of(name, value) for name, value in items)
