"""Condition operand literals and value sets.

A ``Condition`` block binds each key to one literal or to an array of
literals.  Literals are JSON strings, integers or booleans.  Because Python
treats ``True == 1``, values are tagged with their :class:`ValueKind` so that
``[true, 1]`` is a two-element set, as it is on the wire.
"""
from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from s3_iam_policy.errors import PolicyParseError

_TRUE_STRINGS: frozenset[str] = frozenset({"1", "t", "T", "true", "TRUE", "True"})
_FALSE_STRINGS: frozenset[str] = frozenset({"0", "f", "F", "false", "FALSE", "False"})

_INT_RE = re.compile(r"([+-]?)0*([0-9]{1,19})")

INT64_MIN: int = -(2**63)
INT64_MAX: int = 2**63 - 1


class ValueKind(str, Enum):
    """Type tag of a :class:`ConditionValue`."""

    STRING = "string"
    INT = "int"
    BOOL = "bool"


@dataclass(frozen=True)
class ConditionValue:
    """One literal operand of a condition.

    Attributes
    ----------
    kind:
        The literal's type tag.
    value:
        The Python value; its type always agrees with ``kind``.
    """

    kind: ValueKind
    value: str | int | bool

    @classmethod
    def of(cls, value: str | int | bool) -> ConditionValue:
        """Wrap a Python literal, inferring the kind."""
        if isinstance(value, bool):
            return cls(ValueKind.BOOL, value)
        if isinstance(value, int):
            return cls(ValueKind.INT, value)
        if isinstance(value, str):
            return cls(ValueKind.STRING, value)
        raise PolicyParseError(
            f"condition value must be a string, integer or boolean; got {value!r}"
        )

    @classmethod
    def from_json(cls, raw: object) -> ConditionValue:
        """Build a value from a decoded JSON scalar.

        Raises
        ------
        PolicyParseError
            For floats, ``null``, arrays and objects.
        """
        if isinstance(raw, (str, int, bool)):
            return cls.of(raw)
        raise PolicyParseError(
            f"condition value must be a string, integer or boolean; got {raw!r}"
        )

    def to_json(self) -> str | int | bool:
        return self.value

    def __str__(self) -> str:
        if self.kind is ValueKind.BOOL:
            return "true" if self.value else "false"
        return str(self.value)


class ValueSet:
    """An immutable, unordered set of unique :class:`ConditionValue` items.

    Use :meth:`from_json` for wire input: it rejects empty arrays and
    duplicate entries.  The plain constructor is lenient and is meant for
    building sets in code.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Iterable[ConditionValue | str | int | bool] = ()) -> None:
        self._values: frozenset[ConditionValue] = frozenset(
            v if isinstance(v, ConditionValue) else ConditionValue.of(v) for v in values
        )

    @classmethod
    def from_json(cls, raw: object) -> ValueSet:
        """Parse the right-hand side of a ``"key": ...`` condition entry.

        A scalar becomes a one-element set; an array must be non-empty and
        free of duplicates.
        """
        if isinstance(raw, list):
            seen: list[ConditionValue] = []
            for item in raw:
                value = ConditionValue.from_json(item)
                if value in seen:
                    raise PolicyParseError(f"duplicate value found '{value}'")
                seen.append(value)
            if not seen:
                raise PolicyParseError("empty value set")
            return cls(seen)
        return cls([ConditionValue.from_json(raw)])

    def to_json(self) -> list[str | int | bool]:
        """Return the values as a JSON-ready list in a stable order."""
        if not self._values:
            raise PolicyParseError("empty value set")
        return [v.to_json() for v in sorted(self._values, key=_sort_key)]

    def __iter__(self) -> Iterator[ConditionValue]:
        return iter(sorted(self._values, key=_sort_key))

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, item: object) -> bool:
        return item in self._values

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValueSet):
            return NotImplemented
        return self._values == other._values

    def __hash__(self) -> int:
        return hash(self._values)

    def __repr__(self) -> str:
        return f"ValueSet({[str(v) for v in self]!r})"


def _sort_key(value: ConditionValue) -> tuple[str, str]:
    return (value.kind.value, str(value))


# ---------------------------------------------------------------------------
# Operand coercion helpers shared by the condition functions
# ---------------------------------------------------------------------------


def parse_bool(text: str) -> bool:
    """Parse the boolean spellings accepted in policies.

    Raises
    ------
    ValueError
        If *text* is not one of the accepted spellings.
    """
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ValueError(f"provided string was not a boolean string: {text!r}")


def parse_int(text: str) -> int | None:
    """Parse a signed 64-bit decimal integer.

    Returns ``None`` when *text* is malformed or out of range.  Leading zeros
    are ignored and do not count towards the digit limit.
    """
    match = _INT_RE.fullmatch(text)
    if match is None:
        return None
    number = int(match.group(1) + match.group(2))
    if not INT64_MIN <= number <= INT64_MAX:
        return None
    return number
