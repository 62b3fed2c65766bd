"""Statement principals for bucket policies.

A bucket policy names who a statement applies to.  Two spellings are
accepted::

    "Principal": "*"
    "Principal": {"AWS": ["arn:aws:iam::123456789012:root", "*"]}

The value of ``AWS`` may be a single string.  Patterns use the same ``*`` and
``?`` wildcards as resources and are matched against the request's
``account_name``.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from s3_iam_policy import wildcard
from s3_iam_policy.errors import PolicyParseError


@dataclass(frozen=True)
class Principal:
    """The set of account patterns a statement applies to."""

    aws: frozenset[str]

    @classmethod
    def of(cls, patterns: Iterable[str]) -> Principal:
        return cls(frozenset(patterns))

    @classmethod
    def from_json(cls, raw: object) -> Principal:
        """Parse ``"*"`` or ``{"AWS": pattern-or-patterns}``.

        Raises
        ------
        PolicyParseError
            For any other shape, a field other than ``AWS``, or a
            non-string pattern.
        """
        if isinstance(raw, str):
            if raw != "*":
                raise PolicyParseError(f"invalid principal '{raw}'")
            return cls(frozenset({"*"}))
        if not isinstance(raw, Mapping):
            raise PolicyParseError(f"invalid principal {raw!r}")
        unknown = sorted(set(raw) - {"AWS"})
        if unknown or "AWS" not in raw:
            raise PolicyParseError(f"invalid principal field(s) {unknown or sorted(raw)}")

        value = raw["AWS"]
        patterns = value if isinstance(value, list) else [value]
        for pattern in patterns:
            if not isinstance(pattern, str):
                raise PolicyParseError(f"principal must be a string; got {pattern!r}")
        return cls(frozenset(patterns))

    def to_json(self) -> dict[str, list[str]]:
        return {"AWS": sorted(self.aws)}

    def is_valid(self) -> bool:
        return bool(self.aws)

    def is_match(self, account_name: str) -> bool:
        """Return True if any pattern matches *account_name*."""
        return any(wildcard.matches(pattern, account_name) for pattern in self.aws)

    def intersection(self, other: Iterable[str]) -> frozenset[str]:
        return self.aws & frozenset(other)
