"""Exception hierarchy for policy parsing, validation and loading.

Two phases fail loudly and only two: turning a document into objects
(:class:`PolicyParseError`) and checking those objects against the action and
condition-key catalogs (:class:`PolicyValidationError`).  Evaluation never
raises.

All errors subclass :class:`ValueError` so callers that only care about
"bad policy document" can catch that.
"""
from __future__ import annotations


class PolicyError(ValueError):
    """Base class for every error raised by this package."""


class PolicyParseError(PolicyError):
    """Raised when a policy document is structurally malformed.

    Unknown actions, condition keys or operator names, empty or duplicate
    set members and operand shape mismatches all surface as this error.
    """


class ConditionError(PolicyParseError):
    """Raised when a condition operator cannot be built from its operands.

    Attributes
    ----------
    operator:
        The operator name (e.g. ``"IpAddress"``) that rejected the operands.
    key:
        The condition key the operator was bound to, if known.
    """

    def __init__(self, message: str, operator: str = "", key: str = "") -> None:
        self.operator = operator
        self.key = key
        super().__init__(message)


class PolicyValidationError(PolicyError):
    """Raised when a parsed policy fails catalog validation.

    Attributes
    ----------
    sid:
        The Sid of the offending statement, or ``""`` when not applicable.
    """

    def __init__(self, message: str, sid: str = "") -> None:
        self.sid = sid
        super().__init__(message)


class PolicyLoadError(PolicyError):
    """Raised when a policy file or string cannot be loaded.

    Attributes
    ----------
    source:
        The path or identifier of the document that caused the error, if known.
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        prefix = f"[{source}] " if source else ""
        super().__init__(f"{prefix}{message}")
