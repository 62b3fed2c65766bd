"""Condition functions: one predicate per ``(operator, key, operands)`` triple.

Each ConditionFunction subclass tests a single condition key of the request
attribute map against the operands written in the policy.  Functions are
immutable and hashable; two functions are equal when they were built from the
same operator, key and operand set.

Supported families:

- BooleanFunction     : ``Bool`` on ``aws:SecureTransport``
- NullFunction        : ``Null``, tests presence of a key
- NumericFunction     : ``Numeric{Equals,LessThan,...}``
- DateFunction        : ``Date{Equals,LessThan,...}``
- IpAddressFunction   : ``IpAddress`` on ``aws:SourceIp``
- StringEqualsFunction: ``StringEquals`` and ``StringEqualsIgnoreCase``
- StringLikeFunction  : ``StringLike``
- BinaryEqualsFunction: ``BinaryEquals``
- Negated             : every ``Not`` operator wraps its positive form

Factory
-------
Use :func:`new_function` to build the right function from an operator name,
a key and a :class:`~s3_iam_policy.condition.values.ValueSet`.  Direct
construction skips operand validation.
"""
from __future__ import annotations

import base64
import binascii
import ipaddress
import operator
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from s3_iam_policy import wildcard
from s3_iam_policy.condition.keys import (
    AWS_SECURE_TRANSPORT,
    AWS_SOURCE_IP,
    COMMON_KEYS,
    S3X_AMZ_CONTENT_SHA256,
    S3X_AMZ_COPY_SOURCE,
    S3X_AMZ_METADATA_DIRECTIVE,
    S3X_AMZ_SERVER_SIDE_ENCRYPTION,
    S3X_AMZ_SERVER_SIDE_ENCRYPTION_CUSTOMER_ALGORITHM,
    ConditionKey,
    lookup_values,
    substitute,
)
from s3_iam_policy.condition.names import Name
from s3_iam_policy.condition.values import (
    INT64_MAX,
    INT64_MIN,
    ConditionValue,
    ValueKind,
    ValueSet,
    parse_bool,
    parse_int,
)
from s3_iam_policy.errors import ConditionError

Attributes = Mapping[str, Sequence[str]]
IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network

_IP_ADDRESS_RE = re.compile(r"([0-9]+\.){3}[0-9]+")
_RFC3339_RE = re.compile(
    r"([0-9]{4}-[0-9]{2}-[0-9]{2})[Tt]([0-9]{2}:[0-9]{2}:[0-9]{2})"
    r"(?:\.([0-9]+))?([Zz]|[+-][0-9]{2}:[0-9]{2})"
)
_VALID_BUCKET_NAME_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9\.\-\_\:]{1,61}[A-Za-z0-9]")


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------


class ConditionFunction(ABC):
    """Abstract base for condition functions.

    Every concrete function carries a ``key`` (the condition key it tests)
    and a ``name`` (the operator it was built from).
    """

    key: ConditionKey
    name: Name

    @abstractmethod
    def evaluate(self, attrs: Attributes) -> bool:
        """Return True if the request attributes satisfy the condition.

        Parameters
        ----------
        attrs:
            Request attributes keyed by bare condition key name.  Values are
            lists of strings; a missing entry means the key is absent.

        Returns
        -------
        bool
        """

    @abstractmethod
    def to_wire(self) -> tuple[ConditionKey, ValueSet]:
        """Return the key and operand set this function serializes to."""

    @property
    def operator_name(self) -> Name:
        return self.name

    def __str__(self) -> str:
        key, values = self.to_wire()
        return f"{self.name}:{key}:{[str(v) for v in values]}"


def _first_value(key: ConditionKey, attrs: Attributes) -> str | None:
    values = lookup_values(key, attrs)
    if not values:
        return None
    return values[0]


# ---------------------------------------------------------------------------
# BooleanFunction
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BooleanFunction(ConditionFunction):
    """Compare the first request value of the key with ``"true"``/``"false"``.

    Examples
    --------
    ::

        f = BooleanFunction(AWS_SECURE_TRANSPORT, True)
        assert f.evaluate({"SecureTransport": ["true"]}) is True
        assert f.evaluate({}) is False
    """

    key: ConditionKey
    value: bool
    name: Name = field(default=Name.BOOLEAN, init=False)

    def evaluate(self, attrs: Attributes) -> bool:
        first = _first_value(self.key, attrs)
        if first is None:
            return False
        return first == ("true" if self.value else "false")

    def to_wire(self) -> tuple[ConditionKey, ValueSet]:
        return self.key, ValueSet(["true" if self.value else "false"])


# ---------------------------------------------------------------------------
# NullFunction
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NullFunction(ConditionFunction):
    """Test whether a key is missing from the request.

    ``Null: {key: true}`` holds when the key is absent (or present with no
    values); ``Null: {key: false}`` holds when it carries at least one value.
    """

    key: ConditionKey
    value: bool
    name: Name = field(default=Name.NULL, init=False)

    def evaluate(self, attrs: Attributes) -> bool:
        values = lookup_values(self.key, attrs)
        if values is None:
            return self.value
        return (len(values) == 0) == self.value

    def to_wire(self) -> tuple[ConditionKey, ValueSet]:
        return self.key, ValueSet([self.value])


# ---------------------------------------------------------------------------
# NumericFunction
# ---------------------------------------------------------------------------

_ORDERING_OPERATORS: dict[str, Callable[[object, object], bool]] = {
    "Equals": operator.eq,
    "LessThan": operator.lt,
    "LessThanEquals": operator.le,
    "GreaterThan": operator.gt,
    "GreaterThanEquals": operator.ge,
}


def _compare(name: Name, prefix: str, left: object, right: object) -> bool:
    return _ORDERING_OPERATORS[name.value[len(prefix):]](left, right)


@dataclass(frozen=True)
class NumericFunction(ConditionFunction):
    """Compare the first request value, parsed as an integer, with ``value``.

    The comparison is ``request <op> operand``.  A missing or non-integer
    request value never satisfies the condition.
    """

    key: ConditionKey
    value: int
    name: Name = Name.NUMERIC_EQUALS

    def evaluate(self, attrs: Attributes) -> bool:
        first = _first_value(self.key, attrs)
        if first is None:
            return False
        number = parse_int(first)
        if number is None:
            return False
        return _compare(self.name, "Numeric", number, self.value)

    def to_wire(self) -> tuple[ConditionKey, ValueSet]:
        return self.key, ValueSet([self.value])


# ---------------------------------------------------------------------------
# DateFunction
# ---------------------------------------------------------------------------


def parse_date(text: str) -> datetime | None:
    """Parse an RFC 3339 timestamp; return ``None`` if malformed or naive."""
    match = _RFC3339_RE.fullmatch(text)
    if match is None:
        return None
    date_part, time_part, fraction, offset = match.groups()
    offset = "+00:00" if offset in ("Z", "z") else offset
    micros = f".{fraction[:6]:0<6}" if fraction else ""
    try:
        return datetime.fromisoformat(f"{date_part}T{time_part}{micros}{offset}")
    except ValueError:
        return None


def format_date(value: datetime) -> str:
    text = value.isoformat()
    if text.endswith("+00:00"):
        return text[: -len("+00:00")] + "Z"
    return text


@dataclass(frozen=True)
class DateFunction(ConditionFunction):
    """Compare the first request value, parsed as RFC 3339, with ``value``."""

    key: ConditionKey
    value: datetime
    name: Name = Name.DATE_EQUALS

    def evaluate(self, attrs: Attributes) -> bool:
        first = _first_value(self.key, attrs)
        if first is None:
            return False
        when = parse_date(first)
        if when is None:
            return False
        return _compare(self.name, "Date", when, self.value)

    def to_wire(self) -> tuple[ConditionKey, ValueSet]:
        return self.key, ValueSet([format_date(self.value)])


# ---------------------------------------------------------------------------
# IpAddressFunction
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IpAddressFunction(ConditionFunction):
    """Test whether any request address falls inside any of ``networks``.

    Request values that do not parse as an IP address are skipped.

    Examples
    --------
    ::

        f = new_function("IpAddress", AWS_SOURCE_IP, ValueSet(["192.168.1.0/24"]))
        assert f.evaluate({"SourceIp": ["192.168.1.10"]}) is True
    """

    key: ConditionKey
    networks: frozenset[IPNetwork]
    name: Name = field(default=Name.IP_ADDRESS, init=False)

    def evaluate(self, attrs: Attributes) -> bool:
        values = lookup_values(self.key, attrs)
        if not values:
            return False
        for value in values:
            try:
                address = ipaddress.ip_address(value)
            except ValueError:
                continue
            if any(address in network for network in self.networks):
                return True
        return False

    def to_wire(self) -> tuple[ConditionKey, ValueSet]:
        return self.key, ValueSet(str(n) for n in self.networks)


# ---------------------------------------------------------------------------
# String family
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StringEqualsFunction(ConditionFunction):
    """Test whether any request value equals any operand.

    Operands may carry ``${key}`` policy variables; they are substituted from
    the request before comparing.  With ``ignore_case`` both sides are
    case-folded.
    """

    key: ConditionKey
    values: frozenset[str]
    ignore_case: bool = False
    variables: tuple[ConditionKey, ...] = field(default=COMMON_KEYS, compare=False, repr=False)

    @property
    def name(self) -> Name:  # type: ignore[override]
        return Name.STRING_EQUALS_IGNORE_CASE if self.ignore_case else Name.STRING_EQUALS

    def evaluate(self, attrs: Attributes) -> bool:
        values = lookup_values(self.key, attrs)
        if values is None:
            return False
        operands = {substitute(v, attrs, self.variables) for v in self.values}
        if self.ignore_case:
            operands = {v.casefold() for v in operands}
            return any(v.casefold() in operands for v in values)
        return any(v in operands for v in values)

    def to_wire(self) -> tuple[ConditionKey, ValueSet]:
        return self.key, ValueSet(self.values)


@dataclass(frozen=True)
class StringLikeFunction(ConditionFunction):
    """Test whether any request value matches any operand glob (``*``, ``?``)."""

    key: ConditionKey
    values: frozenset[str]
    variables: tuple[ConditionKey, ...] = field(default=COMMON_KEYS, compare=False, repr=False)
    name: Name = field(default=Name.STRING_LIKE, init=False)

    def evaluate(self, attrs: Attributes) -> bool:
        values = lookup_values(self.key, attrs)
        if values is None:
            return False
        patterns = [substitute(p, attrs, self.variables) for p in self.values]
        return any(wildcard.matches(p, v) for v in values for p in patterns)

    def to_wire(self) -> tuple[ConditionKey, ValueSet]:
        return self.key, ValueSet(self.values)


@dataclass(frozen=True)
class BinaryEqualsFunction(ConditionFunction):
    """Like :class:`StringEqualsFunction` with base64-encoded operands.

    ``values`` holds the decoded text; :meth:`to_wire` encodes it again.
    """

    key: ConditionKey
    values: frozenset[str]
    variables: tuple[ConditionKey, ...] = field(default=COMMON_KEYS, compare=False, repr=False)
    name: Name = field(default=Name.BINARY_EQUALS, init=False)

    def evaluate(self, attrs: Attributes) -> bool:
        values = lookup_values(self.key, attrs)
        if values is None:
            return False
        operands = {substitute(v, attrs, self.variables) for v in self.values}
        return any(v in operands for v in values)

    def to_wire(self) -> tuple[ConditionKey, ValueSet]:
        return self.key, ValueSet(
            base64.b64encode(v.encode("utf-8")).decode("ascii") for v in self.values
        )


# ---------------------------------------------------------------------------
# Negated
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Negated(ConditionFunction):
    """Logical negation of another function under a different operator name.

    ``StringNotEquals``, ``NotIpAddress``, ``NumericNotEquals`` and the
    other ``Not`` operators are all expressed this way, so a ``Not``
    operator holds whenever its positive form does not, including when the
    key is absent from the request.
    """

    inner: ConditionFunction
    name: Name

    @property
    def key(self) -> ConditionKey:  # type: ignore[override]
        return self.inner.key

    def evaluate(self, attrs: Attributes) -> bool:
        return not self.inner.evaluate(attrs)

    def to_wire(self) -> tuple[ConditionKey, ValueSet]:
        return self.inner.to_wire()


# ---------------------------------------------------------------------------
# Operand validation
# ---------------------------------------------------------------------------


def check_bucket_name(bucket: str) -> None:
    """Raise :class:`ValueError` if *bucket* is not a valid S3 bucket name."""
    if not bucket.strip():
        raise ValueError("bucket name cannot be empty")
    if len(bucket) < 3:
        raise ValueError("bucket name cannot be shorter than 3 characters")
    if len(bucket) > 63:
        raise ValueError("bucket name cannot be longer than 63 characters")
    if _IP_ADDRESS_RE.fullmatch(bucket):
        raise ValueError("bucket name cannot be an ip address")
    if ".." in bucket or ".-" in bucket or "-." in bucket:
        raise ValueError("bucket name contains invalid characters")
    if not _VALID_BUCKET_NAME_RE.fullmatch(bucket):
        raise ValueError("bucket name contains invalid characters")


def _split_copy_source(path: str) -> tuple[str, str]:
    bucket, _, obj = path.lstrip("/").partition("/")
    return bucket, obj


def _invalid(name: Name, key: ConditionKey, value: str) -> ConditionError:
    return ConditionError(
        f"invalid value '{value}' for '{key}' for {name} condition",
        operator=name.value,
        key=key.name,
    )


def _validate_string_operands(
    name: Name,
    key: ConditionKey,
    values: frozenset[str],
    check_bucket: bool,
) -> None:
    for value in values:
        if key == S3X_AMZ_COPY_SOURCE:
            bucket, obj = _split_copy_source(value)
            if not obj:
                raise _invalid(name, key, value)
            if check_bucket:
                try:
                    check_bucket_name(bucket)
                except ValueError as exc:
                    raise ConditionError(
                        f"invalid value '{value}' for '{key}' for {name} condition: {exc}",
                        operator=name.value,
                        key=key.name,
                    ) from exc
        elif key in (S3X_AMZ_SERVER_SIDE_ENCRYPTION, S3X_AMZ_SERVER_SIDE_ENCRYPTION_CUSTOMER_ALGORITHM):
            if value != "AES256":
                raise _invalid(name, key, value)
        elif key == S3X_AMZ_METADATA_DIRECTIVE:
            if value not in ("COPY", "REPLACE"):
                raise _invalid(name, key, value)
        elif key == S3X_AMZ_CONTENT_SHA256:
            if not value:
                raise ConditionError(
                    f"invalid empty value for '{key}' for {name} condition",
                    operator=name.value,
                    key=key.name,
                )


def _string_operands(name: Name, key: ConditionKey, values: ValueSet) -> frozenset[str]:
    result: list[str] = []
    for value in values:
        if value.kind is not ValueKind.STRING:
            raise ConditionError(
                f"value must be a string for {name} condition",
                operator=name.value,
                key=key.name,
            )
        result.append(str(value.value))
    return frozenset(result)


def _single_operand(name: Name, key: ConditionKey, values: ValueSet) -> ConditionValue:
    if len(values) != 1:
        raise ConditionError(
            f"only one value is allowed for {name} condition",
            operator=name.value,
            key=key.name,
        )
    return next(iter(values))


def _bool_operand(name: Name, key: ConditionKey, values: ValueSet) -> bool:
    value = _single_operand(name, key, values)
    match value.kind:
        case ValueKind.BOOL:
            return bool(value.value)
        case ValueKind.STRING:
            try:
                return parse_bool(str(value.value))
            except ValueError as exc:
                raise ConditionError(
                    f"value must be a boolean string for {name} condition",
                    operator=name.value,
                    key=key.name,
                ) from exc
        case _:
            raise ConditionError(
                f"value must be a boolean for {name} condition",
                operator=name.value,
                key=key.name,
            )


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

Variables = tuple[ConditionKey, ...]


def _new_boolean(name: Name, key: ConditionKey, values: ValueSet, variables: Variables) -> ConditionFunction:
    if key != AWS_SECURE_TRANSPORT:
        raise ConditionError(
            f"only {AWS_SECURE_TRANSPORT} key is allowed for {name} condition",
            operator=name.value,
            key=key.name,
        )
    return BooleanFunction(key, _bool_operand(name, key, values))


def _new_null(name: Name, key: ConditionKey, values: ValueSet, variables: Variables) -> ConditionFunction:
    return NullFunction(key, _bool_operand(name, key, values))


def _new_numeric(name: Name, key: ConditionKey, values: ValueSet, variables: Variables) -> ConditionFunction:
    value = _single_operand(name, key, values)
    number: int | None
    match value.kind:
        case ValueKind.INT:
            number = int(value.value)
            if not INT64_MIN <= number <= INT64_MAX:
                number = None
        case ValueKind.STRING:
            number = parse_int(str(value.value))
        case _:
            number = None
    if number is None:
        raise ConditionError(
            f"value must be a signed 64-bit integer for {name} condition",
            operator=name.value,
            key=key.name,
        )
    if name is Name.NUMERIC_NOT_EQUALS:
        return Negated(NumericFunction(key, number, Name.NUMERIC_EQUALS), name)
    return NumericFunction(key, number, name)


def _new_date(name: Name, key: ConditionKey, values: ValueSet, variables: Variables) -> ConditionFunction:
    value = _single_operand(name, key, values)
    when = parse_date(str(value.value)) if value.kind is ValueKind.STRING else None
    if when is None:
        raise ConditionError(
            f"value must be an RFC 3339 time string for {name} condition",
            operator=name.value,
            key=key.name,
        )
    if name is Name.DATE_NOT_EQUALS:
        return Negated(DateFunction(key, when, Name.DATE_EQUALS), name)
    return DateFunction(key, when, name)


def _new_ip_address(name: Name, key: ConditionKey, values: ValueSet, variables: Variables) -> ConditionFunction:
    if key != AWS_SOURCE_IP:
        raise ConditionError(
            f"only {AWS_SOURCE_IP} key is allowed for {name} condition",
            operator=name.value,
            key=key.name,
        )
    networks: list[IPNetwork] = []
    for text in _string_operands(name, key, values):
        if "/" not in text:
            raise ConditionError(
                f"value '{text}' must be in CIDR notation for {name} condition",
                operator=name.value,
                key=key.name,
            )
        try:
            networks.append(ipaddress.ip_network(text, strict=False))
        except ValueError as exc:
            raise ConditionError(
                f"invalid CIDR '{text}' for {name} condition",
                operator=name.value,
                key=key.name,
            ) from exc
    function = IpAddressFunction(key, frozenset(networks))
    if name is Name.NOT_IP_ADDRESS:
        return Negated(function, name)
    return function


def _new_string_equals(name: Name, key: ConditionKey, values: ValueSet, variables: Variables) -> ConditionFunction:
    operands = _string_operands(name, key, values)
    check_bucket = name in (Name.STRING_EQUALS, Name.STRING_NOT_EQUALS)
    _validate_string_operands(name, key, operands, check_bucket=check_bucket)
    ignore_case = name in (Name.STRING_EQUALS_IGNORE_CASE, Name.STRING_NOT_EQUALS_IGNORE_CASE)
    function = StringEqualsFunction(key, operands, ignore_case=ignore_case, variables=variables)
    if name in (Name.STRING_NOT_EQUALS, Name.STRING_NOT_EQUALS_IGNORE_CASE):
        return Negated(function, name)
    return function


def _new_string_like(name: Name, key: ConditionKey, values: ValueSet, variables: Variables) -> ConditionFunction:
    operands = _string_operands(name, key, values)
    for value in operands:
        if key == S3X_AMZ_COPY_SOURCE:
            bucket, obj = _split_copy_source(value)
            if not obj:
                raise _invalid(name, key, value)
            try:
                check_bucket_name(bucket)
            except ValueError as exc:
                raise ConditionError(
                    f"invalid value '{value}' for '{key}' for {name} condition: {exc}",
                    operator=name.value,
                    key=key.name,
                ) from exc
    function = StringLikeFunction(key, operands, variables=variables)
    if name is Name.STRING_NOT_LIKE:
        return Negated(function, name)
    return function


def _new_binary_equals(name: Name, key: ConditionKey, values: ValueSet, variables: Variables) -> ConditionFunction:
    decoded: list[str] = []
    for text in _string_operands(name, key, values):
        try:
            decoded.append(base64.b64decode(text, validate=True).decode("utf-8"))
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise ConditionError(
                f"value '{text}' must be base64-encoded UTF-8 for {name} condition",
                operator=name.value,
                key=key.name,
            ) from exc
    operands = frozenset(decoded)
    _validate_string_operands(name, key, operands, check_bucket=False)
    return BinaryEqualsFunction(key, operands, variables=variables)


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

_Builder = Callable[[Name, ConditionKey, ValueSet, Variables], ConditionFunction]

_CONDITION_FUNCTION_MAP: dict[Name, _Builder] = {
    Name.STRING_EQUALS: _new_string_equals,
    Name.STRING_NOT_EQUALS: _new_string_equals,
    Name.STRING_EQUALS_IGNORE_CASE: _new_string_equals,
    Name.STRING_NOT_EQUALS_IGNORE_CASE: _new_string_equals,
    Name.STRING_LIKE: _new_string_like,
    Name.STRING_NOT_LIKE: _new_string_like,
    Name.BINARY_EQUALS: _new_binary_equals,
    Name.IP_ADDRESS: _new_ip_address,
    Name.NOT_IP_ADDRESS: _new_ip_address,
    Name.NULL: _new_null,
    Name.BOOLEAN: _new_boolean,
    Name.NUMERIC_EQUALS: _new_numeric,
    Name.NUMERIC_NOT_EQUALS: _new_numeric,
    Name.NUMERIC_LESS_THAN: _new_numeric,
    Name.NUMERIC_LESS_THAN_EQUALS: _new_numeric,
    Name.NUMERIC_GREATER_THAN: _new_numeric,
    Name.NUMERIC_GREATER_THAN_EQUALS: _new_numeric,
    Name.DATE_EQUALS: _new_date,
    Name.DATE_NOT_EQUALS: _new_date,
    Name.DATE_LESS_THAN: _new_date,
    Name.DATE_LESS_THAN_EQUALS: _new_date,
    Name.DATE_GREATER_THAN: _new_date,
    Name.DATE_GREATER_THAN_EQUALS: _new_date,
}


def new_function(
    name: Name | str,
    key: ConditionKey,
    values: ValueSet,
    variables: Variables = COMMON_KEYS,
) -> ConditionFunction:
    """Build a condition function from an operator name, key and operands.

    Parameters
    ----------
    name:
        Operator name, e.g. ``"StringEquals"`` or ``Name.IP_ADDRESS``.
    key:
        The condition key the operator tests.
    values:
        The operand set as written in the policy.
    variables:
        Keys whose ``${...}`` tokens are substituted inside string operands.

    Returns
    -------
    ConditionFunction

    Raises
    ------
    ConditionError
        If the operator is unknown, the key is not allowed for it, or the
        operands have the wrong count or type.
    """
    try:
        operator_name = Name(name)
    except ValueError as exc:
        raise ConditionError(
            f"invalid condition name '{name}'. Known names: {sorted(n.value for n in Name)}.",
            operator=str(name),
            key=key.name,
        ) from exc
    builder = _CONDITION_FUNCTION_MAP[operator_name]
    return builder(operator_name, key, values, variables)
