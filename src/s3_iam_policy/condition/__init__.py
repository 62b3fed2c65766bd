"""Condition keys, operand values and condition functions."""
from __future__ import annotations

from s3_iam_policy.condition.function_set import Functions
from s3_iam_policy.condition.functions import (
    BinaryEqualsFunction,
    BooleanFunction,
    ConditionFunction,
    DateFunction,
    IpAddressFunction,
    Negated,
    NullFunction,
    NumericFunction,
    StringEqualsFunction,
    StringLikeFunction,
    new_function,
)
from s3_iam_policy.condition.keys import (
    ALL_SUPPORTED_ADMIN_KEYS,
    ALL_SUPPORTED_KEYS,
    COMMON_KEYS,
    ConditionKey,
    is_valid_key,
    lookup_values,
    substitute,
)
from s3_iam_policy.condition.names import SUPPORTED_CONDITIONS, Name
from s3_iam_policy.condition.values import ConditionValue, ValueKind, ValueSet

__all__ = [
    "ALL_SUPPORTED_ADMIN_KEYS",
    "ALL_SUPPORTED_KEYS",
    "BinaryEqualsFunction",
    "BooleanFunction",
    "COMMON_KEYS",
    "ConditionFunction",
    "ConditionKey",
    "ConditionValue",
    "DateFunction",
    "Functions",
    "IpAddressFunction",
    "Name",
    "Negated",
    "NullFunction",
    "NumericFunction",
    "SUPPORTED_CONDITIONS",
    "StringEqualsFunction",
    "StringLikeFunction",
    "ValueKind",
    "ValueSet",
    "is_valid_key",
    "lookup_values",
    "new_function",
    "substitute",
]
