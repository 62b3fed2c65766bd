"""Tests for condition operand values (condition/values.py)."""
from __future__ import annotations

import pytest

from s3_iam_policy.condition.values import (
    ConditionValue,
    ValueKind,
    ValueSet,
    parse_bool,
    parse_int,
)
from s3_iam_policy.errors import PolicyParseError


# ---------------------------------------------------------------------------
# ConditionValue
# ---------------------------------------------------------------------------


class TestConditionValue:
    def test_kinds_are_inferred(self) -> None:
        assert ConditionValue.from_json("x").kind is ValueKind.STRING
        assert ConditionValue.from_json(7).kind is ValueKind.INT
        assert ConditionValue.from_json(True).kind is ValueKind.BOOL

    def test_bool_and_int_are_distinct(self) -> None:
        assert ConditionValue.of(True) != ConditionValue.of(1)

    @pytest.mark.parametrize("raw", [1.5, None, [1], {"a": 1}])
    def test_rejects_non_scalar_literals(self, raw: object) -> None:
        with pytest.raises(PolicyParseError):
            ConditionValue.from_json(raw)

    def test_str_of_bool_is_lowercase(self) -> None:
        assert str(ConditionValue.of(False)) == "false"
        assert str(ConditionValue.of(True)) == "true"

    def test_to_json_returns_python_value(self) -> None:
        assert ConditionValue.of(42).to_json() == 42


# ---------------------------------------------------------------------------
# ValueSet
# ---------------------------------------------------------------------------


class TestValueSet:
    def test_scalar_becomes_single_element(self) -> None:
        values = ValueSet.from_json("10.0.0.0/8")
        assert len(values) == 1
        assert ConditionValue.of("10.0.0.0/8") in values

    def test_true_and_one_are_two_values(self) -> None:
        assert len(ValueSet.from_json([True, 1])) == 2

    def test_empty_array_rejected(self) -> None:
        with pytest.raises(PolicyParseError, match="empty value set"):
            ValueSet.from_json([])

    def test_duplicates_rejected(self) -> None:
        with pytest.raises(PolicyParseError, match="duplicate value"):
            ValueSet.from_json(["a", "a"])

    def test_nested_array_rejected(self) -> None:
        with pytest.raises(PolicyParseError):
            ValueSet.from_json([["a"]])

    def test_to_json_is_sorted(self) -> None:
        assert ValueSet.from_json(["b", "c", "a"]).to_json() == ["a", "b", "c"]

    def test_equality_ignores_order(self) -> None:
        assert ValueSet(["a", "b"]) == ValueSet(["b", "a"])
        assert hash(ValueSet(["a", "b"])) == hash(ValueSet(["b", "a"]))

    def test_iteration_is_stable(self) -> None:
        values = ValueSet(["z", "y"])
        assert [v.value for v in values] == ["y", "z"]


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


class TestParseBool:
    @pytest.mark.parametrize("text", ["1", "t", "T", "true", "TRUE", "True"])
    def test_true_spellings(self, text: str) -> None:
        assert parse_bool(text) is True

    @pytest.mark.parametrize("text", ["0", "f", "F", "false", "FALSE", "False"])
    def test_false_spellings(self, text: str) -> None:
        assert parse_bool(text) is False

    @pytest.mark.parametrize("text", ["yes", "tRuE", "", "2"])
    def test_other_strings_raise(self, text: str) -> None:
        with pytest.raises(ValueError):
            parse_bool(text)


class TestParseInt:
    def test_signed_values(self) -> None:
        assert parse_int("-12") == -12
        assert parse_int("+3") == 3
        assert parse_int("0") == 0

    @pytest.mark.parametrize("text", ["1.5", "abc", "", " 1", "1e3"])
    def test_malformed_is_none(self, text: str) -> None:
        assert parse_int(text) is None

    def test_sixty_four_bit_bounds(self) -> None:
        assert parse_int("9223372036854775807") == 2**63 - 1
        assert parse_int("-9223372036854775808") == -(2**63)
        assert parse_int("9223372036854775808") is None
        assert parse_int("-9223372036854775809") is None

    def test_leading_zeros_ignored(self) -> None:
        assert parse_int("0" * 40 + "1") == 1
        assert parse_int("-007") == -7

    @pytest.mark.parametrize("text", ["5\n", "\n5", "5 ", "9" * 20, "9" * 5000, "٣"])
    def test_trailing_newline_and_oversized_are_none(self, text: str) -> None:
        assert parse_int(text) is None
