"""Tests for the Condition block collection (condition/function_set.py)."""
from __future__ import annotations

import dataclasses

import pytest

from s3_iam_policy.condition.function_set import Functions
from s3_iam_policy.condition.functions import new_function
from s3_iam_policy.condition.keys import AWS_SOURCE_IP, S3_PREFIX
from s3_iam_policy.condition.names import Name
from s3_iam_policy.condition.values import ValueSet
from s3_iam_policy.errors import ConditionError, PolicyParseError
from s3_iam_policy.policies.catalog import default_catalog


@pytest.fixture()
def conditions() -> Functions:
    return Functions.from_json(
        {
            "StringEquals": {"s3:prefix": ["home/", "docs/"]},
            "IpAddress": {"aws:SourceIp": "10.0.0.0/8"},
        }
    )


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestFunctionsParsing:
    def test_one_function_per_key(self, conditions: Functions) -> None:
        assert len(conditions) == 2
        assert conditions.keys() == frozenset({S3_PREFIX, AWS_SOURCE_IP})

    def test_several_keys_under_one_operator(self) -> None:
        functions = Functions.from_json(
            {"Null": {"s3:prefix": True, "aws:SourceIp": False}}
        )
        assert len(functions) == 2

    def test_empty_block_rejected(self) -> None:
        with pytest.raises(PolicyParseError, match="must not be empty"):
            Functions.from_json({})

    def test_non_object_rejected(self) -> None:
        with pytest.raises(PolicyParseError):
            Functions.from_json(["StringEquals"])

    def test_unknown_operator_rejected(self) -> None:
        with pytest.raises(PolicyParseError, match="invalid condition name"):
            Functions.from_json({"StringSounds": {"s3:prefix": "a"}})

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(PolicyParseError, match="invalid condition key"):
            Functions.from_json({"StringEquals": {"s3:colour": "blue"}})

    def test_empty_operator_map_rejected(self) -> None:
        with pytest.raises(PolicyParseError):
            Functions.from_json({"StringEquals": {}})

    def test_operand_errors_surface_as_condition_error(self) -> None:
        with pytest.raises(ConditionError):
            Functions.from_json({"Bool": {"s3:prefix": True}})

    def test_catalog_can_forbid_operators(self) -> None:
        catalog = dataclasses.replace(
            default_catalog(),
            condition_names=default_catalog().condition_names - {Name.STRING_LIKE},
        )
        with pytest.raises(PolicyParseError, match="invalid condition name"):
            Functions.from_json({"StringLike": {"s3:prefix": "a*"}}, catalog)
        assert len(Functions.from_json({"StringEquals": {"s3:prefix": "a"}}, catalog)) == 1

    def test_catalog_can_forbid_keys(self) -> None:
        catalog = dataclasses.replace(
            default_catalog(),
            condition_keys=default_catalog().condition_keys - {S3_PREFIX},
        )
        with pytest.raises(PolicyParseError, match="invalid condition key"):
            Functions.from_json({"StringEquals": {"s3:prefix": "a"}}, catalog)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


class TestFunctionsSerialization:
    def test_to_json_groups_by_operator(self, conditions: Functions) -> None:
        assert conditions.to_json() == {
            "IpAddress": {"aws:SourceIp": ["10.0.0.0/8"]},
            "StringEquals": {"s3:prefix": ["docs/", "home/"]},
        }

    def test_reparse_gives_equal_block(self, conditions: Functions) -> None:
        assert Functions.from_json(conditions.to_json()) == conditions


# ---------------------------------------------------------------------------
# Evaluation and identity
# ---------------------------------------------------------------------------


class TestFunctionsEvaluation:
    def test_all_must_hold(self, conditions: Functions) -> None:
        assert conditions.evaluate({"prefix": ["home/"], "SourceIp": ["10.1.2.3"]}) is True
        assert conditions.evaluate({"prefix": ["home/"], "SourceIp": ["192.168.0.1"]}) is False
        assert conditions.evaluate({"SourceIp": ["10.1.2.3"]}) is False

    def test_empty_collection_is_true(self) -> None:
        assert Functions().evaluate({}) is True
        assert not Functions()

    def test_duplicates_collapse(self) -> None:
        function = new_function("StringEquals", S3_PREFIX, ValueSet(["a"]))
        assert len(Functions([function, function])) == 1

    def test_equality_ignores_order(self) -> None:
        first = new_function("StringEquals", S3_PREFIX, ValueSet(["a"]))
        second = new_function("IpAddress", AWS_SOURCE_IP, ValueSet(["10.0.0.0/8"]))
        assert Functions([first, second]) == Functions([second, first])
        assert hash(Functions([first, second])) == hash(Functions([second, first]))
