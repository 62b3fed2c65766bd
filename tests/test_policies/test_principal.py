"""Tests for bucket policy principals (policies/principal.py)."""
from __future__ import annotations

import pytest

from s3_iam_policy.errors import PolicyParseError
from s3_iam_policy.policies.principal import Principal


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestPrincipalParse:
    def test_star_string(self) -> None:
        assert Principal.from_json("*") == Principal.of(["*"])

    def test_aws_single_string(self) -> None:
        principal = Principal.from_json({"AWS": "arn:aws:iam::111122223333:*"})
        assert principal.aws == frozenset({"arn:aws:iam::111122223333:*"})

    def test_aws_list(self) -> None:
        principal = Principal.from_json({"AWS": ["arn:aws:iam::1:root", "arn:aws:iam::2:root"]})
        assert len(principal.aws) == 2

    @pytest.mark.parametrize(
        "raw",
        [
            "arn:aws:iam::111122223333:*",
            ["arn:aws:iam::111122223333:*"],
            {"aws": "*"},
            {"AWS": "*", "CanonicalUser": "abc"},
            {"AWS": [7]},
            {},
        ],
    )
    def test_invalid_shapes(self, raw: object) -> None:
        with pytest.raises(PolicyParseError):
            Principal.from_json(raw)

    def test_to_json_is_sorted(self) -> None:
        principal = Principal.of(["b", "a"])
        assert principal.to_json() == {"AWS": ["a", "b"]}


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


class TestPrincipalMatch:
    def test_star_matches_any_account(self) -> None:
        assert Principal.of(["*"]).is_match("AccountNumber")

    def test_prefix_pattern(self) -> None:
        assert Principal.of(["arn:aws:iam:*"]).is_match("arn:aws:iam::AccountNumber:root")

    def test_other_account_does_not_match(self) -> None:
        principal = Principal.of(["arn:aws:iam::AccountNumber:*"])
        assert not principal.is_match("arn:aws:iam::TestAccountNumber:root")

    def test_validity(self) -> None:
        assert Principal.of(["*"]).is_valid()
        assert not Principal.of([]).is_valid()

    def test_intersection(self) -> None:
        principal = Principal.of(["arn:aws:iam::1:root"])
        assert principal.intersection(["arn:aws:iam::1:root", "*"]) == frozenset(
            {"arn:aws:iam::1:root"}
        )
        assert principal.intersection(["arn:aws:iam::1:myuser"]) == frozenset()
