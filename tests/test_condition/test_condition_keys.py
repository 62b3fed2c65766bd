"""Tests for the condition key catalog (condition/keys.py)."""
from __future__ import annotations

import pytest

from s3_iam_policy.condition.keys import (
    ALL_SUPPORTED_ADMIN_KEYS,
    ALL_SUPPORTED_KEYS,
    AWS_SOURCE_IP,
    AWS_USERNAME,
    COMMON_KEYS,
    JWT_SUB,
    S3_PREFIX,
    S3X_AMZ_COPY_SOURCE,
    ConditionKey,
    bare_name,
    canonical_header_key,
    is_valid_key,
    key_by_name,
    lookup_values,
    substitute,
)


# ---------------------------------------------------------------------------
# ConditionKey
# ---------------------------------------------------------------------------


class TestConditionKey:
    def test_namespace(self) -> None:
        assert AWS_SOURCE_IP.namespace == "aws"
        assert S3_PREFIX.namespace == "s3"
        assert ConditionKey("plain").namespace == ""

    def test_bare_name_strips_namespace(self) -> None:
        assert AWS_SOURCE_IP.bare_name == "SourceIp"
        assert JWT_SUB.bare_name == "sub"
        assert S3X_AMZ_COPY_SOURCE.bare_name == "x-amz-copy-source"

    def test_variable_token(self) -> None:
        assert AWS_USERNAME.variable_token == "${aws:username}"

    def test_str_is_full_name(self) -> None:
        assert str(S3_PREFIX) == "s3:prefix"

    def test_equal_keys_built_separately(self) -> None:
        assert ConditionKey("s3:prefix") == S3_PREFIX
        assert hash(ConditionKey("s3:prefix")) == hash(S3_PREFIX)

    def test_is_valid(self) -> None:
        assert S3_PREFIX.is_valid() is True
        assert ConditionKey("s3:unknown").is_valid() is False


class TestBareName:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("aws:Referer", "Referer"),
            ("ldap:user", "user"),
            ("jwt:groups", "groups"),
            ("s3:max-keys", "max-keys"),
            ("custom:thing", "custom:thing"),
            ("nothing", "nothing"),
        ],
    )
    def test_strips_one_known_prefix(self, name: str, expected: str) -> None:
        assert bare_name(name) == expected


# ---------------------------------------------------------------------------
# Attribute lookup
# ---------------------------------------------------------------------------


class TestCanonicalHeaderKey:
    def test_hyphenated_header(self) -> None:
        assert canonical_header_key("x-amz-copy-source") == "X-Amz-Copy-Source"

    def test_mixed_case_is_normalised(self) -> None:
        assert canonical_header_key("SourceIp") == "Sourceip"

    def test_invalid_token_unchanged(self) -> None:
        assert canonical_header_key("bad key") == "bad key"


class TestLookupValues:
    def test_bare_name_lookup(self) -> None:
        assert lookup_values(AWS_SOURCE_IP, {"SourceIp": ["10.0.0.1"]}) == ["10.0.0.1"]

    def test_canonical_form_preferred(self) -> None:
        attrs = {"Sourceip": ["1.1.1.1"], "SourceIp": ["2.2.2.2"]}
        assert lookup_values(AWS_SOURCE_IP, attrs) == ["1.1.1.1"]

    def test_header_style_key(self) -> None:
        attrs = {"X-Amz-Copy-Source": ["bucket/object"]}
        assert lookup_values(S3X_AMZ_COPY_SOURCE, attrs) == ["bucket/object"]

    def test_absent_key_is_none(self) -> None:
        assert lookup_values(S3_PREFIX, {}) is None

    def test_present_but_empty(self) -> None:
        assert lookup_values(S3_PREFIX, {"prefix": []}) == []


# ---------------------------------------------------------------------------
# Policy variable substitution
# ---------------------------------------------------------------------------


class TestSubstitute:
    def test_replaces_known_variable(self) -> None:
        assert substitute("home/${aws:username}/*", {"username": ["alice"]}) == "home/alice/*"

    def test_first_non_empty_value_wins(self) -> None:
        assert substitute("${aws:username}", {"username": ["", "bob", "carol"]}) == "bob"

    def test_missing_value_leaves_token(self) -> None:
        assert substitute("home/${aws:username}/*", {}) == "home/${aws:username}/*"

    def test_text_without_tokens_untouched(self) -> None:
        assert substitute("plain/text", {"username": ["alice"]}) == "plain/text"

    def test_only_listed_variables_are_substituted(self) -> None:
        # s3:prefix is not a common key, so it is not a policy variable.
        assert substitute("${s3:prefix}", {"prefix": ["x"]}) == "${s3:prefix}"

    def test_custom_variable_list(self) -> None:
        text = substitute("${s3:prefix}", {"prefix": ["x"]}, variables=(S3_PREFIX,))
        assert text == "x"

    def test_multiple_tokens(self) -> None:
        attrs = {"username": ["alice"], "sub": ["1234"]}
        assert substitute("${aws:username}-${jwt:sub}", attrs) == "alice-1234"


# ---------------------------------------------------------------------------
# Catalogs
# ---------------------------------------------------------------------------


class TestCatalogs:
    def test_common_keys_are_supported(self) -> None:
        assert set(COMMON_KEYS) <= ALL_SUPPORTED_KEYS

    def test_admin_keys_are_aws_keys(self) -> None:
        assert all(k.namespace == "aws" for k in ALL_SUPPORTED_ADMIN_KEYS)

    def test_list_keys_not_common(self) -> None:
        assert S3_PREFIX not in COMMON_KEYS
        assert S3_PREFIX in ALL_SUPPORTED_KEYS

    def test_is_valid_key(self) -> None:
        assert is_valid_key("aws:SourceIp") is True
        assert is_valid_key("aws:sourceip") is False
        assert is_valid_key("s3:unknown") is False

    def test_key_by_name(self) -> None:
        assert key_by_name("s3:prefix") == S3_PREFIX
        assert key_by_name("nope") is None
