"""Tests for policy statements (policies/statement.py)."""
from __future__ import annotations

import pytest

from s3_iam_policy.errors import PolicyParseError, PolicyValidationError
from s3_iam_policy.policies.request import AuthorizationRequest
from s3_iam_policy.policies.statement import Effect, Statement, Vote


def _statement(**fields: object) -> Statement:
    raw: dict[str, object] = {"Effect": "Allow", "Action": ["s3:GetObject"]}
    raw.update(fields)
    return Statement.from_json(raw)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestStatementParsing:
    def test_minimal_statement(self) -> None:
        statement = _statement(Resource="arn:aws:s3:::mybucket/*")
        assert statement.effect is Effect.ALLOW
        assert len(statement.actions) == 1
        assert len(statement.resources) == 1
        assert not statement.conditions

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(PolicyParseError, match="unknown field"):
            _statement(NotPrincipal="*")

    def test_missing_effect_rejected(self) -> None:
        with pytest.raises(PolicyParseError, match="Effect"):
            Statement.from_json({"Action": "s3:GetObject"})

    def test_missing_action_rejected(self) -> None:
        with pytest.raises(PolicyParseError, match="Action"):
            Statement.from_json({"Effect": "Allow"})

    def test_invalid_effect_rejected(self) -> None:
        with pytest.raises(PolicyParseError, match="invalid effect"):
            _statement(Effect="Maybe")

    def test_non_string_sid_rejected(self) -> None:
        with pytest.raises(PolicyParseError):
            _statement(Sid=7)

    def test_empty_condition_rejected(self) -> None:
        with pytest.raises(PolicyParseError):
            _statement(Resource="mybucket/*", Condition={})

    def test_round_trip(self) -> None:
        statement = _statement(
            Sid="ReadFromOffice",
            Resource=["arn:aws:s3:::mybucket/*"],
            Condition={"IpAddress": {"aws:SourceIp": ["192.168.1.0/24"]}},
        )
        assert statement.to_json() == {
            "Sid": "ReadFromOffice",
            "Effect": "Allow",
            "Action": ["s3:GetObject"],
            "Resource": ["arn:aws:s3:::mybucket/*"],
            "Condition": {"IpAddress": {"aws:SourceIp": ["192.168.1.0/24"]}},
        }
        assert Statement.from_json(statement.to_json()) == statement

    def test_sid_not_part_of_equality(self) -> None:
        first = _statement(Sid="one", Resource="mybucket/*")
        second = _statement(Sid="two", Resource="mybucket/*")
        assert first == second


# ---------------------------------------------------------------------------
# Validation of S3 statements
# ---------------------------------------------------------------------------


class TestRegularValidation:
    def test_object_action_needs_object_resource(self) -> None:
        _statement(Resource="mybucket/*").validate()
        with pytest.raises(PolicyValidationError, match="unsupported resource"):
            _statement(Resource="mybucket").validate()

    def test_bucket_action_needs_bucket_resource(self) -> None:
        Statement.from_json(
            {"Effect": "Allow", "Action": "s3:ListBucket", "Resource": "mybucket"}
        ).validate()
        with pytest.raises(PolicyValidationError):
            Statement.from_json(
                {"Effect": "Allow", "Action": "s3:ListBucket", "Resource": "mybucket/*"}
            ).validate()

    def test_wildcard_resource_serves_both(self) -> None:
        Statement.from_json(
            {"Effect": "Allow", "Action": ["s3:ListBucket", "s3:GetObject"], "Resource": "*"}
        ).validate()

    def test_missing_resource_rejected(self) -> None:
        with pytest.raises(PolicyValidationError, match="no resources"):
            _statement().validate()

    def test_unsupported_condition_key(self) -> None:
        statement = _statement(
            Resource="mybucket/*",
            Condition={"StringEquals": {"s3:prefix": "home/"}},
        )
        with pytest.raises(PolicyValidationError, match="unsupported condition keys"):
            statement.validate()

    def test_supported_condition_key(self) -> None:
        Statement.from_json(
            {
                "Effect": "Allow",
                "Action": "s3:ListBucket",
                "Resource": "mybucket",
                "Condition": {"StringLike": {"s3:prefix": "home/*"}},
            }
        ).validate()

    def test_invalid_utf8_sid(self) -> None:
        with pytest.raises(PolicyValidationError, match="UTF-8"):
            _statement(Sid="\ud800", Resource="mybucket/*").validate()

    def test_error_carries_sid(self) -> None:
        with pytest.raises(PolicyValidationError) as excinfo:
            _statement(Sid="Broken", Resource="mybucket").validate()
        assert excinfo.value.sid == "Broken"


# ---------------------------------------------------------------------------
# Validation of admin statements
# ---------------------------------------------------------------------------


class TestAdminValidation:
    def test_admin_statement_without_resource(self) -> None:
        Statement.from_json({"Effect": "Allow", "Action": ["admin:ServerInfo"]}).validate()

    def test_admin_condition_on_admin_key(self) -> None:
        Statement.from_json(
            {
                "Effect": "Allow",
                "Action": ["admin:*"],
                "Condition": {"IpAddress": {"aws:SourceIp": "10.0.0.0/8"}},
            }
        ).validate()

    def test_admin_condition_on_s3_key_rejected(self) -> None:
        statement = Statement.from_json(
            {
                "Effect": "Allow",
                "Action": ["admin:ServerInfo"],
                "Condition": {"StringEquals": {"s3:prefix": "x"}},
            }
        )
        with pytest.raises(PolicyValidationError, match="unsupported condition keys"):
            statement.validate()

    def test_mixed_actions_rejected(self) -> None:
        statement = Statement.from_json(
            {
                "Effect": "Allow",
                "Action": ["admin:Heal", "s3:GetObject"],
                "Resource": "mybucket/*",
            }
        )
        with pytest.raises(PolicyValidationError, match="admin statement"):
            statement.validate()


# ---------------------------------------------------------------------------
# Voting
# ---------------------------------------------------------------------------


class TestStatementVote:
    def test_allow_vote(self) -> None:
        statement = _statement(Resource="mybucket/*")
        request = AuthorizationRequest("s3:GetObject", "mybucket", "a.txt")
        assert statement.vote(request) is Vote.ALLOW
        assert statement.is_allowed(request) is True

    def test_deny_vote(self) -> None:
        statement = _statement(Effect="Deny", Resource="mybucket/*")
        request = AuthorizationRequest("s3:GetObject", "mybucket", "a.txt")
        assert statement.vote(request) is Vote.DENY
        assert statement.is_allowed(request) is False

    def test_abstain_on_other_action(self) -> None:
        statement = _statement(Resource="mybucket/*")
        assert statement.vote(AuthorizationRequest("s3:PutObject", "mybucket", "a")) is Vote.ABSTAIN

    def test_abstain_on_other_resource(self) -> None:
        statement = _statement(Resource="mybucket/*")
        assert statement.vote(AuthorizationRequest("s3:GetObject", "other", "a")) is Vote.ABSTAIN

    def test_abstain_when_condition_fails(self) -> None:
        statement = _statement(
            Resource="mybucket/*",
            Condition={"Bool": {"aws:SecureTransport": "true"}},
        )
        insecure = AuthorizationRequest(
            "s3:GetObject", "mybucket", "a", attrs={"SecureTransport": ["false"]}
        )
        secure = AuthorizationRequest(
            "s3:GetObject", "mybucket", "a", attrs={"SecureTransport": ["true"]}
        )
        assert statement.vote(insecure) is Vote.ABSTAIN
        assert statement.vote(secure) is Vote.ALLOW

    def test_bucket_level_request(self) -> None:
        statement = Statement.from_json(
            {"Effect": "Allow", "Action": "s3:ListBucket", "Resource": "mybucket"}
        )
        assert statement.vote(AuthorizationRequest("s3:ListBucket", "mybucket")) is Vote.ALLOW

    def test_admin_statement_ignores_resources(self) -> None:
        statement = Statement.from_json(
            {"Effect": "Allow", "Action": "admin:ServerInfo", "Resource": "nothing/*"}
        )
        assert statement.vote(AuthorizationRequest("admin:ServerInfo")) is Vote.ALLOW


# ---------------------------------------------------------------------------
# Principals and bucket policies
# ---------------------------------------------------------------------------


class TestStatementPrincipal:
    def test_principal_round_trip(self) -> None:
        statement = _statement(
            Principal={"AWS": ["arn:aws:iam::111122223333:root"]},
            Resource="mybucket/*",
        )
        assert statement.to_json()["Principal"] == {"AWS": ["arn:aws:iam::111122223333:root"]}
        assert Statement.from_json(statement.to_json()) == statement

    def test_principal_is_part_of_equality(self) -> None:
        anyone = _statement(Principal="*", Resource="mybucket/*")
        unrestricted = _statement(Resource="mybucket/*")
        assert anyone != unrestricted

    def test_principal_restricts_account(self) -> None:
        statement = _statement(
            Principal={"AWS": "arn:aws:iam::111122223333:*"},
            Resource="mybucket/*",
        )
        member = AuthorizationRequest(
            "s3:GetObject", "mybucket", "a", account_name="arn:aws:iam::111122223333:alice"
        )
        outsider = AuthorizationRequest(
            "s3:GetObject", "mybucket", "a", account_name="arn:aws:iam::444455556666:bob"
        )
        assert statement.vote(member) is Vote.ALLOW
        assert statement.vote(outsider) is Vote.ABSTAIN

    def test_no_principal_applies_to_everyone(self) -> None:
        statement = _statement(Resource="mybucket/*")
        assert statement.is_allowed(
            AuthorizationRequest("s3:GetObject", "mybucket", "a", account_name="anyone")
        )

    def test_empty_principal_fails_validation(self) -> None:
        statement = _statement(Principal={"AWS": []}, Resource="mybucket/*")
        with pytest.raises(PolicyValidationError, match="empty principal"):
            statement.validate()

    def test_resources_must_match_bucket(self) -> None:
        statement = _statement(Principal="*", Resource="mybucket/*")
        statement.validate(bucket_name="mybucket")
        with pytest.raises(PolicyValidationError, match="does not match bucket"):
            statement.validate(bucket_name="otherbucket")

    def test_wildcard_bucket_matches_any_bucket(self) -> None:
        _statement(Principal="*", Resource="my*/*").validate(bucket_name="mybucket")
