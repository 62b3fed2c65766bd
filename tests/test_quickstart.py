"""Test that the quickstart API works for s3-iam-policy."""
from __future__ import annotations


def test_quickstart_import() -> None:
    import s3_iam_policy as iam

    assert iam.__version__ == "0.1.0"


def test_quickstart_canned_policy() -> None:
    import s3_iam_policy as iam

    policy = iam.Policy.parse(iam.get_template("readonly"))
    policy.validate()
    assert policy.is_allowed(iam.AuthorizationRequest("s3:GetObject", "photos", "cat.jpg"))
    assert not policy.is_allowed(iam.AuthorizationRequest("s3:PutObject", "photos", "cat.jpg"))


def test_quickstart_evaluate_result() -> None:
    import s3_iam_policy as iam

    policy = iam.get_policy("writeonly")
    result = policy.evaluate(iam.AuthorizationRequest("s3:PutObject", "photos", "cat.jpg"))
    assert result.allowed is True
    assert result.decision is iam.DecisionType.ALLOWED


def test_quickstart_errors_share_a_base() -> None:
    import s3_iam_policy as iam

    assert issubclass(iam.PolicyParseError, iam.PolicyError)
    assert issubclass(iam.PolicyValidationError, iam.PolicyError)
    assert issubclass(iam.PolicyLoadError, ValueError)


def test_quickstart_parser_accessible() -> None:
    from s3_iam_policy import PolicyParser

    parser = PolicyParser()
    assert parser.config.strict_fields is True
