"""Tests for the canned policy library (templates/canned_policies.py)."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from s3_iam_policy.policies.policy import Policy
from s3_iam_policy.policies.request import AuthorizationRequest
from s3_iam_policy.templates.canned_policies import (
    TEMPLATES,
    get_policy,
    get_template,
    list_templates,
    write_template,
)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_list_templates(self) -> None:
        assert list_templates() == ["consoleAdmin", "diagnostics", "readonly", "readwrite", "writeonly"]

    @pytest.mark.parametrize("name", sorted(TEMPLATES))
    def test_every_template_is_valid_json_and_policy(self, name: str) -> None:
        json.loads(get_template(name))
        assert get_policy(name).is_valid() is True

    def test_unknown_template(self) -> None:
        with pytest.raises(KeyError, match="not found"):
            get_template("superuser")

    def test_write_template(self, tmp_path: Path) -> None:
        written = write_template("readonly", tmp_path / "nested" / "readonly.json")
        assert written.exists()
        assert Policy.parse(written.read_text(encoding="utf-8")) == get_policy("readonly")


# ---------------------------------------------------------------------------
# Semantics
# ---------------------------------------------------------------------------


class TestCannedSemantics:
    def test_readonly(self) -> None:
        policy = get_policy("readonly")
        assert policy.is_allowed(AuthorizationRequest("s3:GetObject", "photos", "a.jpg"))
        assert policy.is_allowed(AuthorizationRequest("s3:GetBucketLocation", "photos"))
        assert not policy.is_allowed(AuthorizationRequest("s3:PutObject", "photos", "a.jpg"))

    def test_writeonly(self) -> None:
        policy = get_policy("writeonly")
        assert policy.is_allowed(AuthorizationRequest("s3:PutObject", "photos", "a.jpg"))
        assert not policy.is_allowed(AuthorizationRequest("s3:GetObject", "photos", "a.jpg"))

    def test_readwrite(self) -> None:
        policy = get_policy("readwrite")
        assert policy.is_allowed(AuthorizationRequest("s3:DeleteObject", "photos", "a.jpg"))
        assert not policy.is_allowed(AuthorizationRequest("admin:ServerInfo"))

    def test_diagnostics(self) -> None:
        policy = get_policy("diagnostics")
        assert policy.is_allowed(AuthorizationRequest("admin:ServerTrace"))
        assert not policy.is_allowed(AuthorizationRequest("admin:CreateUser"))
        assert not policy.is_allowed(AuthorizationRequest("s3:GetObject", "photos", "a.jpg"))

    def test_console_admin(self) -> None:
        policy = get_policy("consoleAdmin")
        assert policy.is_allowed(AuthorizationRequest("admin:CreateUser"))
        assert policy.is_allowed(AuthorizationRequest("s3:PutObject", "photos", "a.jpg"))
