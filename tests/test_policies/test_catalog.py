"""Tests for PolicyCatalog (policies/catalog.py)."""
from __future__ import annotations

import dataclasses

import pytest

from s3_iam_policy.condition.keys import (
    ALL_SUPPORTED_ADMIN_KEYS,
    ALL_SUPPORTED_KEYS,
    AWS_SOURCE_IP,
    S3_PREFIX,
)
from s3_iam_policy.condition.names import SUPPORTED_CONDITIONS
from s3_iam_policy.errors import PolicyValidationError
from s3_iam_policy.policies.actions import Action
from s3_iam_policy.policies.admin_actions import AdminAction
from s3_iam_policy.policies.catalog import default_catalog
from s3_iam_policy.policies.policy import Policy


class TestDefaultCatalog:
    def test_is_shared(self) -> None:
        assert default_catalog() is default_catalog()

    def test_vocabularies(self) -> None:
        catalog = default_catalog()
        assert catalog.condition_keys == ALL_SUPPORTED_KEYS
        assert catalog.admin_keys == ALL_SUPPORTED_ADMIN_KEYS
        assert catalog.condition_names == SUPPORTED_CONDITIONS

    def test_keys_for_action(self) -> None:
        assert S3_PREFIX in default_catalog().keys_for_action(Action.LIST_BUCKET)
        assert S3_PREFIX not in default_catalog().keys_for_action(Action.GET_OBJECT)

    def test_keys_for_admin_action(self) -> None:
        keys = default_catalog().keys_for_admin_action(AdminAction.SERVER_INFO)
        assert AWS_SOURCE_IP in keys

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            default_catalog().admin_keys = frozenset()  # type: ignore[misc]


class TestCustomCatalog:
    def test_narrowed_action_keys_fail_validation(self) -> None:
        catalog = dataclasses.replace(
            default_catalog(),
            action_condition_keys={Action.LIST_BUCKET: frozenset()},
        )
        policy = Policy.parse(
            {
                "Version": "2012-10-17",
                "Statement": [
                    {
                        "Effect": "Allow",
                        "Action": "s3:ListBucket",
                        "Resource": "mybucket",
                        "Condition": {"StringLike": {"s3:prefix": "home/*"}},
                    }
                ],
            },
            catalog=catalog,
        )
        policy.validate()
        with pytest.raises(PolicyValidationError):
            policy.validate(catalog)
