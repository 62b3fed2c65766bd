"""Policy documents: actions, resources, statements and the decision."""
from __future__ import annotations

from s3_iam_policy.policies.actions import (
    ACTION_CONDITION_KEY_MAP,
    SUPPORTED_OBJECT_ACTIONS,
    Action,
    ActionSet,
    condition_keys_for,
    parse_action,
)
from s3_iam_policy.policies.admin_actions import ADMIN_ACTION_CONDITION_KEY_MAP, AdminAction
from s3_iam_policy.policies.catalog import PolicyCatalog, default_catalog
from s3_iam_policy.policies.claims import policies_from_claims
from s3_iam_policy.policies.parser import PolicyParser
from s3_iam_policy.policies.policy import (
    DEFAULT_VERSION,
    DecisionType,
    EvaluationResult,
    Policy,
)
from s3_iam_policy.policies.principal import Principal
from s3_iam_policy.policies.request import AuthorizationRequest
from s3_iam_policy.policies.resource import Resource, ResourceSet
from s3_iam_policy.policies.statement import Effect, Statement, Vote

__all__ = [
    "ACTION_CONDITION_KEY_MAP",
    "ADMIN_ACTION_CONDITION_KEY_MAP",
    "Action",
    "ActionSet",
    "AdminAction",
    "AuthorizationRequest",
    "DEFAULT_VERSION",
    "DecisionType",
    "Effect",
    "EvaluationResult",
    "Policy",
    "PolicyCatalog",
    "PolicyParser",
    "Principal",
    "Resource",
    "ResourceSet",
    "SUPPORTED_OBJECT_ACTIONS",
    "Statement",
    "Vote",
    "condition_keys_for",
    "default_catalog",
    "parse_action",
    "policies_from_claims",
]
