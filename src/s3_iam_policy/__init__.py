"""s3-iam-policy: IAM policy evaluation for S3-compatible object stores.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import s3_iam_policy as iam
>>> iam.__version__
'0.1.0'
>>> policy = iam.Policy.parse(iam.get_template("readonly"))
>>> policy.validate()
>>> policy.is_allowed(iam.AuthorizationRequest("s3:GetObject", "photos", "cat.jpg"))
True
>>> policy.is_allowed(iam.AuthorizationRequest("s3:PutObject", "photos", "cat.jpg"))
False
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
from s3_iam_policy.errors import (
    ConditionError,
    PolicyError,
    PolicyLoadError,
    PolicyParseError,
    PolicyValidationError,
)

# ---------------------------------------------------------------------------
# Conditions
# ---------------------------------------------------------------------------
from s3_iam_policy.condition.function_set import Functions
from s3_iam_policy.condition.functions import ConditionFunction, new_function
from s3_iam_policy.condition.keys import ConditionKey
from s3_iam_policy.condition.names import Name
from s3_iam_policy.condition.values import ConditionValue, ValueSet

# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------
from s3_iam_policy.policies.actions import Action, ActionSet
from s3_iam_policy.policies.admin_actions import AdminAction
from s3_iam_policy.policies.catalog import PolicyCatalog, default_catalog
from s3_iam_policy.policies.claims import policies_from_claims
from s3_iam_policy.policies.parser import PolicyParser
from s3_iam_policy.policies.policy import DecisionType, EvaluationResult, Policy
from s3_iam_policy.policies.principal import Principal
from s3_iam_policy.policies.request import AuthorizationRequest
from s3_iam_policy.policies.resource import Resource, ResourceSet
from s3_iam_policy.policies.statement import Effect, Statement, Vote

# ---------------------------------------------------------------------------
# Config and templates
# ---------------------------------------------------------------------------
from s3_iam_policy.config.config_loader import ConfigLoader, EngineConfig
from s3_iam_policy.templates.canned_policies import get_policy, get_template, list_templates

__all__ = [
    "__version__",
    # Errors
    "ConditionError",
    "PolicyError",
    "PolicyLoadError",
    "PolicyParseError",
    "PolicyValidationError",
    # Conditions
    "ConditionFunction",
    "ConditionKey",
    "ConditionValue",
    "Functions",
    "Name",
    "ValueSet",
    "new_function",
    # Policies
    "Action",
    "ActionSet",
    "AdminAction",
    "AuthorizationRequest",
    "DecisionType",
    "Effect",
    "EvaluationResult",
    "Policy",
    "PolicyCatalog",
    "PolicyParser",
    "Principal",
    "Resource",
    "ResourceSet",
    "Statement",
    "Vote",
    "default_catalog",
    "policies_from_claims",
    # Config and templates
    "ConfigLoader",
    "EngineConfig",
    "get_policy",
    "get_template",
    "list_templates",
]
