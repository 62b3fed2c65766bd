"""Immutable bundle of the vocabularies used to parse and validate policies.

The defaults describe the built-in S3 and admin vocabularies.  A custom
catalog can narrow them, e.g. to forbid some operators on a deployment::

    catalog = dataclasses.replace(
        default_catalog(),
        condition_names=default_catalog().condition_names - {Name.BINARY_EQUALS},
    )
    policy = Policy.parse(text, catalog=catalog)
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache

from s3_iam_policy.condition.keys import (
    ALL_SUPPORTED_ADMIN_KEYS,
    ALL_SUPPORTED_KEYS,
    COMMON_KEYS,
    ConditionKey,
)
from s3_iam_policy.condition.names import SUPPORTED_CONDITIONS, Name
from s3_iam_policy.policies.actions import ACTION_CONDITION_KEY_MAP, Action, condition_keys_for
from s3_iam_policy.policies.admin_actions import ADMIN_ACTION_CONDITION_KEY_MAP, AdminAction


@dataclass(frozen=True)
class PolicyCatalog:
    """Key, operator and action vocabularies.

    Attributes
    ----------
    condition_keys:
        Every key a ``Condition`` block may name.
    common_keys:
        Keys allowed on every action; also the ``${...}`` policy variables.
    admin_keys:
        Keys admin statements may test.
    condition_names:
        Operator names a ``Condition`` block may use.
    action_condition_keys:
        Extra keys per S3 action.
    admin_action_condition_keys:
        Allowed keys per admin action.
    """

    condition_keys: frozenset[ConditionKey]
    common_keys: tuple[ConditionKey, ...]
    admin_keys: frozenset[ConditionKey]
    condition_names: frozenset[Name]
    action_condition_keys: Mapping[Action, frozenset[ConditionKey]]
    admin_action_condition_keys: Mapping[AdminAction, frozenset[ConditionKey]]

    def keys_for_action(self, action: Action) -> frozenset[ConditionKey]:
        """Return the condition keys a statement naming *action* may test."""
        return condition_keys_for(action, self.action_condition_keys, self.common_keys)

    def keys_for_admin_action(self, action: AdminAction) -> frozenset[ConditionKey]:
        return self.admin_action_condition_keys.get(action, frozenset())


@lru_cache(maxsize=None)
def default_catalog() -> PolicyCatalog:
    """Return the built-in catalog.  Built once and shared."""
    return PolicyCatalog(
        condition_keys=ALL_SUPPORTED_KEYS,
        common_keys=COMMON_KEYS,
        admin_keys=ALL_SUPPORTED_ADMIN_KEYS,
        condition_names=SUPPORTED_CONDITIONS,
        action_condition_keys=ACTION_CONDITION_KEY_MAP,
        admin_action_condition_keys=ADMIN_ACTION_CONDITION_KEY_MAP,
    )
