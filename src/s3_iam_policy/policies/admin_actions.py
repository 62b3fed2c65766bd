"""Control-plane (``admin:``) actions."""
from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType

from s3_iam_policy import wildcard
from s3_iam_policy.condition.keys import ALL_SUPPORTED_ADMIN_KEYS, ConditionKey


class AdminAction(str, Enum):
    """Closed set of administrative actions.  Disjoint from S3 actions."""

    HEAL = "admin:Heal"
    STORAGE_INFO = "admin:StorageInfo"
    PROMETHEUS = "admin:Prometheus"
    DATA_USAGE_INFO = "admin:DataUsageInfo"
    FORCE_UNLOCK = "admin:ForceUnlock"
    TOP_LOCKS_INFO = "admin:TopLocksInfo"
    PROFILING = "admin:Profiling"
    SERVER_TRACE = "admin:ServerTrace"
    CONSOLE_LOG = "admin:ConsoleLog"
    KMS_CREATE_KEY = "admin:KMSCreateKey"
    KMS_KEY_STATUS = "admin:KMSKeyStatus"
    SERVER_INFO = "admin:ServerInfo"
    HEALTH_INFO = "admin:OBDInfo"
    BANDWIDTH_MONITOR = "admin:BandwidthMonitor"
    SERVER_UPDATE = "admin:ServerUpdate"
    SERVICE_RESTART = "admin:ServiceRestart"
    SERVICE_STOP = "admin:ServiceStop"
    CONFIG_UPDATE = "admin:ConfigUpdate"
    CREATE_USER = "admin:CreateUser"
    DELETE_USER = "admin:DeleteUser"
    LIST_USERS = "admin:ListUsers"
    ENABLE_USER = "admin:EnableUser"
    DISABLE_USER = "admin:DisableUser"
    GET_USER = "admin:GetUser"
    CREATE_SERVICE_ACCOUNT = "admin:CreateServiceAccount"
    UPDATE_SERVICE_ACCOUNT = "admin:UpdateServiceAccount"
    REMOVE_SERVICE_ACCOUNT = "admin:RemoveServiceAccount"
    LIST_SERVICE_ACCOUNTS = "admin:ListServiceAccounts"
    ADD_USER_TO_GROUP = "admin:AddUserToGroup"
    REMOVE_USER_FROM_GROUP = "admin:RemoveUserFromGroup"
    GET_GROUP = "admin:GetGroup"
    LIST_GROUPS = "admin:ListGroups"
    ENABLE_GROUP = "admin:EnableGroup"
    DISABLE_GROUP = "admin:DisableGroup"
    CREATE_POLICY = "admin:CreatePolicy"
    DELETE_POLICY = "admin:DeletePolicy"
    GET_POLICY = "admin:GetPolicy"
    ATTACH_POLICY = "admin:AttachUserOrGroupPolicy"
    LIST_USER_POLICIES = "admin:ListUserPolicies"
    SET_BUCKET_QUOTA = "admin:SetBucketQuota"
    GET_BUCKET_QUOTA = "admin:GetBucketQuota"
    SET_BUCKET_TARGET = "admin:SetBucketTarget"
    GET_BUCKET_TARGET = "admin:GetBucketTarget"
    SET_TIER = "admin:SetTier"
    LIST_TIER = "admin:ListTier"
    LIST_POOLS = "admin:ListPools"
    ALL_ADMIN_ACTIONS = "admin:*"

    def __str__(self) -> str:
        return self.value

    def is_match(self, action: str) -> bool:
        """Return True if this action, read as a pattern, matches *action*."""
        return wildcard.matches(self.value, str(action))


# Every admin action accepts the same aws: request keys.
ADMIN_ACTION_CONDITION_KEY_MAP: Mapping[AdminAction, frozenset[ConditionKey]] = MappingProxyType(
    {action: ALL_SUPPORTED_ADMIN_KEYS for action in AdminAction}
)


def is_admin_action(name: str) -> bool:
    """Return True if *name* is a known admin action."""
    return name in AdminAction._value2member_map_
