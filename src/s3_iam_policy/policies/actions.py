"""S3 data-plane actions and the condition keys each one supports.

Every action name in a policy must be a member of :class:`Action` or
:class:`~s3_iam_policy.policies.admin_actions.AdminAction`, so typos are
caught at parse time.  Members are matched as glob patterns against request
actions, which is how ``s3:*`` covers every S3 action.
"""
from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from enum import Enum
from types import MappingProxyType

from s3_iam_policy import wildcard
from s3_iam_policy.condition import keys as ck
from s3_iam_policy.condition.keys import ALL_SUPPORTED_KEYS, COMMON_KEYS, ConditionKey
from s3_iam_policy.errors import PolicyParseError
from s3_iam_policy.policies.admin_actions import AdminAction


class Action(str, Enum):
    """Closed set of S3 actions a policy may name."""

    ABORT_MULTIPART_UPLOAD = "s3:AbortMultipartUpload"
    CREATE_BUCKET = "s3:CreateBucket"
    DELETE_BUCKET = "s3:DeleteBucket"
    FORCE_DELETE_BUCKET = "s3:ForceDeleteBucket"
    DELETE_BUCKET_POLICY = "s3:DeleteBucketPolicy"
    DELETE_OBJECT = "s3:DeleteObject"
    GET_BUCKET_LOCATION = "s3:GetBucketLocation"
    GET_BUCKET_NOTIFICATION = "s3:GetBucketNotification"
    GET_BUCKET_POLICY = "s3:GetBucketPolicy"
    GET_OBJECT = "s3:GetObject"
    HEAD_BUCKET = "s3:HeadBucket"
    LIST_ALL_MY_BUCKETS = "s3:ListAllMyBuckets"
    LIST_BUCKET = "s3:ListBucket"
    GET_BUCKET_POLICY_STATUS = "s3:GetBucketPolicyStatus"
    LIST_BUCKET_MULTIPART_UPLOADS = "s3:ListBucketMultipartUploads"
    LIST_BUCKET_VERSIONS = "s3:ListBucketVersions"
    LISTEN_NOTIFICATION = "s3:ListenNotification"
    LISTEN_BUCKET_NOTIFICATION = "s3:ListenBucketNotification"
    LIST_MULTIPART_UPLOAD_PARTS = "s3:ListMultipartUploadParts"
    PUT_LIFECYCLE_CONFIGURATION = "s3:PutLifecycleConfiguration"
    GET_LIFECYCLE_CONFIGURATION = "s3:GetLifecycleConfiguration"
    PUT_BUCKET_NOTIFICATION = "s3:PutBucketNotification"
    PUT_BUCKET_POLICY = "s3:PutBucketPolicy"
    PUT_OBJECT = "s3:PutObject"
    DELETE_OBJECT_VERSION = "s3:DeleteObjectVersion"
    DELETE_OBJECT_VERSION_TAGGING = "s3:DeleteObjectVersionTagging"
    GET_OBJECT_VERSION = "s3:GetObjectVersion"
    GET_OBJECT_VERSION_TAGGING = "s3:GetObjectVersionTagging"
    PUT_OBJECT_VERSION_TAGGING = "s3:PutObjectVersionTagging"
    BYPASS_GOVERNANCE_RETENTION = "s3:BypassGovernanceRetention"
    PUT_OBJECT_RETENTION = "s3:PutObjectRetention"
    GET_OBJECT_RETENTION = "s3:GetObjectRetention"
    GET_OBJECT_LEGAL_HOLD = "s3:GetObjectLegalHold"
    PUT_OBJECT_LEGAL_HOLD = "s3:PutObjectLegalHold"
    GET_BUCKET_OBJECT_LOCK_CONFIGURATION = "s3:GetBucketObjectLockConfiguration"
    PUT_BUCKET_OBJECT_LOCK_CONFIGURATION = "s3:PutBucketObjectLockConfiguration"
    GET_BUCKET_TAGGING = "s3:GetBucketTagging"
    PUT_BUCKET_TAGGING = "s3:PutBucketTagging"
    GET_OBJECT_TAGGING = "s3:GetObjectTagging"
    PUT_OBJECT_TAGGING = "s3:PutObjectTagging"
    DELETE_OBJECT_TAGGING = "s3:DeleteObjectTagging"
    PUT_ENCRYPTION_CONFIGURATION = "s3:PutEncryptionConfiguration"
    GET_ENCRYPTION_CONFIGURATION = "s3:GetEncryptionConfiguration"
    PUT_BUCKET_VERSIONING = "s3:PutBucketVersioning"
    GET_BUCKET_VERSIONING = "s3:GetBucketVersioning"
    GET_REPLICATION_CONFIGURATION = "s3:GetReplicationConfiguration"
    PUT_REPLICATION_CONFIGURATION = "s3:PutReplicationConfiguration"
    REPLICATE_OBJECT = "s3:ReplicateObject"
    REPLICATE_DELETE = "s3:ReplicateDelete"
    REPLICATE_TAGS = "s3:ReplicateTags"
    GET_OBJECT_VERSION_FOR_REPLICATION = "s3:GetObjectVersionForReplication"
    ALL_ACTIONS = "s3:*"

    def __str__(self) -> str:
        return self.value

    def is_object_action(self) -> bool:
        """Return True if the action operates on objects rather than buckets."""
        return self in SUPPORTED_OBJECT_ACTIONS

    def is_match(self, action: str) -> bool:
        """Return True if this action, read as a pattern, matches *action*."""
        return wildcard.matches(self.value, str(action))

    @classmethod
    def parse(cls, name: str) -> Action:
        """Return the action called *name*.

        Raises
        ------
        PolicyParseError
            If *name* is not a known S3 action.
        """
        try:
            return cls(name)
        except ValueError as exc:
            raise PolicyParseError(f"invalid action '{name}'") from exc


SUPPORTED_OBJECT_ACTIONS: frozenset[Action] = frozenset(
    {
        Action.ALL_ACTIONS,
        Action.ABORT_MULTIPART_UPLOAD,
        Action.DELETE_OBJECT,
        Action.GET_OBJECT,
        Action.LIST_MULTIPART_UPLOAD_PARTS,
        Action.PUT_OBJECT,
        Action.BYPASS_GOVERNANCE_RETENTION,
        Action.PUT_OBJECT_RETENTION,
        Action.GET_OBJECT_RETENTION,
        Action.PUT_OBJECT_LEGAL_HOLD,
        Action.GET_OBJECT_LEGAL_HOLD,
        Action.GET_OBJECT_TAGGING,
        Action.PUT_OBJECT_TAGGING,
        Action.DELETE_OBJECT_TAGGING,
        Action.GET_OBJECT_VERSION,
        Action.GET_OBJECT_VERSION_TAGGING,
        Action.DELETE_OBJECT_VERSION,
        Action.DELETE_OBJECT_VERSION_TAGGING,
        Action.PUT_OBJECT_VERSION_TAGGING,
        Action.REPLICATE_OBJECT,
        Action.REPLICATE_DELETE,
        Action.REPLICATE_TAGS,
        Action.GET_OBJECT_VERSION_FOR_REPLICATION,
    }
)


# ---------------------------------------------------------------------------
# Condition keys per action
# ---------------------------------------------------------------------------


def _with_common(*extra: ConditionKey) -> frozenset[ConditionKey]:
    return frozenset((*COMMON_KEYS, *extra))


_SSE_KEYS = (ck.S3X_AMZ_SERVER_SIDE_ENCRYPTION, ck.S3X_AMZ_SERVER_SIDE_ENCRYPTION_CUSTOMER_ALGORITHM)
_LIST_KEYS = (ck.S3_PREFIX, ck.S3_DELIMITER, ck.S3_MAX_KEYS)
_VERSION_ONLY = _with_common(ck.S3_VERSION_ID)

ACTION_CONDITION_KEY_MAP: Mapping[Action, frozenset[ConditionKey]] = MappingProxyType(
    {
        Action.ALL_ACTIONS: ALL_SUPPORTED_KEYS,
        Action.GET_OBJECT: _with_common(*_SSE_KEYS, ck.S3_VERSION_ID),
        Action.LIST_BUCKET: _with_common(*_LIST_KEYS),
        Action.LIST_BUCKET_VERSIONS: _with_common(*_LIST_KEYS),
        Action.DELETE_OBJECT: _VERSION_ONLY,
        Action.PUT_OBJECT: _with_common(
            ck.S3X_AMZ_COPY_SOURCE,
            *_SSE_KEYS,
            ck.S3X_AMZ_METADATA_DIRECTIVE,
            ck.S3X_AMZ_STORAGE_CLASS,
            ck.S3_VERSION_ID,
            ck.S3_OBJECT_LOCK_RETAIN_UNTIL_DATE,
            ck.S3_OBJECT_LOCK_MODE,
            ck.S3_OBJECT_LOCK_LEGAL_HOLD,
        ),
        Action.PUT_OBJECT_RETENTION: _with_common(
            *_SSE_KEYS,
            ck.S3_OBJECT_LOCK_REMAINING_RETENTION_DAYS,
            ck.S3_OBJECT_LOCK_RETAIN_UNTIL_DATE,
            ck.S3_OBJECT_LOCK_MODE,
            ck.S3_VERSION_ID,
        ),
        Action.GET_OBJECT_RETENTION: _with_common(*_SSE_KEYS, ck.S3_VERSION_ID),
        Action.PUT_OBJECT_LEGAL_HOLD: _with_common(
            *_SSE_KEYS, ck.S3_OBJECT_LOCK_LEGAL_HOLD, ck.S3_VERSION_ID
        ),
        Action.GET_OBJECT_LEGAL_HOLD: _with_common(),
        Action.BYPASS_GOVERNANCE_RETENTION: _with_common(
            ck.S3_OBJECT_LOCK_REMAINING_RETENTION_DAYS,
            ck.S3_OBJECT_LOCK_RETAIN_UNTIL_DATE,
            ck.S3_OBJECT_LOCK_MODE,
            ck.S3_OBJECT_LOCK_LEGAL_HOLD,
        ),
        Action.GET_OBJECT_VERSION_FOR_REPLICATION: _VERSION_ONLY,
        Action.GET_OBJECT_VERSION: _VERSION_ONLY,
        Action.GET_OBJECT_VERSION_TAGGING: _VERSION_ONLY,
        Action.DELETE_OBJECT_VERSION: _VERSION_ONLY,
        Action.DELETE_OBJECT_VERSION_TAGGING: _VERSION_ONLY,
        Action.PUT_OBJECT_VERSION_TAGGING: _VERSION_ONLY,
        Action.PUT_OBJECT_TAGGING: _VERSION_ONLY,
        Action.GET_OBJECT_TAGGING: _VERSION_ONLY,
        Action.DELETE_OBJECT_TAGGING: _VERSION_ONLY,
        Action.REPLICATE_OBJECT: _VERSION_ONLY,
        Action.REPLICATE_DELETE: _VERSION_ONLY,
        Action.REPLICATE_TAGS: _VERSION_ONLY,
    }
)


def condition_keys_for(
    action: Action,
    key_map: Mapping[Action, frozenset[ConditionKey]] = ACTION_CONDITION_KEY_MAP,
    common_keys: Iterable[ConditionKey] = COMMON_KEYS,
) -> frozenset[ConditionKey]:
    """Return the condition keys a statement naming *action* may test.

    This is the common keys plus the keys of every map entry that *action*,
    read as a pattern, matches.  ``s3:*`` therefore picks up every key.
    """
    keys: set[ConditionKey] = set(common_keys)
    for mapped_action, mapped_keys in key_map.items():
        if action.is_match(mapped_action.value):
            keys.update(mapped_keys)
    return frozenset(keys)


# ---------------------------------------------------------------------------
# ActionSet
# ---------------------------------------------------------------------------


AnyAction = Action | AdminAction


def is_valid_action(name: str) -> bool:
    """Return True if *name* is a known S3 action."""
    return name in Action._value2member_map_


def parse_action(name: str) -> AnyAction:
    """Return the S3 or admin action called *name*.

    Raises
    ------
    PolicyParseError
        If *name* names neither kind of action.
    """
    if is_valid_action(name):
        return Action(name)
    if name in AdminAction._value2member_map_:
        return AdminAction(name)
    raise PolicyParseError(f"invalid action '{name}'")


class ActionSet:
    """An immutable set of actions, S3 or admin, read as patterns."""

    __slots__ = ("_actions",)

    def __init__(self, actions: Iterable[AnyAction] = ()) -> None:
        self._actions: frozenset[AnyAction] = frozenset(actions)

    @classmethod
    def from_json(cls, raw: object) -> ActionSet:
        """Parse a single action name or a non-empty array of unique names."""
        names = [raw] if isinstance(raw, str) else raw
        if not isinstance(names, list):
            raise PolicyParseError(f"action must be a string or an array; got {raw!r}")
        actions: list[AnyAction] = []
        for name in names:
            if not isinstance(name, str):
                raise PolicyParseError(f"action must be a string; got {name!r}")
            action = parse_action(name)
            if action in actions:
                raise PolicyParseError(f"duplicate action found '{name}'")
            actions.append(action)
        if not actions:
            raise PolicyParseError("empty action set")
        return cls(actions)

    def to_json(self) -> list[str]:
        return sorted(a.value for a in self._actions)

    def is_match(self, action: str) -> bool:
        """Return True if any member pattern matches *action*.

        A grant of ``s3:GetObjectVersion`` also grants ``s3:GetObject``.
        """
        for member in self._actions:
            if member.is_match(action):
                return True
            if member is Action.GET_OBJECT_VERSION and str(action) == Action.GET_OBJECT.value:
                return True
        return False

    def has_admin(self) -> bool:
        """Return True if any member is an admin action."""
        return any(isinstance(a, AdminAction) for a in self._actions)

    def __iter__(self) -> Iterator[AnyAction]:
        return iter(sorted(self._actions, key=lambda a: a.value))

    def __len__(self) -> int:
        return len(self._actions)

    def __contains__(self, item: object) -> bool:
        return item in self._actions

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActionSet):
            return NotImplemented
        return self._actions == other._actions

    def __hash__(self) -> int:
        return hash(self._actions)

    def __repr__(self) -> str:
        return f"ActionSet({self.to_json()!r})"
