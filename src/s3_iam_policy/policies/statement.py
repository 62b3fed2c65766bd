"""A single policy statement: effect, actions, resources and conditions.

Example
-------
>>> stmt = Statement.from_json({
...     "Effect": "Allow",
...     "Action": "s3:GetObject",
...     "Resource": "arn:aws:s3:::mybucket/*",
... })
>>> stmt.validate()
>>> stmt.vote(AuthorizationRequest("s3:GetObject", "mybucket", "a.txt"))
<Vote.ALLOW: 'allow'>
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from s3_iam_policy.condition.function_set import Functions
from s3_iam_policy.errors import PolicyParseError, PolicyValidationError
from s3_iam_policy.policies.actions import ActionSet
from s3_iam_policy.policies.admin_actions import AdminAction
from s3_iam_policy.policies.catalog import PolicyCatalog, default_catalog
from s3_iam_policy.policies.principal import Principal
from s3_iam_policy.policies.request import AuthorizationRequest
from s3_iam_policy.policies.resource import ResourceSet

STATEMENT_FIELDS: frozenset[str] = frozenset(
    {"Sid", "Effect", "Principal", "Action", "Resource", "Condition"}
)


class Effect(str, Enum):
    """What a matching statement asserts."""

    ALLOW = "Allow"
    DENY = "Deny"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, raw: object) -> Effect:
        try:
            return cls(raw)
        except ValueError as exc:
            raise PolicyParseError(f"invalid effect '{raw}'") from exc


class Vote(str, Enum):
    """A statement's contribution to a policy decision."""

    ALLOW = "allow"
    DENY = "deny"
    ABSTAIN = "abstain"


@dataclass(frozen=True)
class Statement:
    """One authorization rule.

    Attributes
    ----------
    effect:
        ``Allow`` or ``Deny``.
    actions:
        Actions the statement covers; either all S3 or all admin actions.
    resources:
        Resource patterns.  Ignored for admin statements.
    conditions:
        Conjunction of condition functions; empty means always true.
    sid:
        Optional statement id.  Not part of equality.
    principal:
        Accounts the statement applies to, as written in bucket policies.
        ``None`` means the statement applies to every caller.
    """

    effect: Effect
    actions: ActionSet
    resources: ResourceSet = field(default_factory=ResourceSet)
    conditions: Functions = field(default_factory=Functions)
    sid: str = field(default="", compare=False)
    principal: Principal | None = None

    # ------------------------------------------------------------------
    # Parsing / serialization
    # ------------------------------------------------------------------

    @classmethod
    def from_json(
        cls,
        raw: object,
        catalog: PolicyCatalog | None = None,
    ) -> Statement:
        """Build a statement from its decoded JSON object.

        Raises
        ------
        PolicyParseError
            On unknown fields, a missing ``Effect`` or ``Action``, or any
            malformed member.
        """
        if not isinstance(raw, Mapping):
            raise PolicyParseError(f"statement must be an object; got {raw!r}")
        unknown = sorted(set(raw) - STATEMENT_FIELDS)
        if unknown:
            raise PolicyParseError(f"unknown field(s) in statement: {unknown}")
        if "Effect" not in raw:
            raise PolicyParseError("statement is missing 'Effect'")
        if "Action" not in raw:
            raise PolicyParseError("statement is missing 'Action'")

        catalog = catalog or default_catalog()
        sid = raw.get("Sid", "")
        if not isinstance(sid, str):
            raise PolicyParseError(f"Sid must be a string; got {sid!r}")

        resources = (
            ResourceSet.from_json(raw["Resource"], catalog.common_keys)
            if "Resource" in raw
            else ResourceSet()
        )
        conditions = (
            Functions.from_json(raw["Condition"], catalog) if "Condition" in raw else Functions()
        )
        return cls(
            effect=Effect.parse(raw["Effect"]),
            actions=ActionSet.from_json(raw["Action"]),
            resources=resources,
            conditions=conditions,
            sid=sid,
            principal=Principal.from_json(raw["Principal"]) if "Principal" in raw else None,
        )

    def to_json(self) -> dict[str, object]:
        """Return the statement as a JSON-ready dictionary."""
        result: dict[str, object] = {}
        if self.sid:
            result["Sid"] = self.sid
        result["Effect"] = self.effect.value
        if self.principal is not None:
            result["Principal"] = self.principal.to_json()
        result["Action"] = self.actions.to_json()
        if self.resources:
            result["Resource"] = self.resources.to_json()
        if self.conditions:
            result["Condition"] = self.conditions.to_json()
        return result

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def is_admin(self) -> bool:
        """Return True if any action is an admin action."""
        return self.actions.has_admin()

    def validate(self, catalog: PolicyCatalog | None = None, bucket_name: str | None = None) -> None:
        """Check the statement against the action and key catalogs.

        Parameters
        ----------
        catalog:
            Vocabulary to check against; the default catalog if omitted.
        bucket_name:
            For bucket policies, the bucket the policy is attached to.  Every
            resource's bucket pattern must match it.

        Raises
        ------
        PolicyValidationError
            If the statement mixes admin and S3 actions, lacks a resource
            suitable for one of its actions, tests a condition key one of
            its actions does not support, has an empty principal, or names
            a resource outside *bucket_name*.
        """
        catalog = catalog or default_catalog()
        if not self.actions:
            raise PolicyValidationError("statement has no actions", sid=self.sid)
        if self.principal is not None and not self.principal.is_valid():
            raise PolicyValidationError("statement has an empty principal", sid=self.sid)
        if self.is_admin():
            self._validate_admin(catalog)
        else:
            self._validate_regular(catalog)
            if bucket_name is not None:
                self._validate_bucket(bucket_name)

    def _validate_bucket(self, bucket_name: str) -> None:
        for resource in self.resources:
            if not resource.matches_bucket(bucket_name):
                raise PolicyValidationError(
                    f"resource '{resource}' does not match bucket '{bucket_name}'",
                    sid=self.sid,
                )

    def _validate_admin(self, catalog: PolicyCatalog) -> None:
        keys = self.conditions.keys()
        for action in self.actions:
            if not isinstance(action, AdminAction):
                raise PolicyValidationError(
                    f"unsupported action '{action}' in admin statement", sid=self.sid
                )
            unsupported = keys - catalog.keys_for_admin_action(action)
            if unsupported:
                raise PolicyValidationError(
                    f"unsupported condition keys {sorted(k.name for k in unsupported)} "
                    f"used for action '{action}'",
                    sid=self.sid,
                )

    def _validate_regular(self, catalog: PolicyCatalog) -> None:
        try:
            self.sid.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise PolicyValidationError("Sid is not valid UTF-8", sid=self.sid) from exc
        if not self.resources:
            raise PolicyValidationError("statement has no resources", sid=self.sid)
        for resource in self.resources:
            if not resource.is_valid():
                raise PolicyValidationError(f"invalid resource '{resource}'", sid=self.sid)

        keys = self.conditions.keys()
        for action in self.actions:
            if action.is_object_action():
                if not self.resources.object_resource_exists():
                    raise PolicyValidationError(
                        f"unsupported resource found {self.resources.to_json()} "
                        f"for action '{action}'",
                        sid=self.sid,
                    )
            elif not self.resources.bucket_resource_exists():
                raise PolicyValidationError(
                    f"unsupported resource found {self.resources.to_json()} "
                    f"for action '{action}'",
                    sid=self.sid,
                )
            unsupported = keys - catalog.keys_for_action(action)
            if unsupported:
                raise PolicyValidationError(
                    f"unsupported condition keys {sorted(k.name for k in unsupported)} "
                    f"used for action '{action}'",
                    sid=self.sid,
                )

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def matches(self, request: AuthorizationRequest) -> bool:
        """Return True if principal, action, resource and conditions all apply to *request*."""
        if self.principal is not None and not self.principal.is_match(request.account_name):
            return False
        if not self.actions.is_match(str(request.action)):
            return False
        if not self.is_admin() and not self.resources.is_match(
            request.resource_path, request.attrs
        ):
            return False
        return self.conditions.evaluate(request.attrs)

    def vote(self, request: AuthorizationRequest) -> Vote:
        """Return this statement's vote on *request*."""
        if not self.matches(request):
            return Vote.ABSTAIN
        return Vote.ALLOW if self.effect is Effect.ALLOW else Vote.DENY

    def is_allowed(self, request: AuthorizationRequest) -> bool:
        """Return True if the statement, on its own, grants *request*."""
        return self.vote(request) is Vote.ALLOW
