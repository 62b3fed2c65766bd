"""IAM policy documents and the explicit-deny-wins decision.

Example
-------
>>> policy = Policy.parse('''{
...   "Version": "2012-10-17",
...   "Statement": [
...     {"Effect": "Allow", "Action": ["s3:*"], "Resource": ["arn:aws:s3:::mybucket/*"]},
...     {"Effect": "Deny", "Action": ["s3:DeleteObject"],
...      "Resource": ["arn:aws:s3:::mybucket/secret/*"]}
...   ]
... }''')
>>> policy.validate()
>>> policy.is_allowed(AuthorizationRequest("s3:DeleteObject", "mybucket", "secret/a"))
False
>>> policy.is_allowed(AuthorizationRequest("s3:GetObject", "mybucket", "secret/a"))
True
"""
from __future__ import annotations

import json
import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum

from s3_iam_policy.config.config_loader import DEFAULT_VERSION
from s3_iam_policy.errors import PolicyParseError, PolicyValidationError
from s3_iam_policy.policies.catalog import PolicyCatalog, default_catalog
from s3_iam_policy.policies.request import AuthorizationRequest
from s3_iam_policy.policies.statement import Statement, Vote

logger = logging.getLogger(__name__)

ACCEPTED_VERSIONS: frozenset[str] = frozenset({"", DEFAULT_VERSION})

POLICY_FIELDS: frozenset[str] = frozenset({"Version", "Statement", "ID"})


class DecisionType(str, Enum):
    """Outcome of evaluating a policy against a request."""

    ALLOWED = "ALLOWED"
    EXPLICIT_DENY = "EXPLICIT_DENY"
    IMPLICIT_DENY = "IMPLICIT_DENY"


@dataclass(frozen=True)
class EvaluationResult:
    """Decision plus the vote of every statement, in document order."""

    decision: DecisionType
    votes: tuple[tuple[Statement, Vote], ...] = ()

    @property
    def allowed(self) -> bool:
        return self.decision is DecisionType.ALLOWED

    @property
    def deciding_statements(self) -> list[Statement]:
        """Return the statements whose vote produced the decision."""
        match self.decision:
            case DecisionType.EXPLICIT_DENY:
                wanted = Vote.DENY
            case DecisionType.ALLOWED:
                wanted = Vote.ALLOW
            case _:
                return []
        return [stmt for stmt, vote in self.votes if vote is wanted]


@dataclass(frozen=True, eq=False)
class Policy:
    """A parsed policy document.

    Attributes
    ----------
    version:
        The ``Version`` field; ``""`` or ``"2012-10-17"`` once validated.
    statements:
        Statements in document order, duplicates removed.
    id:
        The optional ``ID`` field.
    """

    version: str = DEFAULT_VERSION
    statements: tuple[Statement, ...] = ()
    id: str = field(default="")

    # ------------------------------------------------------------------
    # Parsing / serialization
    # ------------------------------------------------------------------

    @classmethod
    def parse(
        cls,
        document: str | bytes | Mapping[str, object],
        catalog: PolicyCatalog | None = None,
    ) -> Policy:
        """Parse a policy from JSON text or an already-decoded mapping.

        Parameters
        ----------
        document:
            JSON text, UTF-8 bytes or a mapping such as ``json.loads`` returns.
        catalog:
            Optional vocabulary override; see :mod:`s3_iam_policy.policies.catalog`.

        Returns
        -------
        Policy
            The parsed, not yet validated, policy.

        Raises
        ------
        PolicyParseError
            If the document is not a well-formed policy.
        """
        if isinstance(document, (str, bytes)):
            try:
                raw = json.loads(document)
            except (ValueError, RecursionError) as exc:
                raise PolicyParseError(f"policy is not valid JSON: {exc}") from exc
        else:
            raw = document
        if not isinstance(raw, Mapping):
            raise PolicyParseError(f"policy must be a JSON object; got {type(raw).__name__}")

        unknown = sorted(set(raw) - POLICY_FIELDS)
        if unknown:
            raise PolicyParseError(f"unknown field(s) in policy: {unknown}")
        if "Version" not in raw:
            raise PolicyParseError("policy is missing 'Version'")
        if "Statement" not in raw:
            raise PolicyParseError("policy is missing 'Statement'")

        version = raw["Version"]
        if not isinstance(version, str):
            raise PolicyParseError(f"Version must be a string; got {version!r}")
        policy_id = raw.get("ID", "")
        if not isinstance(policy_id, str):
            raise PolicyParseError(f"ID must be a string; got {policy_id!r}")

        raw_statements = raw["Statement"]
        if isinstance(raw_statements, Mapping):
            raw_statements = [raw_statements]
        if not isinstance(raw_statements, list):
            raise PolicyParseError(
                f"Statement must be an object or an array; got {raw_statements!r}"
            )
        statements = [Statement.from_json(s, catalog) for s in raw_statements]
        return cls(version=version, statements=_dedupe(statements), id=policy_id)

    def to_dict(self) -> dict[str, object]:
        """Return the policy as a JSON-ready dictionary."""
        result: dict[str, object] = {}
        if self.id:
            result["ID"] = self.id
        result["Version"] = self.version
        result["Statement"] = [s.to_json() for s in self.statements]
        return result

    def to_json(self, indent: int | None = None) -> str:
        """Serialize the policy to JSON text.  ``parse(to_json())`` round-trips."""
        return json.dumps(self.to_dict(), indent=indent)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(
        self,
        catalog: PolicyCatalog | None = None,
        accepted_versions: Iterable[str] = ACCEPTED_VERSIONS,
        bucket_name: str | None = None,
    ) -> None:
        """Check the version and every statement.

        Pass *bucket_name* to validate a bucket policy: every resource must
        then fall inside that bucket.

        Raises
        ------
        PolicyValidationError
            On an unsupported version or the first invalid statement.
        """
        if self.version not in frozenset(accepted_versions):
            raise PolicyValidationError(f"invalid version '{self.version}'")
        catalog = catalog or default_catalog()
        for statement in self.statements:
            statement.validate(catalog, bucket_name=bucket_name)

    def is_valid(self) -> bool:
        try:
            self.validate()
        except PolicyValidationError:
            return False
        return True

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self, request: AuthorizationRequest) -> EvaluationResult:
        """Collect every statement's vote and combine them.

        Any deny vote denies.  Otherwise owners and deny-only checks are
        allowed, and everyone else needs at least one allow vote.
        """
        votes = tuple((stmt, stmt.vote(request)) for stmt in self.statements)
        if any(vote is Vote.DENY for _, vote in votes):
            decision = DecisionType.EXPLICIT_DENY
        elif request.deny_only or request.is_owner:
            decision = DecisionType.ALLOWED
        elif any(vote is Vote.ALLOW for _, vote in votes):
            decision = DecisionType.ALLOWED
        else:
            decision = DecisionType.IMPLICIT_DENY
        logger.debug(
            "%s on %r: %s", request.action, request.resource_path, decision.value
        )
        return EvaluationResult(decision=decision, votes=votes)

    def is_allowed(self, request: AuthorizationRequest) -> bool:
        """Return True if *request* is allowed: default deny, explicit deny wins."""
        return self.evaluate(request).allowed

    def match_resource(self, path: str) -> bool:
        """Return True if any statement's resources match *path*, ignoring variables."""
        return any(s.resources.match_resource(path) for s in self.statements)

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def is_empty(self) -> bool:
        return not self.statements

    def merge(self, other: Policy) -> Policy:
        """Return a policy holding the statements of both, duplicates removed.

        The version is this policy's, or *other*'s if this one has none.
        """
        version = self.version or other.version
        return Policy(
            version=version,
            statements=_dedupe([*self.statements, *other.statements]),
            id=self.id or other.id,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Policy):
            return NotImplemented
        return self.version == other.version and Counter(self.statements) == Counter(
            other.statements
        )

    def __hash__(self) -> int:
        return hash((self.version, frozenset(self.statements)))


def _dedupe(statements: Iterable[Statement]) -> tuple[Statement, ...]:
    unique: list[Statement] = []
    for statement in statements:
        if statement in unique:
            logger.warning("Dropping duplicate statement %r", statement.sid or statement.to_json())
            continue
        unique.append(statement)
    return tuple(unique)
