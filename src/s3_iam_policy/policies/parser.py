"""Policy document loader.

Reads JSON (or YAML) policy documents from files and strings into validated
:class:`~s3_iam_policy.policies.policy.Policy` objects, applying the
:class:`~s3_iam_policy.config.config_loader.EngineConfig` settings.

A YAML document uses the same field names as JSON::

    Version: "2012-10-17"
    Statement:
      - Effect: Allow
        Action: s3:GetObject
        Resource: arn:aws:s3:::mybucket/*

Example
-------
>>> parser = PolicyParser()
>>> policy = parser.parse_file("readonly.json")
>>> len(policy.statements)
1
"""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

import yaml

from s3_iam_policy.config.config_loader import EngineConfig
from s3_iam_policy.errors import PolicyError, PolicyLoadError
from s3_iam_policy.policies.catalog import PolicyCatalog
from s3_iam_policy.policies.policy import POLICY_FIELDS, Policy
from s3_iam_policy.policies.statement import STATEMENT_FIELDS

logger = logging.getLogger(__name__)

DocumentFormat = Literal["json", "yaml"]

_YAML_SUFFIXES: frozenset[str] = frozenset({".yaml", ".yml"})
_YAML_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class _PolicyYamlLoader(yaml.SafeLoader):
    """SafeLoader that keeps unquoted dates as strings.

    ``Version: 2012-10-17`` and RFC 3339 condition operands must reach the
    policy parser as text, the same as in JSON.
    """


_PolicyYamlLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _YAML_TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class PolicyParser:
    """Parses policy documents into :class:`Policy` objects.

    Parameters
    ----------
    config:
        Engine settings.  Defaults to :class:`EngineConfig` defaults: strict
        field checking and validation on load.
    catalog:
        Optional vocabulary override passed through to parsing and validation.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        catalog: PolicyCatalog | None = None,
    ) -> None:
        self._config = config or EngineConfig()
        self._catalog = catalog

    @property
    def config(self) -> EngineConfig:
        return self._config

    def parse_file(self, policy_path: str | Path) -> Policy:
        """Parse a policy file.  ``.yaml``/``.yml`` files are read as YAML.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        PolicyLoadError
            If the document is malformed or fails validation.
        """
        policy_path = Path(policy_path)
        if not policy_path.exists():
            raise FileNotFoundError(f"Policy file not found: {policy_path}")

        fmt: DocumentFormat = "yaml" if policy_path.suffix.lower() in _YAML_SUFFIXES else "json"
        content = policy_path.read_text(encoding="utf-8")
        policy = self.parse_string(content, fmt=fmt, source=str(policy_path))
        logger.info(
            "Loaded policy with %d statement(s) from %s", len(policy.statements), policy_path
        )
        return policy

    def parse_string(
        self,
        content: str,
        fmt: DocumentFormat = "json",
        source: str | None = None,
    ) -> Policy:
        """Parse a policy from JSON or YAML text.

        Parameters
        ----------
        content:
            Raw document text.
        fmt:
            ``"json"`` (default) or ``"yaml"``.
        source:
            Name used in error messages, e.g. the file path.
        """
        try:
            if fmt == "yaml":
                raw = yaml.load(content, Loader=_PolicyYamlLoader)
            else:
                raw = json.loads(content)
        except (ValueError, RecursionError, yaml.YAMLError) as exc:
            raise PolicyLoadError(f"malformed {fmt.upper()} document: {exc}", source) from exc
        return self.parse_dict(raw, source=source)

    def parse_dict(self, raw: object, source: str | None = None) -> Policy:
        """Parse an already-decoded document and validate it if configured."""
        if not isinstance(raw, Mapping):
            raise PolicyLoadError(
                f"policy document must be a mapping; got {type(raw).__name__}", source
            )
        document = raw if self._config.strict_fields else self._relax(raw, source)
        try:
            policy = Policy.parse(document, catalog=self._catalog)
            if self._config.validate_on_load:
                policy.validate(self._catalog, accepted_versions=self._config.accepted_versions)
        except PolicyError as exc:
            raise PolicyLoadError(str(exc), source) from exc
        return policy

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _relax(self, raw: Mapping[str, object], source: str | None) -> dict[str, object]:
        """Drop unknown fields and fill a missing ``Version``."""
        document = {k: v for k, v in raw.items() if k in POLICY_FIELDS}
        for name in sorted(set(raw) - POLICY_FIELDS):
            logger.warning("Ignoring unknown policy field %r in %s", name, source or "<string>")
        document.setdefault("Version", self._config.default_version)

        statements = document.get("Statement")
        if isinstance(statements, Mapping):
            statements = [statements]
        if isinstance(statements, list):
            relaxed: list[object] = []
            for statement in statements:
                if isinstance(statement, Mapping):
                    for name in sorted(set(statement) - STATEMENT_FIELDS):
                        logger.warning(
                            "Ignoring unknown statement field %r in %s", name, source or "<string>"
                        )
                    statement = {k: v for k, v in statement.items() if k in STATEMENT_FIELDS}
                relaxed.append(statement)
            document["Statement"] = relaxed
        return document
