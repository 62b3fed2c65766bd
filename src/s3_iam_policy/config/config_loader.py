"""Engine configuration loader with Pydantic v2 validation.

Loads and validates an ``s3-iam-policy.yaml`` file into a typed
:class:`EngineConfig` object.  Unknown keys are allowed so that deployment
files can carry settings for neighbouring components.

Example
-------
>>> loader = ConfigLoader()
>>> config = loader.load(Path("s3-iam-policy.yaml"))
>>> config.accepted_versions
['', '2012-10-17']
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_VERSION = "2012-10-17"

logger = logging.getLogger(__name__)


class EngineConfig(BaseModel):
    """Top-level engine configuration schema.

    All fields are optional and fall back to the AWS-compatible defaults.
    """

    model_config = {"extra": "allow"}

    accepted_versions: list[str] = Field(default_factory=lambda: ["", DEFAULT_VERSION])
    default_version: str = Field(default=DEFAULT_VERSION)
    strict_fields: bool = Field(default=True)
    validate_on_load: bool = Field(default=True)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    policy_files: list[Path] = Field(default_factory=list)

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @field_validator("accepted_versions")
    @classmethod
    def validate_accepted_versions(cls, values: list[str]) -> list[str]:
        if not values:
            raise ValueError("accepted_versions must not be empty")
        return values


class ConfigLoader:
    """Loads and validates engine YAML configuration.

    Example
    -------
    >>> loader = ConfigLoader()
    >>> config = loader.load(Path("s3-iam-policy.yaml"))
    """

    def load(self, config_path: Path) -> EngineConfig:
        """Load and validate an engine YAML file.

        Parameters
        ----------
        config_path:
            Path to the configuration file.

        Returns
        -------
        EngineConfig
            Validated configuration object.

        Raises
        ------
        FileNotFoundError:
            When the config file does not exist.
        ValueError:
            When the YAML content fails Pydantic validation.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Engine config not found: {config_path}")

        with config_path.open("r", encoding="utf-8") as fh:
            raw: dict[str, object] = yaml.safe_load(fh) or {}

        config = EngineConfig.model_validate(raw)
        logger.info("Loaded engine config from %s", config_path)
        return config

    def load_string(self, yaml_content: str) -> EngineConfig:
        """Load and validate a YAML string directly.

        Parameters
        ----------
        yaml_content:
            Raw YAML text.
        """
        raw: dict[str, object] = yaml.safe_load(yaml_content) or {}
        return EngineConfig.model_validate(raw)

    def defaults(self) -> EngineConfig:
        """Return a default configuration with all defaults applied."""
        return EngineConfig()
