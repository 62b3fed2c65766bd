"""Engine configuration."""
from __future__ import annotations

from s3_iam_policy.config.config_loader import ConfigLoader, EngineConfig

__all__ = ["ConfigLoader", "EngineConfig"]
