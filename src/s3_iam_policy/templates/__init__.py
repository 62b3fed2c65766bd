"""Canned policy library for s3-iam-policy.

Provides the five built-in policies: ``readonly``, ``readwrite``,
``writeonly``, ``diagnostics`` and ``consoleAdmin``.
"""
from __future__ import annotations

from s3_iam_policy.templates.canned_policies import (
    TEMPLATES,
    get_policy,
    get_template,
    list_templates,
    write_template,
)

__all__ = [
    "TEMPLATES",
    "get_policy",
    "get_template",
    "list_templates",
    "write_template",
]
