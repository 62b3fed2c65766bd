"""Built-in canned IAM policies.

Five policies are bundled, matching the ones an S3-compatible server
usually ships for its users: ``readonly``, ``readwrite``, ``writeonly``,
``diagnostics`` and ``consoleAdmin``.

Example
-------
>>> from s3_iam_policy.templates.canned_policies import get_template, list_templates
>>> list_templates()
['consoleAdmin', 'diagnostics', 'readonly', 'readwrite', 'writeonly']
>>> get_policy("readonly").is_allowed(AuthorizationRequest("s3:GetObject", "photos", "a.jpg"))
True
"""
from __future__ import annotations

from pathlib import Path

from s3_iam_policy.policies.policy import Policy

# ---------------------------------------------------------------------------
# Template definitions
# ---------------------------------------------------------------------------

_READ_ONLY = """\
{
  "Version": "2012-10-17",
  "Statement": [
    {
      "Effect": "Allow",
      "Action": ["s3:GetBucketLocation", "s3:GetObject"],
      "Resource": ["arn:aws:s3:::*"]
    }
  ]
}
"""

_READ_WRITE = """\
{
  "Version": "2012-10-17",
  "Statement": [
    {
      "Effect": "Allow",
      "Action": ["s3:*"],
      "Resource": ["arn:aws:s3:::*"]
    }
  ]
}
"""

_WRITE_ONLY = """\
{
  "Version": "2012-10-17",
  "Statement": [
    {
      "Effect": "Allow",
      "Action": ["s3:PutObject"],
      "Resource": ["arn:aws:s3:::*"]
    }
  ]
}
"""

_DIAGNOSTICS = """\
{
  "Version": "2012-10-17",
  "Statement": [
    {
      "Effect": "Allow",
      "Action": [
        "admin:ServerTrace",
        "admin:Profiling",
        "admin:ConsoleLog",
        "admin:ServerInfo",
        "admin:TopLocksInfo",
        "admin:OBDInfo",
        "admin:BandwidthMonitor",
        "admin:Prometheus"
      ],
      "Resource": ["arn:aws:s3:::*"]
    }
  ]
}
"""

_CONSOLE_ADMIN = """\
{
  "Version": "2012-10-17",
  "Statement": [
    {
      "Effect": "Allow",
      "Action": ["admin:*"]
    },
    {
      "Effect": "Allow",
      "Action": ["s3:*"],
      "Resource": ["arn:aws:s3:::*"]
    }
  ]
}
"""

# ---------------------------------------------------------------------------
# Template registry
# ---------------------------------------------------------------------------

TEMPLATES: dict[str, str] = {
    "readonly": _READ_ONLY,
    "readwrite": _READ_WRITE,
    "writeonly": _WRITE_ONLY,
    "diagnostics": _DIAGNOSTICS,
    "consoleAdmin": _CONSOLE_ADMIN,
}

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_template(name: str) -> str:
    """Return the JSON text of a canned policy.

    Raises
    ------
    KeyError
        If no template with the given name is registered.

    Example
    -------
    >>> get_template("readwrite").startswith("{")
    True
    """
    if name not in TEMPLATES:
        available = ", ".join(sorted(TEMPLATES))
        raise KeyError(f"Template {name!r} not found. Available templates: {available}.")
    return TEMPLATES[name]


def get_policy(name: str) -> Policy:
    """Return a canned policy, parsed and validated."""
    policy = Policy.parse(get_template(name))
    policy.validate()
    return policy


def list_templates() -> list[str]:
    """Return a sorted list of all canned policy names."""
    return sorted(TEMPLATES)


def write_template(name: str, output_path: Path) -> Path:
    """Write a canned policy to a file.

    Parent directories are created automatically if they do not exist.

    Parameters
    ----------
    name:
        The template identifier.  See :func:`list_templates`.
    output_path:
        Destination file path, typically ending in ``.json``.

    Returns
    -------
    Path
        The absolute path of the written file.

    Raises
    ------
    KeyError
        If no template with the given name is registered.
    """
    content = get_template(name)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content, encoding="utf-8")
    return output_path.resolve()
