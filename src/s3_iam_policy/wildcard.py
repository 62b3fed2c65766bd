"""Glob matching for resource patterns, action patterns and ``StringLike``.

Only two metacharacters are recognised:

- ``*`` matches any run of characters, including ``/`` and the empty run
- ``?`` matches exactly one character

Everything else (including ``[``, ``]`` and ``\\``) is literal and matching is
case-sensitive.  ``fnmatch`` is not used because it gives ``[...]`` a meaning
and does not treat ``/`` uniformly across platforms.

Example
-------
>>> matches("mybucket/*", "mybucket/a/b.txt")
True
>>> matches("s3:Get?bject", "s3:GetObject")
True
"""
from __future__ import annotations

import re
from functools import lru_cache


@lru_cache(maxsize=4096)
def _compile(pattern: str) -> re.Pattern[str]:
    parts: list[str] = []
    for char in pattern:
        if char == "*":
            # Collapse runs of '*' so the regex stays linear.
            if not parts or parts[-1] != ".*":
                parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def matches(pattern: str, text: str) -> bool:
    """Return True when *text* matches the glob *pattern* in full.

    An empty pattern only matches the empty string; a lone ``*`` matches
    everything.
    """
    if pattern == "*":
        return True
    if not pattern:
        return text == ""
    return _compile(pattern).fullmatch(text) is not None
