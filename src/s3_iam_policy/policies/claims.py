"""Policy names carried in identity-token claims."""
from __future__ import annotations

from collections.abc import Mapping


def policies_from_claims(claims: Mapping[str, object], claim_name: str) -> set[str] | None:
    """Return the policy names listed under *claim_name*.

    The claim may be a comma-separated string or a list of such strings.
    Names are trimmed, blanks are dropped and non-string list entries are
    skipped.

    Returns
    -------
    set[str] | None
        ``None`` if the claim is missing or is neither a string nor a list.

    Example
    -------
    >>> sorted(policies_from_claims({"policy": "readwrite, diagnostics"}, "policy"))
    ['diagnostics', 'readwrite']
    """
    value = claims.get(claim_name)
    if isinstance(value, str):
        entries: list[str] = [value]
    elif isinstance(value, list):
        entries = [v for v in value if isinstance(v, str)]
    else:
        return None

    names: set[str] = set()
    for entry in entries:
        for name in entry.split(","):
            name = name.strip()
            if name:
                names.add(name)
    return names
