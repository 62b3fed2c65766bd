"""The authorization question put to a policy."""
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field


@dataclass(frozen=True)
class AuthorizationRequest:
    """One request to authorize.

    Attributes
    ----------
    action:
        The requested action, e.g. ``"s3:GetObject"`` or ``Action.GET_OBJECT``.
    bucket:
        Target bucket name; empty for service-level requests.
    object:
        Target object key; empty for bucket-level requests.
    attrs:
        Request attributes keyed by bare condition key name
        (``"SourceIp"``, ``"prefix"`` ...), each a list of values.
    is_owner:
        The caller owns the resource.  Allowed unless explicitly denied.
    deny_only:
        Only explicit denies are of interest.  Allowed unless explicitly
        denied.
    account_name:
        The caller's account, matched against statement principals.
    """

    action: str
    bucket: str = ""
    object: str = ""
    attrs: Mapping[str, Sequence[str]] = field(default_factory=dict)
    is_owner: bool = False
    deny_only: bool = False
    account_name: str = ""

    @property
    def resource_path(self) -> str:
        """Return ``bucket/object``; a bucket-level request yields ``bucket/``."""
        if self.object.startswith("/"):
            return self.bucket + self.object
        return self.bucket + "/" + self.object
