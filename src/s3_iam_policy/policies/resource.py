"""Bucket and object resource patterns.

A resource pattern is written ``arn:aws:s3:::<bucket>[/<key-pattern>]``.  The
``arn:aws:s3:::`` prefix is optional on input and always emitted on output.
Patterns may contain ``*`` and ``?`` wildcards and ``${key}`` policy
variables, e.g. ``arn:aws:s3:::home/${aws:username}/*``.
"""
from __future__ import annotations

import posixpath
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field

from s3_iam_policy import wildcard
from s3_iam_policy.condition.keys import COMMON_KEYS, ConditionKey, substitute
from s3_iam_policy.errors import PolicyParseError

RESOURCE_ARN_PREFIX = "arn:aws:s3:::"

_EMPTY_ATTRS: Mapping[str, Sequence[str]] = {}


def clean_path(path: str) -> str:
    """Return the shortest path equivalent to *path*.

    Repeated slashes and ``.`` elements are removed, ``..`` elements consume
    their parent and a trailing slash is dropped.  The empty path cleans to
    ``"."``.
    """
    cleaned = posixpath.normpath(path)
    # normpath keeps a leading "//" on POSIX.
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


@dataclass(frozen=True, order=True)
class Resource:
    """One resource pattern of a statement.

    Attributes
    ----------
    bucket_name:
        The bucket component of the pattern (text before the first ``/``).
    pattern:
        The full pattern without the ARN prefix.
    """

    bucket_name: str
    pattern: str
    variables: tuple[ConditionKey, ...] = field(
        default=COMMON_KEYS, compare=False, repr=False
    )

    @classmethod
    def new(cls, bucket_name: str, key_name: str = "") -> Resource:
        """Build a resource from a bucket name and an optional key pattern."""
        pattern = bucket_name
        if key_name:
            if not key_name.startswith("/"):
                pattern += "/"
            pattern += key_name
        return cls(bucket_name, pattern)

    @classmethod
    def parse(
        cls,
        text: str,
        variables: tuple[ConditionKey, ...] = COMMON_KEYS,
    ) -> Resource:
        """Parse an ARN or bare resource pattern.

        Raises
        ------
        PolicyParseError
            If the pattern is empty or starts with ``/``.
        """
        pattern = text[len(RESOURCE_ARN_PREFIX):] if text.startswith(RESOURCE_ARN_PREFIX) else text
        if not pattern:
            raise PolicyParseError(f"invalid resource '{text}'")
        if pattern.startswith("/"):
            raise PolicyParseError(f"invalid resource '{text}': missing bucket name")
        bucket_name = pattern.split("/", 1)[0]
        return cls(bucket_name, pattern, variables)

    def is_valid(self) -> bool:
        return bool(self.pattern)

    def is_bucket_pattern(self) -> bool:
        """Return True if the pattern can match a bare bucket."""
        return "/" not in self.pattern or self.pattern == "*"

    def is_object_pattern(self) -> bool:
        """Return True if the pattern can match an object key."""
        return "/" in self.pattern or "*" in self.bucket_name or self.pattern == "*/*"

    def is_match(self, path: str, attrs: Mapping[str, Sequence[str]] = _EMPTY_ATTRS) -> bool:
        """Return True if *path* (``bucket/key``) matches this pattern.

        Policy variables are substituted from *attrs* first.  A cleaned path
        that equals the pattern literally matches even if the raw path has
        redundant separators.
        """
        pattern = substitute(self.pattern, attrs, self.variables)
        cleaned = clean_path(path)
        if cleaned != "." and cleaned == pattern:
            return True
        return wildcard.matches(pattern, path)

    def match_resource(self, path: str) -> bool:
        """Match *path* against the pattern without variable substitution."""
        return self.is_match(path, _EMPTY_ATTRS)

    def matches_bucket(self, bucket_name: str) -> bool:
        """Return True if the bucket component of the pattern covers *bucket_name*."""
        return self.is_valid() and wildcard.matches(self.bucket_name, bucket_name)

    def to_json(self) -> str:
        return RESOURCE_ARN_PREFIX + self.pattern

    def __str__(self) -> str:
        return self.to_json()


class ResourceSet:
    """An immutable set of :class:`Resource` patterns."""

    __slots__ = ("_resources",)

    def __init__(self, resources: Iterable[Resource] = ()) -> None:
        self._resources: frozenset[Resource] = frozenset(resources)

    @classmethod
    def from_json(
        cls,
        raw: object,
        variables: tuple[ConditionKey, ...] = COMMON_KEYS,
    ) -> ResourceSet:
        """Parse a single pattern or an array of unique patterns."""
        texts = [raw] if isinstance(raw, str) else raw
        if not isinstance(texts, list):
            raise PolicyParseError(f"resource must be a string or an array; got {raw!r}")
        resources: list[Resource] = []
        for text in texts:
            if not isinstance(text, str):
                raise PolicyParseError(f"resource must be a string; got {text!r}")
            resource = Resource.parse(text, variables)
            if resource in resources:
                raise PolicyParseError(f"duplicate resource found '{text}'")
            resources.append(resource)
        return cls(resources)

    def to_json(self) -> list[str]:
        return [r.to_json() for r in sorted(self._resources)]

    def is_match(self, path: str, attrs: Mapping[str, Sequence[str]] = _EMPTY_ATTRS) -> bool:
        return any(r.is_match(path, attrs) for r in self._resources)

    def match_resource(self, path: str) -> bool:
        return any(r.match_resource(path) for r in self._resources)

    def bucket_resource_exists(self) -> bool:
        return any(r.is_bucket_pattern() for r in self._resources)

    def object_resource_exists(self) -> bool:
        return any(r.is_object_pattern() for r in self._resources)

    def intersection(self, other: ResourceSet) -> ResourceSet:
        return ResourceSet(self._resources & other._resources)

    def __iter__(self) -> Iterator[Resource]:
        return iter(sorted(self._resources))

    def __len__(self) -> int:
        return len(self._resources)

    def __bool__(self) -> bool:
        return bool(self._resources)

    def __contains__(self, item: object) -> bool:
        return item in self._resources

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResourceSet):
            return NotImplemented
        return self._resources == other._resources

    def __hash__(self) -> int:
        return hash(self._resources)

    def __repr__(self) -> str:
        return f"ResourceSet({self.to_json()!r})"
