"""The ``Condition`` block of a statement: a conjunction of functions."""
from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import TYPE_CHECKING

from s3_iam_policy.condition.functions import ConditionFunction, new_function
from s3_iam_policy.condition.keys import COMMON_KEYS, ConditionKey, is_valid_key
from s3_iam_policy.condition.names import Name, is_valid_name
from s3_iam_policy.condition.values import ValueSet
from s3_iam_policy.errors import PolicyParseError

if TYPE_CHECKING:
    from s3_iam_policy.policies.catalog import PolicyCatalog


class Functions:
    """An unordered collection of condition functions, all of which must hold.

    An empty collection always evaluates to True.

    Example
    -------
    ::

        conditions = Functions.from_json(
            {"IpAddress": {"aws:SourceIp": "192.168.1.0/24"}}
        )
        assert conditions.evaluate({"SourceIp": ["192.168.1.7"]})
    """

    __slots__ = ("_functions",)

    def __init__(self, functions: Iterable[ConditionFunction] = ()) -> None:
        unique: list[ConditionFunction] = []
        for function in functions:
            if function not in unique:
                unique.append(function)
        self._functions: tuple[ConditionFunction, ...] = tuple(unique)

    # ------------------------------------------------------------------
    # Parsing / serialization
    # ------------------------------------------------------------------

    @classmethod
    def from_json(
        cls,
        raw: object,
        catalog: PolicyCatalog | None = None,
    ) -> Functions:
        """Parse a ``Condition`` object of the form ``{"Op": {"key": values}}``.

        Parameters
        ----------
        raw:
            The decoded JSON value of the ``Condition`` field.
        catalog:
            Optional catalog restricting operator names and keys.  Defaults
            to the built-in vocabulary.

        Raises
        ------
        PolicyParseError
            On an empty block, an unknown operator or key, or bad operands.
        """
        if not isinstance(raw, Mapping):
            raise PolicyParseError(f"condition must be an object; got {raw!r}")
        if not raw:
            raise PolicyParseError("condition must not be empty")

        variables: tuple[ConditionKey, ...] = catalog.common_keys if catalog else COMMON_KEYS
        functions: list[ConditionFunction] = []
        for operator_name, entries in raw.items():
            if not _name_allowed(str(operator_name), catalog):
                raise PolicyParseError(f"invalid condition name '{operator_name}'")
            if not isinstance(entries, Mapping) or not entries:
                raise PolicyParseError(
                    f"condition '{operator_name}' must map keys to values; got {entries!r}"
                )
            for key_name, raw_values in entries.items():
                if not _key_allowed(str(key_name), catalog):
                    raise PolicyParseError(f"invalid condition key '{key_name}'")
                values = ValueSet.from_json(raw_values)
                functions.append(
                    new_function(operator_name, ConditionKey(str(key_name)), values, variables)
                )
        return cls(functions)

    def to_json(self) -> dict[str, dict[str, list[str | int | bool]]]:
        """Return the ``Condition`` object, grouping functions by operator."""
        result: dict[str, dict[str, list[str | int | bool]]] = {}
        for function in sorted(self._functions, key=_sort_key):
            key, values = function.to_wire()
            result.setdefault(function.name.value, {})[key.name] = values.to_json()
        return result

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate(self, attrs: Mapping[str, Sequence[str]]) -> bool:
        """Return True if every function holds for *attrs*."""
        return all(function.evaluate(attrs) for function in self._functions)

    def keys(self) -> frozenset[ConditionKey]:
        """Return the set of condition keys tested by the functions."""
        return frozenset(function.key for function in self._functions)

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[ConditionFunction]:
        return iter(self._functions)

    def __len__(self) -> int:
        return len(self._functions)

    def __bool__(self) -> bool:
        return bool(self._functions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Functions):
            return NotImplemented
        return frozenset(self._functions) == frozenset(other._functions)

    def __hash__(self) -> int:
        return hash(frozenset(self._functions))

    def __repr__(self) -> str:
        return f"Functions({[str(f) for f in self._functions]!r})"


def _sort_key(function: ConditionFunction) -> tuple[str, str]:
    return (function.name.value, function.key.name)


def _name_allowed(name: str, catalog: PolicyCatalog | None) -> bool:
    if catalog is None:
        return is_valid_name(name)
    return is_valid_name(name) and Name(name) in catalog.condition_names


def _key_allowed(name: str, catalog: PolicyCatalog | None) -> bool:
    if catalog is None:
        return is_valid_key(name)
    return ConditionKey(name) in catalog.condition_keys
