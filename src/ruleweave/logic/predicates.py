"""Predicate objects, the predicate registry, and the standard predicate set."""

from __future__ import annotations

import inspect
import operator
import re
from collections.abc import Iterable, Iterator, Mapping, Sized
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Callable

from ruleweave.exceptions import ConfigurationError, UnknownPredicateError

PredicateFn = Callable[..., bool]


class _Absent:
    """Sentinel for a key that is not present in the input mapping."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "ABSENT"


ABSENT: Any = _Absent()


# ---------------------------------------------------------------------------
# Predicate objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Predicate:
    """A named boolean test over bound arguments plus a subject.

    The subject is always the last positional argument of ``fn``; every
    parameter before it is a bound argument whose name is exposed in
    ``arg_names`` for message interpolation.
    """

    id: str
    fn: PredicateFn
    arg_names: tuple[str, ...] = ()

    @classmethod
    def from_function(cls, predicate_id: str, fn: PredicateFn) -> Predicate:
        """Build a predicate, reading argument names from the signature of *fn*."""
        params = [
            p
            for p in inspect.signature(fn).parameters.values()
            if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
        ]
        if not params:
            msg = f"Predicate '{predicate_id}' must accept at least the subject argument"
            raise ConfigurationError(msg)
        return cls(id=predicate_id, fn=fn, arg_names=tuple(p.name for p in params[:-1]))

    @property
    def arity(self) -> int:
        """Number of bound arguments (the subject is not counted)."""
        return len(self.arg_names)

    def __call__(self, *args: Any) -> bool:
        return bool(self.fn(*args))

    def bind(self, args: tuple[Any, ...]) -> tuple[tuple[str, Any], ...]:
        """Pair bound argument values with their parameter names."""
        return tuple(zip(self.arg_names, args))


class PredicateRegistry(Mapping[str, Predicate]):
    """Read-only mapping from predicate id to :class:`Predicate`.

    Registries are never mutated; :meth:`with_predicates` returns a new one.
    """

    def __init__(self, predicates: Iterable[Predicate] = ()) -> None:
        self._predicates: Mapping[str, Predicate] = MappingProxyType(
            {p.id: p for p in predicates}
        )

    def __getitem__(self, predicate_id: str) -> Predicate:
        try:
            return self._predicates[predicate_id]
        except KeyError:
            raise UnknownPredicateError(predicate_id) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._predicates)

    def __len__(self) -> int:
        return len(self._predicates)

    def __repr__(self) -> str:
        return f"PredicateRegistry({sorted(self._predicates)!r})"

    def with_predicates(
        self, *predicates: Predicate, **functions: PredicateFn
    ) -> PredicateRegistry:
        """Return a new registry extended (or overridden) with extra predicates.

        Keyword functions are registered under their keyword with a trailing
        ``?`` appended when missing, so ``with_predicates(even=fn)`` adds
        ``even?``.
        """
        merged = dict(self._predicates)
        for predicate in predicates:
            merged[predicate.id] = predicate
        for name, fn in functions.items():
            predicate_id = name if name.endswith("?") else f"{name}?"
            merged[predicate_id] = Predicate.from_function(predicate_id, fn)
        return PredicateRegistry(merged.values())


# ---------------------------------------------------------------------------
# Standard predicates
# ---------------------------------------------------------------------------


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def key_p(name: Any, input: Any) -> bool:
    return isinstance(input, Mapping) and name in input


def none_p(input: Any) -> bool:
    return input is None


def empty_p(input: Any) -> bool:
    if input is None or input is ABSENT:
        return True
    if isinstance(input, (str, bytes, Mapping, list, tuple, set, frozenset)):
        return len(input) == 0
    return False


def filled_p(input: Any) -> bool:
    return not empty_p(input)


def bool_p(input: Any) -> bool:
    return isinstance(input, bool)


def int_p(input: Any) -> bool:
    return isinstance(input, int) and not isinstance(input, bool)


def float_p(input: Any) -> bool:
    return isinstance(input, float)


def decimal_p(input: Any) -> bool:
    return isinstance(input, Decimal)


def str_p(input: Any) -> bool:
    return isinstance(input, str)


def date_p(input: Any) -> bool:
    return isinstance(input, date)


def date_time_p(input: Any) -> bool:
    return isinstance(input, datetime)


def time_p(input: Any) -> bool:
    return isinstance(input, time)


def hash_p(input: Any) -> bool:
    return isinstance(input, Mapping)


def array_p(input: Any) -> bool:
    return _is_sequence(input)


def eql_p(left: Any, input: Any) -> bool:
    return bool(left == input)


def _compare(op: Callable[[Any, Any], Any], num: Any, input: Any) -> bool:
    """Apply *op* to ``(input, num)``; a missing or incomparable subject fails."""
    if input is ABSENT:
        return False
    try:
        return bool(op(input, num))
    except TypeError:
        return False


def gt_p(num: Any, input: Any) -> bool:
    return _compare(operator.gt, num, input)


def gteq_p(num: Any, input: Any) -> bool:
    return _compare(operator.ge, num, input)


def lt_p(num: Any, input: Any) -> bool:
    return _compare(operator.lt, num, input)


def lteq_p(num: Any, input: Any) -> bool:
    return _compare(operator.le, num, input)


def size_p(num: Any, input: Any) -> bool:
    if not isinstance(input, Sized):
        return False
    if isinstance(num, range):
        return len(input) in num
    return len(input) == num


def min_size_p(num: int, input: Any) -> bool:
    return isinstance(input, Sized) and len(input) >= num


def max_size_p(num: int, input: Any) -> bool:
    return isinstance(input, Sized) and len(input) <= num


def inclusion_p(list: Any, input: Any) -> bool:
    return input in list


def exclusion_p(list: Any, input: Any) -> bool:
    return input not in list


def format_p(regex: str | re.Pattern[str], input: Any) -> bool:
    if not isinstance(input, str):
        return False
    return re.search(regex, input) is not None


def true_p(input: Any) -> bool:
    return input is True


def false_p(input: Any) -> bool:
    return input is False


STANDARD_PREDICATES: dict[str, PredicateFn] = {
    "key?": key_p,
    "none?": none_p,
    "empty?": empty_p,
    "filled?": filled_p,
    "bool?": bool_p,
    "int?": int_p,
    "float?": float_p,
    "decimal?": decimal_p,
    "str?": str_p,
    "date?": date_p,
    "date_time?": date_time_p,
    "time?": time_p,
    "hash?": hash_p,
    "array?": array_p,
    "eql?": eql_p,
    "gt?": gt_p,
    "gteq?": gteq_p,
    "lt?": lt_p,
    "lteq?": lteq_p,
    "size?": size_p,
    "min_size?": min_size_p,
    "max_size?": max_size_p,
    "inclusion?": inclusion_p,
    "exclusion?": exclusion_p,
    "format?": format_p,
    "true?": true_p,
    "false?": false_p,
}


def default_registry() -> PredicateRegistry:
    """Return a registry holding the standard predicate set."""
    return PredicateRegistry(
        Predicate.from_function(pid, fn) for pid, fn in STANDARD_PREDICATES.items()
    )
