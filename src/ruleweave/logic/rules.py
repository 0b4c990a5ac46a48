"""Rule objects: leaf predicate checks and logical combinators.

A compiled rule graph is a tree of frozen dataclasses.  Calling a rule with
an input returns a :data:`~ruleweave.logic.result.Result`; ``to_ast()``
returns the nested-list form the compiler accepts.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from ruleweave.logic.predicates import ABSENT, Predicate
from ruleweave.logic.result import Failure, FieldName, Result, Success

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _fetch(input: Any, name: FieldName) -> Any:
    """Return the subject at *name*; ``None`` addresses the input itself."""
    if name is None:
        return input
    if isinstance(input, Mapping):
        return input.get(name, ABSENT)
    return ABSENT


def freeze_args(args: Any) -> tuple[Any, ...]:
    """Convert AST argument lists to nested tuples so rules stay immutable."""

    def _freeze(value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return tuple(_freeze(v) for v in value)
        return value

    return tuple(_freeze(a) for a in args)


def thaw_args(args: tuple[Any, ...]) -> list[Any]:
    """Inverse of :func:`freeze_args`: tuples back to serializable lists."""

    def _thaw(value: Any) -> Any:
        if isinstance(value, tuple):
            return [_thaw(v) for v in value]
        return value

    return [_thaw(a) for a in args]


def _predicate_ast(predicate: Predicate, args: tuple[Any, ...]) -> list[Any]:
    return ["predicate", [predicate.id, thaw_args(args)]]


class _Combinable:
    """Operator sugar shared by every rule: ``&``, ``|`` and ``>``."""

    def __and__(self, other: Rule) -> Conjunction:
        return Conjunction(self, other)  # type: ignore[arg-type]

    def __or__(self, other: Rule) -> Disjunction:
        return Disjunction(self, other)  # type: ignore[arg-type]

    def __gt__(self, other: Rule) -> Implication:
        return Implication(self, other)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Leaf rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=True)
class KeyRule(_Combinable):
    """Check that the input mapping contains ``name``.

    The key name is passed to the predicate after its own bound arguments,
    so ``key?`` is invoked as ``key?(name, input)``.
    """

    name: str
    predicate: Predicate
    args: tuple[Any, ...] = ()

    type: ClassVar[str] = "key"

    def __call__(self, input: Any) -> Result:
        call_args = (*self.args, self.name)
        if self.predicate(*call_args, input):
            return Success(input, self.name, _fetch(input, self.name))
        return Failure(
            input,
            self.name,
            self.predicate.id,
            self.predicate.bind(call_args),
            _fetch(input, self.name),
            kind=self.type,
        )

    def to_ast(self) -> list[Any]:
        return [self.type, [self.name, _predicate_ast(self.predicate, self.args)]]


@dataclass(frozen=True, eq=True)
class ValueRule(_Combinable):
    """Apply a predicate to the value stored at ``name``.

    A missing key yields :data:`ABSENT` as the subject; presence is the job
    of a preceding :class:`KeyRule`.
    """

    name: FieldName
    predicate: Predicate
    args: tuple[Any, ...] = ()

    type: ClassVar[str] = "val"

    def __call__(self, input: Any) -> Result:
        subject = _fetch(input, self.name)
        if self.predicate(*self.args, subject):
            return Success(input, self.name, subject)
        return Failure(
            input,
            self.name,
            self.predicate.id,
            self.predicate.bind(self.args),
            subject,
            kind=self.type,
        )

    def to_ast(self) -> list[Any]:
        return [self.type, [self.name, _predicate_ast(self.predicate, self.args)]]


@dataclass(frozen=True, eq=True)
class EachRule(_Combinable):
    """Apply ``rule`` to every element of the sequence at ``name``.

    Every element is evaluated; the result fails when at least one element
    fails and keeps the failures keyed by element index.  ``name=None``
    iterates the input itself.
    """

    name: FieldName
    rule: Rule

    type: ClassVar[str] = "each"

    def __call__(self, input: Any) -> Result:
        subject = _fetch(input, self.name)
        if not isinstance(subject, (list, tuple)):
            return Failure(input, self.name, "array?", (), subject)

        failures: list[tuple[FieldName, Failure]] = []
        for idx, element in enumerate(subject):
            result = self.rule(element)
            if isinstance(result, Failure):
                failures.append((idx, result))

        if failures:
            return Failure(
                input, self.name, None, (), subject, kind=self.type, children=tuple(failures)
            )
        return Success(input, self.name, subject)

    def to_ast(self) -> list[Any]:
        if self.name is None:
            return [self.type, [self.rule.to_ast()]]
        return [self.type, [self.name, self.rule.to_ast()]]


@dataclass(frozen=True, eq=True)
class SetRule(_Combinable):
    """Evaluate nested ``rules`` against the mapping at ``name``.

    Nested rules are independent: all of them run and every failing branch
    is kept.  ``name=None`` validates the input itself.  ``single`` marks a
    rule compiled from the one-node form ``["set", [name, node]]`` so that
    ``to_ast()`` gives that form back.
    """

    name: FieldName
    rules: tuple[Rule, ...]
    single: bool = False

    type: ClassVar[str] = "set"

    def __call__(self, input: Any) -> Result:
        subject = _fetch(input, self.name)
        if not isinstance(subject, Mapping):
            return Failure(input, self.name, "hash?", (), subject)

        failures: list[tuple[FieldName, Failure]] = []
        for rule in self.rules:
            result = rule(subject)
            if isinstance(result, Failure):
                failures.append((result.name, result))

        if failures:
            return Failure(
                input, self.name, None, (), subject, kind=self.type, children=tuple(failures)
            )
        return Success(input, self.name, subject)

    def to_ast(self) -> list[Any]:
        if self.single and len(self.rules) == 1:
            return [self.type, [self.name, self.rules[0].to_ast()]]
        return [self.type, [self.name, [rule.to_ast() for rule in self.rules]]]


# ---------------------------------------------------------------------------
# Composite rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True, eq=True)
class _Composite(_Combinable):
    left: Rule
    right: Rule

    type: ClassVar[str] = ""

    @property
    def name(self) -> FieldName:
        return self.left.name

    def to_ast(self) -> list[Any]:
        return [self.type, [self.left.to_ast(), self.right.to_ast()]]


@dataclass(frozen=True, eq=True)
class Conjunction(_Composite):
    """``left`` and then ``right``; ``right`` only runs when ``left`` passes."""

    type: ClassVar[str] = "and"

    def __call__(self, input: Any) -> Result:
        return self.left(input).and_(self.right)


@dataclass(frozen=True, eq=True)
class Disjunction(_Composite):
    """``left`` or else ``right``; ``right`` only runs when ``left`` fails."""

    type: ClassVar[str] = "or"

    def __call__(self, input: Any) -> Result:
        return self.left(input).or_(self.right)


@dataclass(frozen=True, eq=True)
class Implication(_Composite):
    """If ``left`` passes then ``right`` must pass; otherwise vacuously true."""

    type: ClassVar[str] = "implication"

    def __call__(self, input: Any) -> Result:
        return self.left(input) > self.right


Rule = KeyRule | ValueRule | EachRule | SetRule | Conjunction | Disjunction | Implication

COMPOSITES: dict[str, type[_Composite]] = {
    Conjunction.type: Conjunction,
    Disjunction.type: Disjunction,
    Implication.type: Implication,
}
