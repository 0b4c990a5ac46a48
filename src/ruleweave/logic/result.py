"""Evaluation results and the AND / OR / implication algebra over them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ruleweave.logic.rules import Rule

FieldName = str | int | None


@dataclass(frozen=True)
class Success:
    """A rule passed.

    ``input`` is what the rule was called with, so a combinator can run the
    next rule against the same subject.
    """

    input: Any
    name: FieldName = None
    value: Any = None

    @property
    def success(self) -> bool:
        return True

    @property
    def failure(self) -> bool:
        return False

    def and_(self, rule: Rule) -> Result:
        return rule(self.input)

    def or_(self, rule: Rule) -> Result:
        return self

    def implies(self, rule: Rule) -> Result:
        return rule(self.input)

    def __gt__(self, rule: Rule) -> Result:
        return self.implies(rule)


@dataclass(frozen=True)
class Failure:
    """A rule failed.

    Leaf failures carry the predicate id, its named bound arguments, and the
    offending value.  Aggregated failures (``kind`` ``"each"`` or ``"set"``)
    have no predicate of their own; ``children`` holds the failing nested
    results keyed by element index (each) or field name (set).
    """

    input: Any
    name: FieldName
    predicate: str | None
    args: tuple[tuple[str, Any], ...] = ()
    value: Any = None
    kind: str = "val"
    children: tuple[tuple[FieldName, Failure], ...] = ()

    @property
    def success(self) -> bool:
        return False

    @property
    def failure(self) -> bool:
        return True

    def and_(self, rule: Rule) -> Result:
        return self

    def or_(self, rule: Rule) -> Result:
        return rule(self.input)

    def implies(self, rule: Rule) -> Result:
        # A false antecedent makes the implication vacuously true.
        return Success(self.input, self.name, self.value)

    def __gt__(self, rule: Rule) -> Result:
        return self.implies(rule)


Result = Success | Failure
