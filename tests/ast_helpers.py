"""AST-building helpers shared by the test modules."""

from __future__ import annotations

from typing import Any


def pred(predicate_id: str, *args: Any) -> list[Any]:
    """Build a ``predicate`` AST node."""
    return ["predicate", [predicate_id, list(args)]]


def required(name: str, *node: Any) -> list[Any]:
    """``key?`` on *name* followed by *node*, the usual shape of a required field."""
    return ["and", [["key", [name, pred("key?")]], *node]]


def val(name: str | None, predicate_id: str, *args: Any) -> list[Any]:
    """Build a ``val`` node with a single predicate."""
    return ["val", [name, pred(predicate_id, *args)]]


class CallCounter:
    """A predicate function that records how often it was called."""

    def __init__(self, outcome: bool = True) -> None:
        self.outcome = outcome
        self.calls: list[Any] = []

    def __call__(self, input: Any) -> bool:
        self.calls.append(input)
        return self.outcome
