"""Shared test fixtures for Ruleweave."""

from __future__ import annotations

from typing import Any

import pytest
from ast_helpers import CallCounter, pred, required

from ruleweave.logic.compiler import RuleCompiler
from ruleweave.logic.predicates import Predicate, PredicateRegistry, default_registry


@pytest.fixture()
def registry() -> PredicateRegistry:
    """Provide the standard predicate registry."""
    return default_registry()


@pytest.fixture()
def compiler(registry: PredicateRegistry) -> RuleCompiler:
    """Provide a compiler bound to the standard registry."""
    return RuleCompiler(registry)


@pytest.fixture()
def counter() -> CallCounter:
    return CallCounter(outcome=True)


@pytest.fixture()
def counting_registry(registry: PredicateRegistry, counter: CallCounter) -> PredicateRegistry:
    """Standard registry plus ``counted?``, which records every call."""
    return registry.with_predicates(Predicate.from_function("counted?", counter))


@pytest.fixture()
def address_ast() -> list[Any]:
    """Schema for ``{address: {street, city, country: {name, code}}}``."""
    country = required(
        "country",
        [
            "set",
            [
                "country",
                [
                    required("name", ["val", ["name", pred("filled?")]]),
                    required("code", ["val", ["code", pred("filled?")]]),
                ],
            ],
        ],
    )
    return required(
        "address",
        [
            "set",
            [
                "address",
                [
                    required("street", ["val", ["street", pred("filled?")]]),
                    required("city", ["val", ["city", pred("filled?")]]),
                    country,
                ],
            ],
        ],
    )
