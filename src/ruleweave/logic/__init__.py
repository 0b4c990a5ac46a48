"""Rule logic: predicates, results, rule objects, and the AST compiler."""

from ruleweave.logic.compiler import RuleCompiler, compile_rules
from ruleweave.logic.predicates import (
    ABSENT,
    STANDARD_PREDICATES,
    Predicate,
    PredicateRegistry,
    default_registry,
)
from ruleweave.logic.result import Failure, Result, Success
from ruleweave.logic.rules import (
    Conjunction,
    Disjunction,
    EachRule,
    Implication,
    KeyRule,
    Rule,
    SetRule,
    ValueRule,
)

__all__ = [
    "ABSENT",
    "STANDARD_PREDICATES",
    "Conjunction",
    "Disjunction",
    "EachRule",
    "Failure",
    "Implication",
    "KeyRule",
    "Predicate",
    "PredicateRegistry",
    "Result",
    "Rule",
    "RuleCompiler",
    "SetRule",
    "Success",
    "ValueRule",
    "compile_rules",
    "default_registry",
]
