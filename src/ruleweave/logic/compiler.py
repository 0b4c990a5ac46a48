"""Compile nested-list ASTs into rule graphs.

Node shapes (tag first, payload second)::

    ["predicate", [id, args]]
    ["key", [name, predicate_node]]
    ["val", [name, predicate_node]]
    ["set", [name, [node, ...]]]
    ["each", [name, node]]        # or ["each", [node]] to iterate the input itself
    ["and" | "or" | "implication", [left, right]]

Tuples are accepted wherever lists are.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from ruleweave.exceptions import InvalidAstError, UnknownPredicateError
from ruleweave.logic.predicates import Predicate
from ruleweave.logic.rules import (
    COMPOSITES,
    EachRule,
    KeyRule,
    Rule,
    SetRule,
    ValueRule,
    freeze_args,
)

logger = logging.getLogger(__name__)

RULE_TAGS: frozenset[str] = frozenset({"key", "val", "set", "each", *COMPOSITES})
NODE_TAGS: frozenset[str] = RULE_TAGS | {"predicate"}


def _is_node(value: Any) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) == 2
        and isinstance(value[0], str)
        and value[0] in NODE_TAGS
    )


def _unpack(node: Any) -> tuple[str, Any]:
    if not isinstance(node, (list, tuple)) or len(node) != 2:
        msg = f"AST node must be a [tag, payload] pair, got {node!r}"
        raise InvalidAstError(msg)
    tag, payload = node
    if not isinstance(tag, str):
        msg = f"AST node tag must be a string, got {tag!r}"
        raise InvalidAstError(msg)
    return tag, payload


def _pair(tag: str, payload: Any) -> tuple[Any, Any]:
    if not isinstance(payload, (list, tuple)) or len(payload) != 2:
        msg = f"'{tag}' node payload must have exactly two elements, got {payload!r}"
        raise InvalidAstError(msg)
    return payload[0], payload[1]


def _check_name(tag: str, name: Any, *, allow_none: bool) -> None:
    if name is None and allow_none:
        return
    if not isinstance(name, (str, int)) or isinstance(name, bool):
        msg = f"'{tag}' node name must be a string or integer, got {name!r}"
        raise InvalidAstError(msg)


def _check_pattern(pattern: Any) -> None:
    if isinstance(pattern, re.Pattern):
        return
    try:
        re.compile(pattern)
    except (re.error, TypeError) as exc:
        msg = f"Predicate 'format?' got an invalid regular expression {pattern!r}: {exc}"
        raise InvalidAstError(msg) from exc


class RuleCompiler:
    """Turn AST nodes into rule objects using a predicate registry.

    The compiler only builds the graph; it never calls a predicate.  Unknown
    predicate ids raise :class:`~ruleweave.exceptions.UnknownPredicateError`
    and malformed nodes raise :class:`~ruleweave.exceptions.InvalidAstError`.
    """

    def __init__(self, predicates: Mapping[str, Predicate]) -> None:
        self._predicates = predicates

    def compile(self, node: Any) -> Rule:
        """Compile a single rule node."""
        tag, payload = _unpack(node)

        if tag in COMPOSITES:
            left, right = _pair(tag, payload)
            return COMPOSITES[tag](self.compile(left), self.compile(right))
        if tag == "key":
            name, predicate_node = _pair(tag, payload)
            _check_name(tag, name, allow_none=False)
            predicate, args = self._visit_predicate(predicate_node, implicit=1)
            return KeyRule(name, predicate, args)
        if tag == "val":
            name, predicate_node = _pair(tag, payload)
            _check_name(tag, name, allow_none=True)
            predicate, args = self._visit_predicate(predicate_node)
            return ValueRule(name, predicate, args)
        if tag == "each":
            return self._visit_each(payload)
        if tag == "set":
            name, nodes = _pair(tag, payload)
            _check_name(tag, name, allow_none=True)
            single = _is_node(nodes)
            if single:
                nodes = [nodes]
            if not isinstance(nodes, (list, tuple)) or not nodes:
                msg = f"'set' node for {name!r} must hold a non-empty list of rule nodes"
                raise InvalidAstError(msg)
            return SetRule(name, tuple(self.compile(n) for n in nodes), single=single)
        if tag == "predicate":
            msg = "A bare 'predicate' node must be wrapped in a 'key' or 'val' node"
            raise InvalidAstError(msg)

        msg = f"Unknown AST node tag '{tag}', expected one of {sorted(NODE_TAGS)}"
        raise InvalidAstError(msg)

    def compile_all(self, nodes: Iterable[Any]) -> list[Rule]:
        """Compile a list of top-level rule nodes."""
        rules = [self.compile(node) for node in nodes]
        logger.debug("Compiled %d top-level rules", len(rules))
        return rules

    def _visit_each(self, payload: Any) -> EachRule:
        if isinstance(payload, (list, tuple)) and len(payload) == 1:
            return EachRule(None, self.compile(payload[0]))
        name, node = _pair("each", payload)
        _check_name("each", name, allow_none=True)
        return EachRule(name, self.compile(node))

    def _visit_predicate(
        self, node: Any, *, implicit: int = 0
    ) -> tuple[Predicate, tuple[Any, ...]]:
        tag, payload = _unpack(node)
        if tag != "predicate":
            msg = f"Expected a 'predicate' node, got '{tag}'"
            raise InvalidAstError(msg)
        predicate_id, args = _pair(tag, payload)
        if not isinstance(args, (list, tuple)):
            msg = f"Arguments of predicate '{predicate_id}' must be a list, got {args!r}"
            raise InvalidAstError(msg)

        if not isinstance(predicate_id, str) or predicate_id not in self._predicates:
            raise UnknownPredicateError(str(predicate_id))
        predicate = self._predicates[predicate_id]
        expected = predicate.arity - implicit
        if expected < 0:
            msg = f"Predicate '{predicate_id}' does not accept a key name and cannot check presence"
            raise InvalidAstError(msg)
        if len(args) != expected:
            msg = (
                f"Predicate '{predicate_id}' takes {expected} bound argument(s), "
                f"got {len(args)}"
            )
            raise InvalidAstError(msg)
        if predicate_id == "format?" and args:
            _check_pattern(args[0])
        return predicate, freeze_args(args)


def compile_rules(nodes: Iterable[Any], predicates: Mapping[str, Predicate]) -> list[Rule]:
    """Compile *nodes* against *predicates* in one call."""
    return RuleCompiler(predicates).compile_all(nodes)
