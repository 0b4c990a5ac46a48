"""Schema facade: compile top-level rules, evaluate input, report errors."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import yaml

from ruleweave.config import SchemaConfig
from ruleweave.errors.compiler import ErrorCompiler, ErrorDocument
from ruleweave.errors.messages import load_messages
from ruleweave.errors.resolver import MessageDocument, MessageResolver
from ruleweave.exceptions import ConfigurationError
from ruleweave.logic.compiler import RuleCompiler
from ruleweave.logic.result import Failure

if TYPE_CHECKING:
    from pathlib import Path

    from ruleweave.logic.result import Result
    from ruleweave.logic.rules import Rule

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMA_VERSIONS: frozenset[int] = frozenset({1})


@dataclass(frozen=True)
class SchemaResult:
    """Outcome of validating one input against a schema."""

    input: Any
    results: tuple[Result, ...]
    errors: ErrorDocument
    config: SchemaConfig = field(repr=False)

    @property
    def success(self) -> bool:
        return not self.errors

    @property
    def failure(self) -> bool:
        return bool(self.errors)

    def messages(self, *, locale: str | None = None) -> MessageDocument:
        """Return the error document rendered as messages."""
        resolver = MessageResolver(
            self.config.messages,
            namespace=self.config.namespace,
            locale=self.config.locale,
        )
        return resolver.messages(self.errors, locale=locale)


class Schema:
    """A list of independent top-level rules sharing one configuration.

    Every top-level rule is evaluated against the whole input, so failures
    on different fields are all reported.
    """

    def __init__(self, rules: Iterable[Rule], config: SchemaConfig | None = None) -> None:
        self.rules: tuple[Rule, ...] = tuple(rules)
        self.config = config or SchemaConfig.default()

    @classmethod
    def from_ast(cls, nodes: Sequence[Any], config: SchemaConfig | None = None) -> Schema:
        """Compile *nodes* with the predicates of *config*."""
        config = config or SchemaConfig.default()
        return cls(RuleCompiler(config.predicates).compile_all(nodes), config)

    def __call__(self, input: Any) -> SchemaResult:
        results = tuple(rule(input) for rule in self.rules)
        errors = ErrorCompiler().compile(results)
        failed = sum(1 for r in results if isinstance(r, Failure))
        logger.debug("Evaluated %d rules, %d failed", len(results), failed)
        return SchemaResult(input=input, results=results, errors=errors, config=self.config)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return self.rules == other.rules and self.config == other.config

    def __repr__(self) -> str:
        return f"Schema({len(self.rules)} rules, namespace={self.config.namespace!r})"

    def to_ast(self) -> list[Any]:
        return [rule.to_ast() for rule in self.rules]


# ---------------------------------------------------------------------------
# YAML schema files
# ---------------------------------------------------------------------------


def load_schema(schema_path: Path, config: SchemaConfig | None = None) -> Schema:
    """Parse a schema file and compile its rules.

    The file holds ``version``, ``rules`` (a list of AST nodes) and the
    optional ``namespace``, ``locale`` and ``messages`` keys; ``messages`` is
    a path relative to the schema file whose templates override those of
    *config*.

    Raises :class:`ConfigurationError` on schema errors.
    """
    try:
        with schema_path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Cannot read schema {schema_path}: {exc}"
        raise ConfigurationError(msg) from exc

    if not isinstance(data, dict):
        msg = f"{schema_path.name}: schema must be a YAML mapping"
        raise ConfigurationError(msg)

    version = data.get("version")
    if version is None:
        msg = f"{schema_path.name}: missing required 'version' field"
        raise ConfigurationError(msg)
    if version not in SUPPORTED_SCHEMA_VERSIONS:
        expected = sorted(SUPPORTED_SCHEMA_VERSIONS)
        msg = f"{schema_path.name}: unsupported version {version}, expected one of {expected}"
        raise ConfigurationError(msg)

    rules_data = data.get("rules")
    if not isinstance(rules_data, list):
        msg = f"{schema_path.name}: 'rules' must be a list of AST nodes"
        raise ConfigurationError(msg)

    config = config or SchemaConfig.default()

    namespace = data.get("namespace")
    if namespace is not None:
        if not isinstance(namespace, str) or not namespace.strip():
            msg = f"{schema_path.name}: 'namespace' must be a non-empty string"
            raise ConfigurationError(msg)
        config = config.with_namespace(namespace)

    locale = data.get("locale")
    if locale is not None:
        config = config.with_locale(str(locale))

    messages_ref = data.get("messages")
    if messages_ref is not None:
        messages_path = schema_path.parent / str(messages_ref)
        if messages_path.is_file():
            config = config.with_messages(load_messages(messages_path))
        else:
            logger.warning(
                "Messages file %s referenced by %s not found, using defaults",
                messages_path,
                schema_path.name,
            )

    schema = Schema.from_ast(rules_data, config)
    logger.debug("Loaded schema %s with %d rules", schema_path, len(schema.rules))
    return schema
