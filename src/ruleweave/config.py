"""Explicit, immutable configuration shared by the compiler and the resolver."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from ruleweave.errors.messages import DEFAULT_LOCALE, MessageTable, default_messages
from ruleweave.logic.predicates import PredicateRegistry, default_registry


@dataclass(frozen=True)
class SchemaConfig:
    """Predicates, message table, namespace, and locale for a schema.

    Build once before evaluation starts; derive variants with
    :meth:`with_namespace`, :meth:`with_messages` and friends rather than
    mutating an existing config.
    """

    predicates: PredicateRegistry = field(default_factory=default_registry)
    messages: MessageTable = field(default_factory=default_messages)
    namespace: str | None = None
    locale: str = DEFAULT_LOCALE

    @classmethod
    def default(cls) -> SchemaConfig:
        return cls()

    def with_namespace(self, namespace: str | None) -> SchemaConfig:
        return replace(self, namespace=namespace)

    def with_locale(self, locale: str) -> SchemaConfig:
        return replace(self, locale=locale)

    def with_messages(self, messages: MessageTable) -> SchemaConfig:
        """Return a config whose table is the current one overridden by *messages*."""
        return replace(self, messages=self.messages.merge(messages))

    def with_predicates(self, predicates: PredicateRegistry) -> SchemaConfig:
        return replace(self, predicates=predicates)
