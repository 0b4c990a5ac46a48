"""Configuration errors raised by the compiler, loaders, and message resolver.

Validation failures are never raised; they travel as ``Failure`` values.
Everything here signals that the validation setup itself is broken.
"""

from __future__ import annotations


class RuleweaveError(Exception):
    """Base class for all ruleweave errors."""


class ConfigurationError(RuleweaveError, ValueError):
    """Raised when schemas, predicates, or message tables are misconfigured."""


class UnknownPredicateError(ConfigurationError, KeyError):
    """Raised when a predicate id is not present in the registry."""

    def __init__(self, predicate_id: str) -> None:
        self.predicate_id = predicate_id
        super().__init__(f"Unknown predicate '{predicate_id}'")

    def __str__(self) -> str:
        # KeyError would otherwise render the message wrapped in quotes.
        return str(self.args[0])


class InvalidAstError(ConfigurationError):
    """Raised when an AST node has an unexpected shape."""


class MissingMessageError(ConfigurationError, LookupError):
    """Raised when no message template matches a failure."""


class MessageTemplateError(ConfigurationError):
    """Raised when a template references a placeholder with no value."""
