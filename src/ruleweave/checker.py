"""Check orchestrator: load schema and input files, validate, format results."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import yaml

from ruleweave.errors.compiler import error_document_to_dict
from ruleweave.errors.messages import load_messages
from ruleweave.exceptions import ConfigurationError
from ruleweave.schema import Schema, load_schema

if TYPE_CHECKING:
    from pathlib import Path

    from ruleweave.errors.compiler import ErrorDocument
    from ruleweave.errors.resolver import MessageDocument


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CheckError(Exception):
    """Raised when a check cannot run because of a configuration problem."""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class CheckResult:
    """Result of a check run."""

    input_path: str
    errors: ErrorDocument = field(default_factory=dict)
    messages: MessageDocument = field(default_factory=dict)
    rules_evaluated: int = 0
    elapsed_ms: float = 0.0

    @property
    def valid(self) -> bool:
        return not self.errors


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def load_input(input_path: Path) -> Any:
    """Read a JSON (``.json``) or YAML input document."""
    text = input_path.read_text(encoding="utf-8")
    if input_path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def check(
    schema_path: Path,
    input_path: Path,
    *,
    namespace: str | None = None,
    locale: str | None = None,
    messages_path: Path | None = None,
) -> CheckResult:
    """Validate one input file against a schema file.

    Parameters
    ----------
    schema_path:
        YAML schema file (see :func:`ruleweave.schema.load_schema`).
    input_path:
        JSON or YAML document to validate.
    namespace:
        Optional message namespace, overriding the schema's own.
    locale:
        Optional locale for messages, overriding the schema's own.
    messages_path:
        Optional extra message file applied on top of everything else.

    Raises
    ------
    CheckError
        When the schema, messages, or input cannot be loaded, or a message
        template is missing.
    """
    start = time.monotonic()

    try:
        schema = load_schema(schema_path)
    except ConfigurationError as exc:
        msg = f"Invalid schema: {exc}"
        raise CheckError(msg) from exc

    config = schema.config
    if namespace is not None:
        config = config.with_namespace(namespace)
    if locale is not None:
        config = config.with_locale(locale)
    if messages_path is not None:
        try:
            config = config.with_messages(load_messages(messages_path))
        except ConfigurationError as exc:
            msg = f"Invalid messages: {exc}"
            raise CheckError(msg) from exc

    try:
        data = load_input(input_path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        msg = f"Cannot read input {input_path}: {exc}"
        raise CheckError(msg) from exc

    schema = Schema(schema.rules, config)
    result = schema(data)

    try:
        messages = result.messages()
    except ConfigurationError as exc:
        msg = f"Invalid messages: {exc}"
        raise CheckError(msg) from exc

    elapsed = (time.monotonic() - start) * 1000
    return CheckResult(
        input_path=str(input_path),
        errors=result.errors,
        messages=messages,
        rules_evaluated=len(schema.rules),
        elapsed_ms=elapsed,
    )


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def _flatten(messages: MessageDocument, prefix: str = "") -> list[tuple[str, str]]:
    """Flatten nested messages into ``(dotted.path, message)`` pairs."""
    pairs: list[tuple[str, str]] = []
    for key, items in messages.items():
        if key is None:
            path = prefix
        else:
            path = f"{prefix}.{key}" if prefix else str(key)
        for item in items:
            if isinstance(item, dict):
                pairs.extend(_flatten(item, path))
            else:
                pairs.append((path, str(item)))
    return pairs


def format_rich(result: CheckResult) -> str:
    """Format a CheckResult as human-readable text.

    Example output with errors::

        Input: user.json (2 rules evaluated)

        ✗ age: must be greater than 18
        ✗ address.street: is missing

        2 errors found (0.1s)
    """
    lines: list[str] = [
        f"Input: {result.input_path} ({result.rules_evaluated} rules evaluated)",
        "",
    ]
    elapsed_str = f"{result.elapsed_ms / 1000:.1f}s"

    pairs = _flatten(result.messages)
    if pairs:
        for path, message in pairs:
            lines.append(f"✗ {path}: {message}")
        lines.append("")
        lines.append(f"{len(pairs)} errors found ({elapsed_str})")
    else:
        lines.append(f"✓ Input is valid ({elapsed_str})")

    return "\n".join(lines)


def format_json(result: CheckResult) -> str:
    """Format a CheckResult as structured JSON with ``errors``, ``messages`` and ``summary``."""
    output: dict[str, object] = {
        "errors": error_document_to_dict(result.errors),
        "messages": _stringify_keys(result.messages),
        "summary": {
            "input": result.input_path,
            "valid": result.valid,
            "rules_evaluated": result.rules_evaluated,
            "elapsed_ms": result.elapsed_ms,
        },
    }
    return json.dumps(output, indent=2, default=str)


def format_porcelain(result: CheckResult) -> str:
    """One TAB-separated ``path<TAB>message`` line per message."""
    return "\n".join(f"{path}\t{message}" for path, message in _flatten(result.messages))


def _stringify_keys(document: dict[Any, list[Any]]) -> dict[str, Any]:
    return {
        str(key): [_stringify_keys(i) if isinstance(i, dict) else i for i in items]
        for key, items in document.items()
    }

