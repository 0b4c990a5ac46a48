"""Resolve error entries to human-readable messages."""

from __future__ import annotations

import logging
import re
from typing import Any

from ruleweave.errors.compiler import ErrorDocument, ErrorEntry
from ruleweave.errors.messages import DEFAULT_LOCALE, MessageTable, type_names
from ruleweave.exceptions import MessageTemplateError, MissingMessageError

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"%\{(\w+)\}")

MessageDocument = dict[Any, list[Any]]


def _render(value: Any) -> str:
    if isinstance(value, (list, tuple, set, frozenset)):
        return ", ".join(str(v) for v in value)
    return str(value)


def interpolation_values(entry: ErrorEntry) -> dict[str, Any]:
    """Collect placeholder values for an entry.

    ``name`` and ``value`` are always available; every bound predicate
    argument is available under its parameter name, and range arguments
    additionally expose inclusive ``left``/``right`` bounds.
    """
    values: dict[str, Any] = {"value": entry.value}
    for arg_name, arg in entry.args:
        values[arg_name] = arg
        if isinstance(arg, range):
            values["left"] = arg[0] if arg else arg.start
            values["right"] = arg[-1] if arg else arg.stop - 1
    values["name"] = entry.name
    return values


def interpolate(template: str, values: dict[str, Any]) -> str:
    """Fill ``%{placeholder}`` slots in *template*.

    Raises :class:`MessageTemplateError` for placeholders with no value.
    """

    def _sub(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in values:
            msg = f"Template {template!r} references unknown placeholder '{key}'"
            raise MessageTemplateError(msg)
        return _render(values[key])

    return _PLACEHOLDER_RE.sub(_sub, template)


class MessageResolver:
    """Map error entries to messages using a :class:`MessageTable`.

    *namespace* selects the override partition consulted before the default
    table.  When no template exists for the requested locale the resolver
    falls back to ``DEFAULT_LOCALE`` before giving up.
    """

    def __init__(
        self,
        table: MessageTable,
        *,
        namespace: str | None = None,
        locale: str = DEFAULT_LOCALE,
    ) -> None:
        self.table = table
        self.namespace = namespace
        self.locale = locale

    def template_for(self, entry: ErrorEntry, *, locale: str | None = None) -> str:
        """Return the raw template for *entry* without interpolation."""
        arg_values = entry.arg_values
        arg_types = type_names(arg_values[0]) if arg_values else ()
        rule = entry.name if isinstance(entry.name, str) else None

        locales = [locale or self.locale]
        if DEFAULT_LOCALE not in locales:
            locales.append(DEFAULT_LOCALE)

        for loc in locales:
            template = self.table.lookup(
                entry.predicate,
                namespace=self.namespace,
                rule=rule,
                arg_types=arg_types,
                val_types=type_names(entry.value),
                locale=loc,
            )
            if template is not None:
                if loc != locales[0]:
                    logger.debug(
                        "No '%s' message for %s, using '%s'", locales[0], entry.predicate, loc
                    )
                return template

        msg = (
            f"No message template for predicate '{entry.predicate}' "
            f"(rule={rule!r}, namespace={self.namespace!r}, locale={locales[0]!r})"
        )
        raise MissingMessageError(msg)

    def resolve(self, entry: ErrorEntry, *, locale: str | None = None) -> str:
        """Return the interpolated message for *entry*."""
        template = self.template_for(entry, locale=locale)
        return interpolate(template, interpolation_values(entry))

    def messages(self, document: ErrorDocument, *, locale: str | None = None) -> MessageDocument:
        """Return *document* with every entry replaced by its message."""
        rendered: MessageDocument = {}
        for key, items in document.items():
            rendered[key] = [
                self.resolve(item, locale=locale)
                if isinstance(item, ErrorEntry)
                else self.messages(item, locale=locale)
                for item in items
            ]
        return rendered
