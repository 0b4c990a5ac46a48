"""Message table: templates keyed by locale, namespace, rule, predicate, and type axes.

Message files are YAML mappings of this shape::

    en:
      errors:
        filled?: "must be filled"
        size?:
          arg:
            default: "size must be %{num}"
            range: "size must be within %{left} - %{right}"
          value:
            string:
              arg:
                default: "length must be %{num}"
                range: "length must be within %{left} - %{right}"
        rules:
          age:
            filled?: "age is required"
        user:                      # namespace
          rules:
            age:
              filled?: "user age is required"

Keys ending in ``?`` are predicates, ``rules`` holds per-field overrides and
any other mapping under ``errors`` is a namespace holding the same layout.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time
from decimal import Decimal
from importlib import resources
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import yaml

from ruleweave.exceptions import ConfigurationError
from ruleweave.logic.predicates import ABSENT

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"

# (locale, namespace, rule, predicate, val_type, arg_type)
MessageKey = tuple[str, str | None, str | None, str, str | None, str | None]

# Ordered most specific first so subclasses win over their bases.
_TYPE_NAMES: tuple[tuple[type | tuple[type, ...], str], ...] = (
    (bool, "bool"),
    (int, "integer"),
    (float, "float"),
    (Decimal, "decimal"),
    (str, "string"),
    (datetime, "date_time"),
    (date, "date"),
    (time, "time"),
    (range, "range"),
    (Mapping, "hash"),
    ((list, tuple), "array"),
    ((set, frozenset), "set"),
)


def type_names(value: Any) -> tuple[str, ...]:
    """Return the message type names matching *value*, most specific first."""
    if value is None:
        return ("nil",)
    if value is ABSENT:
        return ("absent",)
    return tuple(name for cls, name in _TYPE_NAMES if isinstance(value, cls))


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------


class MessageTable:
    """Immutable index of message templates.

    Build it with :meth:`from_dict`, :func:`load_messages` or
    :func:`default_messages`; combine tables with :meth:`merge`.
    """

    def __init__(self, entries: Mapping[MessageKey, str] | None = None) -> None:
        self._entries: Mapping[MessageKey, str] = MappingProxyType(dict(entries or {}))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MessageTable):
            return NotImplemented
        return dict(self._entries) == dict(other._entries)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"MessageTable({len(self._entries)} templates, locales={sorted(self.locales)})"

    @property
    def locales(self) -> frozenset[str]:
        return frozenset(key[0] for key in self._entries)

    @property
    def namespaces(self) -> frozenset[str]:
        return frozenset(key[1] for key in self._entries if key[1] is not None)

    @classmethod
    def from_dict(cls, data: Any) -> MessageTable:
        """Index a ``{locale: {"errors": {...}}}`` mapping.

        Raises :class:`ConfigurationError` for malformed structures.
        """
        if not isinstance(data, Mapping):
            msg = "messages: top level must be a mapping of locales"
            raise ConfigurationError(msg)

        entries: dict[MessageKey, str] = {}
        for locale, locale_data in data.items():
            if not isinstance(locale_data, Mapping) or not isinstance(
                locale_data.get("errors"), Mapping
            ):
                msg = f"messages: locale '{locale}' must contain an 'errors' mapping"
                raise ConfigurationError(msg)
            _index_errors(entries, str(locale), locale_data["errors"], namespace=None)
        return cls(entries)

    def merge(self, other: MessageTable) -> MessageTable:
        """Return a new table where *other*'s templates override this one's."""
        return MessageTable({**self._entries, **other._entries})

    def get(self, key: MessageKey) -> str | None:
        return self._entries.get(key)

    def lookup(
        self,
        predicate: str,
        *,
        namespace: str | None = None,
        rule: str | None = None,
        arg_types: Iterable[str] = (),
        val_types: Iterable[str] = (),
        locale: str = DEFAULT_LOCALE,
    ) -> str | None:
        """Find the most specific template for a failure, or ``None``.

        Precedence, first match wins:

        1. namespace + rule + predicate + value type
        2. namespace + rule + predicate + argument type
        3. namespace + rule + predicate
        4. rule + predicate (value and argument type refinements first)
        5. namespace + predicate + value type
        6. namespace + predicate + argument type
        7. namespace + predicate
        8. predicate + value type
        9. predicate + argument type
        10. predicate
        """
        arg_types = tuple(arg_types)
        val_types = tuple(val_types)
        for key in self._candidates(
            predicate, namespace, rule, arg_types, val_types, locale
        ):
            template = self._entries.get(key)
            if template is not None:
                return template
        return None

    @staticmethod
    def _candidates(
        predicate: str,
        namespace: str | None,
        rule: str | None,
        arg_types: tuple[str, ...],
        val_types: tuple[str, ...],
        locale: str,
    ) -> Iterable[MessageKey]:
        def typed(ns: str | None, rule_name: str | None) -> Iterable[MessageKey]:
            # A value-type entry may refine itself by argument type.
            for vt in val_types:
                for at in arg_types:
                    yield (locale, ns, rule_name, predicate, vt, at)
                yield (locale, ns, rule_name, predicate, vt, None)
            for at in arg_types:
                yield (locale, ns, rule_name, predicate, None, at)

        if namespace is not None and rule is not None:
            yield from typed(namespace, rule)
            yield (locale, namespace, rule, predicate, None, None)
        if rule is not None:
            yield from typed(None, rule)
            yield (locale, None, rule, predicate, None, None)
        if namespace is not None:
            yield from typed(namespace, None)
            yield (locale, namespace, None, predicate, None, None)
        yield from typed(None, None)
        yield (locale, None, None, predicate, None, None)


# ---------------------------------------------------------------------------
# YAML indexing
# ---------------------------------------------------------------------------


def _index_errors(
    entries: dict[MessageKey, str],
    locale: str,
    errors: Mapping[str, Any],
    *,
    namespace: str | None,
) -> None:
    for key, value in errors.items():
        key = str(key)
        if key.endswith("?"):
            _index_predicate(entries, (locale, namespace, None, key), value)
        elif key == "rules":
            if not isinstance(value, Mapping):
                msg = f"messages: 'rules' in locale '{locale}' must be a mapping"
                raise ConfigurationError(msg)
            for rule_name, predicates in value.items():
                if not isinstance(predicates, Mapping):
                    msg = f"messages: rule '{rule_name}' must map predicates to templates"
                    raise ConfigurationError(msg)
                for predicate, template in predicates.items():
                    _index_predicate(
                        entries, (locale, namespace, str(rule_name), str(predicate)), template
                    )
        elif namespace is None and isinstance(value, Mapping):
            _index_errors(entries, locale, value, namespace=key)
        else:
            msg = f"messages: unexpected key '{key}' in locale '{locale}'"
            raise ConfigurationError(msg)


def _index_predicate(
    entries: dict[MessageKey, str],
    prefix: tuple[str, str | None, str | None, str],
    value: Any,
    *,
    val_type: str | None = None,
) -> None:
    locale, namespace, rule, predicate = prefix
    if isinstance(value, str):
        entries[(locale, namespace, rule, predicate, val_type, None)] = value
        return
    if not isinstance(value, Mapping):
        msg = f"messages: template for '{predicate}' must be a string or mapping"
        raise ConfigurationError(msg)

    for section, body in value.items():
        if section == "text" and isinstance(body, str):
            entries[(locale, namespace, rule, predicate, val_type, None)] = body
        elif section == "arg" and isinstance(body, Mapping):
            for arg_type, template in body.items():
                if not isinstance(template, str):
                    msg = f"messages: '{predicate}' arg.{arg_type} must be a string"
                    raise ConfigurationError(msg)
                at = None if arg_type == "default" else str(arg_type)
                entries[(locale, namespace, rule, predicate, val_type, at)] = template
        elif section == "value" and isinstance(body, Mapping) and val_type is None:
            for vt, nested in body.items():
                _index_predicate(entries, prefix, nested, val_type=str(vt))
        else:
            msg = f"messages: unexpected section '{section}' under '{predicate}'"
            raise ConfigurationError(msg)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_messages(path: Path) -> MessageTable:
    """Load a message table from a YAML file.

    Raises :class:`ConfigurationError` when the file cannot be read or parsed.
    """
    try:
        with path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Cannot load messages from {path}: {exc}"
        raise ConfigurationError(msg) from exc

    table = MessageTable.from_dict(data)
    logger.debug("Loaded %d message templates from %s", len(table), path)
    return table


def default_messages() -> MessageTable:
    """Return the bundled English message table."""
    text = resources.files("ruleweave.errors").joinpath("messages.yml").read_text("utf-8")
    return MessageTable.from_dict(yaml.safe_load(text))
