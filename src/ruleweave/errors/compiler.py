"""Turn failing results into a nested error document.

The document mirrors the nesting of the validated input::

    {"age": [ErrorEntry(...)],
     "address": [{"street": [ErrorEntry(...)]}, {"country": [ErrorEntry(...)]}],
     "tags": [{1: [ErrorEntry(...)]}]}

Leaf failures become :class:`ErrorEntry` values, ``set`` failures become one
nested document per failing nested rule, and ``each`` failures become a
single document keyed by the indexes of the failing elements.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Union

from ruleweave.logic.predicates import ABSENT
from ruleweave.logic.result import Failure, FieldName, Result

ErrorDocument = dict[FieldName, list[Union["ErrorEntry", "ErrorDocument"]]]


@dataclass(frozen=True)
class ErrorEntry:
    """A single predicate failure against a field."""

    name: FieldName
    predicate: str
    args: tuple[tuple[str, Any], ...]
    value: Any
    rule_type: str = "val"

    @property
    def arg_values(self) -> tuple[Any, ...]:
        return tuple(value for _, value in self.args)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation."""
        return {
            "name": self.name,
            "predicate": self.predicate,
            "args": {arg_name: _jsonable(v) for arg_name, v in self.args},
            "value": _jsonable(self.value),
            "rule_type": self.rule_type,
        }


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    return repr(value) if value is ABSENT else str(value)


class ErrorCompiler:
    """Walk failing results and build an :data:`ErrorDocument`."""

    def compile(self, results: Result | Iterable[Result]) -> ErrorDocument:
        """Compile one result or several top-level results into one document.

        Successes contribute nothing; failures against the same field are
        appended in evaluation order.
        """
        if not isinstance(results, Iterable):
            results = [results]  # type: ignore[list-item]

        document: ErrorDocument = {}
        for result in results:
            if isinstance(result, Failure):
                document.setdefault(result.name, []).extend(self._entries(result, result.name))
        return document

    def _entries(self, failure: Failure, name: FieldName) -> list[Any]:
        """Return what goes in the list under the failure's own key."""
        if failure.kind == "each":
            by_index: ErrorDocument = {}
            for index, child in failure.children:
                by_index.setdefault(index, []).extend(self._entries(child, name))
            return [by_index]

        if failure.kind == "set":
            nested: list[Any] = []
            for child_name, child in failure.children:
                key = child_name if child_name is not None else name
                nested.append({key: self._entries(child, key)})
            return nested

        return [
            ErrorEntry(
                name=failure.name if failure.name is not None else name,
                predicate=str(failure.predicate),
                args=failure.args,
                value=failure.value,
                rule_type=failure.kind,
            )
        ]


def error_document_to_dict(document: ErrorDocument) -> dict[str, Any]:
    """Render a document with plain dicts so it can be dumped as JSON."""
    rendered: dict[str, Any] = {}
    for key, items in document.items():
        rendered[str(key)] = [
            item.to_dict() if isinstance(item, ErrorEntry) else error_document_to_dict(item)
            for item in items
        ]
    return rendered
