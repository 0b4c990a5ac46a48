"""Tests for ruleweave.errors.compiler: error documents mirror input nesting."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ast_helpers import required, val

from ruleweave.errors.compiler import ErrorCompiler, ErrorEntry, error_document_to_dict
from ruleweave.logic.predicates import ABSENT
from ruleweave.logic.result import Failure, Success

if TYPE_CHECKING:
    from ruleweave.logic.compiler import RuleCompiler


def _missing(name: str) -> ErrorEntry:
    return ErrorEntry(name, "key?", (("name", name),), ABSENT, rule_type="key")


class TestLeafEntries:
    def test_success_contributes_nothing(self) -> None:
        assert ErrorCompiler().compile(Success({"age": 1}, "age", 1)) == {}

    def test_single_failure(self) -> None:
        failure = Failure({"age": 1}, "age", "gt?", (("num", 18),), 1)
        document = ErrorCompiler().compile(failure)
        assert document == {"age": [ErrorEntry("age", "gt?", (("num", 18),), 1)]}

    def test_failures_on_same_field_accumulate(self) -> None:
        results = [
            Failure({}, "age", "int?", (), "x"),
            Success({}, "name", "Jane"),
            Failure({}, "age", "gt?", (("num", 18),), "x"),
        ]
        document = ErrorCompiler().compile(results)
        assert [e.predicate for e in document["age"]] == ["int?", "gt?"]
        assert "name" not in document


class TestNestedDocuments:
    def test_missing_address(self, compiler: RuleCompiler, address_ast: list[Any]) -> None:
        result = compiler.compile(address_ast)({})
        assert ErrorCompiler().compile(result) == {"address": [_missing("address")]}

    def test_sibling_branches_are_all_kept(
        self, compiler: RuleCompiler, address_ast: list[Any]
    ) -> None:
        result = compiler.compile(address_ast)({"address": {"city": "NYC"}})
        assert ErrorCompiler().compile(result) == {
            "address": [{"street": [_missing("street")]}, {"country": [_missing("country")]}]
        }

    def test_two_levels_deep(self, compiler: RuleCompiler, address_ast: list[Any]) -> None:
        data = {"address": {"street": "Main", "city": "NYC", "country": {"name": "US"}}}
        document = ErrorCompiler().compile(compiler.compile(address_ast)(data))
        assert document == {"address": [{"country": [{"code": [_missing("code")]}]}]}

    def test_nested_value_failure(self, compiler: RuleCompiler, address_ast: list[Any]) -> None:
        data = {"address": {"street": "", "city": "NYC", "country": {"name": "US", "code": "us"}}}
        document = ErrorCompiler().compile(compiler.compile(address_ast)(data))
        assert document == {"address": [{"street": [ErrorEntry("street", "filled?", (), "")]}]}

    def test_each_failures_keyed_by_index(self, compiler: RuleCompiler) -> None:
        rule = compiler.compile(["each", ["phone_numbers", val(None, "str?")]])
        document = ErrorCompiler().compile(rule({"phone_numbers": ["123456789", 123456789]}))
        assert document == {
            "phone_numbers": [{1: [ErrorEntry("phone_numbers", "str?", (), 123456789)]}]
        }

    def test_each_of_sets(self, compiler: RuleCompiler) -> None:
        item = ["set", [None, [required("sku", val("sku", "str?"))]]]
        rule = compiler.compile(["each", ["items", item]])
        document = ErrorCompiler().compile(rule({"items": [{"sku": "a"}, {}, {"sku": 3}]}))
        assert document == {
            "items": [
                {
                    1: [{"sku": [_missing("sku")]}],
                    2: [{"sku": [ErrorEntry("sku", "str?", (), 3)]}],
                }
            ]
        }

    def test_shape_mismatch_is_an_ordinary_entry(self, compiler: RuleCompiler) -> None:
        rule = compiler.compile(["each", ["tags", val(None, "str?")]])
        document = ErrorCompiler().compile(rule({"tags": "red"}))
        assert document == {"tags": [ErrorEntry("tags", "array?", (), "red")]}


class TestSerialization:
    def test_entry_to_dict(self) -> None:
        entry = ErrorEntry("age", "size?", (("num", range(1, 4)),), ABSENT)
        assert entry.to_dict() == {
            "name": "age",
            "predicate": "size?",
            "args": {"num": "range(1, 4)"},
            "value": "ABSENT",
            "rule_type": "val",
        }

    def test_document_to_dict_stringifies_keys(self) -> None:
        entry = ErrorEntry("tags", "str?", (), 1)
        rendered = error_document_to_dict({"tags": [{0: [entry]}]})
        assert rendered == {"tags": [{"0": [entry.to_dict()]}]}

    def test_arg_values(self) -> None:
        entry = ErrorEntry("age", "gt?", (("num", 18),), 3)
        assert entry.arg_values == (18,)
