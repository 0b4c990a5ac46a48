"""Tests for ruleweave.errors.resolver: templates to messages."""

from __future__ import annotations

import pytest

from ruleweave.errors.compiler import ErrorEntry
from ruleweave.errors.messages import MessageTable, default_messages
from ruleweave.errors.resolver import MessageResolver, interpolate, interpolation_values
from ruleweave.exceptions import ConfigurationError, MessageTemplateError, MissingMessageError
from ruleweave.logic.predicates import ABSENT


@pytest.fixture()
def resolver() -> MessageResolver:
    return MessageResolver(default_messages())


class TestInterpolate:
    def test_named_placeholders(self) -> None:
        assert interpolate("must be greater than %{num}", {"num": 18}) == (
            "must be greater than 18"
        )

    def test_list_values_are_joined(self) -> None:
        assert interpolate("one of: %{list}", {"list": ("a", "b")}) == "one of: a, b"

    def test_text_without_placeholders(self) -> None:
        assert interpolate("is missing", {}) == "is missing"

    def test_unknown_placeholder_raises(self) -> None:
        with pytest.raises(MessageTemplateError, match="'max'"):
            interpolate("at most %{max}", {"num": 3})

    def test_range_bounds_are_inclusive(self) -> None:
        entry = ErrorEntry("code", "size?", (("num", range(2, 5)),), "a")
        values = interpolation_values(entry)
        assert values["left"] == 2
        assert values["right"] == 4
        assert values["name"] == "code"
        assert values["value"] == "a"

    def test_empty_range_bounds(self) -> None:
        entry = ErrorEntry("code", "size?", (("num", range(3, 3)),), "ab")
        values = interpolation_values(entry)
        assert values["left"] == 3
        assert values["right"] == 2


class TestResolve:
    def test_simple_message(self, resolver: MessageResolver) -> None:
        entry = ErrorEntry("age", "gt?", (("num", 18),), 10)
        assert resolver.resolve(entry) == "must be greater than 18"

    def test_key_missing(self, resolver: MessageResolver) -> None:
        entry = ErrorEntry("age", "key?", (("name", "age"),), ABSENT, rule_type="key")
        assert resolver.resolve(entry) == "is missing"

    def test_inclusion_list(self, resolver: MessageResolver) -> None:
        entry = ErrorEntry("role", "inclusion?", (("list", ("admin", "user")),), "root")
        assert resolver.resolve(entry) == "must be one of: admin, user"

    @pytest.mark.parametrize(
        ("num", "value", "expected"),
        [
            (3, [1], "size must be 3"),
            (range(1, 4), [], "size must be within 1 - 3"),
            (3, "ab", "length must be 3"),
            (range(1, 4), "", "length must be within 1 - 3"),
        ],
    )
    def test_size_by_argument_and_value_type(
        self, resolver: MessageResolver, num: object, value: object, expected: str
    ) -> None:
        entry = ErrorEntry("code", "size?", (("num", num),), value)
        assert resolver.resolve(entry) == expected

    def test_empty_range_message(self, resolver: MessageResolver) -> None:
        entry = ErrorEntry("code", "size?", (("num", range(3, 3)),), "ab")
        assert resolver.resolve(entry) == "length must be within 3 - 2"

    def test_missing_template(self, resolver: MessageResolver) -> None:
        entry = ErrorEntry("age", "adult?", (), 10)
        with pytest.raises(MissingMessageError, match="adult\\?"):
            resolver.resolve(entry)

    def test_missing_template_is_configuration_error(self, resolver: MessageResolver) -> None:
        with pytest.raises(ConfigurationError):
            resolver.resolve(ErrorEntry("age", "adult?", (), 10))

    def test_bad_placeholder_in_custom_template(self) -> None:
        table = MessageTable.from_dict({"en": {"errors": {"gt?": "above %{limit}"}}})
        entry = ErrorEntry("age", "gt?", (("num", 18),), 10)
        with pytest.raises(MessageTemplateError):
            MessageResolver(table).resolve(entry)

    def test_field_name_placeholder(self) -> None:
        table = MessageTable.from_dict({"en": {"errors": {"filled?": "%{name} is required"}}})
        entry = ErrorEntry("email", "filled?", (), "")
        assert MessageResolver(table).resolve(entry) == "email is required"


class TestNamespaceAndLocale:
    @pytest.fixture()
    def table(self) -> MessageTable:
        return default_messages().merge(
            MessageTable.from_dict(
                {
                    "en": {
                        "errors": {"user": {"rules": {"age": {"filled?": "user age is required"}}}}
                    },
                    "fr": {"errors": {"filled?": "doit être rempli"}},
                }
            )
        )

    def test_namespace_preferred(self, table: MessageTable) -> None:
        entry = ErrorEntry("age", "filled?", (), None)
        assert MessageResolver(table, namespace="user").resolve(entry) == "user age is required"
        assert MessageResolver(table).resolve(entry) == "must be filled"

    def test_requested_locale(self, table: MessageTable) -> None:
        entry = ErrorEntry("age", "filled?", (), None)
        assert MessageResolver(table, locale="fr").resolve(entry) == "doit être rempli"
        assert MessageResolver(table).resolve(entry, locale="fr") == "doit être rempli"

    def test_falls_back_to_english(self, table: MessageTable) -> None:
        entry = ErrorEntry("age", "int?", (), "x")
        assert MessageResolver(table, locale="fr").resolve(entry) == "must be an integer"

    def test_no_fallback_table_raises(self) -> None:
        table = MessageTable.from_dict({"fr": {"errors": {"filled?": "doit être rempli"}}})
        entry = ErrorEntry("age", "int?", (), "x")
        with pytest.raises(MissingMessageError, match="'fr'"):
            MessageResolver(table, locale="fr").resolve(entry)


class TestMessageDocuments:
    def test_nested_document(self, resolver: MessageResolver) -> None:
        document = {
            "age": [ErrorEntry("age", "gt?", (("num", 18),), 10)],
            "address": [
                {"street": [ErrorEntry("street", "key?", (("name", "street"),), ABSENT)]},
                {"country": [ErrorEntry("country", "key?", (("name", "country"),), ABSENT)]},
            ],
            "phone_numbers": [{1: [ErrorEntry("phone_numbers", "str?", (), 123)]}],
        }
        assert resolver.messages(document) == {
            "age": ["must be greater than 18"],
            "address": [{"street": ["is missing"]}, {"country": ["is missing"]}],
            "phone_numbers": [{1: ["must be a string"]}],
        }

    def test_empty_document(self, resolver: MessageResolver) -> None:
        assert resolver.messages({}) == {}
