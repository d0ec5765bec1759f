"""Tests for devtools_codegen.naming — generated identifier derivation."""

from __future__ import annotations

import pytest

from devtools_codegen.naming import (
    apply_convention,
    camel_to_snake,
    class_name,
    entity_module_name,
    enum_member_identifiers,
    member_identifier,
    member_identifiers,
    module_name,
)
from devtools_codegen.types import NamingConvention


class TestCamelToSnake:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            pytest.param("getCookies", "get_cookies", id="lower-camel"),
            pytest.param("RemoteObject", "remote_object", id="upper-camel"),
            pytest.param("XMLHttpRequest", "xml_http_request", id="leading-acronym"),
            pytest.param("DOMDebugger", "dom_debugger", id="acronym-then-word"),
            pytest.param("already_snake", "already_snake", id="snake"),
        ],
    )
    def test_conversion(self, name: str, expected: str) -> None:
        assert camel_to_snake(name) == expected


class TestApplyConvention:
    @pytest.mark.parametrize(
        ("convention", "expected"),
        [
            pytest.param(NamingConvention.UPPER_CAMEL, "GetCookies", id="upper"),
            pytest.param(NamingConvention.LOWER_CAMEL, "getCookies", id="lower"),
            pytest.param(NamingConvention.SNAKE, "get_cookies", id="snake"),
            pytest.param(NamingConvention.PRESERVE, "getCookies", id="preserve"),
        ],
    )
    def test_conventions(self, convention: NamingConvention, expected: str) -> None:
        assert apply_convention("getCookies", convention) == expected

    def test_keyword_escaped(self) -> None:
        assert member_identifier("from", NamingConvention.SNAKE) == "from_"

    def test_leading_digit_escaped(self) -> None:
        assert apply_convention("3d", NamingConvention.SNAKE) == "_3d"

    def test_dashes_translated(self) -> None:
        assert apply_convention("no-referrer", NamingConvention.UPPER_CAMEL) == "NoReferrer"

    def test_empty_uses_fallback(self) -> None:
        assert apply_convention("--", NamingConvention.SNAKE, fallback="value") == "value"


class TestClassName:
    def test_suffix_joined_as_word(self) -> None:
        assert class_name("getCookies", NamingConvention.UPPER_CAMEL, "Result") == "GetCookiesResult"
        assert class_name("getCookies", NamingConvention.SNAKE, "Result") == "get_cookies_result"
        assert class_name("getCookies", NamingConvention.LOWER_CAMEL, "Params") == "getCookiesParams"

    def test_preserve_keeps_schema_spelling(self) -> None:
        assert class_name("getCookies", NamingConvention.PRESERVE, "Params") == "getCookiesParams"
        assert class_name("cookie", NamingConvention.PRESERVE) == "cookie"

    def test_names_differing_only_by_word_boundaries_fold_together(self) -> None:
        type_name = class_name("SetcookieParams", NamingConvention.UPPER_CAMEL)
        params_name = class_name("setCookie", NamingConvention.UPPER_CAMEL, "Params")
        assert type_name != params_name
        assert type_name.lower() == params_name.lower()


class TestModuleName:
    def test_domain_to_module(self) -> None:
        assert module_name("Network") == "network"
        assert module_name("DOMDebugger") == "dom_debugger"
        assert module_name("IndexedDB") == "indexed_db"

    def test_class_to_entity_module(self) -> None:
        assert entity_module_name("GetCookiesResult") == "get_cookies_result"
        assert entity_module_name("ConsoleApiCalledEvent") == "console_api_called_event"
        assert entity_module_name("get_cookies_result") == "get_cookies_result"


class TestMemberIdentifiers:
    def test_folding_names_disambiguated_in_order(self) -> None:
        names = ["fooBar", "foo_bar", "FooBar"]
        assert member_identifiers(names, NamingConvention.SNAKE) == ["foo_bar", "foo_bar_2", "foo_bar_3"]

    def test_distinct_names_unchanged(self) -> None:
        names = ["requestId", "from", "1x"]
        assert member_identifiers(names, NamingConvention.SNAKE) == ["request_id", "from_", "_1x"]

    def test_reserved_names_escaped(self) -> None:
        reserved = frozenset({"typing", "METHOD"})
        assert member_identifiers(["typing", "METHOD"], NamingConvention.PRESERVE, reserved) == [
            "typing_",
            "METHOD_",
        ]

    def test_escaped_name_still_disambiguated(self) -> None:
        reserved = frozenset({"typing"})
        assert member_identifiers(["typing", "typing_"], NamingConvention.SNAKE, reserved) == [
            "typing_",
            "typing__2",
        ]


class TestEnumMemberIdentifiers:
    def test_upper_snake(self) -> None:
        assert enum_member_identifiers(["Document", "XHR", "EventSource"]) == [
            "DOCUMENT",
            "XHR",
            "EVENT_SOURCE",
        ]

    def test_non_identifier_characters_translated(self) -> None:
        assert enum_member_identifiers(["no-referrer-when-downgrade", "a b"]) == [
            "NO_REFERRER_WHEN_DOWNGRADE",
            "A_B",
        ]

    def test_leading_digit_escaped(self) -> None:
        assert enum_member_identifiers(["1x", "2d"]) == ["_1X", "_2D"]

    def test_collisions_disambiguated_in_order(self) -> None:
        assert enum_member_identifiers(["fetch", "Fetch", "FETCH"]) == [
            "FETCH",
            "FETCH_2",
            "FETCH_3",
        ]

    def test_symbol_only_literal_uses_fallback(self) -> None:
        assert enum_member_identifiers(["*", "-"]) == ["VALUE", "VALUE_2"]

    def test_deterministic(self) -> None:
        values = ["Document", "document", "1x", "no-cors"]
        assert enum_member_identifiers(values) == enum_member_identifiers(values)
