"""Tests for guidelint.rules.elm: Elm style matchers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from guidelint.core.registry import MatchContext
from guidelint.core.scanner import scan
from guidelint.rules.common import code_tokens
from guidelint.rules.elm import (
    annotations,
    check_decoder_module_type,
    check_decoder_naming,
    check_module_namespace,
    check_module_path,
    check_no_plural_decoder,
    check_port_documentation,
    module_header,
    resolve_namespace,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from guidelint.core.registry import Finding


def _run(matcher: Callable, source: str, context: MatchContext | None = None) -> list[Finding]:
    return list(matcher(scan(source, "elm"), context or MatchContext()))


# ---------------------------------------------------------------------------
# Structural helpers
# ---------------------------------------------------------------------------


class TestStructure:
    def test_module_header(self) -> None:
        header = module_header(code_tokens(scan("module Types.User exposing (User)", "elm")))
        assert header is not None
        assert header.name == "Types.User"
        assert header.type_name == "User"

    def test_port_module_header(self) -> None:
        header = module_header(scan("port module Ports exposing (..)", "elm"))
        assert header is not None
        assert header.name == "Ports"

    def test_no_header(self) -> None:
        assert module_header(scan("x = 1", "elm")) is None

    def test_multiline_annotation(self) -> None:
        source = "module A exposing (..)\n\nuserDecoder :\n    Decode.Decoder User\nuserDecoder =\n    x\n"
        found = list(annotations(code_tokens(scan(source, "elm"))))
        assert [a.name.text for a in found] == ["userDecoder"]
        assert found[0].is_decoder
        assert found[0].decoded_type == "User"
        assert not found[0].decodes_list

    def test_function_returning_decoder(self) -> None:
        source = "fieldDecoder : String -> Decoder (List a)\n"
        (annotation,) = annotations(code_tokens(scan(source, "elm")))
        assert annotation.is_decoder
        assert annotation.decodes_list
        assert annotation.decoded_type is None


# ---------------------------------------------------------------------------
# TestModuleNamespace
# ---------------------------------------------------------------------------


class TestModuleNamespace:
    def test_unknown_namespace(self) -> None:
        findings = _run(check_module_namespace, "module Helpers.Thing exposing (..)")
        assert len(findings) == 1
        assert (findings[0].line, findings[0].column) == (1, 8)
        assert "'Helpers.Thing'" in findings[0].message

    @pytest.mark.parametrize("name", ["Views.Home", "Api.Users.Get", "Main", "Ports"])
    def test_admitted_modules(self, name: str) -> None:
        assert _run(check_module_namespace, f"module {name} exposing (..)") == []

    def test_prefix_alone_is_not_admitted(self) -> None:
        assert len(_run(check_module_namespace, "module Views exposing (..)")) == 1

    def test_configured_prefixes(self) -> None:
        context = MatchContext(namespace_prefixes=("App.",), top_level_names=())
        findings = _run(check_module_namespace, "module Views.Home exposing (..)", context)
        assert len(findings) == 1
        assert "(App.)" in findings[0].message
        assert _run(check_module_namespace, "module App.Home exposing (..)", context) == []


class TestResolveNamespace:
    def test_longest_prefix_wins(self) -> None:
        prefixes = ("Api.", "Api.Users.")
        assert resolve_namespace("Api.Users.Get", prefixes, ()) == "Api.Users."
        assert resolve_namespace("Api.Orders", prefixes, ()) == "Api."

    def test_exact_top_level_name(self) -> None:
        assert resolve_namespace("Api", ("Api.",), ("Api",)) == "Api"

    def test_no_match(self) -> None:
        assert resolve_namespace("Helpers", ("Views.",), ("Main",)) is None


# ---------------------------------------------------------------------------
# TestModulePath
# ---------------------------------------------------------------------------


class TestModulePath:
    def test_matching_path(self) -> None:
        context = MatchContext(path="src/Views/Home.elm")
        assert _run(check_module_path, "module Views.Home exposing (..)", context) == []

    def test_mismatched_path(self) -> None:
        context = MatchContext(path="src/Pages/Home.elm")
        findings = _run(check_module_path, "module Views.Home exposing (..)", context)
        assert len(findings) == 1
        assert "'Views/Home.elm'" in findings[0].message

    def test_in_memory_source_skipped(self) -> None:
        assert _run(check_module_path, "module Views.Home exposing (..)") == []


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------


class TestDecoderNaming:
    def test_badly_named_decoders(self) -> None:
        source = (
            "module Types.User exposing (..)\n"
            "\n"
            "parseUser : Decoder User\n"
            "parseUser = x\n"
            "\n"
            "decodeThing : Json.Decode.Decoder Thing\n"
            "decodeThing = y\n"
        )
        findings = _run(check_decoder_naming, source)
        assert [(f.line, f.column) for f in findings] == [(3, 1), (6, 1)]
        assert "'parseUser'" in findings[0].message

    def test_conventional_names(self) -> None:
        source = (
            "decoder : Decoder User\n"
            "addressDecoder : Decoder Address\n"
            "fieldDecoder : String -> Decoder a\n"
            "parse : String -> Maybe User\n"
        )
        assert _run(check_decoder_naming, source) == []


class TestDecoderModuleType:
    def test_decoder_for_other_type(self) -> None:
        source = "module Types.User exposing (..)\n\ndecoder : Decoder Account\n"
        findings = _run(check_decoder_module_type, source)
        assert [f.message for f in findings] == [
            "'decoder' in module 'Types.User' decodes 'Account'; "
            "name it 'accountDecoder' or decode 'User'"
        ]

    @pytest.mark.parametrize(
        "annotation",
        ["decoder : Decoder User", "decoder : D.Decoder Types.User", "decoder : Decoder a"],
    )
    def test_clean(self, annotation: str) -> None:
        source = f"module Types.User exposing (..)\n\n{annotation}\n"
        assert _run(check_decoder_module_type, source) == []


class TestNoPluralDecoder:
    def test_plural_list_decoder(self) -> None:
        source = "usersDecoder : Decoder (List User)\n"
        findings = _run(check_no_plural_decoder, source)
        assert [f.message for f in findings] == [
            "List decoder 'usersDecoder' should not be pluralised; use 'Decode.list userDecoder'"
        ]

    def test_singular_or_non_list(self) -> None:
        source = (
            "userDecoder : Decoder User\n"
            "statusDecoder : Decoder (List Status)\n"
            "settingsDecoder : Decoder Settings\n"
        )
        assert _run(check_no_plural_decoder, source) == []


# ---------------------------------------------------------------------------
# TestPortDocumentation
# ---------------------------------------------------------------------------


class TestPortDocumentation:
    def test_undocumented_port(self) -> None:
        source = (
            "port module Ports exposing (..)\n"
            "\n"
            "-- Send a message to JavaScript.\n"
            "port sendMessage : String -> Cmd msg\n"
            "\n"
            "port receive : (String -> msg) -> Sub msg\n"
        )
        findings = _run(check_port_documentation, source)
        assert len(findings) == 1
        assert (findings[0].line, findings[0].column) == (6, 1)
        assert "'receive'" in findings[0].message

    def test_block_doc_comment(self) -> None:
        source = "port module Ports exposing (..)\n\n{-| Outgoing.\n-}\nport out : String -> Cmd msg\n"
        assert _run(check_port_documentation, source) == []
