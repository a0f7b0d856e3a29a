"""Elm style rules: module namespaces, decoder naming, port documentation.

Elm's layout rule puts every top-level declaration at column 1, so the
token stream is split into declarations wherever a token starts a line at
column 1.  Type annotations (``name : Type``) are read from those groups;
definitions without an annotation are invisible to the decoder rules.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import TYPE_CHECKING

from guidelint.core.registry import Finding, Rule, advisory
from guidelint.rules.common import code_tokens, is_plural, paren_depths, singularize

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from guidelint.core.registry import MatchContext
    from guidelint.core.tokens import Token

logger = logging.getLogger(__name__)

_FIELD_DECODER_RE = re.compile(r"^[a-z][A-Za-z0-9_]*Decoder$")


# ---------------------------------------------------------------------------
# Structural helpers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ModuleHeader:
    name: str
    token: Token

    @property
    def type_name(self) -> str:
        """Last segment of the module name, e.g. ``User`` for ``Types.User``."""
        return self.name.rsplit(".", 1)[-1]


@dataclass(frozen=True)
class Annotation:
    """A top-level ``name : Type`` signature."""

    name: Token
    type_tokens: tuple[Token, ...]

    @property
    def result(self) -> tuple[Token, ...]:
        """Type tokens after the last top-level arrow."""
        depths = paren_depths(self.type_tokens)
        start = 0
        for idx, tok in enumerate(self.type_tokens):
            if depths[idx] == 0 and tok.kind == "operator" and tok.text == "->":
                start = idx + 1
        return self.type_tokens[start:]

    @property
    def is_decoder(self) -> bool:
        result = self.result
        if not result:
            return False
        head = result[0].text
        return result[0].kind == "identifier" and (head == "Decoder" or head.endswith(".Decoder"))

    @property
    def decoded_type(self) -> str | None:
        """Unqualified name of the type a decoder produces, when simple."""
        result = self.result
        if len(result) < 2 or result[1].kind != "identifier":
            return None
        return result[1].text.rsplit(".", 1)[-1]

    @property
    def decodes_list(self) -> bool:
        return any(
            tok.kind == "identifier" and (tok.text == "List" or tok.text.endswith(".List"))
            for tok in self.result[1:]
        )


def top_level_groups(code: Sequence[Token]) -> list[list[Token]]:
    """Split tokens into top-level declarations (each starts at column 1)."""
    groups: list[list[Token]] = []
    for tok in code:
        if tok.column == 1 or not groups:
            groups.append([tok])
        else:
            groups[-1].append(tok)
    return groups


def module_header(code: Sequence[Token]) -> ModuleHeader | None:
    """Find ``[port | effect] module Name exposing (..)``."""
    for idx, tok in enumerate(code[:3]):
        if tok.kind == "keyword" and tok.text == "module":
            if idx + 1 < len(code) and code[idx + 1].kind == "identifier":
                name_tok = code[idx + 1]
                return ModuleHeader(name=name_tok.text, token=name_tok)
            return None
    return None


def annotations(code: Sequence[Token]) -> Iterator[Annotation]:
    for group in top_level_groups(code):
        if (
            len(group) >= 2
            and group[0].kind == "identifier"
            and group[0].text[:1].islower()
            and group[1].kind == "operator"
            and group[1].text == ":"
        ):
            yield Annotation(name=group[0], type_tokens=tuple(group[2:]))


def resolve_namespace(
    module_name: str, prefixes: Sequence[str], top_level_names: Sequence[str]
) -> str | None:
    """Return the namespace entry that admits *module_name*, or None.

    When several entries match, the longest wins.  An approved top-level
    name equal to the whole module name is always the longest match.
    """
    candidates = [name for name in top_level_names if name == module_name]
    candidates += [
        prefix
        for prefix in prefixes
        if module_name.startswith(prefix) and len(module_name) > len(prefix)
    ]
    if not candidates:
        return None
    return max(candidates, key=len)


def _lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


# ---------------------------------------------------------------------------
# Matchers
# ---------------------------------------------------------------------------


def check_module_namespace(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    header = module_header(code_tokens(tokens))
    if header is None:
        return
    match = resolve_namespace(header.name, context.namespace_prefixes, context.top_level_names)
    if match is not None:
        logger.debug("Module %s admitted by namespace entry %r", header.name, match)
        return
    prefixes = ", ".join(context.namespace_prefixes) or "none"
    yield Finding(
        line=header.token.line,
        column=header.token.column,
        message=(
            f"Module '{header.name}' must live under one of the namespaces "
            f"({prefixes}) or be an approved top-level module"
        ),
    )


def check_module_path(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    """The module name matches the trailing segments of its file path.

    ``src/Views/Home.elm`` must declare ``Views.Home``.  Skipped when the
    file has no path (in-memory input) or no module header.
    """
    if not context.path.endswith(".elm"):
        return
    header = module_header(code_tokens(tokens))
    if header is None:
        return
    segments = header.name.split(".")
    path_parts = list(PurePath(context.path.replace("\\", "/")).with_suffix("").parts)
    if path_parts[-len(segments) :] == segments:
        return
    expected_path = "/".join(segments) + ".elm"
    yield Finding(
        line=header.token.line,
        column=header.token.column,
        message=f"Module '{header.name}' should be defined in a file ending with '{expected_path}'",
    )


def check_decoder_naming(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    for annotation in annotations(code_tokens(tokens)):
        if not annotation.is_decoder:
            continue
        name = annotation.name.text
        if name == "decoder" or _FIELD_DECODER_RE.match(name):
            continue
        yield Finding(
            line=annotation.name.line,
            column=annotation.name.column,
            message=f"Decoder '{name}' should be named 'decoder' or '<field>Decoder'",
        )


def check_decoder_module_type(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    """A function called ``decoder`` decodes the type its module is named after.

    Only simple result types (``Decoder User``, ``Decoder Types.User``) are
    compared; parenthesised or type-variable results are not reported.
    """
    code = code_tokens(tokens)
    header = module_header(code)
    if header is None:
        return
    for annotation in annotations(code):
        if annotation.name.text != "decoder" or not annotation.is_decoder:
            continue
        decoded = annotation.decoded_type
        if decoded is None or not decoded[:1].isupper() or decoded == header.type_name:
            continue
        yield Finding(
            line=annotation.name.line,
            column=annotation.name.column,
            message=(
                f"'decoder' in module '{header.name}' decodes '{decoded}'; "
                f"name it '{_lower_first(decoded)}Decoder' or decode '{header.type_name}'"
            ),
        )


def check_no_plural_decoder(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    """List decoders keep the singular name: ``Decode.list userDecoder``.

    Reports ``<plural>Decoder`` annotated with a ``List`` result.  Plural
    detection is suffix-based, see :func:`guidelint.rules.common.is_plural`.
    """
    for annotation in annotations(code_tokens(tokens)):
        name = annotation.name.text
        if not (annotation.is_decoder and name.endswith("Decoder")):
            continue
        stem = name[: -len("Decoder")]
        if not stem or not annotation.decodes_list or not is_plural(stem):
            continue
        yield Finding(
            line=annotation.name.line,
            column=annotation.name.column,
            message=(
                f"List decoder '{name}' should not be pluralised; "
                f"use 'Decode.list {singularize(stem)}Decoder'"
            ),
        )


def check_port_documentation(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    """Every ``port`` declaration is directly preceded by a comment."""
    for idx, tok in enumerate(tokens):
        if not (tok.kind == "keyword" and tok.text == "port" and tok.column == 1):
            continue
        nxt = tokens[idx + 1] if idx + 1 < len(tokens) else None
        if nxt is None or nxt.kind != "identifier":
            # `port module Foo` header.
            continue
        if idx > 0 and tokens[idx - 1].kind == "comment":
            continue
        yield Finding(
            line=tok.line,
            column=tok.column,
            message=f"Port '{nxt.text}' should be preceded by a comment documenting it",
        )


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

ELM_RULES: tuple[Rule, ...] = (
    Rule(
        id="elm-module-namespace",
        language="elm",
        description="Modules live under an approved namespace prefix or are approved top-level modules.",
        matcher=check_module_namespace,
    ),
    Rule(
        id="elm-module-path",
        language="elm",
        description="The module name matches the file path.",
        severity="warning",
        matcher=check_module_path,
    ),
    Rule(
        id="elm-decoder-naming",
        language="elm",
        description="Decoders are named 'decoder' or '<field>Decoder'.",
        matcher=check_decoder_naming,
    ),
    Rule(
        id="elm-decoder-module-type",
        language="elm",
        description="A function named 'decoder' decodes the type its module is named after.",
        severity="warning",
        matcher=check_decoder_module_type,
    ),
    Rule(
        id="elm-no-plural-decoder",
        language="elm",
        description="List decoders are not pluralised; compose 'Decode.list' with the singular decoder.",
        matcher=check_no_plural_decoder,
    ),
    Rule(
        id="elm-port-documentation",
        language="elm",
        description="Ports are documented with a preceding comment.",
        severity="warning",
        matcher=check_port_documentation,
    ),
    advisory(
        "elm-prefer-case-of",
        "elm",
        "Prefer 'case .. of' over 'if' chains; a judgement call, not checked.",
    ),
    advisory(
        "elm-small-let",
        "elm",
        "Refactor when let-bindings grow too large; a judgement call, not checked.",
    ),
)
