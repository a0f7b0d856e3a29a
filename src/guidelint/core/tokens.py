"""Token and source-file data model shared by the scanner and the rule matchers."""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

TOKEN_KINDS: frozenset[str] = frozenset(
    {
        "keyword",
        "identifier",
        "string",
        "number",
        "operator",
        "punctuation",
        "comment",
        "unknown",
    }
)

EXTENSION_LANGUAGES: dict[str, str] = {
    ".sql": "sql",
    ".elm": "elm",
}

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Token:
    """A coarse lexical unit with its 1-based source position."""

    kind: str  # one of TOKEN_KINDS
    text: str  # verbatim source text, case preserved
    line: int
    column: int

    @property
    def upper(self) -> str:
        return self.text.upper()

    def is_keyword(self, *words: str) -> bool:
        """Case-insensitive keyword test; with no *words* any keyword matches."""
        if self.kind != "keyword":
            return False
        return not words or self.text.upper() in words

    def is_punct(self, text: str) -> bool:
        return self.kind == "punctuation" and self.text == text


@dataclass(frozen=True)
class SourceFile:
    """One input file after scanning."""

    path: str
    language: str
    text: str
    tokens: tuple[Token, ...] = field(default=(), repr=False)


def language_for_path(path: str) -> str:
    """Classify *path* by extension; unknown extensions map to the bare suffix."""
    dot = path.rfind(".")
    slash = max(path.rfind("/"), path.rfind("\\"))
    if dot <= slash:
        return ""
    suffix = path[dot:].lower()
    return EXTENSION_LANGUAGES.get(suffix, suffix.lstrip("."))
