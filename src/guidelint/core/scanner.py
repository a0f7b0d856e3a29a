"""Minimal lexical scanners for SQL and Elm.

The scanners only split text into coarse tokens; they know nothing about
grammar.  They never raise: characters that fit no token class become
``unknown`` tokens so rules can still run on the recognisable rest of the file.
Whitespace is dropped once positions have been tracked.  Comments are kept so
rules can look for documentation next to a declaration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from guidelint.core.tokens import Token

if TYPE_CHECKING:
    from collections.abc import Callable

# ---------------------------------------------------------------------------
# Keyword tables
# ---------------------------------------------------------------------------

SQL_KEYWORDS: frozenset[str] = frozenset(
    {
        "ADD", "ALL", "ALTER", "AND", "ANY", "AS", "ASC", "BEGIN", "BETWEEN",
        "BY", "CASCADE", "CASE", "CAST", "CHECK", "COLUMN", "COMMIT",
        "CONFLICT", "CONSTRAINT", "CREATE", "CROSS", "CURRENT",
        "CURRENT_DATE", "CURRENT_TIMESTAMP", "DEFAULT", "DELETE", "DESC",
        "DISTINCT", "DO", "DROP", "ELSE", "END", "EXCEPT", "EXISTS", "FALSE",
        "FETCH", "FILTER", "FIRST", "FOLLOWING", "FOR", "FOREIGN", "FROM",
        "FULL", "FUNCTION", "GROUP", "GROUPS", "HAVING", "IF", "ILIKE", "IN",
        "INDEX", "INNER", "INSERT", "INTERSECT", "INTERVAL", "INTO", "IS",
        "JOIN", "KEY", "LAST", "LATERAL", "LEFT", "LIKE", "LIMIT", "LOCKED",
        "MATERIALIZED", "NATURAL", "NOT", "NOTHING", "NOWAIT", "NULL", "NULLS",
        "OF", "OFFSET", "ON", "ONLY", "OR", "ORDER", "OUTER", "OVER",
        "PARTITION", "PRECEDING", "PRIMARY", "QUALIFY", "RANGE", "RECURSIVE",
        "REFERENCES", "REPLACE", "RETURNING", "RETURNS", "RIGHT", "ROLLBACK",
        "ROW", "ROWS", "SELECT", "SET", "SHARE", "SKIP", "TABLE",
        "TABLESAMPLE", "TEMP", "TEMPORARY", "THEN", "TRUE", "TRUNCATE",
        "UNBOUNDED", "UNION", "UNIQUE", "UPDATE", "USING", "VALUES", "VIEW",
        "WHEN", "WHERE", "WINDOW", "WITH",
    }
)  # fmt: skip

ELM_KEYWORDS: frozenset[str] = frozenset(
    {
        "alias", "as", "case", "effect", "else", "exposing", "if", "import",
        "in", "infix", "let", "module", "of", "port", "then", "type", "where",
    }
)  # fmt: skip

_SQL_OPERATORS: tuple[str, ...] = (
    "->>", "<>", "!=", "<=", ">=", "||", "::", "->",
    "=", "<", ">", "+", "-", "*", "/", "%", "|", "&", "^", "~", "!", "@", "#", "?", ":",
)  # fmt: skip
_SQL_PUNCTUATION = frozenset("(),;.[]")

_ELM_SYMBOL_CHARS = frozenset("+-/*=.<>:&|^?%!\\")
_ELM_PUNCTUATION = frozenset("()[]{},`")


# ---------------------------------------------------------------------------
# Cursor
# ---------------------------------------------------------------------------


class _Cursor:
    """Walks normalised text and turns consumed spans into positioned tokens."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.line = 1
        self.line_start = 0
        self.tokens: list[Token] = []

    @property
    def done(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        return self.text[idx] if idx < len(self.text) else ""

    def startswith(self, prefix: str) -> bool:
        return self.text.startswith(prefix, self.pos)

    def emit(self, kind: str, end: int) -> None:
        """Emit ``text[pos:end]`` as a token of *kind* and advance past it."""
        end = max(end, self.pos + 1)
        end = min(end, len(self.text))
        chunk = self.text[self.pos : end]
        if kind:
            self.tokens.append(
                Token(kind=kind, text=chunk, line=self.line, column=self.pos - self.line_start + 1)
            )
        newlines = chunk.count("\n")
        if newlines:
            self.line += newlines
            self.line_start = self.pos + chunk.rfind("\n") + 1
        self.pos = end

    def skip(self, end: int) -> None:
        self.emit("", end)

    def find(self, needle: str, start: int) -> int:
        """Index just past *needle*, or end of text when it never appears."""
        idx = self.text.find(needle, start)
        return len(self.text) if idx < 0 else idx + len(needle)

    def number_end(self) -> int:
        text = self.text
        idx = self.pos
        if text.startswith(("0x", "0X"), idx):
            idx += 2
            while idx < len(text) and text[idx] in "0123456789abcdefABCDEF":
                idx += 1
            return idx
        while idx < len(text) and text[idx].isdigit():
            idx += 1
        if idx + 1 < len(text) and text[idx] == "." and text[idx + 1].isdigit():
            idx += 1
            while idx < len(text) and text[idx].isdigit():
                idx += 1
        if idx < len(text) and text[idx] in "eE":
            exp = idx + 1
            if exp < len(text) and text[exp] in "+-":
                exp += 1
            if exp < len(text) and text[exp].isdigit():
                idx = exp
                while idx < len(text) and text[idx].isdigit():
                    idx += 1
        return idx


def _quoted_end(text: str, start: int, quote: str, *, backslash: bool, doubled: bool) -> int:
    """End index (exclusive) of a quoted literal opening at *start*.

    Unterminated literals run to the end of the text.
    """
    idx = start + 1
    while idx < len(text):
        char = text[idx]
        if backslash and char == "\\":
            idx += 2
            continue
        if char == quote:
            if doubled and idx + 1 < len(text) and text[idx + 1] == quote:
                idx += 2
                continue
            return idx + 1
        if char == "\n" and quote == "'" and not doubled:
            # Elm char literals never span lines.
            return idx
        idx += 1
    return len(text)


# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------


def _dollar_tag(text: str, start: int) -> str | None:
    """Return the ``$tag$`` opener at *start* (PostgreSQL dollar quoting)."""
    if text[start] != "$":
        return None
    idx = start + 1
    while idx < len(text) and (text[idx].isalnum() or text[idx] == "_"):
        idx += 1
    if idx < len(text) and text[idx] == "$":
        tag = text[start : idx + 1]
        if len(tag) == 2 or not tag[1].isdigit():
            return tag
    return None


def _scan_sql(cur: _Cursor) -> None:
    text = cur.text
    while not cur.done:
        char = cur.peek()
        if char.isspace():
            cur.skip(cur.pos + 1)
        elif cur.startswith("--"):
            end = text.find("\n", cur.pos)
            cur.emit("comment", len(text) if end < 0 else end)
        elif cur.startswith("/*"):
            cur.emit("comment", cur.find("*/", cur.pos + 2))
        elif char == "'":
            cur.emit("string", _quoted_end(text, cur.pos, "'", backslash=False, doubled=True))
        elif char in "\"`":
            cur.emit("identifier", _quoted_end(text, cur.pos, char, backslash=False, doubled=True))
        elif char == "$" and (tag := _dollar_tag(text, cur.pos)) is not None:
            cur.emit("string", cur.find(tag, cur.pos + len(tag)))
        elif char == "$" and cur.peek(1).isdigit():
            # Positional parameter such as $1.
            end = cur.pos + 1
            while end < len(text) and text[end].isdigit():
                end += 1
            cur.emit("identifier", end)
        elif char.isdigit():
            cur.emit("number", cur.number_end())
        elif char.isalpha() or char == "_":
            end = _word_end(text, cur.pos)
            word = text[cur.pos : end]
            cur.emit("keyword" if word.upper() in SQL_KEYWORDS else "identifier", end)
        elif char in _SQL_PUNCTUATION:
            cur.emit("punctuation", cur.pos + 1)
        else:
            for op in _SQL_OPERATORS:
                if cur.startswith(op):
                    cur.emit("operator", cur.pos + len(op))
                    break
            else:
                cur.emit("unknown", cur.pos + 1)


# ---------------------------------------------------------------------------
# Elm
# ---------------------------------------------------------------------------


def _elm_block_comment_end(text: str, start: int) -> int:
    """End of a (possibly nested) ``{- ... -}`` comment opening at *start*."""
    depth = 0
    idx = start
    while idx < len(text):
        if text.startswith("{-", idx):
            depth += 1
            idx += 2
        elif text.startswith("-}", idx):
            depth -= 1
            idx += 2
            if depth == 0:
                return idx
        else:
            idx += 1
    return len(text)


def _elm_name_end(text: str, start: int) -> int:
    """End of a possibly qualified name such as ``Json.Decode.field``.

    Only segments that start upper-case may be followed by a ``.`` qualifier.
    """
    end = _word_end(text, start)
    while (
        text[start].isupper()
        and end + 1 < len(text)
        and text[end] == "."
        and (text[end + 1].isalpha())
    ):
        start = end + 1
        end = _word_end(text, start)
    return end


def _word_end(text: str, start: int) -> int:
    idx = start
    while idx < len(text) and (text[idx].isalnum() or text[idx] == "_"):
        idx += 1
    return idx


def _scan_elm(cur: _Cursor) -> None:
    text = cur.text
    while not cur.done:
        char = cur.peek()
        if char.isspace():
            cur.skip(cur.pos + 1)
        elif cur.startswith("--"):
            end = text.find("\n", cur.pos)
            cur.emit("comment", len(text) if end < 0 else end)
        elif cur.startswith("{-"):
            cur.emit("comment", _elm_block_comment_end(text, cur.pos))
        elif cur.startswith('"""'):
            cur.emit("string", cur.find('"""', cur.pos + 3))
        elif char == '"':
            cur.emit("string", _quoted_end(text, cur.pos, '"', backslash=True, doubled=False))
        elif char == "'":
            cur.emit("string", _quoted_end(text, cur.pos, "'", backslash=True, doubled=False))
        elif char.isdigit():
            cur.emit("number", cur.number_end())
        elif char.isalpha() or char == "_":
            end = _elm_name_end(text, cur.pos)
            word = text[cur.pos : end]
            cur.emit("keyword" if word in ELM_KEYWORDS else "identifier", end)
        elif char in _ELM_PUNCTUATION:
            cur.emit("punctuation", cur.pos + 1)
        elif char in _ELM_SYMBOL_CHARS:
            end = cur.pos
            while end < len(text) and text[end] in _ELM_SYMBOL_CHARS:
                end += 1
            cur.emit("operator", end)
        else:
            cur.emit("unknown", cur.pos + 1)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

_SCANNERS: dict[str, Callable[[_Cursor], None]] = {
    "sql": _scan_sql,
    "elm": _scan_elm,
}


def normalize_text(source: str | bytes) -> str:
    """Decode bytes as UTF-8 (replacing bad sequences) and unify line endings."""
    if isinstance(source, bytes):
        source = source.decode("utf-8", errors="replace")
    return source.replace("\r\n", "\n").replace("\r", "\n")


def scan(source: str | bytes, language: str) -> list[Token]:
    """Split *source* into tokens for *language*.

    Languages without a dedicated scanner fall back to the SQL scanner,
    which is generic enough to give positions for any C-like text.
    """
    cur = _Cursor(normalize_text(source))
    _SCANNERS.get(language, _scan_sql)(cur)
    return cur.tokens
