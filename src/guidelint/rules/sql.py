"""SQL style rules: keyword casing, explicit syntax, table and column naming.

Every matcher works on the flat token stream.  Where a convention needs
structure (which table a JOIN introduces, which columns a CREATE TABLE
declares) the matcher rebuilds just enough of it from parenthesis depth and
the nearest preceding keyword.  Each docstring states where that heuristic
over- or under-reports.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from guidelint.core.registry import Finding, Rule, advisory
from guidelint.rules.common import (
    SNAKE_CASE_RE,
    code_tokens,
    is_plural,
    paren_depths,
    singularize,
    unquote,
)

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from guidelint.core.registry import MatchContext
    from guidelint.core.tokens import Token

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_JOIN_QUALIFIERS = ("INNER", "LEFT", "RIGHT", "FULL", "CROSS", "OUTER", "NATURAL")
_ORDER_BY_END = (
    "LIMIT", "OFFSET", "FETCH", "FOR", "UNION", "EXCEPT", "INTERSECT", "RETURNING",
)  # fmt: skip
_WINDOW_FRAME_KEYWORDS = ("ROWS", "RANGE", "GROUPS")
_TABLE_MODIFIERS = ("LATERAL", "ONLY")
_ON_CLAUSE_END = (
    "WHERE", "GROUP", "ORDER", "HAVING", "LIMIT", "JOIN", "INNER", "LEFT", "RIGHT",
    "FULL", "CROSS", "NATURAL", "UNION", "EXCEPT", "INTERSECT", "RETURNING", "FOR",
    "WINDOW", "QUALIFY",
)  # fmt: skip
_TABLE_CONSTRAINT_KEYWORDS = ("PRIMARY", "FOREIGN", "UNIQUE", "CONSTRAINT", "CHECK")
_TABLE_CONSTRAINT_WORDS = frozenset({"EXCLUDE", "LIKE", "INDEX", "KEY"})
_KEYED_SUFFIXES = ("id", "version")

# Ordinary words that happen to end in "id" or "version".
_KEYED_LOOKALIKES = frozenset(
    {
        "acid", "aid", "guid", "uuid", "amid", "android", "avoid", "bid", "braid", "did", "druid",
        "fluid", "grid", "hid", "humid", "hybrid", "invalid", "kid", "laid",
        "lid", "lipid", "liquid", "maid", "paid", "prepaid", "raid", "rapid",
        "rid", "said", "skid", "solid", "squid", "timid", "unpaid", "valid",
        "vivid", "void", "aversion", "conversion", "diversion", "inversion",
        "perversion", "reversion", "subversion",
    }
)  # fmt: skip

# Acronyms that end in "id" without being foreign keys.
_KEYED_ACRONYMS = frozenset({"bssid", "ppid", "rfid", "ssid"})

_CAMEL_BOUNDARY_RE = re.compile(r"(?<!^)(?=[A-Z])")


# ---------------------------------------------------------------------------
# Structural helpers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ColumnDef:
    """One column definition inside ``CREATE TABLE ( ... )``."""

    name: Token
    tokens: tuple[Token, ...]

    @property
    def column_name(self) -> str:
        return unquote(self.name.text)


def _render(tokens: Sequence[Token]) -> str:
    text = " ".join(tok.text for tok in tokens)
    return text.replace(" . ", ".").replace("( ", "(").replace(" )", ")")


def _to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY_RE.sub("_", name).lower()


def read_qualified_name(code: Sequence[Token], start: int) -> tuple[list[Token], int]:
    """Read ``schema.table`` style names at *start*.

    Returns the name segments and the index just past them; the segment list
    is empty when no identifier starts at *start*.
    """
    parts: list[Token] = []
    idx = start
    while idx < len(code) and code[idx].kind == "identifier":
        parts.append(code[idx])
        idx += 1
        if idx + 1 < len(code) and code[idx].is_punct(".") and code[idx + 1].kind == "identifier":
            idx += 1
            continue
        break
    return parts, idx


def _matching_close(code: Sequence[Token], depths: Sequence[int], open_idx: int) -> int:
    depth = depths[open_idx]
    for idx in range(open_idx + 1, len(code)):
        if depths[idx] == depth and code[idx].is_punct(")"):
            return idx
    return len(code) - 1


def _is_column_start(tok: Token) -> bool:
    if tok.kind not in ("identifier", "keyword"):
        return False
    if tok.is_keyword(*_TABLE_CONSTRAINT_KEYWORDS):
        return False
    return tok.upper not in _TABLE_CONSTRAINT_WORDS


def create_tables(code: Sequence[Token]) -> Iterator[tuple[Token, list[ColumnDef]]]:
    """Yield ``(table name token, column definitions)`` per CREATE TABLE.

    Table-level constraints (PRIMARY KEY (...), FOREIGN KEY, UNIQUE,
    CONSTRAINT, CHECK, EXCLUDE, LIKE) are not columns and are left out.
    ``CREATE TABLE ... AS SELECT`` has no column list and yields nothing.
    """
    depths = paren_depths(code)
    for idx, tok in enumerate(code):
        if not tok.is_keyword("CREATE"):
            continue
        pos = idx + 1
        # CREATE [TEMP | TEMPORARY | UNLOGGED | GLOBAL TEMPORARY] TABLE
        while pos < len(code) and pos <= idx + 3 and not code[pos].is_keyword("TABLE"):
            pos += 1
        if pos >= len(code) or not code[pos].is_keyword("TABLE"):
            continue
        pos += 1
        if (
            pos + 2 < len(code)
            and code[pos].is_keyword("IF")
            and code[pos + 1].is_keyword("NOT")
            and code[pos + 2].is_keyword("EXISTS")
        ):
            pos += 3
        parts, pos = read_qualified_name(code, pos)
        if not parts or pos >= len(code) or not code[pos].is_punct("("):
            continue

        inner = depths[pos] + 1
        items: list[list[Token]] = [[]]
        for k in range(pos + 1, len(code)):
            if depths[k] < inner:
                break
            if depths[k] == inner and code[k].is_punct(","):
                items.append([])
                continue
            items[-1].append(code[k])

        columns = [
            ColumnDef(name=item[0], tokens=tuple(item))
            for item in items
            if item and _is_column_start(item[0])
        ]
        yield parts[-1], columns


# ---------------------------------------------------------------------------
# Matchers
# ---------------------------------------------------------------------------


def check_keyword_case(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    for tok in tokens:
        if tok.kind == "keyword" and tok.text != tok.upper:
            yield Finding(
                line=tok.line,
                column=tok.column,
                message=f"Keyword '{tok.text}' should be upper-case ('{tok.upper}')",
            )


def check_explicit_inner_join(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    """A JOIN not preceded by INNER/LEFT/RIGHT/FULL/CROSS/OUTER/NATURAL."""
    code = code_tokens(tokens)
    for idx, tok in enumerate(code):
        if not tok.is_keyword("JOIN"):
            continue
        if idx > 0 and code[idx - 1].is_keyword(*_JOIN_QUALIFIERS):
            continue
        yield Finding(
            line=tok.line,
            column=tok.column,
            message="Write 'INNER JOIN' instead of a bare 'JOIN'",
        )


def _ends_expression(tok: Token) -> bool:
    if tok.kind in ("identifier", "number", "string"):
        return True
    return tok.is_punct(")") or tok.is_keyword("END", "NULL", "TRUE", "FALSE")


def _missing_table_alias_as(
    code: Sequence[Token], depths: Sequence[int], start: int
) -> Iterator[Finding]:
    pos = start
    while pos < len(code):
        if code[pos].is_keyword(*_TABLE_MODIFIERS):
            pos += 1
            continue
        if code[pos].is_punct("("):
            name = "subquery"
            pos = _matching_close(code, depths, pos) + 1
        else:
            parts, pos = read_qualified_name(code, pos)
            if not parts:
                return
            name = "'" + ".".join(part.text for part in parts) + "'"
            if pos < len(code) and code[pos].is_punct("("):
                # Set-returning function call; its alias is not checked.
                return
        if pos < len(code) and code[pos].kind == "identifier":
            alias = code[pos]
            yield Finding(
                line=alias.line,
                column=alias.column,
                message=f"Alias '{alias.text}' for {name} should be introduced with AS",
            )
            pos += 1
        elif pos + 1 < len(code) and code[pos].is_keyword("AS"):
            pos += 2
        if pos < len(code) and code[pos].is_punct(","):
            pos += 1
            continue
        return


def _missing_column_alias_as(
    code: Sequence[Token], depths: Sequence[int], select_idx: int
) -> Iterator[Finding]:
    depth = depths[select_idx]
    prev: Token | None = None
    for idx in range(select_idx + 1, len(code)):
        tok = code[idx]
        if depths[idx] < depth:
            return
        if depths[idx] == depth:
            if tok.is_keyword("FROM", "INTO") or tok.is_punct(";"):
                return
            if tok.kind == "identifier" and prev is not None and _ends_expression(prev):
                nxt = code[idx + 1] if idx + 1 < len(code) else None
                if (
                    nxt is None
                    or nxt.is_punct(",")
                    or nxt.is_punct(";")
                    or nxt.is_punct(")")
                    or nxt.is_keyword("FROM", "INTO")
                ):
                    yield Finding(
                        line=tok.line,
                        column=tok.column,
                        message=f"Column alias '{tok.text}' should be introduced with AS",
                    )
        prev = tok


def check_explicit_as(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    """Aliases must be introduced with ``AS``.

    Table aliases are checked right after FROM/JOIN (and across the commas
    of a FROM list).  Column aliases are checked in the SELECT list: an
    identifier that directly follows a complete expression and is itself
    followed by a comma or FROM is taken to be an alias.  LATERAL and ONLY
    in front of a table are skipped.  Known gaps: aliases of set-returning
    functions in FROM are not checked, and an alias followed by ORDER/WINDOW
    keywords in exotic dialects is missed.  Over-reports when a dialect word
    outside the keyword table follows a table name: any plain identifier
    there is taken for an alias.
    """
    code = code_tokens(tokens)
    depths = paren_depths(code)
    for idx, tok in enumerate(code):
        if tok.is_keyword("FROM", "JOIN"):
            yield from _missing_table_alias_as(code, depths, idx + 1)
        elif tok.is_keyword("SELECT"):
            yield from _missing_column_alias_as(code, depths, idx)


def _order_item_finding(item: list[Token]) -> Finding | None:
    if not item:
        return None
    body = item
    if len(body) >= 2 and body[-2].is_keyword("NULLS"):
        body = body[:-2]
    if body and body[-1].is_keyword("ASC", "DESC"):
        return None
    return Finding(
        line=item[0].line,
        column=item[0].column,
        message=f"ORDER BY item '{_render(body)}' should state ASC or DESC",
    )


def check_sort_direction(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    """Every ORDER BY item ends in ASC or DESC (before an optional NULLS FIRST/LAST).

    The item list ends at the first ``;``, closing parenthesis, window frame
    clause, locking clause (FOR UPDATE) or LIMIT/OFFSET/FETCH/set operator at
    the ORDER BY's own depth.
    """
    code = code_tokens(tokens)
    depths = paren_depths(code)
    for idx, tok in enumerate(code):
        if not (tok.is_keyword("ORDER") and idx + 1 < len(code) and code[idx + 1].is_keyword("BY")):
            continue
        depth = depths[idx]
        item: list[Token] = []
        for k in range(idx + 2, len(code)):
            cur = code[k]
            if depths[k] < depth:
                break
            if depths[k] == depth:
                if cur.is_punct(";") or cur.is_keyword(*_ORDER_BY_END):
                    break
                if cur.is_keyword(*_WINDOW_FRAME_KEYWORDS):
                    break
                if cur.is_punct(","):
                    finding = _order_item_finding(item)
                    if finding is not None:
                        yield finding
                    item = []
                    continue
            item.append(cur)
        finding = _order_item_finding(item)
        if finding is not None:
            yield finding


def check_explicit_nullability(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    """Each CREATE TABLE column says NULL or NOT NULL.

    Any NULL keyword inside the column definition counts, so a
    ``DEFAULT NULL`` with no nullability clause is a known false negative.
    PRIMARY KEY columns still need an explicit NOT NULL.
    """
    for _, columns in create_tables(code_tokens(tokens)):
        for column in columns:
            if any(tok.is_keyword("NULL") for tok in column.tokens):
                continue
            yield Finding(
                line=column.name.line,
                column=column.name.column,
                message=f"Column '{column.column_name}' should declare NULL or NOT NULL explicitly",
            )


def check_join_order(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    """In ``JOIN t ON ...`` the first qualified column must belong to ``t``.

    Only ``qualifier.column`` references are inspected; a condition that
    starts with an unqualified column is not reported.  Joins on subqueries
    and ``USING`` joins are skipped.
    """
    code = code_tokens(tokens)
    depths = paren_depths(code)
    for idx, tok in enumerate(code):
        if not tok.is_keyword("JOIN"):
            continue
        parts, pos = read_qualified_name(code, idx + 1)
        if not parts:
            continue
        joined = unquote(parts[-1].text)
        names = {joined.lower()}
        if pos < len(code) and code[pos].is_keyword("AS"):
            pos += 1
        if pos < len(code) and code[pos].kind == "identifier":
            joined = unquote(code[pos].text)
            names.add(joined.lower())
            pos += 1
        if pos >= len(code) or not code[pos].is_keyword("ON"):
            continue

        depth = depths[pos]
        for k in range(pos + 1, len(code) - 2):
            cur = code[k]
            if depths[k] < depth:
                break
            if depths[k] == depth and (cur.is_punct(";") or cur.is_keyword(*_ON_CLAUSE_END)):
                break
            if (
                cur.kind == "identifier"
                and code[k + 1].is_punct(".")
                and code[k + 2].kind == "identifier"
            ):
                if unquote(cur.text).lower() not in names:
                    yield Finding(
                        line=cur.line,
                        column=cur.column,
                        message=(
                            f"Reference the joining table '{joined}' first in the ON clause "
                            f"(found '{cur.text}')"
                        ),
                    )
                break


def check_table_snake_case(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    for table, _ in create_tables(code_tokens(tokens)):
        name = unquote(table.text)
        if not SNAKE_CASE_RE.match(name):
            yield Finding(
                line=table.line,
                column=table.column,
                message=f"Table name '{name}' should be snake_case ('{_to_snake(name)}')",
            )


def check_table_singular(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    """Table names are singular.

    Only the last ``_`` segment is inspected.  Words ending in -ss, -us,
    -is, -ics or -ous count as singular; uncountable nouns ending in -s
    (``news``) are a known false positive.
    """
    for table, _ in create_tables(code_tokens(tokens)):
        name = unquote(table.text)
        head, _, last = name.rpartition("_")
        if not is_plural(last):
            continue
        suggestion = f"{head}_{singularize(last)}" if head else singularize(last)
        yield Finding(
            line=table.line,
            column=table.column,
            message=f"Table name '{name}' should be singular ('{suggestion}')",
        )


def check_column_snake_case(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    for _, columns in create_tables(code_tokens(tokens)):
        for column in columns:
            name = column.column_name
            if not SNAKE_CASE_RE.match(name):
                yield Finding(
                    line=column.name.line,
                    column=column.name.column,
                    message=f"Column name '{name}' should be snake_case ('{_to_snake(name)}')",
                )


def check_no_bare_id(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    """Columns are never called plain ``id`` or ``version``."""
    for table, columns in create_tables(code_tokens(tokens)):
        entity = unquote(table.text)
        for column in columns:
            name = column.column_name
            if name.lower() not in _KEYED_SUFFIXES:
                continue
            yield Finding(
                line=column.name.line,
                column=column.name.column,
                message=(
                    f"Column '{name}' should carry the full entity prefix: "
                    f"'{entity}_{name.lower()}'"
                ),
            )


def check_id_suffix(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    """Identifier/version columns end in ``_id`` / ``_version``.

    Flags ``userid``, ``userId`` and ``userVersion``.  Ordinary words ending
    in "id" or "version" (``paid``, ``conversion``) are exempt through a
    fixed word list, as are a few acronyms (``rfid``, ``ssid``) and any
    all-lower-case name with a single letter before the suffix (``pid``,
    ``uid``).  Other words outside the list are reported.
    """
    for _, columns in create_tables(code_tokens(tokens)):
        for column in columns:
            name = column.column_name
            lowered = name.lower()
            last = lowered.rsplit("_", 1)[-1]
            if last in _KEYED_LOOKALIKES or last in _KEYED_ACRONYMS:
                continue
            for suffix in _KEYED_SUFFIXES:
                if lowered == suffix or not lowered.endswith(suffix):
                    continue
                if lowered.endswith(f"_{suffix}") and name == lowered:
                    continue
                if name == lowered and len(last) == len(suffix) + 1:
                    continue
                prefix = _to_snake(name[: -len(suffix)]).rstrip("_")
                expected = f"{prefix}_{suffix}"
                if expected == name:
                    continue
                yield Finding(
                    line=column.name.line,
                    column=column.name.column,
                    message=f"Column '{name}' should use the '_{suffix}' suffix ('{expected}')",
                )


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

SQL_RULES: tuple[Rule, ...] = (
    Rule(
        id="sql-keyword-case",
        language="sql",
        description="SQL keywords are written in upper case.",
        matcher=check_keyword_case,
    ),
    Rule(
        id="sql-explicit-inner-join",
        language="sql",
        description="Inner joins are spelled 'INNER JOIN', never a bare 'JOIN'.",
        matcher=check_explicit_inner_join,
    ),
    Rule(
        id="sql-explicit-as",
        language="sql",
        description="Table and column aliases are introduced with AS.",
        matcher=check_explicit_as,
    ),
    Rule(
        id="sql-explicit-sort-direction",
        language="sql",
        description="Every ORDER BY item states ASC or DESC.",
        severity="warning",
        matcher=check_sort_direction,
    ),
    Rule(
        id="sql-explicit-nullability",
        language="sql",
        description="Every column definition declares NULL or NOT NULL.",
        matcher=check_explicit_nullability,
    ),
    Rule(
        id="sql-join-order",
        language="sql",
        description="The joining table is referenced first in the ON clause.",
        severity="warning",
        matcher=check_join_order,
    ),
    Rule(
        id="sql-table-snake-case",
        language="sql",
        description="Table names are snake_case.",
        matcher=check_table_snake_case,
    ),
    Rule(
        id="sql-table-singular",
        language="sql",
        description="Table names are singular.",
        severity="warning",
        matcher=check_table_singular,
    ),
    Rule(
        id="sql-column-snake-case",
        language="sql",
        description="Column names are snake_case.",
        matcher=check_column_snake_case,
    ),
    Rule(
        id="sql-no-bare-id",
        language="sql",
        description="Identifier and version columns carry the entity prefix, never bare id/version.",
        matcher=check_no_bare_id,
    ),
    Rule(
        id="sql-id-suffix",
        language="sql",
        description="Identifier and version columns end in '_id' / '_version'.",
        matcher=check_id_suffix,
    ),
    advisory(
        "sql-river-alignment",
        "sql",
        "Clause keywords are right-aligned to form a river; layout is a formatter concern.",
    ),
)
