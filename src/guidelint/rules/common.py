"""Helpers shared by the SQL and Elm matchers, plus the engine-level rules."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from guidelint.core.registry import ANY_LANGUAGE, Finding, Rule

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from guidelint.core.registry import MatchContext
    from guidelint.core.tokens import Token

SNAKE_CASE_RE = re.compile(r"^[a-z][a-z0-9]*(?:_[a-z0-9]+)*$")

# Words that end in "s" but are not plurals of an entity name.
_SINGULAR_S_ENDINGS = ("ss", "us", "is", "ics", "ous")
_IRREGULAR_PLURALS: dict[str, str] = {
    "people": "person",
    "children": "child",
    "men": "man",
    "women": "woman",
    "mice": "mouse",
    "geese": "goose",
    "teeth": "tooth",
    "feet": "foot",
}


def code_tokens(tokens: Sequence[Token]) -> list[Token]:
    """Drop comments; most matchers only look at code."""
    return [tok for tok in tokens if tok.kind != "comment"]


def paren_depths(tokens: Sequence[Token]) -> list[int]:
    """Nesting depth of every token.

    An opening bracket carries the depth outside it, its contents one more,
    and the closing bracket the outer depth again.  Unbalanced closers never
    push the depth below zero.
    """
    depths: list[int] = []
    depth = 0
    for tok in tokens:
        if tok.kind == "punctuation" and tok.text in ")]}":
            depth = max(depth - 1, 0)
            depths.append(depth)
        elif tok.kind == "punctuation" and tok.text in "([{":
            depths.append(depth)
            depth += 1
        else:
            depths.append(depth)
    return depths


def unquote(name: str) -> str:
    if len(name) >= 2 and name[0] == name[-1] and name[0] in "\"`":
        return name[1:-1]
    return name


def is_plural(word: str) -> bool:
    lowered = word.lower()
    if lowered in _IRREGULAR_PLURALS:
        return True
    return lowered.endswith("s") and len(lowered) > 3 and not lowered.endswith(_SINGULAR_S_ENDINGS)


def singularize(word: str) -> str:
    lowered = word.lower()
    if lowered in _IRREGULAR_PLURALS:
        return _IRREGULAR_PLURALS[lowered]
    if lowered.endswith("ies") and len(lowered) > 4:
        return word[:-3] + "y"
    if lowered.endswith(("sses", "xes", "ches", "shes", "zes")):
        return word[:-2]
    if lowered.endswith("s"):
        return word[:-1]
    return word


# ---------------------------------------------------------------------------
# Engine-level rules
# ---------------------------------------------------------------------------


def check_scan_recovery(tokens: Sequence[Token], context: MatchContext) -> Iterator[Finding]:
    """Report each contiguous run of unrecognised characters on a line once."""
    run: list[Token] = []
    for tok in tokens:
        if tok.kind == "unknown" and (not run or run[-1].line == tok.line):
            run.append(tok)
            continue
        if run:
            yield _recovery_finding(run)
            run = []
        if tok.kind == "unknown":
            run.append(tok)
    if run:
        yield _recovery_finding(run)


def _recovery_finding(run: list[Token]) -> Finding:
    chars = "".join(tok.text for tok in run)
    return Finding(
        line=run[0].line,
        column=run[0].column,
        message=f"Unrecognised input {chars!r} was skipped by the scanner",
    )


UNSUPPORTED_LANGUAGE = Rule(
    id="unsupported-language",
    language=ANY_LANGUAGE,
    description="File language has no registered rules.",
    severity="warning",
)


def scan_recovery_rule(language: str) -> Rule:
    return Rule(
        id="scan-recovery",
        language=language,
        description="Input contained characters the scanner could not classify.",
        severity="warning",
        matcher=check_scan_recovery,
    )
