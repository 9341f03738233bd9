"""Recover a bare SQL statement from generated text."""

from __future__ import annotations

import re

FENCE = "```"

# Opening fence with an optional language tag, e.g. "```sql" or "```postgresql\n".
# A tag must end the line, except "sql" itself, so "```SELECT 1```" keeps its SELECT.
_FENCE_OPENER = re.compile(r"^```(?:[A-Za-z0-9_+-]*[ \t]*(?=\r?\n)|sql\b)?", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def clean(raw: str | None, collapse_whitespace: bool = False) -> str:
    """Strip markdown fences and one trailing terminator from generated SQL.

    Never splits on internal terminators; the result is a single candidate
    statement for the safety gate to judge.

    Args:
        raw: Text returned by the generative service
        collapse_whitespace: Replace runs of whitespace (including newlines)
            with single spaces. Used on the execute path only; the
            generate-only path keeps the text's own layout.

    Returns:
        Candidate SQL statement
    """
    text = (raw or "").strip()

    if text.startswith(FENCE):
        text = _FENCE_OPENER.sub("", text, count=1).strip()
    if text.endswith(FENCE):
        text = text[: -len(FENCE)].strip()

    if collapse_whitespace:
        text = _WHITESPACE.sub(" ", text).strip()

    if text.endswith(";"):
        text = text[:-1].rstrip()

    return text
