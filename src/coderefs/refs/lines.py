"""Conversion of raw search rows into reference lines."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from coderefs.refs.keys import FlagKeyMatcher
from coderefs.refs.models import ReferenceLine, SearchRow

MAX_LINE_CHAR_COUNT = 500
TRUNCATION_MARKER = "…"
MATCH_MARKER = ":"
CONTEXT_MARKER = "-"
SEARCH_ROW_FIELDS = 5


class SearchResultParseError(ValueError):
    """Raised when search tool output does not have the supported shape."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


def truncate_line(line_text: str, max_chars: int = MAX_LINE_CHAR_COUNT) -> str:
    """Cap line_text at max_chars, appending a truncation marker when cut."""
    if len(line_text) <= max_chars:
        return line_text
    return line_text[:max_chars] + TRUNCATION_MARKER


def parse_line_number(raw: str) -> int:
    """Parse a positive 1-based line number written as plain ASCII digits."""
    if not (raw.isascii() and raw.isdigit()):
        raise SearchResultParseError(
            reason=f"Line number {raw!r} is not an integer.",
            hint="Search output must use the 'path:line:text' format.",
        )
    value = int(raw)
    if value < 1:
        raise SearchResultParseError(
            reason=f"Line number {value} is not positive.",
            hint="Search output must use 1-based line numbers.",
        )
    return value


def build_reference_line(
    row: Sequence[str],
    matcher: FlagKeyMatcher,
    context_lines: int,
    exclude: re.Pattern[str] | None,
    max_line_chars: int = MAX_LINE_CHAR_COUNT,
) -> ReferenceLine | None:
    """Build one reference line from a raw row, or None when the path is excluded."""
    if len(row) != SEARCH_ROW_FIELDS:
        raise SearchResultParseError(
            reason=f"Search row has {len(row)} fields, expected {SEARCH_ROW_FIELDS}.",
            hint="Rows must be (raw, path, marker, line_number, line_text).",
        )
    _, path, marker, raw_line_num, line_text = row
    if exclude is not None and exclude.search(path):
        return None
    line_num = parse_line_number(raw_line_num)

    if marker == MATCH_MARKER:
        flag_keys = matcher.find(line_text)
    elif marker == CONTEXT_MARKER:
        flag_keys = ()
    else:
        raise SearchResultParseError(
            reason=f"Unknown search row marker {marker!r}.",
            hint="Use ':' for matching lines and '-' for context lines.",
        )

    text = "" if context_lines < 0 else truncate_line(line_text, max_line_chars)
    return ReferenceLine(path=path, line_num=line_num, line_text=text, flag_keys=flag_keys)


def generate_references(
    flag_keys: Sequence[str],
    rows: Iterable[SearchRow],
    context_lines: int,
    delimiters: str,
    exclude: re.Pattern[str] | None,
    max_line_chars: int = MAX_LINE_CHAR_COUNT,
) -> list[ReferenceLine]:
    """Convert ordered search rows into ordered reference lines."""
    matcher = FlagKeyMatcher(flag_keys, delimiters)
    references: list[ReferenceLine] = []
    for row in rows:
        reference = build_reference_line(
            row,
            matcher=matcher,
            context_lines=context_lines,
            exclude=exclude,
            max_line_chars=max_line_chars,
        )
        if reference is not None:
            references.append(reference)
    return references
