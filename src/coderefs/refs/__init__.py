"""Reference aggregation engine."""

from .aggregate import aggregate_by_path
from .hunks import clip_window, make_hunk_reps, make_reference_hunks_reps, merge_windows
from .keys import MIN_FLAG_KEY_LEN, FlagKeyMatcher, filter_short_flag_keys, find_referenced_flags
from .lines import (
    MAX_LINE_CHAR_COUNT,
    SearchResultParseError,
    build_reference_line,
    generate_references,
    truncate_line,
)
from .models import HunkRep, PathReferenceGroup, ReferenceHunksRep, ReferenceLine, SearchRow

__all__ = [
    "FlagKeyMatcher",
    "HunkRep",
    "MAX_LINE_CHAR_COUNT",
    "MIN_FLAG_KEY_LEN",
    "PathReferenceGroup",
    "ReferenceHunksRep",
    "ReferenceLine",
    "SearchResultParseError",
    "SearchRow",
    "aggregate_by_path",
    "build_reference_line",
    "clip_window",
    "filter_short_flag_keys",
    "find_referenced_flags",
    "generate_references",
    "make_hunk_reps",
    "make_reference_hunks_reps",
    "merge_windows",
    "truncate_line",
]
