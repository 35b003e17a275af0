"""Search tool collaborators."""

from .ripgrep import (
    RipgrepSearcher,
    SearchToolError,
    build_search_command,
    parse_search_line,
    parse_search_output,
)

__all__ = [
    "RipgrepSearcher",
    "SearchToolError",
    "build_search_command",
    "parse_search_line",
    "parse_search_output",
]
