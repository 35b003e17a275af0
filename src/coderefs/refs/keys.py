"""Flag key filtering and delimiter-bounded key matching."""

from __future__ import annotations

import re
from collections.abc import Sequence

MIN_FLAG_KEY_LEN = 3


def filter_short_flag_keys(flag_keys: Sequence[str]) -> tuple[list[str], int]:
    """Drop keys too short to search for safely, returning kept keys and removed count."""
    kept = [key for key in flag_keys if len(key) >= MIN_FLAG_KEY_LEN]
    return kept, len(flag_keys) - len(kept)


def _bounded_pattern(flag_key: str, delimiters: str) -> re.Pattern[str]:
    # Word characters that are not delimiters are the only invalid neighbours.
    escaped_delims = "".join(re.escape(char) for char in dict.fromkeys(delimiters))
    neighbour = f"[^\\W{escaped_delims}]"
    return re.compile(f"(?<!{neighbour}){re.escape(flag_key)}(?!{neighbour})")


class FlagKeyMatcher:
    """Find which flag keys occur in a line as delimiter-bounded tokens."""

    def __init__(self, flag_keys: Sequence[str], delimiters: str) -> None:
        self._delimiters = delimiters
        self._patterns: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
            (key, _bounded_pattern(key, delimiters)) for key in dict.fromkeys(flag_keys)
        )

    @property
    def flag_keys(self) -> tuple[str, ...]:
        """Return the configured keys, deduplicated, in input order."""
        return tuple(key for key, _ in self._patterns)

    @property
    def delimiters(self) -> str:
        """Return characters accepted as key boundaries besides non-word characters."""
        return self._delimiters

    def find(self, line_text: str) -> tuple[str, ...]:
        """Return keys present in line_text, preserving key order."""
        return tuple(key for key, pattern in self._patterns if pattern.search(line_text))


def find_referenced_flags(
    line_text: str, flag_keys: Sequence[str], delimiters: str
) -> tuple[str, ...]:
    """Return the ordered subset of flag_keys referenced in line_text."""
    return FlagKeyMatcher(flag_keys, delimiters).find(line_text)
