"""Typed models for code reference aggregation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

SearchRow = tuple[str, str, str, str, str]


@dataclass(slots=True, frozen=True)
class ReferenceLine:
    """One line reported by the search tool, annotated with matched flag keys."""

    path: str
    line_num: int
    line_text: str = ""
    flag_keys: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class PathReferenceGroup:
    """All reference lines for one path plus a flag key -> line numbers index."""

    path: str
    lines: tuple[ReferenceLine, ...]
    flag_reference_map: Mapping[str, tuple[int, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )


@dataclass(slots=True, frozen=True)
class HunkRep:
    """Contiguous excerpt of one file evidencing one flag key."""

    starting_line_number: int
    lines: str
    proj_key: str
    flag_key: str

    def to_payload(self) -> dict[str, object]:
        """Return the ingestion API shape."""
        return {
            "startingLineNumber": self.starting_line_number,
            "lines": self.lines,
            "projKey": self.proj_key,
            "flagKey": self.flag_key,
        }


@dataclass(slots=True, frozen=True)
class ReferenceHunksRep:
    """Hunks found in a single path."""

    path: str
    hunks: tuple[HunkRep, ...]

    def to_payload(self) -> dict[str, object]:
        """Return the ingestion API shape."""
        return {
            "path": self.path,
            "hunks": [hunk.to_payload() for hunk in self.hunks],
        }
