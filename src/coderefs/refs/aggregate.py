"""Partition reference lines into per-path groups."""

from __future__ import annotations

from collections.abc import Iterable
from types import MappingProxyType

from coderefs.refs.lines import SearchResultParseError
from coderefs.refs.models import PathReferenceGroup, ReferenceLine


def aggregate_by_path(references: Iterable[ReferenceLine]) -> list[PathReferenceGroup]:
    """Group references by path in first-seen order, indexing flag key line numbers."""
    lines_by_path: dict[str, list[ReferenceLine]] = {}
    seen: set[tuple[str, int]] = set()
    for reference in references:
        key = (reference.path, reference.line_num)
        if key in seen:
            raise SearchResultParseError(
                reason=f"Line {reference.line_num} of {reference.path!r} was reported twice.",
                hint="Each search output line must appear once.",
            )
        seen.add(key)
        lines_by_path.setdefault(reference.path, []).append(reference)

    groups: list[PathReferenceGroup] = []
    for path, lines in lines_by_path.items():
        flag_lines: dict[str, list[int]] = {}
        for line in lines:
            for flag_key in line.flag_keys:
                flag_lines.setdefault(flag_key, []).append(line.line_num)
        groups.append(
            PathReferenceGroup(
                path=path,
                lines=tuple(lines),
                flag_reference_map=MappingProxyType(
                    {flag_key: tuple(numbers) for flag_key, numbers in flag_lines.items()}
                ),
            )
        )
    return groups
