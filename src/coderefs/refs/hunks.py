"""Context-bounded hunk construction with per-flag window merging."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from coderefs.refs.models import HunkRep, PathReferenceGroup, ReferenceHunksRep


def clip_window(line_num: int, available: Mapping[int, str], context_lines: int) -> tuple[int, int]:
    """Return [start, end] around line_num, bounded by contiguous available lines."""
    start = line_num
    while start > line_num - context_lines and (start - 1) in available:
        start -= 1
    end = line_num
    while end < line_num + context_lines and (end + 1) in available:
        end += 1
    return start, end


def merge_windows(
    line_numbers: Iterable[int], available: Mapping[int, str], context_lines: int
) -> list[tuple[int, int]]:
    """Merge overlapping or touching windows for sorted match line numbers."""
    windows: list[tuple[int, int]] = []
    for line_num in sorted(set(line_numbers)):
        if context_lines < 0:
            windows.append((line_num, line_num))
            continue
        start, end = clip_window(line_num, available, context_lines)
        if windows and start <= windows[-1][1] + 1:
            windows[-1] = (windows[-1][0], max(windows[-1][1], end))
        else:
            windows.append((start, end))
    return windows


def make_hunk_reps(
    group: PathReferenceGroup, proj_key: str, context_lines: int
) -> list[HunkRep]:
    """Build hunks for every flag key referenced in one path."""
    available = {line.line_num: line.line_text for line in group.lines}
    hunks: list[HunkRep] = []
    for flag_key, line_numbers in group.flag_reference_map.items():
        for start, end in merge_windows(line_numbers, available, context_lines):
            if context_lines < 0:
                text = ""
            else:
                text = "".join(
                    f"{available[number]}\n"
                    for number in range(start, end + 1)
                    if number in available
                )
            hunks.append(
                HunkRep(
                    starting_line_number=start,
                    lines=text,
                    proj_key=proj_key,
                    flag_key=flag_key,
                )
            )
    return hunks


def make_reference_hunks_reps(
    groups: Iterable[PathReferenceGroup], proj_key: str, context_lines: int
) -> list[ReferenceHunksRep]:
    """Assemble per-path hunk groups sorted by starting line, omitting empty paths."""
    reps: list[ReferenceHunksRep] = []
    for group in groups:
        hunks = make_hunk_reps(group, proj_key, context_lines)
        if not hunks:
            continue
        hunks.sort(key=lambda hunk: hunk.starting_line_number)
        reps.append(ReferenceHunksRep(path=group.path, hunks=tuple(hunks)))
    return reps
