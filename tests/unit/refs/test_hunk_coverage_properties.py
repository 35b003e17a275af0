from __future__ import annotations

import random

import pytest

from coderefs.refs import ReferenceLine, aggregate_by_path, make_hunk_reps


def _random_file(seed: int) -> list[ReferenceLine]:
    rng = random.Random(seed)
    lines: list[ReferenceLine] = []
    line_num = 0
    for _ in range(rng.randint(1, 40)):
        line_num += rng.choice((1, 1, 1, 2, 5))
        keys = tuple(key for key in ("flag-a", "flag-b") if rng.random() < 0.2)
        lines.append(
            ReferenceLine(path="f", line_num=line_num, line_text=f"l{line_num}", flag_keys=keys)
        )
    return lines


def _span(hunk_lines: str, start: int, available: set[int]) -> set[int]:
    count = len(hunk_lines.splitlines())
    covered: set[int] = set()
    number = start
    while len(covered) < count:
        if number in available:
            covered.add(number)
        number += 1
    return covered


@pytest.mark.parametrize("seed", range(25))
@pytest.mark.parametrize("context_lines", [0, 1, 2, 3])
def test_hunks_cover_matches_and_are_maximally_merged(seed: int, context_lines: int) -> None:
    refs = _random_file(seed)
    available = {ref.line_num for ref in refs}
    groups = aggregate_by_path(refs)
    if not groups:
        return
    (group,) = groups

    hunks = make_hunk_reps(group, "proj", context_lines)

    for flag_key, matched in group.flag_reference_map.items():
        own = sorted(
            (hunk for hunk in hunks if hunk.flag_key == flag_key),
            key=lambda hunk: hunk.starting_line_number,
        )
        spans = [_span(hunk.lines, hunk.starting_line_number, available) for hunk in own]
        covered = set().union(*spans)
        assert set(matched) <= covered
        for previous, current in zip(spans, spans[1:]):
            assert max(previous) + 1 < min(current)
        for span in spans:
            assert all(min(span) <= number <= max(span) for number in span)
            gap_free = all(number in available for number in range(min(span), max(span) + 1))
            assert gap_free
