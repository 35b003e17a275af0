"""Run one reference scan: filter keys, search, aggregate, and build hunks."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from coderefs.config import CodeRefsConfig
from coderefs.git import BranchRep
from coderefs.logging import utc_millis
from coderefs.refs import (
    MIN_FLAG_KEY_LEN,
    ReferenceHunksRep,
    aggregate_by_path,
    filter_short_flag_keys,
    generate_references,
    make_reference_hunks_reps,
)
from coderefs.refs.models import SearchRow


class Searcher(Protocol):
    def search(self, flag_keys: Sequence[str], context_lines: int) -> list[SearchRow]: ...


@dataclass(slots=True, frozen=True)
class ScanResult:
    """References found in one run plus non-fatal diagnostics."""

    references: tuple[ReferenceHunksRep, ...]
    kept_flag_keys: tuple[str, ...]
    removed_flag_keys: int
    warnings: tuple[str, ...]

    @property
    def hunk_count(self) -> int:
        return sum(len(reference.hunks) for reference in self.references)


def run_scan(config: CodeRefsConfig, searcher: Searcher) -> ScanResult:
    """Scan the repository for configured flag keys and build per-path hunks."""
    scan = config.scan
    kept, removed = filter_short_flag_keys(scan.flag_keys)
    warnings: list[str] = []
    if removed:
        warnings.append(
            f"Skipped {removed} flag key(s) shorter than {MIN_FLAG_KEY_LEN} characters."
        )
    if not kept:
        warnings.append("No flag keys to search for; no references were collected.")
        return ScanResult(
            references=(),
            kept_flag_keys=(),
            removed_flag_keys=removed,
            warnings=tuple(warnings),
        )

    rows = searcher.search(kept, scan.context_lines)
    references = generate_references(
        kept,
        rows,
        context_lines=scan.context_lines,
        delimiters=scan.delimiters,
        exclude=scan.exclude,
        max_line_chars=scan.max_line_chars,
    )
    groups = aggregate_by_path(references)
    reps = make_reference_hunks_reps(groups, scan.project_key, scan.context_lines)
    return ScanResult(
        references=tuple(reps),
        kept_flag_keys=tuple(kept),
        removed_flag_keys=removed,
        warnings=tuple(warnings),
    )


def build_branch_rep(
    name: str,
    head: str,
    result: ScanResult,
    update_sequence_id: int | None = None,
    sync_time: int | None = None,
) -> BranchRep:
    """Wrap scan references in a branch snapshot."""
    return BranchRep(
        name=name,
        head=head,
        sync_time=sync_time if sync_time is not None else utc_millis(),
        update_sequence_id=update_sequence_id,
        references=result.references,
    )
