"""Path normalization helpers for repository-scoped search results."""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath
from typing import Final

WINDOWS_ABSOLUTE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[a-zA-Z]:[\\/]")


class PathBlockedError(Exception):
    """Raised when a reported path lies outside the repository root."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


def _normalize_separators(candidate: str) -> tuple[str, bool]:
    """Normalize path separators and detect absolute-style inputs."""
    normalized = candidate.replace("\\", "/")
    if normalized.startswith("/"):
        return normalized, True
    if WINDOWS_ABSOLUTE_PATTERN.match(normalized):
        return normalized, True
    return normalized, False


def normalize_result_path(repo_root: Path, candidate: str) -> str:
    """Return candidate as a repo-relative POSIX path."""
    normalized, is_absolute_style = _normalize_separators(candidate)
    if not normalized:
        raise PathBlockedError(
            reason="Path is empty.",
            hint="The search tool reported a match without a file path.",
        )

    if is_absolute_style:
        root = repo_root.resolve()
        resolved_absolute = Path(normalized).resolve(strict=False)
        if not resolved_absolute.is_relative_to(root):
            raise PathBlockedError(
                reason="Absolute path is outside repo_root.",
                hint="Run the search from the configured repository root.",
            )
        return resolved_absolute.relative_to(root).as_posix()

    parts = [part for part in normalized.split("/") if part not in ("", ".")]
    if not parts:
        raise PathBlockedError(
            reason="Path does not name a file.",
            hint="The search tool reported a match without a file path.",
        )
    if any(part == ".." for part in parts):
        raise PathBlockedError(
            reason="Path traversal is blocked.",
            hint="Search paths must stay under the repository root.",
        )
    return PurePosixPath(*parts).as_posix()
