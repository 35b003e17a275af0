"""
ripgrep.py - rg subprocess wrapper producing raw search rows.

Each output line becomes a (raw, path, marker, line_number, text) row, the
shape consumed by the reference line builder.
"""

from __future__ import annotations

import re
import shutil
import subprocess
from collections.abc import Sequence
from pathlib import Path

from coderefs.refs.lines import SearchResultParseError
from coderefs.refs.models import SearchRow
from coderefs.security import normalize_result_path

GROUP_SEPARATOR = "--"
_LINE_PATTERN = re.compile(r"^(?P<line>\d+)(?P<marker>[:-])(?P<text>.*)$", re.DOTALL)


class SearchToolError(RuntimeError):
    """Raised when ripgrep is missing, times out, or exits with an error."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


def build_search_command(
    rg_path: str,
    flag_keys: Sequence[str],
    context_lines: int,
    ignore_globs: Sequence[str] = (),
) -> list[str]:
    """Build an rg invocation matching any flag key as a fixed string."""
    cmd = [
        rg_path,
        "--no-config",
        "--fixed-strings",
        "--line-number",
        "--with-filename",
        "--no-heading",
        "--null",
        "--sort",
        "path",
        "--color",
        "never",
    ]
    if context_lines > 0:
        cmd.extend(["--context", str(context_lines)])
    for pattern in ignore_globs:
        cmd.extend(["--glob", f"!{pattern}"])
    for flag_key in flag_keys:
        cmd.extend(["-e", flag_key])
    cmd.append(".")
    return cmd


def parse_search_line(raw_line: str, repo_root: Path) -> SearchRow:
    """Parse one 'path NUL line_number marker text' output line."""
    path, separator, rest = raw_line.partition("\0")
    match = _LINE_PATTERN.match(rest) if separator else None
    if match is None:
        raise SearchResultParseError(
            reason=f"Unsupported search output line: {raw_line[:80]!r}",
            hint="ripgrep must be run with --null --line-number --no-heading.",
        )
    return (
        raw_line,
        normalize_result_path(repo_root, path),
        match.group("marker"),
        match.group("line"),
        match.group("text"),
    )


def parse_search_output(output: str, repo_root: Path) -> list[SearchRow]:
    """Parse full rg output into ordered rows, skipping group separators."""
    rows: list[SearchRow] = []
    for raw_line in output.split("\n"):
        line = raw_line.removesuffix("\r")
        if not line or line == GROUP_SEPARATOR:
            continue
        rows.append(parse_search_line(line, repo_root))
    return rows


class RipgrepSearcher:
    """Run ripgrep over a repository root for a set of flag keys."""

    def __init__(
        self,
        repo_root: Path,
        rg_path: str | None = None,
        timeout_seconds: float = 60.0,
        ignore_globs: Sequence[str] = (),
    ) -> None:
        self._repo_root = repo_root.resolve()
        self._rg_path = rg_path or shutil.which("rg")
        self._timeout_seconds = timeout_seconds
        self._ignore_globs = tuple(ignore_globs)

    def search(self, flag_keys: Sequence[str], context_lines: int) -> list[SearchRow]:
        """Return raw rows for every line mentioning a flag key, plus context lines."""
        if not flag_keys:
            return []
        if not self._rg_path:
            raise SearchToolError(
                reason="ripgrep executable was not found.",
                hint="Install ripgrep (rg) and make sure it is on PATH.",
            )
        cmd = build_search_command(
            self._rg_path, flag_keys, context_lines, ignore_globs=self._ignore_globs
        )
        try:
            result = subprocess.run(
                cmd,
                cwd=self._repo_root,
                capture_output=True,
                stdin=subprocess.DEVNULL,
                timeout=self._timeout_seconds,
            )
        except subprocess.TimeoutExpired:
            raise SearchToolError(
                reason=f"ripgrep timed out after {self._timeout_seconds}s.",
                hint="Raise search.timeout_seconds or exclude large directories.",
            ) from None
        except OSError as exc:
            raise SearchToolError(
                reason=f"ripgrep could not be started: {exc}",
                hint="Check that the configured rg executable is runnable.",
            ) from exc

        if result.returncode == 1:
            return []
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise SearchToolError(
                reason=f"ripgrep exited with status {result.returncode}: {stderr}",
                hint="Check the repository root and ignore globs.",
            )
        output = result.stdout.decode("utf-8", errors="replace")
        return parse_search_output(output, self._repo_root)
