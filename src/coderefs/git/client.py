"""Thin git subprocess client for branch metadata."""

from __future__ import annotations

import subprocess
from pathlib import Path

HEADS_PREFIX = "refs/heads/"


class GitCommandError(RuntimeError):
    """Raised when a git command cannot be run or fails."""

    def __init__(self, reason: str, hint: str) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


def parse_ls_remote_heads(output: str) -> list[str]:
    """Extract branch names from `git ls-remote --heads` output."""
    names: list[str] = []
    for line in output.splitlines():
        parts = line.strip().split()
        if len(parts) != 2 or not parts[1].startswith(HEADS_PREFIX):
            continue
        names.append(parts[1][len(HEADS_PREFIX) :])
    return names


class GitClient:
    """Read branch information from a local git checkout."""

    def __init__(self, repo_root: Path, timeout_seconds: float = 30.0) -> None:
        self._repo_root = repo_root.resolve()
        self._timeout_seconds = timeout_seconds

    def _run(self, *args: str) -> str:
        cmd = ["git", *args]
        try:
            result = subprocess.run(
                cmd,
                cwd=self._repo_root,
                capture_output=True,
                text=True,
                stdin=subprocess.DEVNULL,
                timeout=self._timeout_seconds,
            )
        except subprocess.TimeoutExpired:
            raise GitCommandError(
                reason=f"git {args[0]} timed out after {self._timeout_seconds}s.",
                hint="Raise git.timeout_seconds or check remote connectivity.",
            ) from None
        except OSError as exc:
            raise GitCommandError(
                reason=f"git could not be started: {exc}",
                hint="Install git and make sure it is on PATH.",
            ) from exc
        if result.returncode != 0:
            raise GitCommandError(
                reason=f"git {args[0]} failed: {result.stderr.strip()}",
                hint="Run coderefs from inside a git checkout.",
            )
        return result.stdout

    def current_branch(self) -> str:
        """Return the checked-out branch name."""
        name = self._run("rev-parse", "--abbrev-ref", "HEAD").strip()
        if name == "HEAD":
            raise GitCommandError(
                reason="HEAD is detached.",
                hint="Pass --branch explicitly when scanning a detached checkout.",
            )
        return name

    def head_sha(self) -> str:
        """Return the commit SHA at HEAD."""
        return self._run("rev-parse", "HEAD").strip()

    def remote_branches(self, remote: str = "origin") -> list[str]:
        """Return branch names that currently exist on remote."""
        return parse_ls_remote_heads(self._run("ls-remote", "--quiet", "--heads", remote))
