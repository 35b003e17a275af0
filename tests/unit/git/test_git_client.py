from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from coderefs.git import GitClient, GitCommandError, parse_ls_remote_heads


def test_parse_ls_remote_heads() -> None:
    output = "\n".join(
        [
            "1111111111111111111111111111111111111111\trefs/heads/main",
            "2222222222222222222222222222222222222222\trefs/heads/feature/login",
            "3333333333333333333333333333333333333333\trefs/tags/v1.0",
            "",
            "malformed line",
        ]
    )

    assert parse_ls_remote_heads(output) == ["main", "feature/login"]


def test_parse_ls_remote_heads_empty() -> None:
    assert parse_ls_remote_heads("") == []


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_git_client_reads_branch_and_head(tmp_path: Path) -> None:
    def git(*args: str) -> None:
        subprocess.run(["git", *args], cwd=tmp_path, check=True, capture_output=True)

    git("init", "-q", "-b", "trunk")
    git("config", "user.email", "dev@example.com")
    git("config", "user.name", "Dev")
    (tmp_path / "a.txt").write_text("a\n", encoding="utf-8")
    git("add", "a.txt")
    git("commit", "-q", "-m", "init")

    client = GitClient(tmp_path)

    assert client.current_branch() == "trunk"
    assert len(client.head_sha()) == 40


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_git_client_outside_repository_raises(tmp_path: Path) -> None:
    client = GitClient(tmp_path)

    with pytest.raises(GitCommandError) as excinfo:
        client.head_sha()
    assert excinfo.value.hint
