from __future__ import annotations

from pathlib import Path

import pytest

from coderefs.security import PathBlockedError, normalize_result_path


@pytest.mark.parametrize(
    ("candidate", "expected"),
    [
        ("src/main.py", "src/main.py"),
        ("./src/main.py", "src/main.py"),
        ("src\\pkg\\main.py", "src/pkg/main.py"),
        ("src//pkg/./main.py", "src/pkg/main.py"),
    ],
)
def test_relative_paths_normalize_to_posix(
    tmp_path: Path, candidate: str, expected: str
) -> None:
    assert normalize_result_path(tmp_path, candidate) == expected


def test_absolute_path_inside_root_becomes_relative(tmp_path: Path) -> None:
    target = tmp_path / "src" / "main.py"

    assert normalize_result_path(tmp_path, str(target)) == "src/main.py"


def test_absolute_path_outside_root_is_blocked(tmp_path: Path) -> None:
    outside = tmp_path.parent / "elsewhere.py"

    with pytest.raises(PathBlockedError) as excinfo:
        normalize_result_path(tmp_path / "repo", str(outside))
    assert excinfo.value.reason == "Absolute path is outside repo_root."


@pytest.mark.parametrize("candidate", ["", ".", "./"])
def test_empty_paths_are_blocked(tmp_path: Path, candidate: str) -> None:
    with pytest.raises(PathBlockedError):
        normalize_result_path(tmp_path, candidate)


def test_traversal_is_blocked(tmp_path: Path) -> None:
    with pytest.raises(PathBlockedError, match="traversal"):
        normalize_result_path(tmp_path, "src/../../etc/passwd")
