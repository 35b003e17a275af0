from __future__ import annotations

from pathlib import Path

import pytest

from coderefs.refs import SearchResultParseError
from coderefs.search import parse_search_line, parse_search_output
from coderefs.security import PathBlockedError


def test_parses_match_and_context_lines(tmp_path: Path) -> None:
    output = "\n".join(
        [
            "./src/app.py\x0011-def handler():",
            "./src/app.py\x0012:    if flags['someFlag']:",
            "./src/app.py\x0013-        return 1",
            "--",
            "./docs/notes.md\x003:someFlag: yes",
            "",
        ]
    )

    rows = parse_search_output(output, tmp_path)

    assert [row[1:] for row in rows] == [
        ("src/app.py", "-", "11", "def handler():"),
        ("src/app.py", ":", "12", "    if flags['someFlag']:"),
        ("src/app.py", "-", "13", "        return 1"),
        ("docs/notes.md", ":", "3", "someFlag: yes"),
    ]
    assert rows[0][0] == "./src/app.py\x0011-def handler():"


def test_text_may_contain_separators(tmp_path: Path) -> None:
    row = parse_search_line("a-b:c.txt\x007:x:y-z", tmp_path)

    assert row[1:] == ("a-b:c.txt", ":", "7", "x:y-z")


def test_carriage_returns_are_stripped(tmp_path: Path) -> None:
    rows = parse_search_output("win.txt\x001:someFlag\r\n", tmp_path)

    assert rows[0][4] == "someFlag"


def test_backslash_paths_become_posix(tmp_path: Path) -> None:
    row = parse_search_line("src\\win\\file.cs\x002:someFlag", tmp_path)

    assert row[1] == "src/win/file.cs"


@pytest.mark.parametrize("line", ["no-null-byte:1:text", "file.txt\x00abc:text", "file.txt\x00"])
def test_unsupported_lines_raise(tmp_path: Path, line: str) -> None:
    with pytest.raises(SearchResultParseError, match="Unsupported search output"):
        parse_search_line(line, tmp_path)


def test_traversal_paths_are_blocked(tmp_path: Path) -> None:
    with pytest.raises(PathBlockedError, match="traversal"):
        parse_search_line("../outside.txt\x001:someFlag", tmp_path)
