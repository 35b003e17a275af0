"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import re
import tomllib
from dataclasses import dataclass
from pathlib import Path

from coderefs.refs.lines import MAX_LINE_CHAR_COUNT

CONFIG_FILE_NAME = "coderefs.toml"

MIN_CONTEXT_LINES = -1
MAX_CONTEXT_LINES = 5
MAX_LINE_CHARS_CAP = 2_000
MAX_TIMEOUT_SECONDS_CAP = 3_600

DEFAULT_CONTEXT_LINES = 2
DEFAULT_DELIMITERS = "\"'`"
DEFAULT_SEARCH_TIMEOUT_SECONDS = 60
DEFAULT_GIT_TIMEOUT_SECONDS = 30
DEFAULT_REMOTE = "origin"


@dataclass(slots=True, frozen=True)
class ScanSettings:
    """Reference aggregation settings."""

    project_key: str
    flag_keys: tuple[str, ...]
    context_lines: int
    exclude: re.Pattern[str] | None
    delimiters: str
    max_line_chars: int


@dataclass(slots=True, frozen=True)
class SearchSettings:
    """Search tool settings."""

    timeout_seconds: int
    ignore_globs: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class GitSettings:
    """Git collaborator settings."""

    remote: str
    timeout_seconds: int


@dataclass(slots=True, frozen=True)
class CodeRefsConfig:
    """Fully merged configuration for one scan run."""

    repo_root: Path
    data_dir: Path
    scan: ScanSettings
    search: SearchSettings
    git: GitSettings

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "repo_root": str(self.repo_root),
            "data_dir": str(self.data_dir),
            "scan": {
                "project_key": self.scan.project_key,
                "flag_key_count": len(self.scan.flag_keys),
                "context_lines": self.scan.context_lines,
                "exclude": self.scan.exclude.pattern if self.scan.exclude else None,
                "delimiters": self.scan.delimiters,
                "max_line_chars": self.scan.max_line_chars,
            },
            "search": {
                "timeout_seconds": self.search.timeout_seconds,
                "ignore_globs": list(self.search.ignore_globs),
            },
            "git": {
                "remote": self.git.remote,
                "timeout_seconds": self.git.timeout_seconds,
            },
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    project_key: str | None = None
    flag_keys: tuple[str, ...] | None = None
    context_lines: int | None = None
    exclude: str | None = None
    delimiters: str | None = None
    max_line_chars: int | None = None
    remote: str | None = None


def default_config(repo_root: Path) -> CodeRefsConfig:
    """Build default config for a given repository root."""
    resolved_root = repo_root.resolve()
    return CodeRefsConfig(
        repo_root=resolved_root,
        data_dir=resolved_root / ".coderefs",
        scan=ScanSettings(
            project_key="default",
            flag_keys=(),
            context_lines=DEFAULT_CONTEXT_LINES,
            exclude=None,
            delimiters=DEFAULT_DELIMITERS,
            max_line_chars=MAX_LINE_CHAR_COUNT,
        ),
        search=SearchSettings(
            timeout_seconds=DEFAULT_SEARCH_TIMEOUT_SECONDS,
            ignore_globs=(),
        ),
        git=GitSettings(remote=DEFAULT_REMOTE, timeout_seconds=DEFAULT_GIT_TIMEOUT_SECONDS),
    )


def load_repo_config_file(repo_root: Path) -> dict[str, object]:
    """Load optional coderefs.toml from repo root."""
    config_path = repo_root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, name: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{name}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{name}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _optional_string(value: object, name: str, default: str, allow_empty: bool = False) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or (not allow_empty and not value):
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    return value


def _optional_int_in_range(
    value: object, name: str, default: int, minimum: int, maximum: int
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Config field '{name}' must be an integer.")
    if value < minimum or value > maximum:
        raise ValueError(f"Config field '{name}' must be between {minimum} and {maximum}.")
    return value


def compile_exclude(value: object, name: str) -> re.Pattern[str] | None:
    """Compile a path exclusion pattern; empty means no exclusion."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Config field '{name}' must be a regular expression string.")
    if not value:
        return None
    try:
        return re.compile(value)
    except re.error as exc:
        raise ValueError(f"Config field '{name}' is not a valid regular expression: {exc}") from exc


def merge_config(
    base: CodeRefsConfig, repo_payload: dict[str, object], overrides: CliOverrides
) -> CodeRefsConfig:
    """Merge defaults, repo config, then CLI/startup overrides."""
    scan_payload = _get_table(repo_payload, "scan")
    search_payload = _get_table(repo_payload, "search")
    git_payload = _get_table(repo_payload, "git")

    flag_keys = base.scan.flag_keys
    if "flags" in scan_payload:
        flag_keys = _tuple_of_strings(scan_payload["flags"], "scan.flags")
    exclude = base.scan.exclude
    if "exclude" in scan_payload:
        exclude = compile_exclude(scan_payload["exclude"], "scan.exclude")

    ignore_globs = base.search.ignore_globs
    if "ignore_globs" in search_payload:
        ignore_globs = _tuple_of_strings(search_payload["ignore_globs"], "search.ignore_globs")

    merged = CodeRefsConfig(
        repo_root=base.repo_root,
        data_dir=base.data_dir,
        scan=ScanSettings(
            project_key=_optional_string(
                scan_payload.get("project_key"), "scan.project_key", base.scan.project_key
            ),
            flag_keys=flag_keys,
            context_lines=_optional_int_in_range(
                scan_payload.get("context_lines"),
                "scan.context_lines",
                base.scan.context_lines,
                MIN_CONTEXT_LINES,
                MAX_CONTEXT_LINES,
            ),
            exclude=exclude,
            delimiters=_optional_string(
                scan_payload.get("delimiters"),
                "scan.delimiters",
                base.scan.delimiters,
                allow_empty=True,
            ),
            max_line_chars=_optional_int_in_range(
                scan_payload.get("max_line_chars"),
                "scan.max_line_chars",
                base.scan.max_line_chars,
                1,
                MAX_LINE_CHARS_CAP,
            ),
        ),
        search=SearchSettings(
            timeout_seconds=_optional_int_in_range(
                search_payload.get("timeout_seconds"),
                "search.timeout_seconds",
                base.search.timeout_seconds,
                1,
                MAX_TIMEOUT_SECONDS_CAP,
            ),
            ignore_globs=ignore_globs,
        ),
        git=GitSettings(
            remote=_optional_string(git_payload.get("remote"), "git.remote", base.git.remote),
            timeout_seconds=_optional_int_in_range(
                git_payload.get("timeout_seconds"),
                "git.timeout_seconds",
                base.git.timeout_seconds,
                1,
                MAX_TIMEOUT_SECONDS_CAP,
            ),
        ),
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: CodeRefsConfig, overrides: CliOverrides) -> CodeRefsConfig:
    """Apply startup overrides at highest precedence."""
    scan = config.scan
    exclude = scan.exclude
    if overrides.exclude is not None:
        exclude = compile_exclude(overrides.exclude, "overrides.exclude")
    flag_keys = scan.flag_keys
    if overrides.flag_keys is not None:
        flag_keys = _tuple_of_strings(list(overrides.flag_keys), "overrides.flag_keys")

    merged_scan = ScanSettings(
        project_key=_optional_string(
            overrides.project_key, "overrides.project_key", scan.project_key
        ),
        flag_keys=flag_keys,
        context_lines=_optional_int_in_range(
            overrides.context_lines,
            "overrides.context_lines",
            scan.context_lines,
            MIN_CONTEXT_LINES,
            MAX_CONTEXT_LINES,
        ),
        exclude=exclude,
        delimiters=_optional_string(
            overrides.delimiters, "overrides.delimiters", scan.delimiters, allow_empty=True
        ),
        max_line_chars=_optional_int_in_range(
            overrides.max_line_chars,
            "overrides.max_line_chars",
            scan.max_line_chars,
            1,
            MAX_LINE_CHARS_CAP,
        ),
    )
    git = GitSettings(
        remote=_optional_string(overrides.remote, "overrides.remote", config.git.remote),
        timeout_seconds=config.git.timeout_seconds,
    )
    data_dir = overrides.data_dir or config.data_dir
    return CodeRefsConfig(
        repo_root=config.repo_root,
        data_dir=data_dir.resolve(),
        scan=merged_scan,
        search=config.search,
        git=git,
    )


def load_effective_config(
    repo_root: Path, overrides: CliOverrides | None = None
) -> CodeRefsConfig:
    """Load effective config using merge order defaults -> repo config -> overrides."""
    resolved_root = repo_root.resolve()
    base = default_config(resolved_root)
    payload = load_repo_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides())
