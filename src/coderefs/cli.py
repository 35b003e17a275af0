"""Command-line entrypoint: run one scan and emit the hand-off payload."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import TextIO

from coderefs.config import CliOverrides, CodeRefsConfig, load_effective_config
from coderefs.git import GitClient, GitCommandError, KnownBranch, calculate_stale_branches
from coderefs.logging import JsonlRunLogger, RunEvent, sanitize_metadata, utc_millis, utc_timestamp
from coderefs.refs import SearchResultParseError
from coderefs.scan import ScanResult, Searcher, build_branch_rep, run_scan
from coderefs.search import RipgrepSearcher, SearchToolError
from coderefs.security import PathBlockedError

EXIT_OK = 0
EXIT_ERROR = 2
MAX_RECENT_RUNS = 200


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for a scan run."""
    parser = argparse.ArgumentParser(prog="coderefs")
    parser.add_argument("--repo-root", required=False, default=".")
    parser.add_argument("--data-dir", required=False, default=None)
    parser.add_argument("--project-key", required=False, default=None)
    parser.add_argument("--flag", action="append", dest="flags", default=None)
    parser.add_argument("--flags-file", required=False, default=None)
    parser.add_argument("--context-lines", type=int, required=False, default=None)
    parser.add_argument("--exclude", required=False, default=None)
    parser.add_argument("--delimiters", required=False, default=None)
    parser.add_argument("--max-line-chars", type=int, required=False, default=None)
    parser.add_argument("--branch", required=False, default=None)
    parser.add_argument("--head", required=False, default=None)
    parser.add_argument("--update-sequence-id", type=int, required=False, default=None)
    parser.add_argument("--known-branch", action="append", dest="known_branches", default=[])
    parser.add_argument("--remote-branch", action="append", dest="remote_branches", default=None)
    parser.add_argument("--remote", required=False, default=None)
    parser.add_argument("--rg-path", required=False, default=None)
    parser.add_argument("--output", required=False, default=None)
    parser.add_argument("--recent-runs", type=int, required=False, default=None)
    parser.add_argument("--runs-since", required=False, default=None)
    return parser


def read_flags_file(path: Path) -> list[str]:
    """Read one flag key per line, ignoring blanks and '#' comments."""
    keys: list[str] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        keys.append(stripped)
    return keys


def _overrides_from_args(args: argparse.Namespace) -> CliOverrides:
    flag_keys: list[str] | None = None
    if args.flags is not None or args.flags_file is not None:
        flag_keys = list(args.flags or [])
        if args.flags_file is not None:
            try:
                flag_keys.extend(read_flags_file(Path(args.flags_file)))
            except OSError as exc:
                raise ValueError(f"Flags file could not be read: {exc}") from exc
    return CliOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        project_key=args.project_key,
        flag_keys=tuple(flag_keys) if flag_keys is not None else None,
        context_lines=args.context_lines,
        exclude=args.exclude,
        delimiters=args.delimiters,
        max_line_chars=args.max_line_chars,
        remote=args.remote,
    )


def success_response(
    run_id: str, result: dict[str, object], warnings: list[str]
) -> dict[str, object]:
    """Build success envelope."""
    return {
        "run_id": run_id,
        "ok": True,
        "result": result,
        "warnings": warnings,
        "error": None,
    }


def error_response(
    run_id: str, code: str, message: str, hint: str | None = None
) -> dict[str, object]:
    """Build explicit error envelope."""
    error: dict[str, object] = {"code": code, "message": message}
    if hint is not None:
        error["hint"] = hint
    return {
        "run_id": run_id,
        "ok": False,
        "result": {},
        "warnings": [],
        "error": error,
    }


def _write_response(response: dict[str, object], output: str | None, out_stream: TextIO) -> None:
    rendered = f"{json.dumps(response, sort_keys=True)}\n"
    if output is None:
        out_stream.write(rendered)
        out_stream.flush()
        return
    target = Path(output)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(rendered, encoding="utf-8")


def _emit_response(
    response: dict[str, object], output: str | None, out_stream: TextIO
) -> dict[str, object]:
    """Write response; fall back to an OUTPUT_FAILED envelope on out_stream."""
    try:
        _write_response(response, output, out_stream)
    except OSError as exc:
        response = error_response(
            str(response["run_id"]),
            "OUTPUT_FAILED",
            f"Output file could not be written: {exc}",
            "Pass an --output path in a writable location.",
        )
        _write_response(response, None, out_stream)
    return response


def _scan_and_render(
    args: argparse.Namespace,
    config: CodeRefsConfig,
    searcher: Searcher,
    git: GitClient,
) -> tuple[dict[str, object], ScanResult]:
    result = run_scan(config, searcher)
    branch_name = args.branch or git.current_branch()
    head = args.head or git.head_sha()
    branch = build_branch_rep(
        branch_name,
        head,
        result,
        update_sequence_id=args.update_sequence_id,
    )
    stale: list[str] = []
    if args.known_branches:
        remote_names = args.remote_branches
        if remote_names is None:
            remote_names = git.remote_branches(config.git.remote)
        known = [KnownBranch(name=name) for name in args.known_branches]
        stale = calculate_stale_branches(known, remote_names)
    return {"branch": branch.to_payload(), "stale_branches": stale}, result


def run(
    argv: list[str] | None = None,
    out_stream: TextIO | None = None,
    searcher: Searcher | None = None,
    git: GitClient | None = None,
) -> int:
    """Run one scan with injectable collaborators; return the process exit code."""
    stream = out_stream if out_stream is not None else sys.stdout
    args = build_arg_parser().parse_args(argv)
    run_id = f"run-{utc_millis()}"

    try:
        config = load_effective_config(
            repo_root=Path(args.repo_root), overrides=_overrides_from_args(args)
        )
    except (ValueError, OSError) as exc:
        _emit_response(error_response(run_id, "INVALID_CONFIG", str(exc)), args.output, stream)
        return EXIT_ERROR

    run_logger = JsonlRunLogger(path=config.data_dir / "runs.jsonl")
    if args.recent_runs is not None:
        limit = min(max(args.recent_runs, 1), MAX_RECENT_RUNS)
        entries = run_logger.read(since=args.runs_since, limit=limit)
        _write_response(success_response(run_id, {"entries": entries}, []), None, stream)
        return EXIT_OK

    if searcher is None:
        searcher = RipgrepSearcher(
            repo_root=config.repo_root,
            rg_path=args.rg_path,
            timeout_seconds=config.search.timeout_seconds,
            ignore_globs=config.search.ignore_globs,
        )
    if git is None:
        git = GitClient(repo_root=config.repo_root, timeout_seconds=config.git.timeout_seconds)

    metadata: dict[str, object] = {"project_key": config.scan.project_key}
    try:
        result_payload, result = _scan_and_render(args, config, searcher, git)
    except SearchToolError as exc:
        response = error_response(run_id, "SEARCH_FAILED", exc.reason, exc.hint)
    except SearchResultParseError as exc:
        response = error_response(run_id, "INVALID_SEARCH_OUTPUT", exc.reason, exc.hint)
    except GitCommandError as exc:
        response = error_response(run_id, "GIT_FAILED", exc.reason, exc.hint)
    except PathBlockedError as exc:
        response = error_response(run_id, "PATH_BLOCKED", exc.reason, exc.hint)
    else:
        response = success_response(run_id, result_payload, list(result.warnings))
        metadata.update(
            {
                "flag_keys_kept": len(result.kept_flag_keys),
                "flag_keys_removed": result.removed_flag_keys,
                "paths": len(result.references),
                "hunks": result.hunk_count,
                "stale_branches": len(result_payload["stale_branches"]),
                "warnings": len(result.warnings),
            }
        )

    response = _emit_response(response, args.output, stream)

    error_payload = response.get("error")
    error_code = error_payload.get("code") if isinstance(error_payload, dict) else None
    run_logger.append(
        RunEvent(
            timestamp=utc_timestamp(),
            run_id=run_id,
            ok=bool(response["ok"]),
            error_code=error_code if isinstance(error_code, str) else None,
            metadata=sanitize_metadata(metadata),
        )
    )
    for warning in response["warnings"]:
        print(f"warning: {warning}", file=sys.stderr)
    return EXIT_OK if response["ok"] else EXIT_ERROR


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the coderefs process."""
    return run(argv)


if __name__ == "__main__":
    raise SystemExit(main())
