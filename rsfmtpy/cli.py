"""Command line entry point: `rsfmtpy [files..]`, stdin or `--package`."""

from __future__ import annotations

import argparse
import logging
import sys
import time
import tomllib
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any

from tqdm import tqdm

from rsfmtpy.diagnostics import FORMAT_REPARSE_FAILED, Diagnostic, render_diagnostic
from rsfmtpy.format import FormatConfig, FormatError, format_str
from rsfmtpy.format.config import parse_limit, parse_switch
from rsfmtpy.parser import parse_result

logger = logging.getLogger(__name__)

CARGO_TOML = "Cargo.toml"
CONFIG_FILE = "rsfmt.toml"
SKIP_MARKER = "`nofmt`"

# Conventional target directories formatted even without a manifest entry.
_DEFAULT_DIRS: tuple[str, ...] = ("bin", "benches", "tests", "examples", "src")
_TARGET_TABLES: tuple[str, ...] = ("bin", "bench", "test", "example")

# Failures confined to one input; deep nesting surfaces as RecursionError.
_FILE_ERRORS = (OSError, UnicodeDecodeError, RuntimeError, FormatError)


def should_skip(source: str) -> bool:
    """Whether the first five lines opt the file out of formatting."""
    return any(SKIP_MARKER in line for line in source.splitlines()[:5])


def process(source: str, config: FormatConfig) -> str:
    """Format `source`, refusing output that loses comments or no longer parses."""
    result = format_str(source, config)
    if result.lost_comments:
        lines = [render_diagnostic(diagnostic, source) for diagnostic in result.diagnostics]
        raise FormatError(
            "The following comments were missed during formatting:\n" + "\n".join(lines),
            result.diagnostics,
        )
    reparsed = parse_result(result.text)
    if reparsed.has_errors:
        first = reparsed.diagnostics[0]
        diagnostic = Diagnostic.from_spec(FORMAT_REPARSE_FAILED, first.range)
        raise FormatError(
            f"{diagnostic.message}\n{render_diagnostic(first, result.text)}",
            [diagnostic, *reparsed.diagnostics],
        )
    return result.text


def format_file(path: Path, config: FormatConfig) -> bool:
    """Format one file in place; returns whether it was written."""
    start = time.perf_counter()
    source = path.read_text(encoding="utf-8")
    if should_skip(source):
        logger.info("Skipping %s", path)
        return False
    formatted = process(source, config)
    changed = formatted != source
    if changed:
        path.write_text(formatted, encoding="utf-8")
    logger.debug("Formatted %s in %.3fs", path, time.perf_counter() - start)
    return changed


# -- package discovery ---------------------------------------------------


def find_manifest(start: Path) -> Path | None:
    """Nearest `Cargo.toml` at or above `start`."""
    for directory in (start, *start.parents):
        candidate = directory / CARGO_TOML
        if candidate.is_file():
            return candidate
    return None


def package_dirs(manifest_path: Path, seen: set[Path] | None = None) -> list[Path]:
    """Source directories of a package and, recursively, of its workspace members."""
    seen = seen if seen is not None else set()
    with manifest_path.open("rb") as handle:
        manifest: dict[str, Any] = tomllib.load(handle)
    root = manifest_path.parent
    dirs: list[Path] = []

    def add(directory: Path) -> None:
        resolved = directory.resolve()
        if resolved not in seen and resolved.is_dir():
            seen.add(resolved)
            dirs.append(resolved)

    targets: list[dict[str, Any]] = []
    for table in _TARGET_TABLES:
        targets.extend(manifest.get(table, []))
    if isinstance(manifest.get("lib"), dict):
        targets.append(manifest["lib"])
    for target in targets:
        path = target.get("path")
        if path:
            add((root / path).parent)

    for member in manifest.get("workspace", {}).get("members", []):
        member_manifest = root / member / CARGO_TOML
        if member_manifest.is_file():
            dirs.extend(package_dirs(member_manifest, seen))

    for name in _DEFAULT_DIRS:
        add(root / name)
    return dirs


def rust_files(dirs: Iterable[Path]) -> list[Path]:
    """Every `.rs` file under `dirs`, each listed once."""
    files: dict[Path, None] = {}
    for directory in dirs:
        for path in sorted(directory.rglob("*.rs")):
            if path.is_file():
                files.setdefault(path.resolve(), None)
    return list(files)


# -- runs ----------------------------------------------------------------


def _format_many(
    files: Sequence[Path],
    config: FormatConfig,
    *,
    thread_count: int | None,
    show_progress: bool,
) -> list[tuple[Path, Exception]]:
    failures: list[tuple[Path, Exception]] = []
    with ThreadPoolExecutor(max_workers=thread_count) as pool:
        future_map = {pool.submit(format_file, path, config): path for path in files}
        completed: Iterable = as_completed(future_map)
        if show_progress:
            completed = tqdm(completed, total=len(future_map), desc="Formatting", unit="file")
        for future in completed:
            path = future_map[future]
            try:
                future.result()
            except _FILE_ERRORS as error:
                failures.append((path, error))
    return failures


def _run_package(config: FormatConfig, args: argparse.Namespace) -> int:
    start = time.perf_counter()
    manifest = find_manifest(Path.cwd())
    if manifest is None:
        logger.error("No %s found", CARGO_TOML)
        return 1
    logger.info("Formatting workspace %s", manifest.parent)
    files = rust_files(package_dirs(manifest))
    failures = _format_many(
        files,
        config,
        thread_count=args.thread_count,
        show_progress=not args.quiet and sys.stderr.isatty(),
    )
    for path, error in sorted(failures, key=lambda failure: str(failure[0])):
        logger.error("Formatting %s: %s", path, error)
    if failures:
        return 1
    logger.info("Finished %d file(s) in %.2fs", len(files), time.perf_counter() - start)
    return 0


def _run_stdin(config: FormatConfig) -> int:
    source = sys.stdin.read()
    if should_skip(source):
        sys.stdout.write(source)
        return 0
    try:
        formatted = process(source, config)
    except _FILE_ERRORS as error:
        logger.error("Formatting stdin: %s", error)
        return 1
    sys.stdout.write(formatted)
    return 0


def _run_files(files: Sequence[Path], config: FormatConfig) -> int:
    start = time.perf_counter()
    failed = False
    for path in files:
        logger.info("Formatting %s", path)
        try:
            format_file(path, config)
        except _FILE_ERRORS as error:
            logger.error("Formatting %s: %s", path, error)
            failed = True
    logger.info("Finished in %.2fs", time.perf_counter() - start)
    return 1 if failed else 0


# -- arguments -----------------------------------------------------------


def load_config(args: argparse.Namespace) -> FormatConfig:
    """Defaults, then `rsfmt.toml`, then explicit command line flags."""
    config = FormatConfig()
    config_path: Path | None = args.config
    if config_path is None and (Path.cwd() / CONFIG_FILE).is_file():
        config_path = Path.cwd() / CONFIG_FILE
    if config_path is not None:
        with config_path.open("rb") as handle:
            config = FormatConfig.from_mapping(tomllib.load(handle))

    overrides: dict[str, Any] = {}
    if args.line_length is not None:
        overrides["max_width"] = args.line_length
    if args.root_splits:
        overrides["root_splits"] = True
    if args.split_brace_threshold is not None:
        overrides["split_brace_threshold"] = parse_limit("split_brace_threshold", args.split_brace_threshold)
    if args.comment_length is not None:
        overrides["comment_width"] = parse_limit("comment_length", args.comment_length)
    for name in ("split_attributes", "split_where", "comment_errors_fatal"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = parse_switch(name, value)
    return config.with_overrides(**overrides) if overrides else config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rsfmtpy", description="Format Rust source code")
    parser.add_argument(
        "files",
        nargs="*",
        type=Path,
        help="Files to format in place; if none are given, formats stdin to stdout",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Only report errors")
    parser.add_argument(
        "-p",
        "--package",
        action="store_true",
        help="Format the entire package using the nearest Cargo.toml",
    )
    parser.add_argument(
        "--thread-count",
        type=int,
        default=None,
        help="Limit worker threads when using --package (default: executor default)",
    )
    parser.add_argument("-l", "--line-length", type=int, default=None, help="Maximum line width (default: 120)")
    parser.add_argument(
        "--root-splits",
        action="store_true",
        help="For any group that splits, all of its parent groups split as well",
    )
    parser.add_argument(
        "--split-brace-threshold",
        metavar="N|off",
        default=None,
        help="Always split {} groups with at least N elements (default: 1)",
    )
    parser.add_argument("--split-attributes", metavar="on|off", default=None, help="Always split #[] attributes")
    parser.add_argument("--split-where", metavar="on|off", default=None, help="Always split where clauses")
    parser.add_argument(
        "--comment-length",
        metavar="N|off",
        default=None,
        help="Reflow line comments to this width, measured from the comment start (default: 80)",
    )
    parser.add_argument(
        "--comment-errors-fatal",
        metavar="on|off",
        default=None,
        help="Fail instead of dropping comments that cannot be placed",
    )
    parser.add_argument("--config", type=Path, default=None, help=f"Path to a {CONFIG_FILE} file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log per-file timings")
    return parser


def _configure_logging(*, quiet: bool, verbose: bool) -> None:
    level = logging.ERROR if quiet else logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s", stream=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(quiet=args.quiet, verbose=args.verbose)
    try:
        config = load_config(args)
    except (OSError, tomllib.TOMLDecodeError, ValueError) as error:
        logger.error("Invalid configuration: %s", error)
        return 2
    if args.thread_count is not None and args.thread_count < 1:
        parser.error("--thread-count must be positive")

    if args.package:
        try:
            return _run_package(config, args)
        except (OSError, tomllib.TOMLDecodeError) as error:
            logger.error("Formatting package: %s", error)
            return 1
    if not args.files:
        return _run_stdin(config)
    return _run_files(args.files, config)


if __name__ == "__main__":
    raise SystemExit(main())
