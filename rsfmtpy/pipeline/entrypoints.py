"""Entrypoints that orchestrate parse and format with one parse lifecycle."""

from __future__ import annotations

from rsfmtpy.format import FormatConfig
from rsfmtpy.format import run_format as _run_format
from rsfmtpy.parser import parse_result
from rsfmtpy.pipeline.result import RustParseResult
from rsfmtpy.pipeline.results import FormatRunResult


def run_parse(text: str) -> RustParseResult:
    """Parse Rust source once for reuse by later stages."""
    return parse_result(text)


def run_format(
    text: str,
    config: FormatConfig | None = None,
    *,
    parse: RustParseResult | None = None,
) -> FormatRunResult:
    """Run formatting over one Rust parse lifecycle."""
    return _run_format(text, config, parse=parse)
