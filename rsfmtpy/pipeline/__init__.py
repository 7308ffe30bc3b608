"""Shared parse carriers and lazy pipeline entrypoint exports."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rsfmtpy.pipeline.result import RustParseResult
from rsfmtpy.pipeline.results import FormatRunResult

if TYPE_CHECKING:
    from rsfmtpy.format import FormatConfig


def run_parse(text: str) -> RustParseResult:
    from rsfmtpy.pipeline.entrypoints import run_parse as _run_parse

    return _run_parse(text)


def run_format(
    text: str,
    config: FormatConfig | None = None,
    *,
    parse: RustParseResult | None = None,
) -> FormatRunResult:
    from rsfmtpy.pipeline.entrypoints import run_format as _run_format

    return _run_format(text, config, parse=parse)


__all__ = [
    "FormatRunResult",
    "RustParseResult",
    "run_format",
    "run_parse",
]
