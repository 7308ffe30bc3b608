"""Format runner over a CST or a shared Rust parse result."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rsfmtpy.diagnostics import FORMAT_LOST_COMMENT, Diagnostic, render_diagnostic
from rsfmtpy.format.arena import SegmentArena
from rsfmtpy.format.builder import SegmentBuilder
from rsfmtpy.format.config import FormatConfig
from rsfmtpy.format.errors import FormatError
from rsfmtpy.format.frontend import build_groups
from rsfmtpy.format.placement import place_comments
from rsfmtpy.format.render import render
from rsfmtpy.format.whitespace import Comment, GapTable

if TYPE_CHECKING:
    from rsfmtpy.cst import SyntaxNode
    from rsfmtpy.pipeline.result import RustParseResult
    from rsfmtpy.pipeline.results import FormatRunResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FormatResult:
    """Rendered text plus every comment that could not be placed."""

    text: str
    lost_comments: dict[int, list[Comment]] = field(default_factory=dict)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def lost_comment_count(self) -> int:
        return sum(len(comments) for comments in self.lost_comments.values())


def format_tree(root: SyntaxNode, source: str, config: FormatConfig | None = None) -> FormatResult:
    """Format an already parsed tree of `source`."""
    config = config if config is not None else FormatConfig()
    gaps = GapTable.from_tree(root, config)
    arena = SegmentArena()
    builder = SegmentBuilder(arena, gaps, source)
    root_handle = build_groups(root, builder)

    placement = place_comments(arena, root_handle, gaps, source, fatal=config.comment_errors_fatal)
    outcome = render(arena, root_handle, config, placement.dropped)

    diagnostics: list[Diagnostic] = []
    for offset, comments in sorted(placement.lost.items()):
        for comment in comments:
            logger.debug("Lost comment at offset %d: %r", offset, comment.text)
            diagnostics.append(Diagnostic.from_spec(FORMAT_LOST_COMMENT, comment.range))
    return FormatResult(text=outcome.text, lost_comments=dict(placement.lost), diagnostics=diagnostics)


def format_str(source: str, config: FormatConfig | None = None) -> FormatResult:
    """Parse and format `source`; raises `FormatError` when it does not parse."""
    from rsfmtpy.parser import parse_result

    parsed = parse_result(source)
    if parsed.has_errors:
        first = render_diagnostic(parsed.diagnostics[0], source)
        raise FormatError(f"Source has syntax errors: {first}", parsed.diagnostics)
    return format_tree(parsed.syntax_root(), source, config)


def run_format(
    text: str,
    config: FormatConfig | None = None,
    *,
    parse: RustParseResult | None = None,
) -> FormatRunResult:
    """Run formatting from a single parse lifecycle.

    Sources with syntax errors come back unchanged with the parser diagnostics.
    """
    from rsfmtpy.pipeline.results import FormatRunResult

    resolved_parse = _resolve_parse(text, parse=parse)
    diagnostics = list(resolved_parse.diagnostics)
    if resolved_parse.has_errors:
        return FormatRunResult(
            parse=resolved_parse,
            formatted_text=resolved_parse.source_text,
            diagnostics=diagnostics,
            changed=False,
        )

    result = format_tree(resolved_parse.syntax_root(), resolved_parse.source_text, config)
    diagnostics.extend(result.diagnostics)
    return FormatRunResult(
        parse=resolved_parse,
        formatted_text=result.text,
        diagnostics=diagnostics,
        changed=result.text != resolved_parse.source_text,
    )


def _resolve_parse(text: str, *, parse: RustParseResult | None) -> RustParseResult:
    if parse is not None:
        if parse.source_text != text:
            raise ValueError("Provided parse result was built from different text")
        return parse
    from rsfmtpy.parser import parse_result

    return parse_result(text)
