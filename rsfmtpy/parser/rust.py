"""High-level parse entrypoint for Rust source text."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rsfmtpy.diagnostics import collect_diagnostics
from rsfmtpy.lexer import Lexer
from rsfmtpy.parser.event import process_events
from rsfmtpy.parser.grammar import parse_source_file
from rsfmtpy.parser.parser import Parser
from rsfmtpy.parser.token_source import TokenSource
from rsfmtpy.parser.tree_sink import LosslessTreeSink, ParsedGreenTree

if TYPE_CHECKING:
    from rsfmtpy.pipeline import RustParseResult


def parse(text: str) -> ParsedGreenTree:
    lexer = Lexer(text)
    source = TokenSource(lexer)
    parser = Parser(source)

    parse_source_file(parser)
    events, parser_diagnostics = parser.finish()
    trivia, lexer_diagnostics = source.finish()
    diagnostics = collect_diagnostics(lexer_diagnostics, parser_diagnostics)

    sink = LosslessTreeSink(text=text, trivia=trivia)
    process_events(sink, events)
    return sink.finish(diagnostics)


def parse_result(text: str) -> RustParseResult:
    from rsfmtpy.pipeline import RustParseResult

    return RustParseResult(source_text=text, parsed=parse(text))
