"""Biome-style reusable node-list parse loop helpers."""

from collections.abc import Callable
from dataclasses import dataclass

from rsfmtpy.lexer import TokenKind
from rsfmtpy.parser.marker import CompletedMarker
from rsfmtpy.parser.parse_recovery import ParseRecoveryTokenSet
from rsfmtpy.parser.parser import Parser, ParserProgress
from rsfmtpy.syntax import RustSyntaxKind


@dataclass(slots=True)
class ParseNodeList:
    """Non-separated list loop: items, statements, match arms.

    Elements are parsed in place (no wrapping list node); a failed element is
    reported and skipped with `recovery`.
    """

    is_at_list_end: Callable[[Parser], bool]
    parse_element: Callable[[Parser], bool]
    recovery: ParseRecoveryTokenSet
    on_failure: Callable[[Parser], None]

    def parse_list(self, parser: Parser) -> None:
        progress = ParserProgress()

        while not parser.at(TokenKind.EOF) and not self.is_at_list_end(parser):
            progress.assert_progressing(parser)
            if self.parse_element(parser):
                continue
            self.on_failure(parser)
            _, recovery_error = self.recovery.recover(parser)
            if recovery_error is not None:
                break


@dataclass(slots=True)
class ParseSeparatedList:
    """Comma separated list between delimiters, trailing separator allowed."""

    list_kind: RustSyntaxKind | None
    closing: TokenKind
    parse_element: Callable[[Parser], bool]
    on_failure: Callable[[Parser], None]
    separator: TokenKind = TokenKind.COMMA

    def parse_list(self, parser: Parser) -> CompletedMarker | None:
        marker = parser.start() if self.list_kind is not None else None
        progress = ParserProgress()

        while not parser.at(TokenKind.EOF) and not parser.at(self.closing):
            progress.assert_progressing(parser)
            if not self.parse_element(parser):
                self.on_failure(parser)
                recovery = ParseRecoveryTokenSet(
                    node_kind=RustSyntaxKind.ERROR,
                    recovery_set=frozenset({self.separator, self.closing}),
                )
                _, recovery_error = recovery.recover(parser)
                if recovery_error is not None:
                    break
            if not parser.eat(self.separator):
                break

        if marker is None or self.list_kind is None:
            return None
        return marker.complete(parser, self.list_kind)
