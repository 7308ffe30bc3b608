"""Biome-style parser recovery primitives."""

from dataclasses import dataclass
from enum import StrEnum

from rsfmtpy.lexer import TokenKind
from rsfmtpy.parser.marker import CompletedMarker
from rsfmtpy.parser.parser import Parser
from rsfmtpy.syntax import RustSyntaxKind

_OPENERS: dict[TokenKind, TokenKind] = {
    TokenKind.LBRACE: TokenKind.RBRACE,
    TokenKind.LPAREN: TokenKind.RPAREN,
    TokenKind.LBRACKET: TokenKind.RBRACKET,
}


class RecoveryError(StrEnum):
    EOF = "eof"
    RECOVERY_DISABLED = "recovery_disabled"


@dataclass(frozen=True, slots=True)
class ParseRecoveryTokenSet:
    """Recover by consuming tokens into an ERROR node until a safe token is reached.

    Delimited groups are skipped as a whole so a stray `{ ... }` does not end
    recovery at its own closing brace.
    """

    node_kind: RustSyntaxKind
    recovery_set: frozenset[TokenKind]
    line_break: bool = False

    def enable_recovery_on_line_break(self) -> "ParseRecoveryTokenSet":
        return ParseRecoveryTokenSet(
            node_kind=self.node_kind,
            recovery_set=self.recovery_set,
            line_break=True,
        )

    def recover(self, parser: Parser) -> tuple[CompletedMarker | None, RecoveryError | None]:
        if parser.at(TokenKind.EOF):
            return None, RecoveryError.EOF

        if parser.is_speculative_parsing():
            return None, RecoveryError.RECOVERY_DISABLED

        # Always consume the offending token, then stop at the first safe one.
        marker = parser.start()
        while True:
            if parser.current in _OPENERS:
                skip_delimited(parser)
            else:
                parser.bump()
            if parser.at(TokenKind.EOF) or self.is_at_recovered(parser):
                break

        return marker.complete(parser, self.node_kind), None

    def is_at_recovered(self, parser: Parser) -> bool:
        return parser.at_set(self.recovery_set) or (self.line_break and parser.has_preceding_line_break)


def skip_delimited(parser: Parser) -> None:
    """Bump a balanced `(..)`, `[..]` or `{..}` run without building nodes."""
    stack: list[TokenKind] = []
    while not parser.at(TokenKind.EOF):
        kind = parser.current
        if kind in _OPENERS:
            stack.append(_OPENERS[kind])
        elif stack and kind == stack[-1]:
            stack.pop()
        parser.bump()
        if not stack:
            return
