"""Token source that hides trivia and records it separately."""

from dataclasses import dataclass

from rsfmtpy.diagnostics import Diagnostic
from rsfmtpy.lexer import Lexer, Token, TokenKind
from rsfmtpy.text import TextRange, TextSize

_TRIVIA: frozenset[TokenKind] = frozenset({TokenKind.WHITESPACE, TokenKind.NEWLINE, TokenKind.COMMENT})


@dataclass(frozen=True, slots=True)
class TokenSourceCheckpoint:
    position: int


class TokenSource:
    """Bridge between lexer and parser.

    The whole file is lexed up front; the parser walks the non-trivia tokens by
    index, so lookahead and rewinding are plain index arithmetic. Unknown bytes
    (SKIPPED) are handed to the parser so they surface as syntax errors.
    """

    def __init__(self, lexer: Lexer) -> None:
        self._text = lexer.source
        self._tokens: list[Token] = []
        self._trivia: list[TextRange] = []
        for token in lexer.lex():
            if token.kind in _TRIVIA:
                self._trivia.append(token.range)
            else:
                self._tokens.append(token)
        self._lexer_diagnostics = lexer.diagnostics
        self._position = 0

    @property
    def current(self) -> TokenKind:
        return self._tokens[self._position].kind

    @property
    def current_token(self) -> Token:
        return self._tokens[self._position]

    @property
    def current_range(self) -> TextRange:
        return self._tokens[self._position].range

    @property
    def text(self) -> str:
        return self._text

    @property
    def position(self) -> TextSize:
        return self.current_range.start

    @property
    def has_preceding_line_break(self) -> bool:
        return self.current_token.has_preceding_line_break()

    @property
    def has_preceding_trivia(self) -> bool:
        return self.current_token.has_preceding_trivia()

    @property
    def trivia(self) -> list[TextRange]:
        return self._trivia

    @property
    def checkpoint(self) -> TokenSourceCheckpoint:
        return TokenSourceCheckpoint(self._position)

    def bump(self) -> None:
        if self.current != TokenKind.EOF:
            self._position += 1

    def nth_token(self, n: int) -> Token:
        index = min(self._position + n, len(self._tokens) - 1)
        return self._tokens[index]

    def nth(self, n: int) -> TokenKind:
        return self.nth_token(n).kind

    def nth_range(self, n: int) -> TextRange:
        return self.nth_token(n).range

    def nth_text(self, n: int) -> str:
        rng = self.nth_range(n)
        return self._text[rng.start.value : rng.end.value]

    def has_nth_preceding_trivia(self, n: int) -> bool:
        return self.nth_token(n).has_preceding_trivia()

    def rewind(self, checkpoint: TokenSourceCheckpoint) -> None:
        self._position = checkpoint.position

    def finish(self) -> tuple[list[TextRange], list[Diagnostic]]:
        return (self._trivia, list(self._lexer_diagnostics))
