"""Event-based parser core."""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from rsfmtpy.diagnostics import Diagnostic
from rsfmtpy.diagnostics.codes import PARSER_EXPECTED_TOKEN, DiagnosticSpec
from rsfmtpy.lexer import TokenKind
from rsfmtpy.parser.event import TOMBSTONE, Event, TokenEvent
from rsfmtpy.parser.marker import Marker
from rsfmtpy.parser.token_source import TokenSource, TokenSourceCheckpoint
from rsfmtpy.syntax import RustSyntaxKind
from rsfmtpy.text import TextRange, TextSize

_TOKEN_DISPLAY: dict[TokenKind, str] = {
    TokenKind.LBRACE: "`{`",
    TokenKind.RBRACE: "`}`",
    TokenKind.LPAREN: "`(`",
    TokenKind.RPAREN: "`)`",
    TokenKind.LBRACKET: "`[`",
    TokenKind.RBRACKET: "`]`",
    TokenKind.SEMICOLON: "`;`",
    TokenKind.COLON: "`:`",
    TokenKind.COMMA: "`,`",
    TokenKind.EQUAL: "`=`",
    TokenKind.GREATER_THAN: "`>`",
    TokenKind.FAT_ARROW: "`=>`",
    TokenKind.PIPE: "`|`",
    TokenKind.IDENT: "identifier",
}


@dataclass(frozen=True, slots=True)
class ParserCheckpoint:
    source_checkpoint: TokenSourceCheckpoint
    events_len: int
    diagnostics_len: int
    speculative_depth: int


@dataclass(slots=True)
class ParserProgress:
    """Detect parser stalls inside list-style loops."""

    _position: TextSize | None = None

    def has_progressed(self, parser: "Parser") -> bool:
        has_progressed = self._position is None or self._position < parser.position
        self._position = parser.position
        return has_progressed

    def assert_progressing(self, parser: "Parser") -> None:
        if not self.has_progressed(parser):
            raise RuntimeError(f"Parser stopped making progress at {parser.current.name} {parser.current_range}")


class Parser:
    """Event-based parser."""

    def __init__(self, source: TokenSource) -> None:
        self._source = source
        self._events: list[Event] = []
        self._diagnostics: list[Diagnostic] = []
        self._speculative_depth = 0
        self._no_struct_literal = False

    @property
    def source(self) -> TokenSource:
        return self._source

    @property
    def events(self) -> list[Event]:
        return self._events

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return self._diagnostics

    @property
    def current(self) -> TokenKind:
        return self._source.current

    @property
    def current_range(self) -> TextRange:
        return self._source.current_range

    @property
    def current_text(self) -> str:
        return self._source.nth_text(0)

    @property
    def position(self) -> TextSize:
        return self._source.position

    @property
    def has_preceding_line_break(self) -> bool:
        return self._source.has_preceding_line_break

    @property
    def struct_literal_allowed(self) -> bool:
        return not self._no_struct_literal

    def at(self, kind: TokenKind) -> bool:
        return self.current == kind

    def at_set(self, kinds: frozenset[TokenKind] | set[TokenKind]) -> bool:
        return self.current in kinds

    def at_keyword(self, text: str) -> bool:
        return self.current == TokenKind.IDENT and self.current_text == text

    def nth(self, n: int) -> TokenKind:
        return self._source.nth(n)

    def nth_at(self, n: int, kind: TokenKind) -> bool:
        return self._source.nth(n) == kind

    def nth_at_keyword(self, n: int, text: str) -> bool:
        return self._source.nth(n) == TokenKind.IDENT and self._source.nth_text(n) == text

    def nth_text(self, n: int) -> str:
        return self._source.nth_text(n)

    def nth_range(self, n: int) -> TextRange:
        return self._source.nth_range(n)

    def is_joint(self, n: int) -> bool:
        """True when token `n` directly touches token `n - 1` (no trivia between)."""
        return not self._source.has_nth_preceding_trivia(n)

    def start(self) -> Marker:
        pos = len(self._events)
        self._events.append(TOMBSTONE)
        return Marker(pos=pos, start=self.position)

    def checkpoint(self) -> ParserCheckpoint:
        return ParserCheckpoint(
            source_checkpoint=self._source.checkpoint,
            events_len=len(self._events),
            diagnostics_len=len(self._diagnostics),
            speculative_depth=self._speculative_depth,
        )

    def rewind(self, checkpoint: ParserCheckpoint) -> None:
        self._source.rewind(checkpoint.source_checkpoint)
        del self._events[checkpoint.events_len :]
        del self._diagnostics[checkpoint.diagnostics_len :]
        self._speculative_depth = checkpoint.speculative_depth

    @contextmanager
    def speculative_parsing(self) -> Iterator[None]:
        self._speculative_depth += 1
        try:
            yield
        finally:
            self._speculative_depth -= 1

    @contextmanager
    def struct_literals(self, allowed: bool) -> Iterator[None]:
        """Toggle `Path { .. }` literals; off inside `if`/`while`/`match` heads."""
        previous = self._no_struct_literal
        self._no_struct_literal = not allowed
        try:
            yield
        finally:
            self._no_struct_literal = previous

    def bump(self) -> None:
        if self.current == TokenKind.EOF:
            return
        self._events.append(
            TokenEvent(
                kind=RustSyntaxKind.from_token_kind(self.current),
                end=self.current_range.end,
            )
        )
        self._source.bump()

    def bump_n(self, count: int) -> None:
        for _ in range(count):
            self.bump()

    def eat(self, kind: TokenKind) -> bool:
        if self.current == kind:
            self.bump()
            return True
        return False

    def eat_keyword(self, text: str) -> bool:
        if self.at_keyword(text):
            self.bump()
            return True
        return False

    def expect(self, kind: TokenKind) -> bool:
        if self.eat(kind):
            return True
        self.error(
            Diagnostic.from_spec(
                PARSER_EXPECTED_TOKEN,
                self.current_range,
                f"Expected {_TOKEN_DISPLAY.get(kind, kind.name)}",
            )
        )
        return False

    def expect_keyword(self, text: str) -> bool:
        if self.eat_keyword(text):
            return True
        self.error(Diagnostic.from_spec(PARSER_EXPECTED_TOKEN, self.current_range, f"Expected `{text}`"))
        return False

    def error_here(self, spec: DiagnosticSpec, message: str | None = None) -> None:
        self.error(Diagnostic.from_spec(spec, self.current_range, message))

    def error(self, diagnostic: Diagnostic) -> None:
        if self._diagnostics:
            previous = self._diagnostics[-1]
            if previous.range.start == diagnostic.range.start:
                return
        self._diagnostics.append(diagnostic)

    def is_speculative_parsing(self) -> bool:
        return self._speculative_depth > 0

    def finish(self) -> tuple[list[Event], list[Diagnostic]]:
        return self._events, self._diagnostics
