"""Lexer."""

from rsfmtpy.diagnostics import Diagnostic
from rsfmtpy.diagnostics.codes import (
    LEXER_UNTERMINATED_CHAR,
    LEXER_UNTERMINATED_COMMENT,
    LEXER_UNTERMINATED_STRING,
    DiagnosticSpec,
)
from rsfmtpy.lexer.tokens import Token, TokenFlags, TokenKind
from rsfmtpy.text import TextRange, TextSize, slice_text_range

_THREE_CHAR: dict[str, TokenKind] = {
    "..=": TokenKind.DOT_DOT_EQUAL,
    "...": TokenKind.DOT_DOT_DOT,
}

# `<` and `>` are never glued to a following `<` or `>`, so `Vec<Vec<u8>>` and `a >> b` both see two `>`.
# The parser rebuilds `<<`, `>>`, `>=`, `<<=` and `>>=` from adjacent tokens.
_TWO_CHAR: dict[str, TokenKind] = {
    "==": TokenKind.EQUAL_EQUAL,
    "!=": TokenKind.NOT_EQUAL,
    "<=": TokenKind.LESS_THAN_OR_EQUAL,
    "=>": TokenKind.FAT_ARROW,
    "->": TokenKind.THIN_ARROW,
    "&&": TokenKind.AMP_AMP,
    "||": TokenKind.PIPE_PIPE,
    "+=": TokenKind.PLUS_EQUAL,
    "-=": TokenKind.MINUS_EQUAL,
    "*=": TokenKind.STAR_EQUAL,
    "/=": TokenKind.SLASH_EQUAL,
    "%=": TokenKind.PERCENT_EQUAL,
    "^=": TokenKind.CARET_EQUAL,
    "&=": TokenKind.AMP_EQUAL,
    "|=": TokenKind.PIPE_EQUAL,
    "..": TokenKind.DOT_DOT,
    "::": TokenKind.COLON_COLON,
}

_ONE_CHAR: dict[str, TokenKind] = {
    "=": TokenKind.EQUAL,
    "<": TokenKind.LESS_THAN,
    ">": TokenKind.GREATER_THAN,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "%": TokenKind.PERCENT,
    "^": TokenKind.CARET,
    "|": TokenKind.PIPE,
    "&": TokenKind.AMP,
    "?": TokenKind.QUESTION,
    "!": TokenKind.BANG,
    ":": TokenKind.COLON,
    ";": TokenKind.SEMICOLON,
    ",": TokenKind.COMMA,
    ".": TokenKind.DOT,
    "/": TokenKind.SLASH,
    "@": TokenKind.AT,
    "#": TokenKind.POUND,
    "$": TokenKind.DOLLAR,
    "~": TokenKind.TILDE,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
}


def _is_ident_start(ch: str) -> bool:
    return ch == "_" or ch.isalpha()


def _is_ident_continue(ch: str) -> bool:
    return ch == "_" or ch.isalnum()


class Lexer:
    """Lossless lexer that emits trivia and non-trivia tokens.

    `start` and `end` restrict lexing to a slice of `source` while keeping
    token ranges in whole-source coordinates; the formatter uses this to
    re-scan the trivia between two tokens.
    """

    def __init__(self, source: str, *, start: int = 0, end: int | None = None) -> None:
        self._source = source
        self._position = start
        self._end = len(source) if end is None else end
        self._after_newline = False
        self._after_trivia = False
        self._previous_significant = TokenKind.EOF
        self._current_start = TextSize.from_int(start)
        self._current_kind = TokenKind.EOF
        self._current_flags = TokenFlags.NONE
        self._eof_emitted = False
        self._diagnostics: list[Diagnostic] = []

    @property
    def source(self) -> str:
        """Original source text."""
        return self._source

    @property
    def diagnostics(self) -> list[Diagnostic]:
        """List of diagnostics emitted during lexing."""
        return self._diagnostics

    @property
    def current(self) -> TokenKind:
        return self._current_kind

    @property
    def current_range(self) -> TextRange:
        return TextRange.new(self._current_start, TextSize.from_int(self._position))

    @property
    def position(self) -> int:
        return self._position

    @property
    def is_eof(self) -> bool:
        return self._position >= self._end

    @property
    def next_token(self) -> Token:
        self._current_start = TextSize.from_int(self._position)
        self._current_flags = TokenFlags.NONE

        if self.is_eof:
            self._eof_emitted = True
            self._current_kind = TokenKind.EOF
            return Token(TokenKind.EOF, TextRange.empty(self._current_start), self._current_flags)

        kind = self._lex_token()
        if self._after_newline:
            self._current_flags |= TokenFlags.PRECEDING_LINE_BREAK
        if self._after_trivia:
            self._current_flags |= TokenFlags.PRECEDING_TRIVIA
        self._current_kind = kind

        if kind.is_trivia:
            self._after_trivia = True
        else:
            self._after_newline = False
            self._after_trivia = False
            self._previous_significant = kind

        return Token(kind, self.current_range, self._current_flags)

    def lex(self) -> list[Token]:
        tokens: list[Token] = []
        while True:
            token = self.next_token
            tokens.append(token)
            if token.kind == TokenKind.EOF:
                break
        return tokens

    def _lex_token(self) -> TokenKind:
        ch = self._current_char()

        if ch == "\r" or ch == "\n":
            self._consume_newline()
            self._after_newline = True
            return TokenKind.NEWLINE
        if ch.isspace():
            self._consume_whitespaces()
            return TokenKind.WHITESPACE

        if ch == "/" and self._peek_char() == "/":
            return self._lex_line_comment()
        if ch == "/" and self._peek_char() == "*":
            return self._lex_block_comment()

        if ch == '"':
            return self._lex_string(prefix=0)
        if ch == "'":
            return self._lex_char_or_lifetime()

        if ch.isdigit():
            return self._lex_number()

        if _is_ident_start(ch):
            return self._lex_prefixed_literal_or_identifier()

        for table, width in ((_THREE_CHAR, 3), (_TWO_CHAR, 2)):
            kind = table.get(self._source[self._position : min(self._position + width, self._end)])
            if kind is not None:
                self._advance(width)
                return kind

        kind = _ONE_CHAR.get(ch)
        if kind is not None:
            self._advance(1)
            return kind

        # Fallback: preserve bytes as SKIPPED for recovery.
        self._advance(1)
        return TokenKind.SKIPPED

    def _lex_line_comment(self) -> TokenKind:
        # Consume until end of line, do not consume the newline itself.
        self._advance(2)
        while not self.is_eof:
            ch = self._current_char()
            if ch == "\n" or ch == "\r":
                break
            self._advance(1)
        return TokenKind.COMMENT

    def _lex_block_comment(self) -> TokenKind:
        self._advance(2)
        self._current_flags |= TokenFlags.BLOCK_COMMENT
        depth = 1
        while not self.is_eof:
            ch = self._current_char()
            if ch == "/" and self._peek_char() == "*":
                depth += 1
                self._advance(2)
                continue
            if ch == "*" and self._peek_char() == "/":
                depth -= 1
                self._advance(2)
                if depth == 0:
                    return TokenKind.COMMENT
                continue
            self._advance(1)
        self._report(LEXER_UNTERMINATED_COMMENT)
        return TokenKind.COMMENT

    def _lex_string(self, prefix: int) -> TokenKind:
        self._advance(prefix + 1)
        while not self.is_eof:
            ch = self._current_char()
            if ch == '"':
                self._advance(1)
                self._consume_suffix()
                return TokenKind.STRING
            if ch == "\\":
                self._advance(2 if self._position + 1 < self._end else 1)
                continue
            self._advance(1)
        self._report(LEXER_UNTERMINATED_STRING)
        return TokenKind.STRING

    def _lex_raw_string(self, prefix: int) -> TokenKind:
        # prefix covers `r`, `br` or `cr`; then hashes, then the quote.
        self._advance(prefix)
        hashes = 0
        while self._current_char() == "#":
            hashes += 1
            self._advance(1)
        self._advance(1)
        closing = '"' + "#" * hashes
        end = self._source.find(closing, self._position, self._end)
        if end < 0:
            self._position = self._end
            self._report(LEXER_UNTERMINATED_STRING)
            return TokenKind.STRING
        self._position = end + len(closing)
        self._consume_suffix()
        return TokenKind.STRING

    def _lex_char_or_lifetime(self) -> TokenKind:
        next_ch = self._peek_char()
        # 'a' and '\n' are chars; 'a without a closing quote is a lifetime or label.
        if next_ch != "\\" and self._peek_char(2) != "'" and _is_ident_start(next_ch):
            self._advance(1)
            while not self.is_eof and _is_ident_continue(self._current_char()):
                self._advance(1)
            return TokenKind.LIFETIME
        return self._lex_char(prefix=0)

    def _lex_char(self, prefix: int) -> TokenKind:
        self._advance(prefix + 1)
        while not self.is_eof:
            ch = self._current_char()
            if ch == "'":
                self._advance(1)
                self._consume_suffix()
                return TokenKind.CHAR
            if ch == "\n":
                break
            if ch == "\\":
                self._advance(2 if self._position + 1 < self._end else 1)
                continue
            self._advance(1)
        self._report(LEXER_UNTERMINATED_CHAR)
        return TokenKind.CHAR

    def _lex_prefixed_literal_or_identifier(self) -> TokenKind:
        ch = self._current_char()
        next_ch = self._peek_char()
        if ch in "bc":
            if next_ch == '"':
                return self._lex_string(prefix=1)
            if ch == "b" and next_ch == "'":
                return self._lex_char(prefix=1)
            if next_ch == "r" and self._peek_char(2) in ('"', "#"):
                return self._lex_raw_string(prefix=2)
        if ch == "r":
            if next_ch == '"' or (next_ch == "#" and self._peek_char(2) in ('"', "#")):
                return self._lex_raw_string(prefix=1)
            if next_ch == "#" and _is_ident_start(self._peek_char(2)):
                # r#ident
                self._advance(2)
        return self._lex_identifier()

    def _lex_identifier(self) -> TokenKind:
        self._advance(1)
        while not self.is_eof and _is_ident_continue(self._current_char()):
            self._advance(1)
        return TokenKind.IDENT

    def _lex_number(self) -> TokenKind:
        if self._previous_significant == TokenKind.DOT:
            # Tuple field access: `x.0.1` is INT DOT INT, never a float.
            while not self.is_eof and self._current_char().isdigit():
                self._advance(1)
            return TokenKind.INT

        if self._current_char() == "0" and self._peek_char() in ("x", "o", "b"):
            self._advance(2)
            while not self.is_eof and (self._current_char().isalnum() or self._current_char() == "_"):
                self._advance(1)
            return TokenKind.INT

        is_float = False
        self._consume_digits()
        if self._current_char() == "." and self._peek_char() != "." and not _is_ident_start(self._peek_char()):
            is_float = True
            self._advance(1)
            self._consume_digits()
        if self._current_char() in ("e", "E"):
            ahead = 2 if self._peek_char() in ("+", "-") else 1
            if self._peek_char(ahead).isdigit():
                is_float = True
                self._advance(ahead)
                self._consume_digits()
        suffix_start = self._position
        self._consume_suffix()
        if self._source[suffix_start : self._position] in ("f32", "f64"):
            is_float = True
        return TokenKind.FLOAT if is_float else TokenKind.INT

    def _consume_digits(self) -> None:
        while not self.is_eof and (self._current_char().isdigit() or self._current_char() == "_"):
            self._advance(1)

    def _consume_suffix(self) -> None:
        if _is_ident_start(self._current_char()):
            while not self.is_eof and _is_ident_continue(self._current_char()):
                self._advance(1)

    def _consume_whitespaces(self) -> None:
        while not self.is_eof:
            ch = self._current_char()
            if ch != "\n" and ch != "\r" and ch.isspace():
                self._advance(1)
                continue
            break

    def _consume_newline(self) -> None:
        if self._current_char() == "\r" and self._peek_char() == "\n":
            self._advance(2)
        else:
            self._advance(1)

    def _report(self, spec: DiagnosticSpec) -> None:
        self._current_flags |= TokenFlags.UNTERMINATED
        self._diagnostics.append(Diagnostic.from_spec(spec, self.current_range))

    def _current_char(self) -> str:
        if self.is_eof:
            return "\0"
        return self._source[self._position]

    def _peek_char(self, ahead: int = 1) -> str:
        index = self._position + ahead
        if index >= self._end:
            return "\0"
        return self._source[index]

    def _advance(self, steps: int) -> None:
        self._position = min(self._position + steps, self._end)


def token_text(source: str, token: Token) -> str:
    """Get the text of a token from the source string based on its range."""
    if token.kind == TokenKind.EOF:
        return ""
    return slice_text_range(source, token.range)


def dump_tokens(tokens: list[Token], source: str, diagnostics: list[Diagnostic] | None = None) -> None:
    """Print token list with kind, range, flags, and text for debugging."""
    for i, tok in enumerate(tokens):
        text = token_text(source, tok)
        print(f"{i:03d} {tok.kind.name:<22} range={tok.range.as_tuple()} flags={tok.flags} text={text!r}")

    if diagnostics is not None:
        print("\nDiagnostics:")
        for d in diagnostics:
            print(f"- {d.severity.upper()} {d.code} range={d.range.as_tuple()} message={d.message}")
