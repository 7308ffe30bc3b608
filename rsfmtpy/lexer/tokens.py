"""Lexer tokens."""

from dataclasses import dataclass
from enum import IntEnum, IntFlag
from typing import Final

from rsfmtpy.text import TextRange, TextSize


class TokenKind(IntEnum):
    # -------------------------
    # Special / sentinels
    # -------------------------
    EOF = 1

    # -------------------------
    # Trivia tokens (emitted by the lexer)
    # -------------------------
    WHITESPACE = 10
    NEWLINE = 11
    COMMENT = 12
    SKIPPED = 13  # unknown bytes, preserved so ranges still tile the source

    # -------------------------
    # Identifiers / literals
    # -------------------------
    IDENT = 20  # keywords included; the parser checks the text
    LIFETIME = 21  # 'a
    STRING = 22  # "..", r#".."#, b"..", c".."
    CHAR = 23  # 'a', b'a'
    INT = 24
    FLOAT = 25

    # -------------------------
    # Operators (multi-char included)
    # -------------------------
    EQUAL = 30  # =
    EQUAL_EQUAL = 31  # ==
    NOT_EQUAL = 32  # !=
    LESS_THAN_OR_EQUAL = 33  # <=
    LESS_THAN = 35  # <
    GREATER_THAN = 36  # > (never glued; `>>` is two tokens)
    FAT_ARROW = 37  # =>
    THIN_ARROW = 38  # ->
    AMP_AMP = 39  # &&
    PIPE_PIPE = 40  # ||
    PLUS_EQUAL = 42  # +=
    MINUS_EQUAL = 43  # -=
    STAR_EQUAL = 44  # *=
    SLASH_EQUAL = 45  # /=
    PERCENT_EQUAL = 46  # %=
    CARET_EQUAL = 47  # ^=
    AMP_EQUAL = 48  # &=
    PIPE_EQUAL = 49  # |=
    DOT_DOT = 51  # ..
    DOT_DOT_EQUAL = 52  # ..=
    DOT_DOT_DOT = 53  # ...
    COLON_COLON = 54  # ::

    # -------------------------
    # Punctuation / separators
    # -------------------------
    COLON = 60  # :
    SEMICOLON = 61  # ;
    COMMA = 62  # ,
    DOT = 63  # .
    SLASH = 64  # /
    AT = 65  # @
    POUND = 66  # #
    DOLLAR = 67  # $
    TILDE = 68  # ~

    PLUS = 70  # +
    MINUS = 71  # -
    STAR = 72  # *
    PERCENT = 73  # %
    CARET = 74  # ^
    PIPE = 75  # |
    AMP = 76  # &
    QUESTION = 77  # ?
    BANG = 78  # !

    LBRACE = 80  # {
    RBRACE = 81  # }
    LBRACKET = 82  # [
    RBRACKET = 83  # ]
    LPAREN = 84  # (
    RPAREN = 85  # )

    @property
    def is_trivia(self) -> bool:
        return self in (
            TokenKind.WHITESPACE,
            TokenKind.NEWLINE,
            TokenKind.COMMENT,
            TokenKind.SKIPPED,
        )


class TokenFlags(IntFlag):
    """Token metadata flags."""

    NONE = 0
    PRECEDING_LINE_BREAK = 1 << 0  # NEWLINE before
    PRECEDING_TRIVIA = 1 << 1  # any trivia before; unset means the token is glued to the previous one
    BLOCK_COMMENT = 1 << 2  # COMMENT written as /* */
    UNTERMINATED = 1 << 3


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexed token (trivia or non-trivia)."""

    kind: TokenKind
    range: TextRange
    flags: TokenFlags = TokenFlags.NONE

    def has_preceding_line_break(self) -> bool:
        return bool(self.flags & TokenFlags.PRECEDING_LINE_BREAK)

    def has_preceding_trivia(self) -> bool:
        return bool(self.flags & TokenFlags.PRECEDING_TRIVIA)

    def is_block_comment(self) -> bool:
        return bool(self.flags & TokenFlags.BLOCK_COMMENT)


# A small constant that is used everywhere.
EOF_TOKEN: Final[Token] = Token(TokenKind.EOF, TextRange.empty(TextSize.from_int(0)))
