"""Pattern grammar."""

from rsfmtpy.diagnostics.codes import PARSER_EXPECTED_PATTERN
from rsfmtpy.lexer import TokenKind
from rsfmtpy.parser.grammar import common
from rsfmtpy.parser.grammar.common import PathMode
from rsfmtpy.parser.marker import CompletedMarker
from rsfmtpy.parser.parser import Parser
from rsfmtpy.syntax import RustSyntaxKind

_LITERAL_TOKENS: frozenset[TokenKind] = frozenset(
    {TokenKind.INT, TokenKind.FLOAT, TokenKind.STRING, TokenKind.CHAR}
)
_RANGE_OPERATORS: frozenset[TokenKind] = frozenset(
    {TokenKind.DOT_DOT, TokenKind.DOT_DOT_EQUAL, TokenKind.DOT_DOT_DOT}
)
_PATTERN_END: frozenset[TokenKind] = frozenset(
    {
        TokenKind.COMMA,
        TokenKind.RPAREN,
        TokenKind.RBRACKET,
        TokenKind.RBRACE,
        TokenKind.FAT_ARROW,
        TokenKind.EQUAL,
        TokenKind.PIPE,
        TokenKind.COLON,
        TokenKind.EOF,
    }
)


def at_pattern_start(parser: Parser) -> bool:
    return (
        parser.at_set(_LITERAL_TOKENS)
        or parser.at_set(
            frozenset(
                {
                    TokenKind.LPAREN,
                    TokenKind.LBRACKET,
                    TokenKind.AMP,
                    TokenKind.AMP_AMP,
                    TokenKind.MINUS,
                    TokenKind.DOT_DOT,
                    TokenKind.DOT_DOT_EQUAL,
                    TokenKind.PIPE,
                }
            )
        )
        or parser.at_keyword("ref")
        or parser.at_keyword("mut")
        or parser.at_keyword("true")
        or parser.at_keyword("false")
        or parser.at_keyword("_")
        or common.at_path_start(parser)
    )


def parse_pattern(parser: Parser) -> CompletedMarker | None:
    """Top-level pattern: or-patterns with an optional leading `|`."""
    marker = parser.start()
    leading_pipe = parser.eat(TokenKind.PIPE)
    first = parse_pattern_single(parser)
    if first is None:
        if leading_pipe:
            return marker.complete(parser, RustSyntaxKind.OR_PAT)
        marker.abandon(parser)
        return None
    if not parser.at(TokenKind.PIPE) and not leading_pipe:
        marker.abandon(parser)
        return first
    while parser.eat(TokenKind.PIPE):
        if parse_pattern_single(parser) is None:
            break
    return marker.complete(parser, RustSyntaxKind.OR_PAT)


def parse_pattern_no_top_alt(parser: Parser) -> CompletedMarker | None:
    """Pattern without top-level `|`; closure parameters use this."""
    return parse_pattern_single(parser)


def parse_pattern_single(parser: Parser) -> CompletedMarker | None:
    if parser.at(TokenKind.LPAREN):
        return _parse_delimited_pattern(parser, TokenKind.RPAREN, RustSyntaxKind.TUPLE_PAT)
    if parser.at(TokenKind.LBRACKET):
        return _parse_delimited_pattern(parser, TokenKind.RBRACKET, RustSyntaxKind.SLICE_PAT)
    if parser.at(TokenKind.AMP) or parser.at(TokenKind.AMP_AMP):
        marker = parser.start()
        parser.bump()
        parser.eat_keyword("mut")
        parse_pattern_single(parser)
        return marker.complete(parser, RustSyntaxKind.REF_PAT)
    if parser.at(TokenKind.DOT_DOT) and parser.nth(1) in _PATTERN_END:
        marker = parser.start()
        parser.bump()
        return marker.complete(parser, RustSyntaxKind.REST_PAT)
    if parser.at(TokenKind.DOT_DOT_EQUAL) or parser.at(TokenKind.DOT_DOT):
        # Half-open `..=X`.
        marker = parser.start()
        parser.bump()
        _parse_range_end(parser)
        return marker.complete(parser, RustSyntaxKind.RANGE_PAT)
    if parser.at_keyword("_"):
        marker = parser.start()
        parser.bump()
        return marker.complete(parser, RustSyntaxKind.WILDCARD_PAT)
    if _at_literal(parser):
        literal = _parse_literal_pattern(parser)
        return _maybe_range(parser, literal)
    if parser.at_keyword("ref") or parser.at_keyword("mut") or _at_binding(parser):
        return _parse_ident_pattern(parser)
    if common.at_path_start(parser):
        return _parse_path_pattern(parser)

    parser.error_here(PARSER_EXPECTED_PATTERN)
    return None


def _at_literal(parser: Parser) -> bool:
    if parser.at_set(_LITERAL_TOKENS):
        return True
    if parser.at(TokenKind.MINUS) and parser.nth(1) in (TokenKind.INT, TokenKind.FLOAT):
        return True
    return parser.at_keyword("true") or parser.at_keyword("false")


def _at_binding(parser: Parser) -> bool:
    """A plain identifier that is not the start of a longer path pattern."""
    if not parser.at(TokenKind.IDENT) or parser.current_text in common.RESERVED:
        return False
    if parser.current_text in common.PATH_KEYWORDS and parser.current_text != "self":
        return False
    return parser.nth(1) not in (
        TokenKind.COLON_COLON,
        TokenKind.LPAREN,
        TokenKind.LBRACE,
        TokenKind.BANG,
        TokenKind.DOT_DOT,
        TokenKind.DOT_DOT_EQUAL,
        TokenKind.DOT_DOT_DOT,
    )


def _parse_literal_pattern(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.eat(TokenKind.MINUS)
    parser.bump()
    return marker.complete(parser, RustSyntaxKind.LITERAL_PAT)


def _maybe_range(parser: Parser, start: CompletedMarker) -> CompletedMarker:
    if not parser.at_set(_RANGE_OPERATORS):
        return start
    marker = start.precede(parser)
    parser.bump()
    if parser.current not in _PATTERN_END:
        _parse_range_end(parser)
    return marker.complete(parser, RustSyntaxKind.RANGE_PAT)


def _parse_range_end(parser: Parser) -> None:
    if _at_literal(parser):
        _parse_literal_pattern(parser)
    elif common.at_path_start(parser):
        marker = parser.start()
        common.parse_path(parser, PathMode.EXPR)
        marker.complete(parser, RustSyntaxKind.PATH_PAT)
    else:
        parser.error_here(PARSER_EXPECTED_PATTERN)


def _parse_ident_pattern(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.eat_keyword("ref")
    parser.eat_keyword("mut")
    common.parse_name(parser)
    if parser.eat(TokenKind.AT):
        parse_pattern_single(parser)
    return marker.complete(parser, RustSyntaxKind.IDENT_PAT)


def _parse_path_pattern(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    common.parse_path(parser, PathMode.EXPR)
    if parser.at(TokenKind.BANG) and parser.nth(1) in common.DELIMITERS:
        parser.bump()
        common.parse_token_tree(parser)
        return marker.complete(parser, RustSyntaxKind.MACRO_CALL)
    if parser.at(TokenKind.LPAREN):
        parser.bump()
        _parse_pattern_items(parser, TokenKind.RPAREN)
        parser.expect(TokenKind.RPAREN)
        return marker.complete(parser, RustSyntaxKind.TUPLE_STRUCT_PAT)
    if parser.at(TokenKind.LBRACE):
        _parse_record_pattern_fields(parser)
        return marker.complete(parser, RustSyntaxKind.RECORD_PAT)
    path = marker.complete(parser, RustSyntaxKind.PATH_PAT)
    return _maybe_range(parser, path)


def _parse_delimited_pattern(parser: Parser, closing: TokenKind, kind: RustSyntaxKind) -> CompletedMarker:
    marker = parser.start()
    parser.bump()
    _parse_pattern_items(parser, closing)
    parser.expect(closing)
    return marker.complete(parser, kind)


def _parse_pattern_items(parser: Parser, closing: TokenKind) -> None:
    while not parser.at(TokenKind.EOF) and not parser.at(closing):
        if parse_pattern(parser) is None:
            break
        if not parser.eat(TokenKind.COMMA):
            break


def _parse_record_pattern_fields(parser: Parser) -> None:
    parser.bump()
    while not parser.at(TokenKind.EOF) and not parser.at(TokenKind.RBRACE):
        field = parser.start()
        common.parse_attributes(parser)
        if parser.at(TokenKind.DOT_DOT):
            parser.bump()
            field.complete(parser, RustSyntaxKind.REST_PAT)
        elif parser.at(TokenKind.IDENT) and parser.nth_at(1, TokenKind.COLON):
            parser.bump_n(2)
            parse_pattern(parser)
            field.complete(parser, RustSyntaxKind.RECORD_PAT_FIELD)
        elif parser.at(TokenKind.INT) and parser.nth_at(1, TokenKind.COLON):
            parser.bump_n(2)
            parse_pattern(parser)
            field.complete(parser, RustSyntaxKind.RECORD_PAT_FIELD)
        elif parser.at_keyword("ref") or parser.at_keyword("mut") or parser.at(TokenKind.IDENT):
            _parse_ident_pattern(parser)
            field.complete(parser, RustSyntaxKind.RECORD_PAT_FIELD)
        else:
            field.abandon(parser)
            parser.error_here(PARSER_EXPECTED_PATTERN)
            break
        if not parser.eat(TokenKind.COMMA):
            break
    parser.expect(TokenKind.RBRACE)
