"""Type grammar."""

from rsfmtpy.diagnostics.codes import PARSER_EXPECTED_TYPE
from rsfmtpy.lexer import TokenKind
from rsfmtpy.parser.grammar import common, expressions
from rsfmtpy.parser.grammar.common import PathMode
from rsfmtpy.parser.marker import CompletedMarker
from rsfmtpy.parser.parser import Parser
from rsfmtpy.syntax import RustSyntaxKind

_TYPE_START_TOKENS: frozenset[TokenKind] = frozenset(
    {
        TokenKind.LPAREN,
        TokenKind.LBRACKET,
        TokenKind.BANG,
        TokenKind.AMP,
        TokenKind.AMP_AMP,
        TokenKind.STAR,
        TokenKind.LESS_THAN,
        TokenKind.COLON_COLON,
    }
)

_TYPE_KEYWORDS: frozenset[str] = frozenset({"fn", "unsafe", "extern", "impl", "dyn", "for", "_"})


def at_type_start(parser: Parser) -> bool:
    if parser.at_set(_TYPE_START_TOKENS):
        return True
    if not parser.at(TokenKind.IDENT):
        return False
    return parser.current_text in _TYPE_KEYWORDS or common.at_path_start(parser)


def parse_type(parser: Parser) -> CompletedMarker | None:
    match parser.current:
        case TokenKind.LPAREN:
            return _parse_tuple_or_paren_type(parser)
        case TokenKind.LBRACKET:
            return _parse_array_or_slice_type(parser)
        case TokenKind.BANG:
            marker = parser.start()
            parser.bump()
            return marker.complete(parser, RustSyntaxKind.NEVER_TYPE)
        case TokenKind.AMP | TokenKind.AMP_AMP:
            marker = parser.start()
            parser.bump()
            parser.eat(TokenKind.LIFETIME)
            parser.eat_keyword("mut")
            parse_type(parser)
            return marker.complete(parser, RustSyntaxKind.REF_TYPE)
        case TokenKind.STAR:
            marker = parser.start()
            parser.bump()
            if not (parser.eat_keyword("const") or parser.eat_keyword("mut")):
                parser.expect_keyword("const")
            parse_type(parser)
            return marker.complete(parser, RustSyntaxKind.PTR_TYPE)
        case _:
            pass

    if parser.at_keyword("_"):
        marker = parser.start()
        parser.bump()
        return marker.complete(parser, RustSyntaxKind.INFER_TYPE)
    if parser.at_keyword("impl") or parser.at_keyword("dyn"):
        kind = RustSyntaxKind.IMPL_TRAIT_TYPE if parser.at_keyword("impl") else RustSyntaxKind.DYN_TRAIT_TYPE
        marker = parser.start()
        parser.bump()
        common.parse_type_bounds(parser)
        return marker.complete(parser, kind)
    if parser.at_keyword("fn") or parser.at_keyword("unsafe") or parser.at_keyword("extern"):
        return _parse_fn_ptr_type(parser)
    if parser.at_keyword("for") and parser.nth_at(1, TokenKind.LESS_THAN):
        # `for<'a> fn(&'a T)` or a higher-ranked bare trait
        target = _for_binder_target(parser)
        if target == "fn":
            return _parse_fn_ptr_type(parser)
        marker = parser.start()
        common.parse_type_bounds(parser)
        return marker.complete(parser, RustSyntaxKind.DYN_TRAIT_TYPE)
    if common.at_path_start(parser):
        return _parse_path_type(parser)

    parser.error_here(PARSER_EXPECTED_TYPE)
    return None


def _for_binder_target(parser: Parser) -> str:
    depth = 0
    n = 1
    while True:
        kind = parser.nth(n)
        if kind == TokenKind.EOF:
            return "bound"
        if kind == TokenKind.LESS_THAN:
            depth += 1
        elif kind == TokenKind.GREATER_THAN:
            depth -= 1
            if depth == 0:
                break
        n += 1
    return "fn" if parser.nth_text(n + 1) in ("fn", "unsafe", "extern") else "bound"


def _parse_path_type(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    common.parse_path(parser, PathMode.TYPE)
    if parser.at(TokenKind.BANG) and parser.nth(1) in common.DELIMITERS:
        parser.bump()
        common.parse_token_tree(parser)
        return marker.complete(parser, RustSyntaxKind.MACRO_CALL)
    return marker.complete(parser, RustSyntaxKind.PATH_TYPE)


def _parse_tuple_or_paren_type(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.bump()
    count = 0
    trailing_comma = False
    while not parser.at(TokenKind.EOF) and not parser.at(TokenKind.RPAREN):
        if parse_type(parser) is None:
            break
        count += 1
        trailing_comma = parser.eat(TokenKind.COMMA)
        if not trailing_comma:
            break
    parser.expect(TokenKind.RPAREN)
    kind = RustSyntaxKind.PAREN_TYPE if count == 1 and not trailing_comma else RustSyntaxKind.TUPLE_TYPE
    return marker.complete(parser, kind)


def _parse_array_or_slice_type(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.bump()
    parse_type(parser)
    if parser.eat(TokenKind.SEMICOLON):
        expressions.parse_expr(parser)
        parser.expect(TokenKind.RBRACKET)
        return marker.complete(parser, RustSyntaxKind.ARRAY_TYPE)
    parser.expect(TokenKind.RBRACKET)
    return marker.complete(parser, RustSyntaxKind.SLICE_TYPE)


def _parse_fn_ptr_type(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    common.parse_for_binder(parser)
    parser.eat_keyword("unsafe")
    if parser.at_keyword("extern"):
        common.parse_abi(parser)
    parser.expect_keyword("fn")
    _parse_fn_ptr_params(parser)
    parse_ret_type(parser)
    return marker.complete(parser, RustSyntaxKind.FN_PTR_TYPE)


def _parse_fn_ptr_params(parser: Parser) -> None:
    marker = parser.start()
    parser.expect(TokenKind.LPAREN)
    while not parser.at(TokenKind.EOF) and not parser.at(TokenKind.RPAREN):
        param = parser.start()
        common.parse_attributes(parser)
        if parser.at(TokenKind.DOT_DOT_DOT):
            parser.bump()
        else:
            if parser.at(TokenKind.IDENT) and parser.nth_at(1, TokenKind.COLON) and not parser.nth_at(
                2, TokenKind.COLON
            ):
                parser.bump_n(2)
            if parse_type(parser) is None:
                param.abandon(parser)
                break
        param.complete(parser, RustSyntaxKind.PARAM)
        if not parser.eat(TokenKind.COMMA):
            break
    parser.expect(TokenKind.RPAREN)
    marker.complete(parser, RustSyntaxKind.PARAM_LIST)


def parse_fn_sugar_args(parser: Parser) -> None:
    """`Fn(A, B) -> C` inside a type path segment."""
    _parse_fn_ptr_params(parser)
    parse_ret_type(parser)


def parse_ret_type(parser: Parser) -> CompletedMarker | None:
    if not parser.at(TokenKind.THIN_ARROW):
        return None
    marker = parser.start()
    parser.bump()
    parse_type(parser)
    return marker.complete(parser, RustSyntaxKind.RET_TYPE)
