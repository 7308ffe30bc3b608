"""Grammar pieces shared by items, types, patterns and expressions."""

from enum import StrEnum

from rsfmtpy.diagnostics.codes import PARSER_EXPECTED_TOKEN, PARSER_EXPECTED_TYPE
from rsfmtpy.lexer import TokenKind
from rsfmtpy.parser.marker import CompletedMarker
from rsfmtpy.parser.parser import Parser
from rsfmtpy.syntax import RustSyntaxKind

DELIMITERS: dict[TokenKind, TokenKind] = {
    TokenKind.LPAREN: TokenKind.RPAREN,
    TokenKind.LBRACKET: TokenKind.RBRACKET,
    TokenKind.LBRACE: TokenKind.RBRACE,
}

PATH_KEYWORDS: frozenset[str] = frozenset({"self", "super", "crate", "Self"})

# Strict keywords that can never start a path segment.
RESERVED: frozenset[str] = frozenset(
    {
        "as",
        "break",
        "const",
        "continue",
        "else",
        "enum",
        "extern",
        "false",
        "fn",
        "for",
        "if",
        "impl",
        "in",
        "let",
        "loop",
        "match",
        "mod",
        "move",
        "mut",
        "pub",
        "ref",
        "return",
        "static",
        "struct",
        "trait",
        "true",
        "type",
        "unsafe",
        "use",
        "where",
        "while",
        "async",
        "await",
        "dyn",
    }
)


class PathMode(StrEnum):
    """Where a path appears; decides how `<` after a segment is read."""

    TYPE = "type"  # `Vec<u8>`, `Fn(A) -> B`
    EXPR = "expr"  # `Vec::<u8>::new`
    USE = "use"  # no generics at all


def at_path_start(parser: Parser, n: int = 0) -> bool:
    kind = parser.nth(n)
    if kind == TokenKind.COLON_COLON or kind == TokenKind.LESS_THAN:
        return True
    if kind != TokenKind.IDENT:
        return False
    text = parser.nth_text(n)
    return text in PATH_KEYWORDS or text not in RESERVED


def parse_token_tree(parser: Parser) -> CompletedMarker:
    """`( .. )`, `[ .. ]` or `{ .. }` kept as an opaque token run."""
    marker = parser.start()
    stack: list[TokenKind] = []
    while not parser.at(TokenKind.EOF):
        kind = parser.current
        if kind in DELIMITERS:
            stack.append(DELIMITERS[kind])
        elif stack and kind == stack[-1]:
            stack.pop()
        parser.bump()
        if not stack:
            break
    if stack:
        parser.error_here(PARSER_EXPECTED_TOKEN, "Unclosed delimiter in token tree")
    return marker.complete(parser, RustSyntaxKind.TOKEN_TREE)


def at_attribute(parser: Parser, *, inner: bool) -> bool:
    if not parser.at(TokenKind.POUND):
        return False
    if inner:
        return parser.nth_at(1, TokenKind.BANG) and parser.nth_at(2, TokenKind.LBRACKET)
    return parser.nth_at(1, TokenKind.LBRACKET)


def parse_attributes(parser: Parser, *, inner: bool = False) -> int:
    count = 0
    while at_attribute(parser, inner=inner):
        marker = parser.start()
        parser.bump()
        if inner:
            parser.bump()
        parse_token_tree(parser)
        marker.complete(parser, RustSyntaxKind.ATTRIBUTE)
        count += 1
    return count


def parse_visibility(parser: Parser) -> bool:
    if parser.at_keyword("crate") and not parser.nth_at(1, TokenKind.COLON_COLON):
        marker = parser.start()
        parser.bump()
        marker.complete(parser, RustSyntaxKind.VISIBILITY)
        return True
    if not parser.at_keyword("pub"):
        return False
    marker = parser.start()
    parser.bump()
    if parser.at(TokenKind.LPAREN):
        if parser.nth_at_keyword(1, "in"):
            parser.bump_n(2)
            parse_path(parser, PathMode.USE)
            parser.expect(TokenKind.RPAREN)
        elif parser.nth(1) == TokenKind.IDENT and parser.nth_at(2, TokenKind.RPAREN) and parser.nth_text(1) in (
            "crate",
            "self",
            "super",
        ):
            parser.bump_n(3)
    marker.complete(parser, RustSyntaxKind.VISIBILITY)
    return True


def parse_abi(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.expect_keyword("extern")
    parser.eat(TokenKind.STRING)
    return marker.complete(parser, RustSyntaxKind.ABI)


def parse_name(parser: Parser) -> bool:
    if parser.at(TokenKind.IDENT):
        parser.bump()
        return True
    parser.expect(TokenKind.IDENT)
    return False


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


def parse_path(parser: Parser, mode: PathMode) -> CompletedMarker:
    marker = parser.start()
    if parser.at(TokenKind.LESS_THAN):
        _parse_qualified_self(parser)
        parser.expect(TokenKind.COLON_COLON)
    else:
        parser.eat(TokenKind.COLON_COLON)

    _parse_path_segment(parser, mode)
    while parser.at(TokenKind.COLON_COLON) and _continues_path(parser):
        parser.bump()
        _parse_path_segment(parser, mode)
    return marker.complete(parser, RustSyntaxKind.PATH)


def _continues_path(parser: Parser) -> bool:
    # `::<T>` turbofish belongs to the previous segment; `::{` and `::*` end a use path.
    return parser.nth_at(1, TokenKind.IDENT)


def _parse_qualified_self(parser: Parser) -> None:
    from rsfmtpy.parser.grammar import types

    marker = parser.start()
    parser.bump()
    types.parse_type(parser)
    if parser.eat_keyword("as"):
        parse_path(parser, PathMode.TYPE)
    parser.expect(TokenKind.GREATER_THAN)
    marker.complete(parser, RustSyntaxKind.QUALIFIED_SELF)


def _parse_path_segment(parser: Parser, mode: PathMode) -> None:
    from rsfmtpy.parser.grammar import types

    marker = parser.start()
    if not parser.eat(TokenKind.IDENT):
        parser.error_here(PARSER_EXPECTED_TOKEN, "Expected a path segment")

    if mode == PathMode.TYPE:
        if parser.at(TokenKind.LESS_THAN):
            parse_generic_args(parser)
        elif parser.at(TokenKind.COLON_COLON) and parser.nth_at(1, TokenKind.LESS_THAN):
            parser.bump()
            parse_generic_args(parser)
        elif parser.at(TokenKind.LPAREN):
            # Fn(A, B) -> C sugar.
            types.parse_fn_sugar_args(parser)
    elif mode == PathMode.EXPR:
        if parser.at(TokenKind.COLON_COLON) and parser.nth_at(1, TokenKind.LESS_THAN):
            parser.bump()
            parse_generic_args(parser)
    marker.complete(parser, RustSyntaxKind.PATH_SEGMENT)


# ---------------------------------------------------------------------------
# Generics
# ---------------------------------------------------------------------------


def parse_generic_args(parser: Parser) -> CompletedMarker:
    from rsfmtpy.parser.grammar import expressions, types

    marker = parser.start()
    parser.bump()
    while not parser.at(TokenKind.EOF) and not parser.at(TokenKind.GREATER_THAN):
        if parser.at(TokenKind.LIFETIME):
            parser.bump()
        elif parser.at(TokenKind.IDENT) and (
            (parser.nth_at(1, TokenKind.EQUAL) and not parser.nth_at(2, TokenKind.EQUAL))
            or (parser.nth_at(1, TokenKind.COLON) and not parser.nth_at(2, TokenKind.COLON))
        ):
            arg = parser.start()
            parser.bump()
            if parser.eat(TokenKind.EQUAL):
                types.parse_type(parser)
            else:
                parser.bump()
                parse_type_bounds(parser)
            arg.complete(parser, RustSyntaxKind.ASSOC_TYPE_ARG)
        elif parser.at(TokenKind.LBRACE):
            expressions.parse_block_expr(parser)
        elif parser.at_set(frozenset({TokenKind.INT, TokenKind.STRING, TokenKind.CHAR, TokenKind.MINUS})):
            expressions.parse_unary(parser)
        elif types.at_type_start(parser):
            types.parse_type(parser)
        else:
            parser.error_here(PARSER_EXPECTED_TYPE)
            break
        if not parser.eat(TokenKind.COMMA):
            break
    parser.expect(TokenKind.GREATER_THAN)
    return marker.complete(parser, RustSyntaxKind.GENERIC_ARG_LIST)


def parse_generic_params(parser: Parser) -> CompletedMarker | None:
    from rsfmtpy.parser.grammar import expressions, types

    if not parser.at(TokenKind.LESS_THAN):
        return None
    marker = parser.start()
    parser.bump()
    while not parser.at(TokenKind.EOF) and not parser.at(TokenKind.GREATER_THAN):
        param = parser.start()
        parse_attributes(parser)
        if parser.at(TokenKind.LIFETIME):
            parser.bump()
            if parser.eat(TokenKind.COLON):
                _parse_lifetime_bounds(parser)
            param.complete(parser, RustSyntaxKind.LIFETIME_PARAM)
        elif parser.at_keyword("const"):
            parser.bump()
            parse_name(parser)
            parser.expect(TokenKind.COLON)
            types.parse_type(parser)
            if parser.eat(TokenKind.EQUAL):
                if parser.at(TokenKind.LBRACE):
                    expressions.parse_block_expr(parser)
                else:
                    expressions.parse_unary(parser)
            param.complete(parser, RustSyntaxKind.CONST_PARAM)
        elif parser.at(TokenKind.IDENT):
            parser.bump()
            if parser.eat(TokenKind.COLON):
                parse_type_bounds(parser)
            if parser.eat(TokenKind.EQUAL):
                types.parse_type(parser)
            param.complete(parser, RustSyntaxKind.TYPE_PARAM)
        else:
            param.abandon(parser)
            parser.error_here(PARSER_EXPECTED_TOKEN, "Expected a generic parameter")
            break
        if not parser.eat(TokenKind.COMMA):
            break
    parser.expect(TokenKind.GREATER_THAN)
    return marker.complete(parser, RustSyntaxKind.GENERIC_PARAM_LIST)


def _parse_lifetime_bounds(parser: Parser) -> None:
    while parser.eat(TokenKind.LIFETIME):
        if not parser.eat(TokenKind.PLUS):
            break


def parse_for_binder(parser: Parser) -> bool:
    if not (parser.at_keyword("for") and parser.nth_at(1, TokenKind.LESS_THAN)):
        return False
    marker = parser.start()
    parser.bump()
    parse_generic_params(parser)
    marker.complete(parser, RustSyntaxKind.FOR_BINDER)
    return True


def at_type_bound_start(parser: Parser) -> bool:
    return (
        parser.at(TokenKind.LIFETIME)
        or parser.at(TokenKind.QUESTION)
        or parser.at(TokenKind.TILDE)
        or parser.at(TokenKind.LPAREN)
        or parser.at_keyword("for")
        or at_path_start(parser)
    )


def parse_type_bounds(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    while at_type_bound_start(parser):
        bound = parser.start()
        if parser.at(TokenKind.LIFETIME):
            parser.bump()
        elif parser.at(TokenKind.LPAREN):
            parser.bump()
            parse_for_binder(parser)
            parser.eat(TokenKind.QUESTION)
            parse_path(parser, PathMode.TYPE)
            parser.expect(TokenKind.RPAREN)
        else:
            if parser.at(TokenKind.TILDE):
                parser.bump()
                parser.eat_keyword("const")
            parser.eat(TokenKind.QUESTION)
            parse_for_binder(parser)
            parse_path(parser, PathMode.TYPE)
        bound.complete(parser, RustSyntaxKind.TYPE_BOUND)
        if not parser.eat(TokenKind.PLUS):
            break
    return marker.complete(parser, RustSyntaxKind.TYPE_BOUND_LIST)


def parse_where_clause(parser: Parser) -> CompletedMarker | None:
    from rsfmtpy.parser.grammar import types

    if not parser.at_keyword("where"):
        return None
    marker = parser.start()
    parser.bump()
    while not parser.at_set(frozenset({TokenKind.LBRACE, TokenKind.SEMICOLON, TokenKind.EQUAL, TokenKind.EOF})):
        pred = parser.start()
        if parser.at(TokenKind.LIFETIME):
            parser.bump()
            parser.expect(TokenKind.COLON)
            _parse_lifetime_bounds(parser)
        else:
            parse_for_binder(parser)
            types.parse_type(parser)
            parser.expect(TokenKind.COLON)
            parse_type_bounds(parser)
        pred.complete(parser, RustSyntaxKind.WHERE_PRED)
        if not parser.eat(TokenKind.COMMA):
            break
    return marker.complete(parser, RustSyntaxKind.WHERE_CLAUSE)
