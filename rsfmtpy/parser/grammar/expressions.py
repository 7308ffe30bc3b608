"""Expression and statement grammar.

Binary expressions use precedence climbing. Composite operators that the lexer
keeps apart (`<<`, `>>`, `>=`, `<<=`, `>>=`) are recognised here from joint
tokens so generic argument lists can still close with a lone `>`.
"""

from rsfmtpy.diagnostics.codes import PARSER_EXPECTED_EXPRESSION, PARSER_UNEXPECTED_TOKEN
from rsfmtpy.lexer import TokenKind
from rsfmtpy.parser.grammar import common, items, patterns, types
from rsfmtpy.parser.grammar.common import PathMode
from rsfmtpy.parser.marker import CompletedMarker, Marker
from rsfmtpy.parser.parse_recovery import ParseRecoveryTokenSet
from rsfmtpy.parser.parser import Parser, ParserProgress
from rsfmtpy.syntax import RustSyntaxKind

_LITERAL_TOKENS: frozenset[TokenKind] = frozenset(
    {TokenKind.INT, TokenKind.FLOAT, TokenKind.STRING, TokenKind.CHAR}
)
_RANGE_OPERATORS: frozenset[TokenKind] = frozenset({TokenKind.DOT_DOT, TokenKind.DOT_DOT_EQUAL})

_BINARY_PRECEDENCE: dict[TokenKind, int] = {
    TokenKind.PIPE_PIPE: 3,
    TokenKind.AMP_AMP: 4,
    TokenKind.EQUAL_EQUAL: 5,
    TokenKind.NOT_EQUAL: 5,
    TokenKind.LESS_THAN_OR_EQUAL: 5,
    TokenKind.PIPE: 6,
    TokenKind.CARET: 7,
    TokenKind.AMP: 8,
    TokenKind.PLUS: 10,
    TokenKind.MINUS: 10,
    TokenKind.STAR: 11,
    TokenKind.SLASH: 11,
    TokenKind.PERCENT: 11,
}
_COMPARISON = 5
_SHIFT = 9
_CAST = 12
# `let` scrutinees stop before `&&` and `||` so let-chains stay flat.
_LET_SCRUTINEE = 5

_COMPOUND_ASSIGNMENT: frozenset[TokenKind] = frozenset(
    {
        TokenKind.PLUS_EQUAL,
        TokenKind.MINUS_EQUAL,
        TokenKind.STAR_EQUAL,
        TokenKind.SLASH_EQUAL,
        TokenKind.PERCENT_EQUAL,
        TokenKind.CARET_EQUAL,
        TokenKind.AMP_EQUAL,
        TokenKind.PIPE_EQUAL,
    }
)

_EXPR_START_TOKENS: frozenset[TokenKind] = frozenset(
    {
        TokenKind.LPAREN,
        TokenKind.LBRACKET,
        TokenKind.MINUS,
        TokenKind.BANG,
        TokenKind.STAR,
        TokenKind.AMP,
        TokenKind.AMP_AMP,
        TokenKind.PIPE,
        TokenKind.PIPE_PIPE,
        TokenKind.DOT_DOT,
        TokenKind.DOT_DOT_EQUAL,
        TokenKind.LIFETIME,
        TokenKind.LESS_THAN,
        TokenKind.COLON_COLON,
    }
)

_EXPR_KEYWORDS: frozenset[str] = frozenset(
    {
        "if",
        "match",
        "while",
        "loop",
        "for",
        "unsafe",
        "async",
        "const",
        "move",
        "return",
        "break",
        "continue",
        "let",
        "true",
        "false",
    }
)

# Expressions that end a statement without `;` when they open it.
BLOCK_LIKE_KINDS: frozenset[RustSyntaxKind] = frozenset(
    {
        RustSyntaxKind.BLOCK_EXPR,
        RustSyntaxKind.IF_EXPR,
        RustSyntaxKind.MATCH_EXPR,
        RustSyntaxKind.WHILE_EXPR,
        RustSyntaxKind.LOOP_EXPR,
        RustSyntaxKind.FOR_EXPR,
    }
)

_STATEMENT_RECOVERY = ParseRecoveryTokenSet(
    node_kind=RustSyntaxKind.ERROR,
    recovery_set=frozenset({TokenKind.SEMICOLON, TokenKind.RBRACE}),
).enable_recovery_on_line_break()


def at_expr_start(parser: Parser) -> bool:
    if parser.at_set(_LITERAL_TOKENS) or parser.at_set(_EXPR_START_TOKENS):
        return True
    if parser.at(TokenKind.LBRACE):
        return parser.struct_literal_allowed
    if not parser.at(TokenKind.IDENT):
        return False
    return parser.current_text in _EXPR_KEYWORDS or common.at_path_start(parser)


def parse_expr(parser: Parser) -> CompletedMarker | None:
    lhs = _parse_range(parser)
    if lhs is None:
        return None
    width = _assignment_operator_width(parser)
    if width == 0:
        return lhs
    marker = lhs.precede(parser)
    parser.bump_n(width)
    if parse_expr(parser) is None:
        parser.error_here(PARSER_EXPECTED_EXPRESSION)
    return marker.complete(parser, RustSyntaxKind.BIN_EXPR)


def _assignment_operator_width(parser: Parser) -> int:
    if parser.at(TokenKind.EQUAL) or parser.at_set(_COMPOUND_ASSIGNMENT):
        return 1
    if parser.at(TokenKind.LESS_THAN) and parser.nth_at(1, TokenKind.LESS_THAN_OR_EQUAL) and parser.is_joint(1):
        return 2
    if (
        parser.at(TokenKind.GREATER_THAN)
        and parser.nth_at(1, TokenKind.GREATER_THAN)
        and parser.is_joint(1)
        and parser.nth_at(2, TokenKind.EQUAL)
        and parser.is_joint(2)
    ):
        return 3
    return 0


def _parse_range(parser: Parser) -> CompletedMarker | None:
    if parser.at_set(_RANGE_OPERATORS):
        marker = parser.start()
        parser.bump()
        if at_expr_start(parser):
            _parse_bin(parser, 1)
        return marker.complete(parser, RustSyntaxKind.RANGE_EXPR)

    lhs = _parse_bin(parser, 1)
    if lhs is None or not parser.at_set(_RANGE_OPERATORS):
        return lhs
    marker = lhs.precede(parser)
    parser.bump()
    if at_expr_start(parser):
        _parse_bin(parser, 1)
    return marker.complete(parser, RustSyntaxKind.RANGE_EXPR)


def _binary_operator(parser: Parser) -> tuple[int, int] | None:
    """Return `(precedence, token count)` for the operator at the cursor."""
    match parser.current:
        case TokenKind.LESS_THAN:
            if parser.is_joint(1) and parser.nth_at(1, TokenKind.LESS_THAN):
                return _SHIFT, 2
            if parser.is_joint(1) and parser.nth_at(1, TokenKind.LESS_THAN_OR_EQUAL):
                return None
            return _COMPARISON, 1
        case TokenKind.GREATER_THAN:
            if parser.is_joint(1) and parser.nth_at(1, TokenKind.GREATER_THAN):
                if parser.is_joint(2) and parser.nth_at(2, TokenKind.EQUAL):
                    return None
                return _SHIFT, 2
            if parser.is_joint(1) and parser.nth_at(1, TokenKind.EQUAL):
                return _COMPARISON, 2
            return _COMPARISON, 1
        case TokenKind.IDENT:
            return (_CAST, 1) if parser.current_text == "as" else None
        case kind:
            precedence = _BINARY_PRECEDENCE.get(kind)
            return None if precedence is None else (precedence, 1)


def _parse_bin(parser: Parser, min_precedence: int) -> CompletedMarker | None:
    lhs = parse_unary(parser)
    if lhs is None:
        return None
    while True:
        operator = _binary_operator(parser)
        if operator is None:
            break
        precedence, width = operator
        if precedence < min_precedence:
            break
        marker = lhs.precede(parser)
        parser.bump_n(width)
        if precedence == _CAST:
            types.parse_type(parser)
            lhs = marker.complete(parser, RustSyntaxKind.CAST_EXPR)
            continue
        if _parse_bin(parser, precedence + 1) is None:
            parser.error_here(PARSER_EXPECTED_EXPRESSION)
        lhs = marker.complete(parser, RustSyntaxKind.BIN_EXPR)
    return lhs


def parse_unary(parser: Parser) -> CompletedMarker | None:
    if parser.at_set(frozenset({TokenKind.MINUS, TokenKind.BANG, TokenKind.STAR})):
        marker = parser.start()
        parser.bump()
        if parse_unary(parser) is None:
            parser.error_here(PARSER_EXPECTED_EXPRESSION)
        return marker.complete(parser, RustSyntaxKind.PREFIX_EXPR)
    if parser.at(TokenKind.AMP) or parser.at(TokenKind.AMP_AMP):
        marker = parser.start()
        parser.bump()
        parser.eat_keyword("mut")
        if parse_unary(parser) is None:
            parser.error_here(PARSER_EXPECTED_EXPRESSION)
        return marker.complete(parser, RustSyntaxKind.REF_EXPR)
    return _parse_postfix(parser, _parse_primary(parser))


def _parse_postfix(parser: Parser, lhs: CompletedMarker | None, *, calls: bool = True) -> CompletedMarker | None:
    """Postfix chain; `calls=False` keeps only `.` and `?` (block-like statement heads)."""
    if lhs is None:
        return None
    while True:
        if parser.at(TokenKind.QUESTION):
            marker = lhs.precede(parser)
            parser.bump()
            lhs = marker.complete(parser, RustSyntaxKind.TRY_EXPR)
        elif parser.at(TokenKind.DOT):
            if parser.nth_at_keyword(1, "await"):
                marker = lhs.precede(parser)
                parser.bump_n(2)
                lhs = marker.complete(parser, RustSyntaxKind.AWAIT_EXPR)
            elif parser.nth_at(1, TokenKind.IDENT) and (
                parser.nth_at(2, TokenKind.LPAREN)
                or (parser.nth_at(2, TokenKind.COLON_COLON) and parser.nth_at(3, TokenKind.LESS_THAN))
            ):
                marker = lhs.precede(parser)
                parser.bump_n(2)
                if parser.eat(TokenKind.COLON_COLON):
                    common.parse_generic_args(parser)
                parse_arg_list(parser)
                lhs = marker.complete(parser, RustSyntaxKind.METHOD_CALL_EXPR)
            elif parser.nth_at(1, TokenKind.IDENT) or parser.nth_at(1, TokenKind.INT):
                marker = lhs.precede(parser)
                parser.bump_n(2)
                lhs = marker.complete(parser, RustSyntaxKind.FIELD_EXPR)
            else:
                break
        elif calls and parser.at(TokenKind.LPAREN):
            marker = lhs.precede(parser)
            parse_arg_list(parser)
            lhs = marker.complete(parser, RustSyntaxKind.CALL_EXPR)
        elif calls and parser.at(TokenKind.LBRACKET):
            marker = lhs.precede(parser)
            parser.bump()
            with parser.struct_literals(True):
                parse_expr(parser)
            parser.expect(TokenKind.RBRACKET)
            lhs = marker.complete(parser, RustSyntaxKind.INDEX_EXPR)
        else:
            break
    return lhs


def parse_arg_list(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.expect(TokenKind.LPAREN)
    with parser.struct_literals(True):
        _parse_comma_exprs(parser, TokenKind.RPAREN)
    parser.expect(TokenKind.RPAREN)
    return marker.complete(parser, RustSyntaxKind.ARG_LIST)


def _parse_comma_exprs(parser: Parser, closing: TokenKind) -> int:
    count = 0
    while not parser.at(TokenKind.EOF) and not parser.at(closing):
        if parse_expr(parser) is None:
            break
        count += 1
        if not parser.eat(TokenKind.COMMA):
            break
    return count


# ---------------------------------------------------------------------------
# Primary expressions
# ---------------------------------------------------------------------------


def _parse_primary(parser: Parser) -> CompletedMarker | None:
    if parser.at_set(_LITERAL_TOKENS) or parser.at_keyword("true") or parser.at_keyword("false"):
        marker = parser.start()
        parser.bump()
        return marker.complete(parser, RustSyntaxKind.LITERAL)

    match parser.current:
        case TokenKind.LPAREN:
            return _parse_paren_or_tuple(parser)
        case TokenKind.LBRACKET:
            return _parse_array(parser)
        case TokenKind.LBRACE:
            return parse_block_expr(parser)
        case TokenKind.PIPE | TokenKind.PIPE_PIPE:
            return _parse_closure(parser)
        case TokenKind.LIFETIME if parser.nth_at(1, TokenKind.COLON):
            return _parse_labeled(parser)
        case TokenKind.IDENT:
            pass
        case TokenKind.LESS_THAN | TokenKind.COLON_COLON:
            return _parse_path_expr(parser)
        case _:
            parser.error_here(PARSER_EXPECTED_EXPRESSION)
            return None

    match parser.current_text:
        case "if":
            return _parse_if(parser)
        case "match":
            return _parse_match(parser)
        case "while" | "loop" | "for":
            return _parse_loop_like(parser, parser.start())
        case "unsafe" | "const" if parser.nth_at(1, TokenKind.LBRACE):
            return parse_block_expr(parser)
        case "async" if parser.nth_at(1, TokenKind.LBRACE) or (
            parser.nth_at_keyword(1, "move") and parser.nth_at(2, TokenKind.LBRACE)
        ):
            return parse_block_expr(parser)
        case "async" | "move":
            return _parse_closure(parser)
        case "return":
            marker = parser.start()
            parser.bump()
            if at_expr_start(parser):
                parse_expr(parser)
            return marker.complete(parser, RustSyntaxKind.RETURN_EXPR)
        case "break":
            marker = parser.start()
            parser.bump()
            parser.eat(TokenKind.LIFETIME)
            if at_expr_start(parser):
                parse_expr(parser)
            return marker.complete(parser, RustSyntaxKind.BREAK_EXPR)
        case "continue":
            marker = parser.start()
            parser.bump()
            parser.eat(TokenKind.LIFETIME)
            return marker.complete(parser, RustSyntaxKind.CONTINUE_EXPR)
        case "let":
            marker = parser.start()
            parser.bump()
            patterns.parse_pattern(parser)
            parser.expect(TokenKind.EQUAL)
            if _parse_bin(parser, _LET_SCRUTINEE) is None:
                parser.error_here(PARSER_EXPECTED_EXPRESSION)
            return marker.complete(parser, RustSyntaxKind.LET_EXPR)
        case "_":
            marker = parser.start()
            parser.bump()
            return marker.complete(parser, RustSyntaxKind.UNDERSCORE_EXPR)
        case _:
            pass

    if common.at_path_start(parser):
        return _parse_path_expr(parser)
    parser.error_here(PARSER_EXPECTED_EXPRESSION)
    return None


def _parse_path_expr(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    common.parse_path(parser, PathMode.EXPR)
    if parser.at(TokenKind.BANG) and parser.nth(1) in common.DELIMITERS:
        parser.bump()
        parse_macro_args(parser)
        return marker.complete(parser, RustSyntaxKind.MACRO_CALL)
    if parser.at(TokenKind.LBRACE) and parser.struct_literal_allowed:
        _parse_record_expr_fields(parser)
        return marker.complete(parser, RustSyntaxKind.RECORD_EXPR)
    return marker.complete(parser, RustSyntaxKind.PATH_EXPR)


def parse_macro_args(parser: Parser) -> CompletedMarker:
    """Arguments of `name!(..)`: an ARG_LIST when they read as expressions, else a TOKEN_TREE."""
    closing = common.DELIMITERS[parser.current]
    checkpoint = parser.checkpoint()
    with parser.speculative_parsing():
        marker = parser.start()
        parser.bump()
        with parser.struct_literals(True):
            _parse_comma_exprs(parser, closing)
        if parser.at(closing) and len(parser.diagnostics) == checkpoint.diagnostics_len:
            parser.bump()
            return marker.complete(parser, RustSyntaxKind.ARG_LIST)
    parser.rewind(checkpoint)
    return common.parse_token_tree(parser)


def _parse_record_expr_fields(parser: Parser) -> None:
    marker = parser.start()
    parser.bump()
    with parser.struct_literals(True):
        while not parser.at(TokenKind.EOF) and not parser.at(TokenKind.RBRACE):
            if parser.eat(TokenKind.DOT_DOT):
                # Functional update base: `..base`
                if at_expr_start(parser):
                    parse_expr(parser)
                break
            field = parser.start()
            common.parse_attributes(parser)
            if (parser.at(TokenKind.IDENT) or parser.at(TokenKind.INT)) and parser.nth_at(1, TokenKind.COLON):
                parser.bump_n(2)
                if parse_expr(parser) is None:
                    parser.error_here(PARSER_EXPECTED_EXPRESSION)
            elif parser.at(TokenKind.IDENT):
                parser.bump()
            else:
                field.abandon(parser)
                parser.error_here(PARSER_UNEXPECTED_TOKEN, "Expected a field")
                break
            field.complete(parser, RustSyntaxKind.RECORD_EXPR_FIELD)
            if not parser.eat(TokenKind.COMMA):
                break
    parser.expect(TokenKind.RBRACE)
    marker.complete(parser, RustSyntaxKind.RECORD_EXPR_FIELD_LIST)


def _parse_paren_or_tuple(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.bump()
    count = 0
    trailing_comma = False
    with parser.struct_literals(True):
        while not parser.at(TokenKind.EOF) and not parser.at(TokenKind.RPAREN):
            if parse_expr(parser) is None:
                break
            count += 1
            trailing_comma = parser.eat(TokenKind.COMMA)
            if not trailing_comma:
                break
    parser.expect(TokenKind.RPAREN)
    kind = RustSyntaxKind.PAREN_EXPR if count == 1 and not trailing_comma else RustSyntaxKind.TUPLE_EXPR
    return marker.complete(parser, kind)


def _parse_array(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.bump()
    with parser.struct_literals(True):
        if not parser.at(TokenKind.RBRACKET) and parse_expr(parser) is not None:
            if parser.eat(TokenKind.SEMICOLON):
                parse_expr(parser)
            elif parser.eat(TokenKind.COMMA):
                _parse_comma_exprs(parser, TokenKind.RBRACKET)
    parser.expect(TokenKind.RBRACKET)
    return marker.complete(parser, RustSyntaxKind.ARRAY_EXPR)


def _parse_closure(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.eat_keyword("async")
    parser.eat_keyword("move")
    params = parser.start()
    if not parser.eat(TokenKind.PIPE_PIPE):
        parser.expect(TokenKind.PIPE)
        while not parser.at(TokenKind.EOF) and not parser.at(TokenKind.PIPE):
            param = parser.start()
            common.parse_attributes(parser)
            if patterns.parse_pattern_no_top_alt(parser) is None:
                param.abandon(parser)
                break
            if parser.eat(TokenKind.COLON):
                types.parse_type(parser)
            param.complete(parser, RustSyntaxKind.PARAM)
            if not parser.eat(TokenKind.COMMA):
                break
        parser.expect(TokenKind.PIPE)
    params.complete(parser, RustSyntaxKind.CLOSURE_PARAM_LIST)

    if types.parse_ret_type(parser) is not None:
        parse_block_expr(parser)
    elif parse_expr(parser) is None:
        parser.error_here(PARSER_EXPECTED_EXPRESSION)
    return marker.complete(parser, RustSyntaxKind.CLOSURE_EXPR)


# ---------------------------------------------------------------------------
# Block-like expressions
# ---------------------------------------------------------------------------


def _parse_label(parser: Parser) -> None:
    label = parser.start()
    parser.bump_n(2)
    label.complete(parser, RustSyntaxKind.LABEL)


def _parse_labeled(parser: Parser) -> CompletedMarker | None:
    marker = parser.start()
    _parse_label(parser)
    if parser.at_keyword("while") or parser.at_keyword("loop") or parser.at_keyword("for"):
        return _parse_loop_like(parser, marker)
    return _finish_block_expr(parser, marker)


def parse_block_expr(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    if parser.at(TokenKind.LIFETIME) and parser.nth_at(1, TokenKind.COLON):
        _parse_label(parser)
    return _finish_block_expr(parser, marker)


def _finish_block_expr(parser: Parser, marker: Marker) -> CompletedMarker:
    if parser.eat_keyword("async"):
        parser.eat_keyword("move")
    elif not parser.eat_keyword("unsafe"):
        parser.eat_keyword("const")
    parse_block(parser)
    return marker.complete(parser, RustSyntaxKind.BLOCK_EXPR)


def _parse_condition(parser: Parser) -> None:
    with parser.struct_literals(False):
        if parse_expr(parser) is None:
            parser.error_here(PARSER_EXPECTED_EXPRESSION)


def _parse_if(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.bump()
    _parse_condition(parser)
    parse_block(parser)
    if parser.eat_keyword("else"):
        if parser.at_keyword("if"):
            _parse_if(parser)
        else:
            parse_block_expr(parser)
    return marker.complete(parser, RustSyntaxKind.IF_EXPR)


def _parse_loop_like(parser: Parser, marker: Marker) -> CompletedMarker:
    if parser.eat_keyword("loop"):
        parse_block(parser)
        return marker.complete(parser, RustSyntaxKind.LOOP_EXPR)
    if parser.eat_keyword("while"):
        _parse_condition(parser)
        parse_block(parser)
        return marker.complete(parser, RustSyntaxKind.WHILE_EXPR)
    parser.expect_keyword("for")
    patterns.parse_pattern(parser)
    parser.expect_keyword("in")
    _parse_condition(parser)
    parse_block(parser)
    return marker.complete(parser, RustSyntaxKind.FOR_EXPR)


def _parse_match(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.bump()
    _parse_condition(parser)
    arms = parser.start()
    if parser.expect(TokenKind.LBRACE):
        with parser.struct_literals(True):
            common.parse_attributes(parser, inner=True)
            progress = ParserProgress()
            while not parser.at(TokenKind.EOF) and not parser.at(TokenKind.RBRACE):
                progress.assert_progressing(parser)
                if _parse_match_arm(parser):
                    continue
                parser.error_here(PARSER_EXPECTED_EXPRESSION, "Expected a match arm")
                _, recovery_error = _STATEMENT_RECOVERY.recover(parser)
                if recovery_error is not None:
                    break
        parser.expect(TokenKind.RBRACE)
    arms.complete(parser, RustSyntaxKind.MATCH_ARM_LIST)
    return marker.complete(parser, RustSyntaxKind.MATCH_EXPR)


def _parse_match_arm(parser: Parser) -> bool:
    if not (patterns.at_pattern_start(parser) or common.at_attribute(parser, inner=False)):
        return False
    marker = parser.start()
    common.parse_attributes(parser)
    patterns.parse_pattern(parser)
    if parser.at_keyword("if"):
        guard = parser.start()
        parser.bump()
        parse_expr(parser)
        guard.complete(parser, RustSyntaxKind.MATCH_GUARD)
    parser.expect(TokenKind.FAT_ARROW)

    if at_block_like(parser):
        _parse_block_like(parser)
        parser.eat(TokenKind.COMMA)
    else:
        if parse_expr(parser) is None:
            parser.error_here(PARSER_EXPECTED_EXPRESSION)
        if not parser.eat(TokenKind.COMMA) and not parser.at(TokenKind.RBRACE):
            parser.expect(TokenKind.COMMA)
    marker.complete(parser, RustSyntaxKind.MATCH_ARM)
    return True


def at_block_like(parser: Parser) -> bool:
    if parser.at(TokenKind.LBRACE):
        return True
    if parser.at(TokenKind.LIFETIME):
        return parser.nth_at(1, TokenKind.COLON)
    if not parser.at(TokenKind.IDENT):
        return False
    match parser.current_text:
        case "if" | "match" | "while" | "loop" | "for":
            return True
        case "unsafe" | "const":
            return parser.nth_at(1, TokenKind.LBRACE)
        case "async":
            return parser.nth_at(1, TokenKind.LBRACE) or (
                parser.nth_at_keyword(1, "move") and parser.nth_at(2, TokenKind.LBRACE)
            )
        case _:
            return False


def _parse_block_like(parser: Parser) -> CompletedMarker | None:
    return _parse_postfix(parser, _parse_primary(parser), calls=False)


# ---------------------------------------------------------------------------
# Blocks and statements
# ---------------------------------------------------------------------------


def parse_block(parser: Parser) -> CompletedMarker | None:
    if not parser.at(TokenKind.LBRACE):
        parser.expect(TokenKind.LBRACE)
        return None
    marker = parser.start()
    parser.bump()
    with parser.struct_literals(True):
        common.parse_attributes(parser, inner=True)
        progress = ParserProgress()
        while not parser.at(TokenKind.EOF) and not parser.at(TokenKind.RBRACE):
            progress.assert_progressing(parser)
            if _parse_statement(parser):
                continue
            _, recovery_error = _STATEMENT_RECOVERY.recover(parser)
            if recovery_error is not None:
                break
    parser.expect(TokenKind.RBRACE)
    return marker.complete(parser, RustSyntaxKind.BLOCK)


def _parse_statement(parser: Parser) -> bool:
    if parser.at(TokenKind.SEMICOLON):
        marker = parser.start()
        parser.bump()
        marker.complete(parser, RustSyntaxKind.EMPTY_STMT)
        return True

    marker = parser.start()
    common.parse_attributes(parser)
    if parser.at_keyword("let"):
        _finish_let(parser, marker)
        return True
    if items.at_item_start(parser):
        items.finish_item(parser, marker)
        return True
    return _finish_expr_stmt(parser, marker)


def _finish_let(parser: Parser, marker: Marker) -> None:
    parser.bump()
    patterns.parse_pattern(parser)
    if parser.eat(TokenKind.COLON):
        types.parse_type(parser)
    if parser.eat(TokenKind.EQUAL):
        if parse_expr(parser) is None:
            parser.error_here(PARSER_EXPECTED_EXPRESSION)
        if parser.at_keyword("else"):
            let_else = parser.start()
            parser.bump()
            parse_block(parser)
            let_else.complete(parser, RustSyntaxKind.LET_ELSE)
    parser.expect(TokenKind.SEMICOLON)
    marker.complete(parser, RustSyntaxKind.LET_STMT)


def _finish_expr_stmt(parser: Parser, marker: Marker) -> bool:
    if at_block_like(parser):
        if _parse_block_like(parser) is None:
            marker.abandon(parser)
            return False
        parser.eat(TokenKind.SEMICOLON)
        marker.complete(parser, RustSyntaxKind.EXPR_STMT)
        return True

    expr = parse_expr(parser)
    if expr is None:
        marker.abandon(parser)
        return False
    if expr.kind == RustSyntaxKind.MACRO_CALL:
        parser.eat(TokenKind.SEMICOLON)
    elif not parser.at(TokenKind.RBRACE):
        parser.expect(TokenKind.SEMICOLON)
    marker.complete(parser, RustSyntaxKind.EXPR_STMT)
    return True
