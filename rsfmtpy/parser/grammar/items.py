"""Item grammar and the source-file entry point."""

from rsfmtpy.diagnostics.codes import PARSER_EXPECTED_ITEM, PARSER_EXPECTED_TOKEN
from rsfmtpy.lexer import TokenKind
from rsfmtpy.parser.grammar import common, expressions, patterns, types
from rsfmtpy.parser.grammar.common import PathMode
from rsfmtpy.parser.marker import CompletedMarker, Marker
from rsfmtpy.parser.parse_lists import ParseNodeList, ParseSeparatedList
from rsfmtpy.parser.parse_recovery import ParseRecoveryTokenSet
from rsfmtpy.parser.parser import Parser
from rsfmtpy.syntax import RustSyntaxKind

_ITEM_KEYWORDS: frozenset[str] = frozenset({"use", "struct", "enum", "fn", "impl", "trait", "mod", "type", "pub"})
_FN_QUALIFIERS: frozenset[str] = frozenset({"const", "async", "unsafe", "extern", "fn"})

_ITEM_RECOVERY = ParseRecoveryTokenSet(
    node_kind=RustSyntaxKind.ERROR,
    recovery_set=frozenset({TokenKind.SEMICOLON, TokenKind.RBRACE, TokenKind.POUND}),
).enable_recovery_on_line_break()


def parse_source_file(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    common.parse_attributes(parser, inner=True)
    _item_list(lambda p: False).parse_list(parser)
    return marker.complete(parser, RustSyntaxKind.SOURCE_FILE)


def _item_list(is_at_list_end) -> ParseNodeList:
    return ParseNodeList(
        is_at_list_end=is_at_list_end,
        parse_element=parse_item,
        recovery=_ITEM_RECOVERY,
        on_failure=lambda parser: parser.error_here(PARSER_EXPECTED_ITEM),
    )


def _parse_braced_items(parser: Parser, kind: RustSyntaxKind) -> CompletedMarker:
    marker = parser.start()
    parser.expect(TokenKind.LBRACE)
    common.parse_attributes(parser, inner=True)
    _item_list(lambda p: p.at(TokenKind.RBRACE)).parse_list(parser)
    parser.expect(TokenKind.RBRACE)
    return marker.complete(parser, kind)


def parse_item(parser: Parser) -> bool:
    marker = parser.start()
    attributes = common.parse_attributes(parser)
    if at_item_start(parser) or _at_item_macro(parser):
        finish_item(parser, marker)
        return True
    if attributes:
        parser.error_here(PARSER_EXPECTED_ITEM)
        marker.complete(parser, RustSyntaxKind.ERROR)
        return True
    marker.abandon(parser)
    return False


def at_item_start(parser: Parser, n: int = 0) -> bool:
    if parser.nth(n) != TokenKind.IDENT:
        return False
    text = parser.nth_text(n)
    if text in _ITEM_KEYWORDS:
        return True
    match text:
        case "crate":
            return not parser.nth_at(n + 1, TokenKind.COLON_COLON)
        case "extern":
            return (
                parser.nth_at(n + 1, TokenKind.STRING)
                or parser.nth_at(n + 1, TokenKind.LBRACE)
                or parser.nth_at_keyword(n + 1, "crate")
                or parser.nth_at_keyword(n + 1, "fn")
            )
        case "static":
            return parser.nth_at(n + 1, TokenKind.IDENT) and parser.nth_text(n + 1) != "move"
        case "const":
            return parser.nth_at(n + 1, TokenKind.IDENT) and parser.nth_text(n + 1) != "move"
        case "unsafe":
            return parser.nth_text(n + 1) in ("fn", "impl", "trait", "extern", "mod", "auto")
        case "async":
            return parser.nth_at_keyword(n + 1, "fn") or (
                parser.nth_at_keyword(n + 1, "unsafe") and parser.nth_at_keyword(n + 2, "fn")
            )
        case "union":
            return parser.nth_at(n + 1, TokenKind.IDENT)
        case "auto":
            return parser.nth_at_keyword(n + 1, "trait")
        case "macro_rules":
            return parser.nth_at(n + 1, TokenKind.BANG)
        case _:
            return False


def _at_item_macro(parser: Parser) -> bool:
    """`path::to::name! ...` in item position."""
    n = 0
    if parser.nth_at(n, TokenKind.COLON_COLON):
        n += 1
    while parser.nth_at(n, TokenKind.IDENT):
        if parser.nth_at(n + 1, TokenKind.BANG):
            return True
        if not parser.nth_at(n + 1, TokenKind.COLON_COLON):
            return False
        n += 2
    return False


def _item_keyword(parser: Parser) -> str:
    """Skip qualifiers and name the keyword that decides the item kind."""
    n = 0
    while True:
        if parser.nth_at(n, TokenKind.STRING):
            n += 1
            continue
        text = parser.nth_text(n) if parser.nth_at(n, TokenKind.IDENT) else ""
        match text:
            case "extern":
                if parser.nth_at_keyword(n + 1, "crate"):
                    return "extern crate"
                after_abi = n + 2 if parser.nth_at(n + 1, TokenKind.STRING) else n + 1
                if parser.nth_at(after_abi, TokenKind.LBRACE):
                    return "extern block"
            case "const" if parser.nth_text(n + 1) not in _FN_QUALIFIERS:
                return "const"
            case "const" | "async" | "unsafe" | "auto":
                pass
            case "union" if parser.nth_at(n + 1, TokenKind.IDENT):
                return "struct"
            case _:
                return text
        n += 1


def finish_item(parser: Parser, marker: Marker) -> CompletedMarker:
    """Parse an item whose attributes are already consumed into `marker`."""
    common.parse_visibility(parser)
    match _item_keyword(parser):
        case "use":
            return _finish_use(parser, marker)
        case "struct":
            return _finish_struct(parser, marker)
        case "enum":
            return _finish_enum(parser, marker)
        case "fn":
            return _finish_fn(parser, marker)
        case "impl":
            return _finish_impl(parser, marker)
        case "trait":
            return _finish_trait(parser, marker)
        case "mod":
            return _finish_mod(parser, marker)
        case "const" | "static":
            return _finish_const_or_static(parser, marker)
        case "type":
            return _finish_type_alias(parser, marker)
        case "extern crate":
            return _finish_extern_crate(parser, marker)
        case "extern block":
            parser.eat_keyword("unsafe")
            common.parse_abi(parser)
            _parse_braced_items(parser, RustSyntaxKind.ITEM_LIST)
            return marker.complete(parser, RustSyntaxKind.EXTERN_BLOCK)
        case "macro_rules":
            parser.bump_n(2)
            common.parse_name(parser)
            _finish_macro_body(parser)
            return marker.complete(parser, RustSyntaxKind.MACRO_RULES)
        case _:
            if _at_item_macro(parser):
                common.parse_path(parser, PathMode.USE)
                parser.bump()
                if parser.nth(0) not in common.DELIMITERS:
                    parser.eat(TokenKind.IDENT)
                _finish_macro_body(parser)
                return marker.complete(parser, RustSyntaxKind.MACRO_CALL)
            parser.error_here(PARSER_EXPECTED_ITEM)
            return marker.complete(parser, RustSyntaxKind.ERROR)


def _finish_macro_body(parser: Parser) -> None:
    if parser.current not in common.DELIMITERS:
        parser.error_here(PARSER_EXPECTED_TOKEN, "Expected a delimited macro body")
        return
    braced = parser.at(TokenKind.LBRACE)
    common.parse_token_tree(parser)
    if not braced:
        parser.expect(TokenKind.SEMICOLON)


# ---------------------------------------------------------------------------
# use
# ---------------------------------------------------------------------------


def _finish_use(parser: Parser, marker: Marker) -> CompletedMarker:
    parser.bump()
    _parse_use_tree(parser)
    parser.expect(TokenKind.SEMICOLON)
    return marker.complete(parser, RustSyntaxKind.USE_ITEM)


def _parse_use_tree(parser: Parser) -> bool:
    marker = parser.start()
    if parser.at(TokenKind.COLON_COLON) and parser.nth(1) in (TokenKind.LBRACE, TokenKind.STAR):
        parser.bump()
    if parser.at(TokenKind.STAR):
        parser.bump()
    elif parser.at(TokenKind.LBRACE):
        _parse_use_tree_list(parser)
    elif common.at_path_start(parser):
        common.parse_path(parser, PathMode.USE)
        if parser.eat(TokenKind.COLON_COLON):
            if parser.at(TokenKind.LBRACE):
                _parse_use_tree_list(parser)
            else:
                parser.expect(TokenKind.STAR)
        elif parser.eat_keyword("as"):
            common.parse_name(parser)
    else:
        marker.abandon(parser)
        return False
    marker.complete(parser, RustSyntaxKind.USE_TREE)
    return True


def _parse_use_tree_list(parser: Parser) -> None:
    marker = parser.start()
    parser.bump()
    ParseSeparatedList(
        list_kind=None,
        closing=TokenKind.RBRACE,
        parse_element=_parse_use_tree,
        on_failure=lambda p: p.error_here(PARSER_EXPECTED_TOKEN, "Expected a use tree"),
    ).parse_list(parser)
    parser.expect(TokenKind.RBRACE)
    marker.complete(parser, RustSyntaxKind.USE_TREE_LIST)


# ---------------------------------------------------------------------------
# struct / union / enum
# ---------------------------------------------------------------------------


def _finish_struct(parser: Parser, marker: Marker) -> CompletedMarker:
    kind = RustSyntaxKind.UNION_ITEM if parser.at_keyword("union") else RustSyntaxKind.STRUCT_ITEM
    parser.bump()
    common.parse_name(parser)
    common.parse_generic_params(parser)
    if parser.at(TokenKind.LPAREN):
        _parse_tuple_fields(parser)
        common.parse_where_clause(parser)
        parser.expect(TokenKind.SEMICOLON)
        return marker.complete(parser, kind)
    common.parse_where_clause(parser)
    if parser.at(TokenKind.LBRACE):
        _parse_record_fields(parser)
    else:
        parser.expect(TokenKind.SEMICOLON)
    return marker.complete(parser, kind)


def _parse_record_fields(parser: Parser) -> None:
    marker = parser.start()
    parser.bump()
    ParseSeparatedList(
        list_kind=None,
        closing=TokenKind.RBRACE,
        parse_element=_parse_record_field,
        on_failure=lambda p: p.error_here(PARSER_EXPECTED_TOKEN, "Expected a field"),
    ).parse_list(parser)
    parser.expect(TokenKind.RBRACE)
    marker.complete(parser, RustSyntaxKind.RECORD_FIELD_LIST)


def _parse_record_field(parser: Parser) -> bool:
    marker = parser.start()
    common.parse_attributes(parser)
    common.parse_visibility(parser)
    if not parser.at(TokenKind.IDENT):
        marker.abandon(parser)
        return False
    parser.bump()
    parser.expect(TokenKind.COLON)
    types.parse_type(parser)
    marker.complete(parser, RustSyntaxKind.RECORD_FIELD)
    return True


def _parse_tuple_fields(parser: Parser) -> None:
    marker = parser.start()
    parser.bump()
    ParseSeparatedList(
        list_kind=None,
        closing=TokenKind.RPAREN,
        parse_element=_parse_tuple_field,
        on_failure=lambda p: p.error_here(PARSER_EXPECTED_TOKEN, "Expected a field type"),
    ).parse_list(parser)
    parser.expect(TokenKind.RPAREN)
    marker.complete(parser, RustSyntaxKind.TUPLE_FIELD_LIST)


def _parse_tuple_field(parser: Parser) -> bool:
    marker = parser.start()
    common.parse_attributes(parser)
    common.parse_visibility(parser)
    if not types.at_type_start(parser):
        marker.abandon(parser)
        return False
    types.parse_type(parser)
    marker.complete(parser, RustSyntaxKind.TUPLE_FIELD)
    return True


def _finish_enum(parser: Parser, marker: Marker) -> CompletedMarker:
    parser.bump()
    common.parse_name(parser)
    common.parse_generic_params(parser)
    common.parse_where_clause(parser)
    variants = parser.start()
    if parser.expect(TokenKind.LBRACE):
        ParseSeparatedList(
            list_kind=None,
            closing=TokenKind.RBRACE,
            parse_element=_parse_variant,
            on_failure=lambda p: p.error_here(PARSER_EXPECTED_TOKEN, "Expected a variant"),
        ).parse_list(parser)
        parser.expect(TokenKind.RBRACE)
    variants.complete(parser, RustSyntaxKind.VARIANT_LIST)
    return marker.complete(parser, RustSyntaxKind.ENUM_ITEM)


def _parse_variant(parser: Parser) -> bool:
    marker = parser.start()
    common.parse_attributes(parser)
    common.parse_visibility(parser)
    if not parser.at(TokenKind.IDENT):
        marker.abandon(parser)
        return False
    parser.bump()
    if parser.at(TokenKind.LBRACE):
        _parse_record_fields(parser)
    elif parser.at(TokenKind.LPAREN):
        _parse_tuple_fields(parser)
    if parser.at(TokenKind.EQUAL):
        discriminant = parser.start()
        parser.bump()
        expressions.parse_expr(parser)
        discriminant.complete(parser, RustSyntaxKind.DISCRIMINANT)
    marker.complete(parser, RustSyntaxKind.VARIANT)
    return True


# ---------------------------------------------------------------------------
# fn
# ---------------------------------------------------------------------------


def _finish_fn(parser: Parser, marker: Marker) -> CompletedMarker:
    parser.eat_keyword("const")
    parser.eat_keyword("async")
    parser.eat_keyword("unsafe")
    if parser.at_keyword("extern"):
        common.parse_abi(parser)
    parser.expect_keyword("fn")
    common.parse_name(parser)
    common.parse_generic_params(parser)
    _parse_param_list(parser)
    types.parse_ret_type(parser)
    common.parse_where_clause(parser)
    if parser.at(TokenKind.LBRACE):
        expressions.parse_block(parser)
    else:
        parser.expect(TokenKind.SEMICOLON)
    return marker.complete(parser, RustSyntaxKind.FN_ITEM)


def _parse_param_list(parser: Parser) -> None:
    marker = parser.start()
    if parser.expect(TokenKind.LPAREN):
        if _at_self_param(parser):
            _parse_self_param(parser)
            if not parser.at(TokenKind.RPAREN):
                parser.expect(TokenKind.COMMA)
        ParseSeparatedList(
            list_kind=None,
            closing=TokenKind.RPAREN,
            parse_element=_parse_param,
            on_failure=lambda p: p.error_here(PARSER_EXPECTED_TOKEN, "Expected a parameter"),
        ).parse_list(parser)
        parser.expect(TokenKind.RPAREN)
    marker.complete(parser, RustSyntaxKind.PARAM_LIST)


def _at_self_param(parser: Parser) -> bool:
    n = 0
    if parser.nth_at(n, TokenKind.AMP):
        n += 1
        if parser.nth_at(n, TokenKind.LIFETIME):
            n += 1
    if parser.nth_at_keyword(n, "mut"):
        n += 1
    return parser.nth_at_keyword(n, "self") and not parser.nth_at(n + 1, TokenKind.COLON_COLON)


def _parse_self_param(parser: Parser) -> None:
    marker = parser.start()
    if parser.eat(TokenKind.AMP):
        parser.eat(TokenKind.LIFETIME)
    parser.eat_keyword("mut")
    parser.bump()
    if parser.eat(TokenKind.COLON):
        types.parse_type(parser)
    marker.complete(parser, RustSyntaxKind.SELF_PARAM)


def _parse_param(parser: Parser) -> bool:
    marker = parser.start()
    common.parse_attributes(parser)
    if parser.eat(TokenKind.DOT_DOT_DOT):
        marker.complete(parser, RustSyntaxKind.PARAM)
        return True
    if patterns.parse_pattern(parser) is None:
        marker.abandon(parser)
        return False
    parser.expect(TokenKind.COLON)
    if parser.at(TokenKind.DOT_DOT_DOT):
        parser.bump()
    else:
        types.parse_type(parser)
    marker.complete(parser, RustSyntaxKind.PARAM)
    return True


# ---------------------------------------------------------------------------
# impl / trait / mod
# ---------------------------------------------------------------------------


def _finish_impl(parser: Parser, marker: Marker) -> CompletedMarker:
    parser.eat_keyword("unsafe")
    parser.bump()
    if parser.at(TokenKind.LESS_THAN) and not _at_qualified_path_after_impl(parser):
        common.parse_generic_params(parser)
    parser.eat_keyword("const")
    parser.eat(TokenKind.BANG)
    types.parse_type(parser)
    if parser.eat_keyword("for"):
        types.parse_type(parser)
    common.parse_where_clause(parser)
    _parse_braced_items(parser, RustSyntaxKind.ASSOC_ITEM_LIST)
    return marker.complete(parser, RustSyntaxKind.IMPL_ITEM)


def _at_qualified_path_after_impl(parser: Parser) -> bool:
    # `impl <T as Trait>::Assoc` is rare enough that only the leading `<` + path + `as` shape is recognised.
    return parser.nth_at(1, TokenKind.IDENT) and parser.nth_at_keyword(2, "as")


def _finish_trait(parser: Parser, marker: Marker) -> CompletedMarker:
    parser.eat_keyword("unsafe")
    parser.eat_keyword("auto")
    parser.bump()
    common.parse_name(parser)
    common.parse_generic_params(parser)
    if parser.eat(TokenKind.COLON):
        common.parse_type_bounds(parser)
    common.parse_where_clause(parser)
    _parse_braced_items(parser, RustSyntaxKind.ASSOC_ITEM_LIST)
    return marker.complete(parser, RustSyntaxKind.TRAIT_ITEM)


def _finish_mod(parser: Parser, marker: Marker) -> CompletedMarker:
    parser.eat_keyword("unsafe")
    parser.bump()
    common.parse_name(parser)
    if parser.at(TokenKind.LBRACE):
        _parse_braced_items(parser, RustSyntaxKind.ITEM_LIST)
    else:
        parser.expect(TokenKind.SEMICOLON)
    return marker.complete(parser, RustSyntaxKind.MOD_ITEM)


# ---------------------------------------------------------------------------
# const / static / type / extern crate
# ---------------------------------------------------------------------------


def _finish_const_or_static(parser: Parser, marker: Marker) -> CompletedMarker:
    kind = RustSyntaxKind.CONST_ITEM if parser.at_keyword("const") else RustSyntaxKind.STATIC_ITEM
    parser.bump()
    parser.eat_keyword("mut")
    common.parse_name(parser)
    if parser.eat(TokenKind.COLON):
        types.parse_type(parser)
    if parser.eat(TokenKind.EQUAL):
        expressions.parse_expr(parser)
    parser.expect(TokenKind.SEMICOLON)
    return marker.complete(parser, kind)


def _finish_type_alias(parser: Parser, marker: Marker) -> CompletedMarker:
    parser.bump()
    common.parse_name(parser)
    common.parse_generic_params(parser)
    if parser.eat(TokenKind.COLON):
        common.parse_type_bounds(parser)
    common.parse_where_clause(parser)
    if parser.eat(TokenKind.EQUAL):
        types.parse_type(parser)
    common.parse_where_clause(parser)
    parser.expect(TokenKind.SEMICOLON)
    return marker.complete(parser, RustSyntaxKind.TYPE_ALIAS)


def _finish_extern_crate(parser: Parser, marker: Marker) -> CompletedMarker:
    parser.bump_n(2)
    common.parse_name(parser)
    if parser.eat_keyword("as"):
        common.parse_name(parser)
    parser.expect(TokenKind.SEMICOLON)
    return marker.complete(parser, RustSyntaxKind.EXTERN_CRATE)
