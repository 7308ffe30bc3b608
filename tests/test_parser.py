import textwrap

from _debug import debug_dump_cst, debug_dump_diagnostics

from rsfmtpy.cst import GreenNode, GreenToken
from rsfmtpy.lexer import Lexer, TokenKind
from rsfmtpy.parser import (
    Parser,
    ParseRecoveryTokenSet,
    RecoveryError,
    TokenSource,
    parse,
)
from rsfmtpy.parser.tree_sink import ParsedGreenTree
from rsfmtpy.syntax import RustSyntaxKind

K = RustSyntaxKind


def _parse(test_name: str, source: str) -> ParsedGreenTree:
    parsed = parse(source)
    debug_dump_cst(test_name, source, parsed.root)
    debug_dump_diagnostics(test_name, parsed.diagnostics, source)
    return parsed


def _collect_node_kinds(root: GreenNode) -> list[RustSyntaxKind]:
    kinds: list[RustSyntaxKind] = []

    def walk(node: GreenNode) -> None:
        kinds.append(node.kind)
        for child in node.children:
            if isinstance(child, GreenNode):
                walk(child)

    walk(root)
    return kinds


def _collect_tokens(root: GreenNode) -> list[GreenToken]:
    tokens: list[GreenToken] = []

    def walk(node: GreenNode) -> None:
        for child in node.children:
            if isinstance(child, GreenNode):
                walk(child)
            else:
                tokens.append(child)

    walk(root)
    return tokens


def _reconstruct(root: GreenNode) -> str:
    return "".join(token.leading_trivia + token.text for token in _collect_tokens(root))


def _items(root: GreenNode) -> list[GreenNode]:
    source_file = root.children[0]
    assert isinstance(source_file, GreenNode)
    assert source_file.kind == K.SOURCE_FILE
    return [child for child in source_file.children if isinstance(child, GreenNode)]


def test_parse_items_are_lossless() -> None:
    source = textwrap.dedent(
        """
        //! crate docs
        #![allow(dead_code)]

        use std::collections::{HashMap, HashSet as Set};
        use super::*;

        /// A point.
        #[derive(Debug, Clone)]
        pub struct Point<T: Copy> {
            pub x: T,
            y: T, // trailing
        }

        struct Unit;
        struct Pair(i32, pub(crate) u8);

        enum Shape {
            Circle { radius: f64 },
            Square(f64),
            Empty = 3,
        }

        impl<T> Point<T> where T: Copy + Default {
            const ORIGIN: i32 = 0;
            pub fn new(x: T, y: T) -> Self { Self { x, y } }
        }

        trait Area: Sized { fn area(&self) -> f64; }

        mod inner;
        mod nested { fn f() {} }
        extern crate alloc;
        extern "C" { fn abs(input: i32) -> i32; }
        static mut COUNTER: u32 = 0;
        type Map<K> = HashMap<K, Vec<Vec<u8>>>;
        macro_rules! square { ($x:expr) => { $x * $x }; }
        thread_local!(static FOO: u8 = 1);
        """
    ).lstrip()
    parsed = _parse("parse_items_are_lossless", source)

    assert parsed.diagnostics == []
    assert _reconstruct(parsed.root) == source
    assert [item.kind for item in _items(parsed.root)] == [
        K.ATTRIBUTE,
        K.USE_ITEM,
        K.USE_ITEM,
        K.STRUCT_ITEM,
        K.STRUCT_ITEM,
        K.STRUCT_ITEM,
        K.ENUM_ITEM,
        K.IMPL_ITEM,
        K.TRAIT_ITEM,
        K.MOD_ITEM,
        K.MOD_ITEM,
        K.EXTERN_CRATE,
        K.EXTERN_BLOCK,
        K.STATIC_ITEM,
        K.TYPE_ALIAS,
        K.MACRO_RULES,
        K.MACRO_CALL,
    ]
    kinds = set(_collect_node_kinds(parsed.root))
    for expected in (
        K.USE_TREE_LIST,
        K.RECORD_FIELD_LIST,
        K.TUPLE_FIELD_LIST,
        K.VARIANT_LIST,
        K.DISCRIMINANT,
        K.GENERIC_PARAM_LIST,
        K.WHERE_CLAUSE,
        K.ASSOC_ITEM_LIST,
        K.ITEM_LIST,
        K.CONST_ITEM,
        K.SELF_PARAM,
        K.RET_TYPE,
        K.VISIBILITY,
        K.GENERIC_ARG_LIST,
        K.TOKEN_TREE,
    ):
        assert expected in kinds, expected


def test_parse_eof_token_holds_trailing_trivia() -> None:
    source = "fn a() {}\n// tail\n"
    parsed = _parse("parse_eof_token_holds_trailing_trivia", source)

    tokens = _collect_tokens(parsed.root)
    assert tokens[-1].kind == K.EOF
    assert tokens[-1].text == ""
    assert tokens[-1].leading_trivia == "\n// tail\n"


def test_parse_expressions_and_statements() -> None:
    source = textwrap.dedent(
        """
        fn main() {
            let mut total: u64 = 0;
            let Some(value) = maybe else { return; };
            for (i, item) in items.iter().enumerate() {
                total += item.len() as u64 * i;
            }
            while let Some(x) = stack.pop() { continue; }
            let label = match total {
                0 | 1 => "small",
                n if n > 100 => { "big" }
                _ => "medium",
            };
            let closure = move |a: i32, b| a + b;
            let range = 0..=10;
            let tuple = (1, x.0.1, [1, 2, 3][0]);
            let point = Point { x: 1, ..Default::default() };
            if a >> 2 >= b && !c { loop { break 'outer; } } else if d {} else {}
            let value = foo()?.await;
            println!("{}", total);
            &mut *ptr
        }
        """
    ).lstrip()
    parsed = _parse("parse_expressions_and_statements", source)

    assert parsed.diagnostics == []
    assert _reconstruct(parsed.root) == source
    kinds = set(_collect_node_kinds(parsed.root))
    for expected in (
        K.BLOCK,
        K.LET_STMT,
        K.LET_ELSE,
        K.EXPR_STMT,
        K.FOR_EXPR,
        K.WHILE_EXPR,
        K.LET_EXPR,
        K.MATCH_EXPR,
        K.MATCH_ARM_LIST,
        K.MATCH_ARM,
        K.MATCH_GUARD,
        K.OR_PAT,
        K.WILDCARD_PAT,
        K.TUPLE_STRUCT_PAT,
        K.TUPLE_PAT,
        K.CLOSURE_EXPR,
        K.CLOSURE_PARAM_LIST,
        K.RANGE_EXPR,
        K.TUPLE_EXPR,
        K.ARRAY_EXPR,
        K.INDEX_EXPR,
        K.FIELD_EXPR,
        K.RECORD_EXPR,
        K.RECORD_EXPR_FIELD_LIST,
        K.IF_EXPR,
        K.LOOP_EXPR,
        K.BREAK_EXPR,
        K.BIN_EXPR,
        K.CAST_EXPR,
        K.PREFIX_EXPR,
        K.REF_EXPR,
        K.METHOD_CALL_EXPR,
        K.CALL_EXPR,
        K.TRY_EXPR,
        K.AWAIT_EXPR,
        K.MACRO_CALL,
        K.RETURN_EXPR,
        K.CONTINUE_EXPR,
    ):
        assert expected in kinds, expected


def test_parse_shift_is_rebuilt_from_adjacent_tokens() -> None:
    parsed = _parse("parse_shift_is_rebuilt_from_adjacent_tokens", "const X: u8 = a >> 2;\n")

    assert parsed.diagnostics == []
    greater = [token for token in _collect_tokens(parsed.root) if token.kind == K.GREATER_THAN]
    assert [token.text for token in greater] == [">", ">"]
    assert greater[1].leading_trivia == ""


def test_parse_nested_generics_close_with_lone_angles() -> None:
    parsed = _parse("parse_nested_generics_close_with_lone_angles", "type A = Vec<Vec<u8>>;\n")

    assert parsed.diagnostics == []
    kinds = _collect_node_kinds(parsed.root)
    assert kinds.count(K.GENERIC_ARG_LIST) == 2


def test_parse_types() -> None:
    source = textwrap.dedent(
        """
        fn f<'a, T: ?Sized + 'a, const N: usize>(
            a: &'a mut T,
            b: *const u8,
            c: (i32, [u8; N], &[u8]),
            d: fn(i32) -> !,
            e: impl Iterator<Item = u8>,
            f: Box<dyn Fn() + Send>,
            g: <T as Trait>::Assoc,
            _: _,
        ) {}
        """
    ).lstrip()
    parsed = _parse("parse_types", source)

    kinds = set(_collect_node_kinds(parsed.root))
    for expected in (
        K.LIFETIME_PARAM,
        K.TYPE_PARAM,
        K.CONST_PARAM,
        K.TYPE_BOUND_LIST,
        K.REF_TYPE,
        K.PTR_TYPE,
        K.TUPLE_TYPE,
        K.ARRAY_TYPE,
        K.SLICE_TYPE,
        K.FN_PTR_TYPE,
        K.NEVER_TYPE,
        K.IMPL_TRAIT_TYPE,
        K.ASSOC_TYPE_ARG,
        K.DYN_TRAIT_TYPE,
        K.QUALIFIED_SELF,
        K.INFER_TYPE,
    ):
        assert expected in kinds, expected
    assert _reconstruct(parsed.root) == source


def test_parse_recovers_from_garbage_item() -> None:
    source = "fn a() {}\n) garbage\nfn b() {}\n"
    parsed = _parse("parse_recovers_from_garbage_item", source)

    assert parsed.diagnostics
    assert parsed.diagnostics[0].code == "PARSER_EXPECTED_ITEM"
    assert [item.kind for item in _items(parsed.root)] == [K.FN_ITEM, K.ERROR, K.FN_ITEM]
    assert _reconstruct(parsed.root) == source


def test_parse_recovery_stops_at_line_break() -> None:
    source = "@@@\nstruct S;\n"
    parsed = _parse("parse_recovery_stops_at_line_break", source)

    assert [item.kind for item in _items(parsed.root)] == [K.ERROR, K.STRUCT_ITEM]


def test_parse_attribute_without_item_is_an_error() -> None:
    source = "#[test]\n"
    parsed = _parse("parse_attribute_without_item_is_an_error", source)

    assert [diagnostic.code for diagnostic in parsed.diagnostics] == ["PARSER_EXPECTED_ITEM"]
    assert [item.kind for item in _items(parsed.root)] == [K.ERROR]


def test_parse_unexpected_statement_token_is_an_error() -> None:
    source = "fn f() { ) }\n"
    parsed = _parse("parse_unexpected_statement_token_is_an_error", source)

    assert parsed.diagnostics
    assert K.ERROR in _collect_node_kinds(parsed.root)
    assert _reconstruct(parsed.root) == source


def test_parse_never_raises_on_truncated_input() -> None:
    for source in ("fn", "fn f(", "struct S {", "impl<T", "fn f() { let x = ", "match", "\"open"):
        parsed = _parse("parse_never_raises_on_truncated_input", source)
        assert parsed.diagnostics, source
        assert _reconstruct(parsed.root) == source


def test_parse_unknown_bytes_are_errors() -> None:
    parsed = _parse("parse_unknown_bytes_are_errors", "fn a() { € }\n")
    assert parsed.diagnostics


def test_parser_checkpoint_rewind() -> None:
    parser = Parser(TokenSource(Lexer("fn a")))
    checkpoint = parser.checkpoint()

    parser.bump()
    assert parser.current == TokenKind.IDENT
    assert parser.current_text == "a"
    assert len(parser.events) == 1

    parser.rewind(checkpoint)
    assert parser.current_text == "fn"
    assert parser.events == []


def test_recovery_is_disabled_while_speculative() -> None:
    parser = Parser(TokenSource(Lexer(") ;")))
    recovery = ParseRecoveryTokenSet(node_kind=K.ERROR, recovery_set=frozenset({TokenKind.SEMICOLON}))

    with parser.speculative_parsing():
        assert recovery.recover(parser) == (None, RecoveryError.RECOVERY_DISABLED)
    assert parser.events == []

    completed, error = recovery.recover(parser)
    assert error is None
    assert completed is not None
    assert parser.current == TokenKind.SEMICOLON


def test_recovery_at_eof() -> None:
    parser = Parser(TokenSource(Lexer("")))
    recovery = ParseRecoveryTokenSet(node_kind=K.ERROR, recovery_set=frozenset())
    assert recovery.recover(parser) == (None, RecoveryError.EOF)
