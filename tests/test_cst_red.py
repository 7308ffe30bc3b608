from rsfmtpy.cst import SyntaxNode, SyntaxToken, dump_tree, from_green
from rsfmtpy.parser import parse
from rsfmtpy.syntax import RustSyntaxKind


def _syntax_root(source: str) -> SyntaxNode:
    return from_green(parse(source).root, source)


def _source_file(root: SyntaxNode) -> SyntaxNode:
    source_file = root.find_node(RustSyntaxKind.SOURCE_FILE)
    assert source_file is not None
    return source_file


def test_red_wrappers_navigation_and_siblings() -> None:
    root = _syntax_root("fn a() {}\nstruct B;\n")
    source_file = _source_file(root)

    items = source_file.child_nodes()
    assert [item.kind for item in items] == [RustSyntaxKind.FN_ITEM, RustSyntaxKind.STRUCT_ITEM]
    assert items[0].next_sibling() is items[1]
    assert items[1].prev_sibling() is items[0]
    assert items[0].prev_sibling() is None

    eof = items[1].next_sibling()
    assert isinstance(eof, SyntaxToken)
    assert eof.kind == RustSyntaxKind.EOF
    assert root.next_sibling() is None


def test_red_wrappers_token_text_and_trivia_views() -> None:
    source = "fn a() {} // inline\n\nstruct B;\n"
    root = _syntax_root(source)

    tokens = root.descendants_tokens()
    assert "".join(token.leading_trivia + token.text for token in tokens) == source

    struct_keyword = next(token for token in tokens if token.text == "struct")
    assert struct_keyword.leading_trivia == " // inline\n\n"
    assert struct_keyword.start == source.index(" // inline")
    assert struct_keyword.token_start == source.index("struct")
    assert struct_keyword.end == struct_keyword.token_start + len("struct")
    assert struct_keyword.text_range.start.value == struct_keyword.token_start


def test_red_node_ranges_skip_leading_trivia() -> None:
    source = "// head\nfn a() {}\n"
    root = _syntax_root(source)
    fn_item = _source_file(root).find_node(RustSyntaxKind.FN_ITEM)
    assert fn_item is not None

    assert fn_item.start == 0
    assert fn_item.text == "fn a() {}"
    assert fn_item.text_range.start.value == source.index("fn")
    assert fn_item.end == source.index("}") + 1
    assert fn_item.source is source


def test_red_find_helpers() -> None:
    root = _syntax_root("pub fn a(x: i32) -> i32 { x }\n")
    fn_item = _source_file(root).find_node(RustSyntaxKind.FN_ITEM)
    assert fn_item is not None

    assert fn_item.find_node(RustSyntaxKind.VISIBILITY) is not None
    assert fn_item.find_keyword("fn") is not None
    assert fn_item.find_keyword("struct") is None
    assert fn_item.find_nodes(RustSyntaxKind.PARAM_LIST, RustSyntaxKind.RET_TYPE) == (
        fn_item.find_node(RustSyntaxKind.PARAM_LIST),
        fn_item.find_node(RustSyntaxKind.RET_TYPE),
    )
    params = fn_item.find_node(RustSyntaxKind.PARAM_LIST)
    assert params is not None
    assert params.find_token(RustSyntaxKind.LPAREN) is params.first_token()
    assert params.find_token(RustSyntaxKind.RPAREN) is params.last_token()

    first = fn_item.first_token()
    last = fn_item.last_token()
    assert first is not None and first.text == "pub"
    assert last is not None and last.kind == RustSyntaxKind.RBRACE
    assert last.parent.kind == RustSyntaxKind.BLOCK


def test_dump_tree_outlines_nodes() -> None:
    outline = dump_tree(_syntax_root("struct A;\n"))
    lines = outline.splitlines()

    assert lines[0].startswith("ROOT@0..")
    assert lines[1].strip().startswith("SOURCE_FILE")
    assert any("STRUCT_ITEM" in line for line in lines)
    assert "IDENT 'struct'" in outline
