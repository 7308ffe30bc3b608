import pytest
from _debug import debug_dump_diagnostics, debug_print_source

from rsfmtpy.format import CommentPlacementError, FormatConfig, FormatError, format_str
from rsfmtpy.lexer import Lexer, TokenKind, token_text
from rsfmtpy.parser import parse_result


def fmt(source: str, config: FormatConfig | None = None, test_name: str = "fmt") -> str:
    debug_print_source(test_name, source)
    result = format_str(source, config)
    debug_dump_diagnostics(test_name, result.diagnostics, source)
    assert result.lost_comments == {}
    return result.text


def test_struct_fields_split_by_brace_threshold() -> None:
    source = "struct S{a:i32,b:i32}"

    assert fmt(source) == "struct S {\n    a: i32,\n    b: i32,\n}\n"
    assert fmt(source, FormatConfig(split_brace_threshold=None)) == "struct S { a: i32, b: i32 }\n"


def test_brace_threshold_counts_elements() -> None:
    source = "struct S{a:i32,b:i32}"

    two = fmt(source, FormatConfig(max_width=80, split_brace_threshold=2))
    three = fmt(source, FormatConfig(max_width=80, split_brace_threshold=3))

    assert two == "struct S {\n    a: i32,\n    b: i32,\n}\n"
    assert three == "struct S { a: i32, b: i32 }\n"


def test_items_get_blank_line_between_definitions() -> None:
    assert fmt("fn a() {}\nfn b() {}") == "fn a() {}\n\nfn b() {}\n"


def test_imports_stay_adjacent() -> None:
    source = "use a;\nuse b;\n"

    assert fmt(source) == source


def test_source_blank_lines_are_preserved_and_capped() -> None:
    source = "fn f() {\n    let a = 1;\n\n\n\n    let b = 2;\n}\n"

    assert fmt(source) == "fn f() {\n    let a = 1;\n\n    let b = 2;\n}\n"


def test_leading_comment_is_kept() -> None:
    source = "// hello\nfn a() {}\n"

    assert fmt(source) == source


def test_trailing_comment_stays_on_its_line() -> None:
    assert fmt("fn a() {} // x\nfn b() {}") == "fn a() {} // x\n\nfn b() {}\n"


def test_inline_block_comment_stays_inline() -> None:
    source = "fn a(/* x */) {}\n"

    assert fmt(source) == source


def test_unplaceable_comment_is_reported() -> None:
    source = "fn f() -> // note\ni32 {}\n"

    result = format_str(source)

    assert result.text == "fn f() -> i32 {}\n"
    assert result.lost_comment_count == 1
    assert [diagnostic.code for diagnostic in result.diagnostics] == ["FORMAT_LOST_COMMENT"]


def test_unplaceable_comment_is_fatal_when_configured() -> None:
    source = "fn f() -> // note\ni32 {}\n"

    with pytest.raises(CommentPlacementError):
        format_str(source, FormatConfig(comment_errors_fatal=True))


def test_calls_split_when_too_wide() -> None:
    source = "fn f() { call(aaaa, bbbb); }"
    expected = "fn f() {\n    call(\n        aaaa,\n        bbbb,\n    );\n}\n"

    assert fmt(source, FormatConfig(max_width=20)) == expected


def test_closure_body_splits_without_splitting_the_call() -> None:
    source = "fn f() { let x = foo(|| { bar(); }); }"

    assert fmt(source) == "fn f() {\n    let x = foo(|| {\n        bar();\n    });\n}\n"


def test_root_splits_splits_enclosing_groups() -> None:
    source = "fn f() { let x = foo(|| { bar(); }); }"

    text = fmt(source, FormatConfig(root_splits=True))

    assert "foo(|| {" not in text
    assert "bar();" in text
    assert not parse_result(text).has_errors


def test_empty_source_formats_to_empty_output() -> None:
    assert fmt("") == ""
    assert fmt("\n\n") == ""


def test_comment_before_method_call_is_kept() -> None:
    source = "fn f() {\n    let x = foo\n        // why\n        .bar()\n        .baz();\n}\n"

    assert fmt(source) == "fn f() {\n    let x = foo\n        // why\n        .bar().baz();\n}\n"


def test_comment_before_binary_operator_is_kept() -> None:
    source = "fn f() {\n    let x = a\n        // why\n        + b;\n}\n"

    assert fmt(source) == source


def test_blank_line_before_closing_comment_is_kept() -> None:
    source = "fn f() {\n    let x = 1;\n\n    // end of block\n}\n"

    assert fmt(source) == source
    assert fmt("fn f() {\n    let x = 1;\n\n\n}\n") == "fn f() {\n    let x = 1;\n}\n"


def test_blank_line_before_end_of_file_comment_is_kept() -> None:
    source = "fn f() {}\n\n// end\n"

    assert fmt(source) == source
    assert fmt("fn f() {}\n// end\n\n\n") == "fn f() {}\n// end\n"


def test_trailing_comment_counts_against_the_width() -> None:
    source = "fn f() {\n    let mut buffer = String::new(); // buffer\n}\n"

    assert fmt(source, FormatConfig(max_width=45)) == source
    assert fmt(source, FormatConfig(max_width=44)) == (
        "fn f() {\n    let mut buffer =\n        String::new(); // buffer\n}\n"
    )


def test_indented_comment_is_reflowed_from_its_own_column() -> None:
    words = "alpha beta gamma delta epsilon zeta eta theta iota kappa lambda"
    source = f"fn f() {{\n    // {words}\n    let x = 1;\n}}\n"

    text = fmt(source, FormatConfig(comment_width=40))

    comment_lines = [line for line in text.splitlines() if line.lstrip().startswith("//")]
    assert len(comment_lines) > 1
    assert all(line.startswith("    // ") for line in comment_lines)
    assert all(len(line.strip()) <= 40 for line in comment_lines)
    assert " ".join(line.strip()[3:] for line in comment_lines) == words


def test_where_clause_splits_the_signature_under_root_splits() -> None:
    source = "fn f<T>(x: T) -> T where T: Clone { x }"

    text = fmt(source, FormatConfig(split_where=True, root_splits=True))

    lines = text.splitlines()
    assert lines[0] == "fn f<T>(x: T) -> T"
    assert lines[1:4] == ["where", "    T: Clone,", "{"]
    assert not parse_result(text).has_errors
    assert fmt(text, FormatConfig(split_where=True, root_splits=True)) == text

    inline = fmt(source, FormatConfig(split_where=False, root_splits=True))
    assert inline.splitlines()[0] == "fn f<T>(x: T) -> T where T: Clone {"


def test_syntax_errors_raise_format_error() -> None:
    with pytest.raises(FormatError, match="syntax errors") as info:
        format_str("fn a( {}\n")
    assert info.value.diagnostics


IDEMPOTENCE_CASES = [
    ("struct", "struct S{a:i32,b:i32}", None),
    ("items", "use a;\nuse b;\nfn a() {}\nfn b() {}", None),
    ("comments", "// hello\nfn a() {} // x\nfn b(/* y */) {}\n", None),
    ("wide_call", "fn f() { call(aaaa, bbbb); }", FormatConfig(max_width=20)),
    ("closure", "fn f() { let x = foo(|| { bar(); }); }", None),
    ("inline_struct", "struct S{a:i32,b:i32}", FormatConfig(split_brace_threshold=None)),
    ("chain_comment", "fn f() {\n    let x = foo\n        // why\n        .bar()\n        .baz();\n}\n", None),
    ("operator_comment", "fn f() {\n    let x = a\n        // why\n        + b;\n}\n", None),
    ("block_end_comment", "fn f() {\n    let x = 1;\n\n    // end of block\n}\n", None),
    ("file_end_comment", "fn f() {}\n\n// end\n", None),
]


@pytest.mark.parametrize(
    ("source", "config"),
    [(source, config) for _, source, config in IDEMPOTENCE_CASES],
    ids=[name for name, _, _ in IDEMPOTENCE_CASES],
)
def test_formatting_is_idempotent(source: str, config: FormatConfig | None) -> None:
    once = fmt(source, config)

    assert fmt(once, config) == once


@pytest.mark.parametrize(
    ("source", "config"),
    [(source, config) for _, source, config in IDEMPOTENCE_CASES],
    ids=[name for name, _, _ in IDEMPOTENCE_CASES],
)
def test_output_reparses_and_keeps_comments(source: str, config: FormatConfig | None) -> None:
    text = fmt(source, config)

    assert not parse_result(text).has_errors
    for marker in ("// hello", "// x", "/* y */"):
        assert (marker in source) == (marker in text)


def test_lines_fit_the_configured_width() -> None:
    source = "fn f() { call(aaaa, bbbb); other(cccc, dddd, eeee); }"

    text = fmt(source, FormatConfig(max_width=20))

    assert all(len(line) <= 20 for line in text.splitlines())


def _comments(text: str) -> list[str]:
    return sorted(token_text(text, token) for token in Lexer(text).lex() if token.kind == TokenKind.COMMENT)


COMMENT_CASES = [
    ("leading", "// hello\nfn a() {}\n"),
    ("trailing", "fn a() {} // x\nfn b() {}"),
    ("inline_block", "fn a(/* x */) {}\n"),
    ("chain", "fn f() {\n    let x = foo\n        // why\n        .bar()\n        .baz();\n}\n"),
    ("operator", "fn f() {\n    let x = a\n        // why\n        + b;\n}\n"),
    ("block_end", "fn f() {\n    let x = 1;\n\n    // end of block\n}\n"),
    ("file_end", "fn f() {}\n\n// end\n"),
    ("empty_block", "fn f() {\n    // nothing yet\n}\n"),
    ("empty_args", "fn f() { call(\n    // none\n); }\n"),
    ("struct_fields", "struct S {\n    // first\n    a: i32, // a\n    /* b */ b: i32,\n}\n"),
    ("match_arms", "fn f() { match x {\n    // zero\n    0 => a, // a\n    _ => b,\n} }\n"),
    ("unplaceable", "fn f() -> // note\ni32 {}\n"),
]


@pytest.mark.parametrize("source", [source for _, source in COMMENT_CASES], ids=[name for name, _ in COMMENT_CASES])
def test_every_comment_is_written_or_reported_lost(source: str) -> None:
    debug_print_source("comment_completeness", source)
    result = format_str(source, FormatConfig(comment_width=None))

    lost = [comment.text for comments in result.lost_comments.values() for comment in comments]
    assert sorted(_comments(result.text) + lost) == _comments(source)


WIDTH_CASES = [
    "fn f() { call(aaaa, bbbb); other(cccc, dddd, eeee); }",
    "fn f() { let value = first + second + third; }",
    "fn long_name(alpha: u32, beta: u32) -> u32 { alpha }",
    "fn f() { let x = foo.bar().baz().qux(); }",
    "struct Point { x: i32, y: i32 }",
    "fn f() { let point = Point { x: 1, y: 2 }; }",
    "fn f() { match value { Some(x) => x, None => 0 } }",
]


@pytest.mark.parametrize("source", WIDTH_CASES)
def test_every_line_fits_when_the_tokens_allow(source: str) -> None:
    text = fmt(source, FormatConfig(max_width=32))

    assert all(len(line) <= 32 for line in text.splitlines())
    assert not parse_result(text).has_errors
