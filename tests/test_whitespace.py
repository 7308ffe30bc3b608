import textwrap

from rsfmtpy.format import FormatConfig
from rsfmtpy.format.whitespace import Blank, Comment, GapTable, line_comment_prefix, reflow, scan_gap
from rsfmtpy.parser import parse_result


def _gap(source: str, config: FormatConfig | None = None) -> tuple:
    """Scan the trivia between the first `a` and the last `b` of `source`."""
    start = source.index("a") + 1
    end = source.rindex("b")
    return scan_gap(source, start, end, config=config or FormatConfig())


def test_blank_lines_are_capped() -> None:
    source = "a\n\n\n\nb"

    assert _gap(source) == (Blank(1),)
    assert _gap(source, FormatConfig(max_blank_lines=2)) == (Blank(2),)
    assert _gap(source, FormatConfig(max_blank_lines=0)) == ()


def test_single_newline_is_not_a_blank() -> None:
    assert _gap("a\nb") == ()


def test_adjacent_line_comments_merge() -> None:
    source = "a\n// one\n    // two\nb"

    (comment,) = _gap(source)
    assert isinstance(comment, Comment)
    assert comment.text == "// one\n// two"
    assert comment.own_line
    assert not comment.block
    assert not comment.trailing
    assert comment.attach == source.rindex("b")
    assert comment.range.as_tuple() == (source.index("// one"), source.index("// two") + len("// two"))


def test_blank_line_splits_comment_runs() -> None:
    items = _gap("a\n// one\n\n// two\nb")

    assert [type(item) for item in items] == [Comment, Blank, Comment]
    assert items[0].text == "// one"
    assert items[2].text == "// two"


def test_doc_and_plain_comments_do_not_merge() -> None:
    items = _gap("a\n/// doc\n// plain\nb")

    assert [item.text for item in items] == ["/// doc", "// plain"]


def test_trailing_comment_stays_alone() -> None:
    items = _gap("a // trailing\n// own line\nb")

    assert [item.text for item in items] == ["// trailing", "// own line"]
    assert items[0].trailing
    assert not items[1].trailing


def test_block_comments() -> None:
    inline = _gap("a /* inline */ b")
    own_line = _gap("a\n/* own */\nb")

    assert inline[0].block and not inline[0].own_line and inline[0].trailing
    assert own_line[0].block and own_line[0].own_line and not own_line[0].trailing


def test_comment_at_file_start_is_not_trailing() -> None:
    source = "// head\nb"
    items = scan_gap(source, 0, source.index("b"), config=FormatConfig(), at_file_start=True)

    assert items[0].text == "// head"
    assert not items[0].trailing


def test_line_comment_prefix() -> None:
    assert line_comment_prefix("/// doc") == "///"
    assert line_comment_prefix("//! inner") == "//!"
    assert line_comment_prefix("// plain") == "//"
    assert line_comment_prefix("//// banner") == "//"


def test_reflow_wraps_only_long_paragraphs() -> None:
    long_line = "// " + " ".join(["word"] * 30)
    short = "// short line\n// another"

    wrapped = reflow(long_line, 40)
    assert all(len(line) <= 40 for line in wrapped.split("\n"))
    assert all(line.startswith("// ") for line in wrapped.split("\n"))
    assert wrapped.replace("\n// ", " ") == long_line
    assert reflow(short, 40) == short


def test_reflow_keeps_code_fences_and_lists() -> None:
    text = textwrap.dedent(
        """\
        /// ```
        /// let value = some_function_with_a_very_long_name(argument_one, argument_two);
        /// ```
        /// - a list item that is rather long and would otherwise be merged into a paragraph"""
    )

    assert reflow(text, 40) == text


def test_gap_table_hands_out_each_gap_once() -> None:
    source = "// head\nfn a() {} // tail\n"
    root = parse_result(source).syntax_root()
    table = GapTable.from_tree(root, FormatConfig())
    fn_offset = source.index("fn")

    assert table.has_comments(fn_offset)
    items = table.take(fn_offset)
    assert [item.text for item in items] == ["// head"]
    assert table.take(fn_offset) == ()
    assert not table.has_comments(fn_offset)

    remaining = table.remaining()
    assert [comment.text for comment in remaining] == ["// tail"]
    assert remaining[0].trailing


def test_gap_table_take_range_claims_inner_gaps() -> None:
    source = "fn a() { /* x */ }\n"
    root = parse_result(source).syntax_root()
    table = GapTable.from_tree(root, FormatConfig())

    claimed = table.take_range(0, source.index("}") + 1)
    assert [comment.text for comment in claimed] == ["/* x */"]
    assert table.remaining() == []
