from _debug import debug_dump_groups

from rsfmtpy.format import FormatConfig
from rsfmtpy.format.arena import Break, Child, Gap, GroupKind, SegmentArena, Text, TextMode
from rsfmtpy.format.render import Writer, render
from rsfmtpy.format.whitespace import Comment
from rsfmtpy.text import TextRange


def _call_arena(kind: GroupKind = GroupKind.PLAIN) -> tuple[SegmentArena, int, int]:
    """`call(aaaa, bbbb)` with one list group for the arguments."""
    arena = SegmentArena()
    args = arena.new_group(kind, element_count=2)
    for entry in (
        Break(True),
        Text("aaaa"),
        Text(","),
        Text(" ", TextMode.INLINE_ONLY),
        Break(True),
        Text("bbbb"),
        Text(",", TextMode.SPLIT_ONLY),
        Break(False),
    ):
        arena.append(args, entry)
    root = arena.new_group()
    arena.append(root, Text("call("))
    arena.append(root, Child(args))
    arena.append(root, Text(")"))
    return arena, root, args


SPLIT_CALL = "call(\n    aaaa,\n    bbbb,\n)\n"


def test_group_stays_inline_when_it_fits() -> None:
    arena, root, _ = _call_arena()

    outcome = render(arena, root, FormatConfig())
    assert outcome.text == "call(aaaa, bbbb)\n"
    assert outcome.split_groups == frozenset()


def test_group_splits_when_too_wide() -> None:
    arena, root, args = _call_arena()

    outcome = render(arena, root, FormatConfig(max_width=15))
    assert outcome.text == SPLIT_CALL
    assert args in outcome.split_groups


def test_closing_text_counts_against_the_width() -> None:
    # "call(aaaa, bbbb" is 15 wide; the `)` that follows pushes it over.
    arena, root, _ = _call_arena()

    assert render(arena, root, FormatConfig(max_width=16)).text == "call(aaaa, bbbb)\n"
    assert render(arena, root, FormatConfig(max_width=15)).text == SPLIT_CALL


def test_forced_group_splits() -> None:
    arena, root, args = _call_arena()
    arena.get(args).forced = True

    assert render(arena, root, FormatConfig()).text == SPLIT_CALL


def test_brace_threshold() -> None:
    arena, root, _ = _call_arena(GroupKind.BRACE)
    assert render(arena, root, FormatConfig()).text == SPLIT_CALL

    arena, root, _ = _call_arena(GroupKind.BRACE)
    assert render(arena, root, FormatConfig(split_brace_threshold=3)).text == "call(aaaa, bbbb)\n"

    arena, root, _ = _call_arena(GroupKind.BRACE)
    assert render(arena, root, FormatConfig(split_brace_threshold=None)).text == "call(aaaa, bbbb)\n"


def test_attribute_and_where_policies() -> None:
    for kind, option in ((GroupKind.ATTRIBUTES, "split_attributes"), (GroupKind.WHERE, "split_where")):
        arena, root, _ = _call_arena(kind)
        assert render(arena, root, FormatConfig()).text == SPLIT_CALL

        arena, root, _ = _call_arena(kind)
        assert render(arena, root, FormatConfig(**{option: False})).text == "call(aaaa, bbbb)\n"


def _nested_arena() -> tuple[SegmentArena, int]:
    """`f(g(x))` where the inner call is forced to split."""
    arena = SegmentArena()
    inner = arena.new_group()
    for entry in (Text("g("), Break(True), Text("x"), Break(False), Text(")")):
        arena.append(inner, entry)
    arena.get(inner).forced = True
    outer = arena.new_group()
    for entry in (
        Text("f("),
        Break(True),
        Child(inner),
        Text(",", TextMode.SPLIT_ONLY),
        Break(False),
        Text(")"),
    ):
        arena.append(outer, entry)
    return arena, outer


def test_split_child_does_not_split_parent_by_default() -> None:
    arena, root = _nested_arena()

    assert render(arena, root, FormatConfig()).text == "f(g(\n    x\n))\n"


def test_root_splits_propagates_to_ancestors() -> None:
    arena, root = _nested_arena()
    debug_dump_groups("root_splits", arena, root)

    outcome = render(arena, root, FormatConfig(root_splits=True))
    assert outcome.text == "f(\n    g(\n        x\n    ),\n)\n"
    assert root in outcome.split_groups


def _comment(text: str, *, own_line: bool = True, trailing: bool = False, block: bool = False) -> Comment:
    return Comment(
        text=text,
        range=TextRange.from_offsets(0, len(text)),
        attach=0,
        own_line=own_line,
        block=block,
        trailing=trailing,
    )


def test_writer_strips_leading_breaks_and_trailing_space() -> None:
    writer = Writer(FormatConfig())
    writer.newline(0)
    writer.blank(1)
    writer.text("a   ")
    writer.newline(0)
    writer.newline(0)

    assert writer.finish() == "a\n"


def test_writer_empty_output() -> None:
    assert Writer(FormatConfig()).finish() == ""


def test_writer_blank_lines_are_capped() -> None:
    writer = Writer(FormatConfig())
    writer.text("a")
    writer.newline(0)
    writer.blank(3)
    writer.text("b")

    assert writer.finish() == "a\n\nb\n"


def test_writer_pulls_trailing_comment_back() -> None:
    writer = Writer(FormatConfig())
    writer.text("a;")
    writer.newline(0)
    writer.comment(_comment("// note", trailing=True))
    writer.text("b;")

    assert writer.finish() == "a; // note\nb;\n"


def test_writer_indents_own_line_comments() -> None:
    writer = Writer(FormatConfig())
    writer.text("{")
    writer.newline(4)
    writer.comment(_comment("// one\n// two"))
    writer.text("x")
    writer.newline(0)
    writer.text("}")

    assert writer.finish() == "{\n    // one\n    // two\n    x\n}\n"


def test_writer_inline_block_comment() -> None:
    writer = Writer(FormatConfig())
    writer.text("f(")
    writer.comment(_comment("/* x */", own_line=False, block=True))
    writer.text(")")
    writer.text(" a")

    assert writer.finish() == "f(/* x */) a\n"


def test_writer_blank_ends_the_open_line() -> None:
    writer = Writer(FormatConfig())
    writer.text("a;")
    writer.blank(1)
    writer.comment(_comment("// end"))

    assert writer.finish() == "a;\n\n// end\n"


def _assignment_with_comment() -> tuple[SegmentArena, int]:
    """`let x = value; // note` where only the assignment can split."""
    arena = SegmentArena()
    assignment = arena.new_group()
    for entry in (Text("let x ="), Text(" ", TextMode.INLINE_ONLY), Break(True), Text("value;")):
        arena.append(assignment, entry)
    root = arena.new_group()
    arena.append(root, Child(assignment))
    arena.append(root, Gap((_comment("// note", trailing=True),), 0))
    return arena, root


def test_trailing_comment_counts_against_the_width() -> None:
    # "let x = value;" is 14 wide and " // note" adds 8.
    arena, root = _assignment_with_comment()
    assert render(arena, root, FormatConfig(max_width=22)).text == "let x = value; // note\n"

    arena, root = _assignment_with_comment()
    assert render(arena, root, FormatConfig(max_width=21)).text == "let x =\n    value; // note\n"
