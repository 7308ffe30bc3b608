import pytest

from rsfmtpy.format import FormatConfig
from rsfmtpy.format.arena import Break, Child, Gap, GroupKind, SegmentArena, Text, TextMode
from rsfmtpy.format.builder import SegmentBuilder
from rsfmtpy.format.margin import NO_MARGIN, Margin, MarginGroup, needs_blank_line
from rsfmtpy.format.whitespace import Blank, GapTable
from rsfmtpy.parser import parse_result


def test_text_modes() -> None:
    assert TextMode.ALL.visible(True) and TextMode.ALL.visible(False)
    assert TextMode.INLINE_ONLY.visible(False) and not TextMode.INLINE_ONLY.visible(True)
    assert TextMode.SPLIT_ONLY.visible(True) and not TextMode.SPLIT_ONLY.visible(False)


def test_arena_links_children_and_ancestors() -> None:
    arena = SegmentArena()
    root = arena.new_group()
    middle = arena.new_group(GroupKind.BRACE, element_count=2)
    leaf = arena.new_group()

    arena.append(middle, Child(leaf))
    arena.append(root, Child(middle))

    assert arena.children(root) == [middle]
    assert list(arena.ancestors(leaf)) == [middle, root]
    assert list(arena.ancestors(root)) == []
    assert arena.get(middle).kind == GroupKind.BRACE
    assert arena.get(middle).element_count == 2
    assert len(arena) == 3


def test_arena_rejects_appends_to_finalized_group() -> None:
    arena = SegmentArena()
    handle = arena.finalize(arena.new_group())

    with pytest.raises(RuntimeError, match="finalized"):
        arena.append(handle, Text("x"))


def test_arena_rejects_second_parent() -> None:
    arena = SegmentArena()
    first = arena.new_group()
    second = arena.new_group()
    child = arena.new_group()
    arena.append(first, Child(child))

    with pytest.raises(RuntimeError, match="already belongs"):
        arena.append(second, Child(child))
    with pytest.raises(RuntimeError, match="itself"):
        arena.append(second, Child(second))


def test_arena_rejects_unknown_handles() -> None:
    arena = SegmentArena()

    with pytest.raises(ValueError, match="Unknown split group"):
        arena.get(0)


def _builder(source: str = "") -> SegmentBuilder:
    root = parse_result(source).syntax_root()
    return SegmentBuilder(SegmentArena(), GapTable.from_tree(root, FormatConfig()), source)


def test_builder_nests_groups_and_sets_root() -> None:
    builder = _builder()

    with builder.group() as outer:
        builder.text("f(")
        with builder.group(GroupKind.BRACE, 1) as inner:
            builder.soft_break()
            builder.text("x")
        builder.text("")
        builder.text(")")

    assert builder.root == outer
    arena = builder.arena
    assert arena.get(outer).entries == [Text("f("), Child(inner), Text(")")]
    assert arena.get(inner).entries == [Text(" ", TextMode.INLINE_ONLY), Break(True), Text("x")]
    assert arena.get(inner).finalized
    assert arena.get(inner).parent == outer


def test_builder_rejects_second_root() -> None:
    builder = _builder()
    with builder.group():
        pass

    with pytest.raises(RuntimeError, match="already has a root"):
        with builder.group():
            pass


def test_builder_requires_open_group() -> None:
    with pytest.raises(RuntimeError, match="No open split group"):
        _builder().text("x")


def test_builder_flags() -> None:
    builder = _builder()
    with builder.group() as handle:
        builder.tag(GroupKind.WHERE, 3)
        builder.force_split()
        builder.reverse_children()

    group = builder.arena.get(handle)
    assert group.kind == GroupKind.WHERE
    assert group.element_count == 3
    assert group.forced and group.reversed


def test_statement_list_applies_margins() -> None:
    source = "use a;\nuse b;\nfn c() {}\n"
    root = parse_result(source).syntax_root()
    items = root.child_nodes()[0].child_nodes()
    builder = SegmentBuilder(SegmentArena(), GapTable.from_tree(root, FormatConfig()), source)
    margins = {
        "use a;": Margin(MarginGroup.IMPORT),
        "use b;": Margin(MarginGroup.IMPORT),
        "fn c() {}": Margin(MarginGroup.BLOCK_DEF, True),
    }

    with builder.group() as handle:
        builder.statement_list(items, lambda node: builder.text(node.text), lambda node: margins[node.text], indent=False)

    entries = builder.arena.get(handle).entries
    assert entries == [
        Break(False),
        Text("use a;"),
        Break(False),
        Text("use b;"),
        Break(False),
        Gap((Blank(1),), -1),
        Text("fn c() {}"),
    ]


def test_needs_blank_line() -> None:
    imports = Margin(MarginGroup.IMPORT)
    block = Margin(MarginGroup.BLOCK_DEF, True)
    statement_with_body = Margin(MarginGroup.NONE, True)

    assert not needs_blank_line(imports, imports)
    assert not needs_blank_line(NO_MARGIN, NO_MARGIN)
    assert needs_blank_line(imports, block)
    assert needs_blank_line(block, block)
    assert needs_blank_line(imports, NO_MARGIN)
    assert needs_blank_line(NO_MARGIN, statement_with_body)
