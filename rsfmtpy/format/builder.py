"""Ordered construction of the split-group tree."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager

from rsfmtpy.cst import SyntaxElement, SyntaxNode
from rsfmtpy.format.arena import Break, Child, Gap, GapItem, GroupKind, SegmentArena, Text, TextMode
from rsfmtpy.format.margin import Margin, needs_blank_line
from rsfmtpy.format.whitespace import Blank, Comment, GapTable


class SegmentBuilder:
    """Appends entries to the innermost open group.

    Groups are opened with `group()` and finalized when the `with` block ends;
    a finished group becomes a child of the group around it, or the root.
    """

    def __init__(self, arena: SegmentArena, gaps: GapTable, source: str) -> None:
        self.arena = arena
        self.gaps = gaps
        self.source = source
        self.root: int | None = None
        self._stack: list[int] = []

    @property
    def current(self) -> int:
        if not self._stack:
            raise RuntimeError("No open split group")
        return self._stack[-1]

    @contextmanager
    def group(self, kind: GroupKind = GroupKind.PLAIN, element_count: int = 0) -> Iterator[int]:
        handle = self.arena.new_group(kind, element_count)
        self._stack.append(handle)
        try:
            yield handle
        finally:
            self._stack.pop()
        self.arena.finalize(handle)
        if self._stack:
            self.arena.append(self._stack[-1], Child(handle))
        elif self.root is None:
            self.root = handle
        else:
            raise RuntimeError("Split-group tree already has a root")

    def tag(self, kind: GroupKind, element_count: int = 0) -> None:
        group = self.arena.get(self.current)
        group.kind = kind
        group.element_count = element_count

    def text(self, text: str, mode: TextMode = TextMode.ALL) -> None:
        if text:
            self.arena.append(self.current, Text(text, mode))

    def line_break(self, indent: bool = False) -> None:
        self.arena.append(self.current, Break(indent))

    def soft_break(self, indent: bool = True) -> None:
        """A space when inline, a newline when split."""
        self.text(" ", TextMode.INLINE_ONLY)
        self.line_break(indent)

    def gap(
        self,
        offset: int,
        *,
        keep_blanks: bool = False,
        trim_leading: bool = False,
        trim_trailing: bool = False,
    ) -> None:
        self._append_gap(list(self.gaps.take(offset)), offset, keep_blanks, trim_leading, trim_trailing)

    def _append_gap(
        self,
        items: list[GapItem],
        offset: int,
        keep_blanks: bool,
        trim_leading: bool,
        trim_trailing: bool,
    ) -> None:
        if not keep_blanks:
            items = [item for item in items if isinstance(item, Comment)]
        if trim_leading:
            while items and isinstance(items[0], Blank):
                items.pop(0)
        if trim_trailing:
            while items and isinstance(items[-1], Blank):
                items.pop()
        if items:
            self.arena.append(self.current, Gap(tuple(items), offset))

    def has_comments(self, offset: int) -> bool:
        return self.gaps.has_comments(offset)

    def blank_line(self) -> None:
        self.arena.append(self.current, Gap((Blank(1),), -1))

    def force_split(self) -> None:
        self.arena.get(self.current).forced = True

    def reverse_children(self) -> None:
        self.arena.get(self.current).reversed = True

    def verbatim(self, start: int, end: int) -> None:
        """Copy a source span as-is; comments inside it count as placed."""
        self.gaps.take_range(start, end)
        self.text(self.source[start:end])

    def statement_list(
        self,
        nodes: Sequence[SyntaxElement],
        emit: Callable[[SyntaxElement], None],
        margin_of: Callable[[SyntaxElement], Margin],
        *,
        indent: bool = True,
    ) -> None:
        """One sibling per line, with the margin policy between neighbours."""
        previous: Margin | None = None
        for index, node in enumerate(nodes):
            self.line_break(indent)
            margin = margin_of(node)
            first = _first_offset(node)
            items = list(self.gaps.take(first)) if first is not None else []
            # A comment trailing the previous sibling stays in front of the margin.
            if items and isinstance(items[0], Comment) and items[0].trailing:
                self.arena.append(self.current, Gap((items.pop(0),), first))
            if previous is not None and needs_blank_line(previous, margin):
                self.blank_line()
            if first is not None:
                self._append_gap(items, first, True, index == 0, False)
            emit(node)
            previous = margin


def _first_offset(element: SyntaxElement) -> int | None:
    if isinstance(element, SyntaxNode):
        token = element.first_token()
        return None if token is None else token.token_start
    return element.token_start
