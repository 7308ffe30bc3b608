"""Width-driven rendering of a split-group tree.

Pass one decides which groups must split no matter the width (forced groups,
configuration policies, own-line comments). Pass two walks the tree in document
order and decides every remaining group at the column where it starts: inline
if its first line fits and its last line still fits together with the text that
has to follow it on that line, split otherwise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from rsfmtpy.format.alignment import ROOT_ALIGNMENT, Alignment
from rsfmtpy.format.arena import Break, Child, Gap, GapItem, GroupKind, SegmentArena, Text
from rsfmtpy.format.config import FormatConfig
from rsfmtpy.format.whitespace import Blank, Comment

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Shape:
    """Measured extent of a rendering.

    `first` is the width of the first line from the starting column. When the
    rendering spans lines, `last` is the absolute column its last line ends at;
    otherwise it equals `first`.
    """

    first: int
    last: int
    multi: bool


@dataclass(frozen=True, slots=True)
class RenderOutcome:
    text: str
    split_groups: frozenset[int]


class _Cursor:
    """Measurement counterpart of `Writer`."""

    __slots__ = ("first", "col", "multi", "line_start")

    def __init__(self) -> None:
        self.first = 0
        self.col = 0
        self.multi = False
        self.line_start = False

    def text(self, text: str) -> None:
        if self.line_start:
            text = text.lstrip(" ")
            if not text:
                return
        self.line_start = False
        if "\n" in text:
            head, _, rest = text.partition("\n")
            self._extend(len(head))
            self.multi = True
            self.col = len(rest.rsplit("\n", 1)[-1])
            return
        self._extend(len(text))

    def newline(self, indent: int) -> None:
        self.multi = True
        self.col = indent
        self.line_start = True

    def shape(self, shape: Shape) -> None:
        self._extend(shape.first)
        if shape.multi:
            self.multi = True
            self.col = shape.last
        if shape.first:
            self.line_start = False

    def _extend(self, width: int) -> None:
        if self.multi:
            self.col += width
        else:
            self.first += width

    def result(self) -> Shape:
        return Shape(self.first, self.col if self.multi else self.first, self.multi)


class Writer:
    """Line-oriented text sink applying the whitespace rules of the output."""

    def __init__(self, config: FormatConfig) -> None:
        self._config = config
        self._lines: list[str] = []
        self._current: str | None = None
        self._indent = 0
        self._pending_blanks = 0
        self._space_pending = False
        self._last_is_code = False

    @property
    def column(self) -> int:
        if self._current is None:
            return self._indent
        return len(self._current)

    def newline(self, indent: int) -> None:
        if self._current is not None:
            self._flush()
        self._indent = indent
        self._space_pending = False

    def blank(self, count: int) -> None:
        # Blank lines only ever precede a line of their own.
        if self._current is not None:
            self._flush()
        self._pending_blanks = min(max(self._pending_blanks, count), self._config.max_blank_lines)

    def text(self, text: str) -> None:
        if "\n" not in text:
            self._append(text)
            return
        head, *middle, tail = text.split("\n")
        self._append(head)
        # Lines inside a multi-line literal are copied untouched.
        self._emit_line(self._current or "", strip=False)
        for line in middle:
            self._lines.append(line)
        self._current = tail
        self._last_is_code = True

    def comment(self, comment: Comment) -> None:
        if not comment.own_line:
            if self._current is not None and not self._current.endswith((" ", "(", "[")):
                self._current += " "
            self.text(comment.text)
            self._space_pending = True
            return

        single = "\n" not in comment.text
        if comment.trailing and single:
            if self._current is not None and self._current.strip():
                self._current = self._current.rstrip() + " " + comment.text
                self._flush()
                return
            if self._current is None and self._lines and self._last_is_code and not self._pending_blanks:
                self._lines[-1] = self._lines[-1] + " " + comment.text
                return

        if self._current is not None:
            self._flush()
        pad = " " * self._indent
        lines = comment.lines
        if comment.block:
            self._emit_line(pad + lines[0], strip=True)
            for line in lines[1:]:
                self._lines.append(line.rstrip())
        else:
            for line in lines:
                self._emit_line(pad + line.strip(), strip=True)
        self._last_is_code = False
        self._space_pending = False

    def finish(self) -> str:
        if self._current is not None:
            self._flush()
        while self._lines and not self._lines[-1]:
            self._lines.pop()
        if not self._lines:
            return ""
        return "\n".join(self._lines) + "\n"

    def _append(self, text: str) -> None:
        if self._current is None:
            text = text.lstrip(" ")
            if not text:
                return
            self._current = " " * self._indent + text
            self._space_pending = False
            return
        if self._space_pending and text and not text.startswith((" ", ",", ";", ")", "]")):
            self._current += " "
        self._space_pending = False
        self._current += text

    def _flush(self) -> None:
        self._emit_line(self._current or "", strip=True)
        self._current = None
        self._last_is_code = True

    def _emit_line(self, line: str, *, strip: bool) -> None:
        if self._pending_blanks and self._lines:
            self._lines.extend([""] * self._pending_blanks)
        self._pending_blanks = 0
        self._lines.append(line.rstrip() if strip else line)


@dataclass(slots=True)
class Renderer:
    arena: SegmentArena
    config: FormatConfig
    dropped: set[Comment] = field(default_factory=set)
    _forced_extra: set[int] = field(default_factory=set)
    _must: dict[int, bool] = field(default_factory=dict)
    _shapes: dict[tuple[int, bool, int], Shape] = field(default_factory=dict)
    _hints: dict[int, bool] = field(default_factory=dict)
    _split: set[int] = field(default_factory=set)
    _writer: Writer | None = None

    def render(self, root: int) -> RenderOutcome:
        passes = 0
        while True:
            passes += 1
            self._writer = Writer(self.config)
            self._split = set()
            self._hints = {}
            self._emit(root, ROOT_ALIGNMENT, 0)
            if not self.config.root_splits:
                break
            promoted = {
                ancestor
                for handle in self._split
                for ancestor in self.arena.ancestors(handle)
                if ancestor not in self._split
            }
            promoted -= self._forced_extra
            if not promoted:
                break
            self._forced_extra |= promoted
            self._must.clear()
            self._shapes.clear()
        logger.debug("Rendered %d groups in %d pass(es), %d split", len(self.arena), passes, len(self._split))
        return RenderOutcome(self._writer.finish(), frozenset(self._split))

    # -- pass one -------------------------------------------------------

    def must_split(self, handle: int) -> bool:
        cached = self._must.get(handle)
        if cached is not None:
            return cached
        group = self.arena.get(handle)
        result = group.forced or group.has_hard_break or handle in self._forced_extra
        if not result:
            match group.kind:
                case GroupKind.BRACE:
                    threshold = self.config.split_brace_threshold
                    result = threshold is not None and group.element_count >= threshold and group.element_count > 0
                case GroupKind.ATTRIBUTES:
                    result = self.config.split_attributes
                case GroupKind.WHERE:
                    result = self.config.split_where
                case _:
                    pass
        if self.config.root_splits:
            # Every child is visited so descendants are memoized before the parent.
            children = [self.must_split(child) for child in group.child_handles()]
            result = result or any(children)
        self._must[handle] = result
        return result

    # -- measurement ----------------------------------------------------

    def measure(self, handle: int, split: bool, align: Alignment) -> Shape:
        key = (handle, split, align.depth)
        cached = self._shapes.get(key)
        if cached is not None:
            return cached
        cursor = _Cursor()
        current = align
        for entry in self.arena.get(handle).entries:
            match entry:
                case Text(text=text, mode=mode):
                    if mode.visible(split):
                        cursor.text(text)
                case Break(indent=indent):
                    if split:
                        current = align.indent() if indent else align
                        cursor.newline(current.columns(self.config.indent_width))
                case Child(handle=child):
                    cursor.shape(self.measure(child, self.must_split(child), current))
                case Gap(items=items):
                    for item in items:
                        if not isinstance(item, Comment) or item in self.dropped:
                            continue
                        if item.own_line:
                            cursor.newline(current.columns(self.config.indent_width))
                        else:
                            cursor.text(f" {item.text} ")
        shape = cursor.result()
        self._shapes[key] = shape
        return shape

    def fits(self, handle: int, column: int, align: Alignment, trailing: int) -> bool:
        shape = self.measure(handle, False, align)
        limit = self.config.max_width
        if not shape.multi:
            return column + shape.first + trailing <= limit
        return column + shape.first <= limit and shape.last + trailing <= limit

    def _decide(self, handle: int, column: int, align: Alignment, trailing: int) -> bool:
        if self.must_split(handle):
            return True
        return not self.fits(handle, column, align, trailing)

    def _trailing(self, handle: int, index: int, split: bool, align: Alignment, outer: int) -> int:
        """Width that has to share the line with the end of entry `index`.

        A single-line comment that trailed the code in the source is written back
        onto the same line, so it counts too.
        """
        width = 0
        entries = self.arena.get(handle).entries
        for position in range(index + 1, len(entries)):
            match entries[position]:
                case Text(text=text, mode=mode):
                    if not mode.visible(split):
                        continue
                    if "\n" in text:
                        return width + len(text.partition("\n")[0])
                    width += len(text)
                case Break():
                    if split:
                        following = entries[position + 1] if position + 1 < len(entries) else None
                        if isinstance(following, Gap):
                            width += self._trailing_comment(following.items)
                        return width
                case Child(handle=child):
                    child_split = self._hints.get(child)
                    if child_split is None:
                        child_split = self.must_split(child)
                    shape = self.measure(child, child_split, align)
                    width += shape.first
                    if shape.multi:
                        return width
                case Gap(items=items):
                    for item in items:
                        if not isinstance(item, Comment) or item in self.dropped:
                            continue
                        if item.own_line:
                            return width + self._trailing_comment((item,))
                        width += len(item.text) + 2
        return width + outer

    def _trailing_comment(self, items: tuple[GapItem, ...]) -> int:
        for item in items:
            if not isinstance(item, Comment) or item in self.dropped:
                continue
            if item.own_line and item.trailing and "\n" not in item.text:
                return len(item.text) + 1
            return 0
        return 0

    # -- pass two -------------------------------------------------------

    def _emit(self, handle: int, align: Alignment, trailing: int) -> None:
        writer = self._writer
        group = self.arena.get(handle)
        split = self._decide(handle, writer.column, align, trailing)
        if split:
            self._split.add(handle)
        if group.reversed:
            self._provisional(handle, split, align, trailing, writer.column)

        current = align
        for index, entry in enumerate(group.entries):
            match entry:
                case Text(text=text, mode=mode):
                    if mode.visible(split):
                        writer.text(text)
                case Break(indent=indent):
                    if split:
                        current = align.indent() if indent else align
                        writer.newline(current.columns(self.config.indent_width))
                case Child(handle=child):
                    self._emit(child, current, self._trailing(handle, index, split, current, trailing))
                case Gap(items=items):
                    for item in items:
                        if isinstance(item, Blank):
                            writer.blank(item.count)
                        elif item not in self.dropped:
                            writer.comment(item)

    def _provisional(self, handle: int, split: bool, align: Alignment, trailing: int, column: int) -> None:
        """Decide later children first, at their estimated columns, for a reversed group."""
        entries = self.arena.get(handle).entries
        offsets: list[int] = []
        width = 0
        for entry in entries:
            offsets.append(width)
            match entry:
                case Text(text=text, mode=mode):
                    if mode.visible(split):
                        width += len(text)
                case Child(handle=child):
                    width += self.measure(child, self.must_split(child), align).first
                case _:
                    pass
        for index in range(len(entries) - 1, -1, -1):
            entry = entries[index]
            if not isinstance(entry, Child):
                continue
            estimated = column + offsets[index]
            child_trailing = self._trailing(handle, index, split, align, trailing)
            self._hints[entry.handle] = self._decide(entry.handle, estimated, align, child_trailing)


def render(arena: SegmentArena, root: int, config: FormatConfig, dropped: set[Comment] | None = None) -> RenderOutcome:
    return Renderer(arena, config, dropped if dropped is not None else set()).render(root)
