"""Own-line comment placement.

An own-line comment can only be written where the layout may put a newline:
right after or right before a `Break` (looking through group boundaries and
other gap items), or at either end of the document. A legal comment forces the
group owning that break to split; an illegal one is lost.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rsfmtpy.format.arena import Break, Child, Gap, SegmentArena, Text, TextMode
from rsfmtpy.format.errors import CommentPlacementError
from rsfmtpy.format.whitespace import Comment, GapTable
from rsfmtpy.text import LineIndex

# Flattened stream: an int is a break owned by that group, None is visible text.
type _Element = int | Comment | None


@dataclass(slots=True)
class Placement:
    dropped: set[Comment] = field(default_factory=set)
    lost: dict[int, list[Comment]] = field(default_factory=dict)

    def lose(self, comment: Comment) -> None:
        self.dropped.add(comment)
        self.lost.setdefault(comment.attach, []).append(comment)


def place_comments(
    arena: SegmentArena,
    root: int,
    gaps: GapTable,
    source: str,
    *,
    fatal: bool,
) -> Placement:
    """Mark groups that own a hard break and collect every unplaceable comment."""
    stream: list[_Element] = []
    _flatten(arena, root, stream)

    placement = Placement()
    unplaced: list[Comment] = []
    for index, element in enumerate(stream):
        if not isinstance(element, Comment):
            continue
        previous = _neighbour(stream, index, -1)
        following = _neighbour(stream, index, 1)
        if previous is _EDGE or following is _EDGE:
            continue
        if isinstance(previous, int):
            arena.get(previous).has_hard_break = True
        elif isinstance(following, int):
            arena.get(following).has_hard_break = True
        else:
            unplaced.append(element)

    unplaced.extend(gaps.remaining())
    unplaced.sort(key=lambda comment: comment.range.start.value)
    if unplaced and fatal:
        comment = unplaced[0]
        position = LineIndex.of(source).line_col(comment.range.start)
        raise CommentPlacementError(comment, position)
    for comment in unplaced:
        placement.lose(comment)
    return placement


class _Edge:
    pass


_EDGE = _Edge()


def _neighbour(stream: list[_Element], index: int, step: int) -> _Element | _Edge:
    index += step
    while 0 <= index < len(stream):
        element = stream[index]
        if not isinstance(element, Comment):
            return element
        index += step
    return _EDGE


def _flatten(arena: SegmentArena, handle: int, out: list[_Element]) -> None:
    for entry in arena.get(handle).entries:
        match entry:
            case Text(text=text, mode=mode):
                # Padding and inline-only separators disappear next to a taken break.
                if mode != TextMode.INLINE_ONLY and text.strip():
                    out.append(None)
            case Break():
                out.append(handle)
            case Child(handle=child):
                _flatten(arena, child, out)
            case Gap(items=items):
                out.extend(item for item in items if isinstance(item, Comment) and item.own_line)
