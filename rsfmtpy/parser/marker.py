"""Markers for event-based parsing.

A `Marker` is an open start event; completing it writes the node kind and a
finish event. A `CompletedMarker` can `precede` to wrap itself in a new node,
as for `a + b` where the binary node starts before `a` was known to need it.
"""

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from rsfmtpy.parser.event import FinishEvent, StartEvent
from rsfmtpy.syntax import RustSyntaxKind
from rsfmtpy.text import TextSize

if TYPE_CHECKING:
    from rsfmtpy.parser.parser import Parser


def _start_event(parser: "Parser", pos: int) -> StartEvent:
    event = parser.events[pos]
    if not isinstance(event, StartEvent):
        raise RuntimeError("Marker must point to a StartEvent")
    return event


@dataclass(slots=True)
class Marker:
    pos: int
    start: TextSize
    # Start event of the node this marker was created to wrap, if any.
    child_idx: int | None = None

    def complete(self, parser: "Parser", kind: RustSyntaxKind) -> "CompletedMarker":
        parser.events[self.pos] = replace(_start_event(parser, self.pos), kind=kind)
        parser.events.append(FinishEvent())
        return CompletedMarker(start_pos=self.pos, offset=self.start, kind=kind)

    def abandon(self, parser: "Parser") -> None:
        last = parser.events[-1]
        if self.pos == len(parser.events) - 1 and isinstance(last, StartEvent) and last.forward_parent is None:
            parser.events.pop()

        if self.child_idx is not None:
            child = parser.events[self.child_idx]
            if isinstance(child, StartEvent):
                parser.events[self.child_idx] = replace(child, forward_parent=None)


@dataclass(frozen=True, slots=True)
class CompletedMarker:
    start_pos: int
    offset: TextSize
    kind: RustSyntaxKind

    def precede(self, parser: "Parser") -> Marker:
        """Open a new node that will become the parent of this one."""
        parent = parser.start()
        distance = parent.pos - self.start_pos
        if distance <= 0:
            raise RuntimeError("Invalid precede distance")
        parser.events[self.start_pos] = replace(_start_event(parser, self.start_pos), forward_parent=distance)
        parent.child_idx = self.start_pos
        parent.start = self.offset
        return parent
