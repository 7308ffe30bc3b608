"""Parser events and their replay into a tree sink.

The grammar only ever appends events. `CompletedMarker.precede` opens a node
around children that were already parsed by pointing an earlier start event at
a later one through `forward_parent`; replay resolves those links.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol

from rsfmtpy.syntax import RustSyntaxKind
from rsfmtpy.text import TextSize


@dataclass(frozen=True, slots=True)
class StartEvent:
    kind: RustSyntaxKind
    forward_parent: int | None = None


# Placeholder for a marker that was started but not completed (or was consumed as a forward parent).
TOMBSTONE = StartEvent(kind=RustSyntaxKind.TOMBSTONE)


@dataclass(frozen=True, slots=True)
class FinishEvent:
    pass


@dataclass(frozen=True, slots=True)
class TokenEvent:
    kind: RustSyntaxKind
    end: TextSize


type Event = StartEvent | FinishEvent | TokenEvent


class TreeSink(Protocol):
    def token(self, kind: RustSyntaxKind, end: TextSize) -> None: ...

    def start_node(self, kind: RustSyntaxKind) -> None: ...

    def finish_node(self) -> None: ...


def process_events(sink: TreeSink, events: list[Event]) -> None:
    """Replay `events` into `sink`; forward parents are tombstoned in place as they are opened."""
    for index, event in enumerate(events):
        match event:
            case StartEvent(kind=RustSyntaxKind.TOMBSTONE):
                continue
            case StartEvent():
                for kind in reversed(list(_forward_chain(events, index))):
                    sink.start_node(kind)
            case FinishEvent():
                sink.finish_node()
            case TokenEvent(kind=kind, end=end):
                sink.token(kind, end)


def _forward_chain(events: list[Event], index: int) -> Iterator[RustSyntaxKind]:
    """Kinds from the start event at `index` out through its forward parents, innermost first."""
    event = events[index]
    if not isinstance(event, StartEvent):
        raise RuntimeError("Forward chain must begin at a StartEvent")
    yield event.kind
    while event.forward_parent is not None:
        index += event.forward_parent
        if index >= len(events):
            raise RuntimeError("Invalid forward_parent offset in parser events")
        event = events[index]
        if not isinstance(event, StartEvent):
            raise RuntimeError("forward_parent must point to StartEvent")
        events[index] = TOMBSTONE
        if event.kind != RustSyntaxKind.TOMBSTONE:
            yield event.kind
