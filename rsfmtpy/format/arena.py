"""Split-group arena.

Every layout decision is made per split group: a group renders either inline
(its breaks vanish) or split (its breaks become newlines). Groups live in one
flat arena and refer to each other by integer handle, so the tree can be walked
in any order without holding references across phases.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rsfmtpy.format.whitespace import Blank, Comment


class TextMode(StrEnum):
    """When a text entry is visible."""

    ALL = "all"
    INLINE_ONLY = "inline_only"  # `{ a }` padding, `, ` separators
    SPLIT_ONLY = "split_only"  # trailing commas

    def visible(self, split: bool) -> bool:
        match self:
            case TextMode.ALL:
                return True
            case TextMode.INLINE_ONLY:
                return not split
            case TextMode.SPLIT_ONLY:
                return split


class GroupKind(StrEnum):
    """Construct category used by the configuration split policies."""

    PLAIN = "plain"
    BRACE = "brace"
    ATTRIBUTES = "attributes"
    WHERE = "where"


@dataclass(frozen=True, slots=True)
class Text:
    text: str
    mode: TextMode = TextMode.ALL


@dataclass(frozen=True, slots=True)
class Break:
    """Newline when the owning group splits; `indent` moves one level deeper."""

    indent: bool = False


@dataclass(frozen=True, slots=True)
class Child:
    handle: int


type GapItem = Blank | Comment


@dataclass(frozen=True, slots=True)
class Gap:
    """Reattached trivia in front of the token at `offset`."""

    items: tuple[GapItem, ...]
    offset: int


type Entry = Text | Break | Child | Gap


@dataclass(slots=True)
class SplitGroup:
    entries: list[Entry] = field(default_factory=list)
    kind: GroupKind = GroupKind.PLAIN
    element_count: int = 0
    forced: bool = False
    reversed: bool = False
    finalized: bool = False
    parent: int | None = None
    # Set by comment placement when an own-line comment sits next to one of this group's breaks.
    has_hard_break: bool = False

    def child_handles(self) -> Iterator[int]:
        for entry in self.entries:
            if isinstance(entry, Child):
                yield entry.handle


class SegmentArena:
    """Owns every split group of one format call."""

    def __init__(self) -> None:
        self._groups: list[SplitGroup] = []

    def __len__(self) -> int:
        return len(self._groups)

    def new_group(self, kind: GroupKind = GroupKind.PLAIN, element_count: int = 0) -> int:
        self._groups.append(SplitGroup(kind=kind, element_count=element_count))
        return len(self._groups) - 1

    def get(self, handle: int) -> SplitGroup:
        if handle < 0 or handle >= len(self._groups):
            raise ValueError(f"Unknown split group handle {handle}")
        return self._groups[handle]

    def append(self, handle: int, entry: Entry) -> None:
        group = self.get(handle)
        if group.finalized:
            raise RuntimeError(f"Split group {handle} is finalized")
        if isinstance(entry, Child):
            child = self.get(entry.handle)
            if child.parent is not None:
                raise RuntimeError(f"Split group {entry.handle} already belongs to group {child.parent}")
            if entry.handle == handle:
                raise RuntimeError("A split group cannot contain itself")
            child.parent = handle
        group.entries.append(entry)

    def finalize(self, handle: int) -> int:
        self.get(handle).finalized = True
        return handle

    def children(self, handle: int) -> list[int]:
        return list(self.get(handle).child_handles())

    def ancestors(self, handle: int) -> Iterator[int]:
        """Strict ancestors, nearest first."""
        parent = self.get(handle).parent
        while parent is not None:
            yield parent
            parent = self._groups[parent].parent
