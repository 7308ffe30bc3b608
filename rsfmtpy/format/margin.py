"""Blank-line policy between sibling declarations."""

from dataclasses import dataclass
from enum import StrEnum


class MarginGroup(StrEnum):
    NONE = "none"
    IMPORT = "import"
    BLOCK_DEF = "block_def"


@dataclass(frozen=True, slots=True)
class Margin:
    group: MarginGroup = MarginGroup.NONE
    has_body: bool = False


NO_MARGIN = Margin()


def needs_blank_line(previous: Margin, current: Margin) -> bool:
    """Whether two adjacent siblings must be separated by a blank line.

    Blank lines the source already had between them are kept separately through
    the gap reattachment; this only adds the ones the layout requires.
    """
    if previous.group == MarginGroup.BLOCK_DEF or current.group == MarginGroup.BLOCK_DEF:
        return True
    if previous.group != current.group:
        return True
    return previous.has_body or current.has_body
