"""Rust front end: translates a CST into split groups.

Importing the submodules registers their layout rules.
"""

from rsfmtpy.cst import SyntaxNode
from rsfmtpy.format.builder import SegmentBuilder
from rsfmtpy.format.frontend import expressions, items, patterns, types
from rsfmtpy.format.frontend.common import RULES, Frontend

__all__ = ["RULES", "Frontend", "build_groups", "expressions", "items", "patterns", "types"]


def build_groups(root: SyntaxNode, builder: SegmentBuilder) -> int:
    """Lay out `root` (a `ROOT` or `SOURCE_FILE` node); returns the root group handle."""
    Frontend(builder).node(root)
    if builder.root is None:
        raise RuntimeError("Front end produced no split groups")
    return builder.root
