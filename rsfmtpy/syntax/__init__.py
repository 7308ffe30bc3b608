"""Syntax kinds."""

from rsfmtpy.syntax.kind import ITEM_KINDS, PATTERN_KINDS, TYPE_KINDS, RustSyntaxKind

__all__ = [
    "ITEM_KINDS",
    "PATTERN_KINDS",
    "TYPE_KINDS",
    "RustSyntaxKind",
]
