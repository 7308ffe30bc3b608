"""Rust grammar: items, types, patterns, statements and expressions."""

from rsfmtpy.parser.grammar.common import PathMode
from rsfmtpy.parser.grammar.items import at_item_start, parse_item, parse_source_file

__all__ = [
    "PathMode",
    "at_item_start",
    "parse_item",
    "parse_source_file",
]
