"""Parse carrier shared by the formatter and the command line."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rsfmtpy.cst import from_green
from rsfmtpy.diagnostics import has_errors
from rsfmtpy.parser.tree_sink import ParsedGreenTree

if TYPE_CHECKING:
    from rsfmtpy.cst import GreenNode, SyntaxNode
    from rsfmtpy.diagnostics import Diagnostic


@dataclass(slots=True)
class RustParseResult:
    """Parse once, consume many times; the red tree is built on first use."""

    source_text: str
    parsed: ParsedGreenTree
    _syntax_root: SyntaxNode | None = field(default=None, init=False, repr=False)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return self.parsed.diagnostics

    @property
    def has_errors(self) -> bool:
        return has_errors(self.parsed.diagnostics)

    def green_root(self) -> GreenNode:
        return self.parsed.root

    def syntax_root(self) -> SyntaxNode:
        if self._syntax_root is None:
            self._syntax_root = from_green(self.parsed.root, self.source_text)
        return self._syntax_root
