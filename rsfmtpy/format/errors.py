"""Formatter exceptions."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from rsfmtpy.diagnostics import FORMAT_UNPLACEABLE_COMMENT, Diagnostic

if TYPE_CHECKING:
    from rsfmtpy.format.whitespace import Comment
    from rsfmtpy.text import LineCol


class FormatError(Exception):
    """Formatting could not produce output; `diagnostics` says why."""

    def __init__(self, message: str, diagnostics: Iterable[Diagnostic] = ()) -> None:
        super().__init__(message)
        self.diagnostics = list(diagnostics)


class CommentPlacementError(FormatError):
    def __init__(self, comment: Comment, position: LineCol) -> None:
        diagnostic = Diagnostic.from_spec(FORMAT_UNPLACEABLE_COMMENT, comment.range)
        super().__init__(f"{position}: {diagnostic.message}", [diagnostic])
        self.comment = comment
        self.offset = comment.attach
        self.position = position
