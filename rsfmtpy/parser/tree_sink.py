"""Lossless tree sink for parser events."""

from dataclasses import dataclass

from rsfmtpy.cst import GreenNode, TreeBuilder
from rsfmtpy.diagnostics import Diagnostic
from rsfmtpy.syntax import RustSyntaxKind
from rsfmtpy.text import TextRange, TextSize


@dataclass(frozen=True, slots=True)
class ParsedGreenTree:
    root: GreenNode
    diagnostics: list[Diagnostic]


class LosslessTreeSink:
    """Converts parser events into a green CST.

    All trivia in front of a token becomes that token's leading trivia; the
    trivia after the last token hangs off the EOF token.
    """

    def __init__(
        self,
        text: str,
        trivia: list[TextRange],
        builder: TreeBuilder | None = None,
    ) -> None:
        self._text = text
        self._trivia = trivia
        self._text_pos = TextSize.from_int(0)
        self._trivia_pos = 0
        self._parents_count = 0
        self._builder = builder if builder is not None else TreeBuilder()
        self._needs_eof = True

    def token(self, kind: RustSyntaxKind, end: TextSize) -> None:
        self._do_token(kind, end)

    def start_node(self, kind: RustSyntaxKind) -> None:
        self._builder.start_node(kind)
        self._parents_count += 1

    def finish_node(self) -> None:
        self._parents_count -= 1
        if self._parents_count < 0:
            raise RuntimeError("finish_node called more often than start_node")

        if self._parents_count == 0 and self._needs_eof:
            self._do_token(RustSyntaxKind.EOF, TextSize.from_int(len(self._text)))

        self._builder.finish_node()

    def finish(self, diagnostics: list[Diagnostic]) -> ParsedGreenTree:
        return ParsedGreenTree(root=self._builder.finish(), diagnostics=list(diagnostics))

    def _do_token(self, kind: RustSyntaxKind, token_end: TextSize) -> None:
        if kind == RustSyntaxKind.EOF:
            self._needs_eof = False

        trivia_start = self._text_pos
        self._eat_trivia(token_end)
        token_start = self._text_pos
        self._text_pos = token_end

        self._builder.token(
            kind=kind,
            text=self._text[token_start.value : token_end.value],
            leading_trivia=self._text[trivia_start.value : token_start.value],
        )

    def _eat_trivia(self, token_end: TextSize) -> None:
        while self._trivia_pos < len(self._trivia):
            trivia = self._trivia[self._trivia_pos]
            if self._text_pos != trivia.start:
                break
            if trivia.end > token_end:
                break
            self._text_pos = trivia.end
            self._trivia_pos += 1
