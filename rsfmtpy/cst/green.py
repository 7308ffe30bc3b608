"""Immutable green tree: kinds, text and widths, but no absolute positions."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from rsfmtpy.syntax import RustSyntaxKind


@dataclass(frozen=True, slots=True)
class GreenToken:
    """Token text plus the raw trivia (whitespace and comments) that precedes it."""

    kind: RustSyntaxKind
    text: str
    leading_trivia: str

    @property
    def width(self) -> int:
        return len(self.leading_trivia) + len(self.text)


@dataclass(frozen=True, slots=True)
class GreenNode:
    kind: RustSyntaxKind
    children: tuple["GreenElement", ...]
    width: int = field(default=0, compare=False)

    @classmethod
    def of(cls, kind: RustSyntaxKind, children: Sequence["GreenElement"]) -> "GreenNode":
        elements = tuple(children)
        return cls(kind=kind, children=elements, width=sum(child.width for child in elements))


type GreenElement = GreenNode | GreenToken


class TreeBuilder:
    """Nests start/token/finish calls into green nodes under a single ROOT."""

    def __init__(self) -> None:
        self._open: list[tuple[RustSyntaxKind, list[GreenElement]]] = [(RustSyntaxKind.ROOT, [])]

    def start_node(self, kind: RustSyntaxKind) -> None:
        self._open.append((kind, []))

    def token(self, kind: RustSyntaxKind, text: str, leading_trivia: str) -> None:
        self._open[-1][1].append(GreenToken(kind=kind, text=text, leading_trivia=leading_trivia))

    def finish_node(self) -> None:
        if len(self._open) == 1:
            raise RuntimeError("finish_node called with empty builder stack")
        kind, children = self._open.pop()
        self._open[-1][1].append(GreenNode.of(kind, children))

    def finish(self) -> GreenNode:
        if len(self._open) != 1:
            raise RuntimeError("Cannot finish tree: unclosed nodes remain on stack")
        _, roots = self._open[0]
        if len(roots) == 1 and isinstance(roots[0], GreenNode) and roots[0].kind == RustSyntaxKind.ROOT:
            return roots[0]
        return GreenNode.of(RustSyntaxKind.ROOT, roots)
