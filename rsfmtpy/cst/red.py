"""Red CST wrappers over immutable green nodes/tokens."""

from __future__ import annotations

from collections.abc import Iterator

from rsfmtpy.cst.green import GreenNode
from rsfmtpy.syntax import RustSyntaxKind
from rsfmtpy.text import TextRange


class SyntaxToken:
    __slots__ = (
        "kind",
        "text",
        "leading_trivia",
        "parent",
        "index_in_parent",
        "_start",
        "_token_start",
    )

    def __init__(
        self,
        *,
        kind: RustSyntaxKind,
        text: str,
        leading_trivia: str,
        parent: SyntaxNode,
        index_in_parent: int,
        start: int,
    ) -> None:
        self.kind = kind
        self.text = text
        self.leading_trivia = leading_trivia
        self.parent = parent
        self.index_in_parent = index_in_parent
        self._start = start
        self._token_start = start + len(leading_trivia)

    @property
    def start(self) -> int:
        """Offset of the leading trivia."""
        return self._start

    @property
    def end(self) -> int:
        return self._token_start + len(self.text)

    @property
    def token_start(self) -> int:
        return self._token_start

    @property
    def token_end(self) -> int:
        return self.end

    @property
    def text_range(self) -> TextRange:
        return TextRange.from_offsets(self._token_start, self.end)

    def __repr__(self) -> str:
        return f"SyntaxToken({self.kind.name}, {self.text!r}, {self._token_start})"


class SyntaxNode:
    __slots__ = (
        "kind",
        "parent",
        "index_in_parent",
        "_children",
        "_source",
        "_start",
        "_end",
    )

    def __init__(
        self,
        *,
        kind: RustSyntaxKind,
        parent: SyntaxNode | None,
        index_in_parent: int,
        source: str,
        start: int,
    ) -> None:
        self.kind = kind
        self.parent = parent
        self.index_in_parent = index_in_parent
        self._source = source
        self._start = start
        self._end = start
        self._children: tuple[SyntaxElement, ...] = ()

    @property
    def start(self) -> int:
        return self._start

    @property
    def end(self) -> int:
        return self._end

    @property
    def source(self) -> str:
        return self._source

    @property
    def text(self) -> str:
        """Node text without the first token's leading trivia."""
        first = self.first_token()
        if first is None:
            return ""
        return self._source[first.token_start : self._end]

    @property
    def text_range(self) -> TextRange:
        first = self.first_token()
        if first is None:
            return TextRange.from_offsets(self._end, self._end)
        return TextRange.from_offsets(first.token_start, self._end)

    @property
    def children(self) -> tuple[SyntaxElement, ...]:
        return self._children

    def child_nodes(self) -> tuple[SyntaxNode, ...]:
        return tuple(child for child in self._children if isinstance(child, SyntaxNode))

    def find_node(self, *kinds: RustSyntaxKind) -> SyntaxNode | None:
        for child in self._children:
            if isinstance(child, SyntaxNode) and child.kind in kinds:
                return child
        return None

    def find_nodes(self, *kinds: RustSyntaxKind) -> tuple[SyntaxNode, ...]:
        return tuple(
            child for child in self._children if isinstance(child, SyntaxNode) and child.kind in kinds
        )

    def find_token(self, *kinds: RustSyntaxKind) -> SyntaxToken | None:
        for child in self._children:
            if isinstance(child, SyntaxToken) and child.kind in kinds:
                return child
        return None

    def find_keyword(self, text: str) -> SyntaxToken | None:
        for child in self._children:
            if isinstance(child, SyntaxToken) and child.kind == RustSyntaxKind.IDENT and child.text == text:
                return child
        return None

    def iter_tokens(self) -> Iterator[SyntaxToken]:
        for child in self._children:
            if isinstance(child, SyntaxToken):
                yield child
            else:
                yield from child.iter_tokens()

    def descendants_tokens(self) -> tuple[SyntaxToken, ...]:
        return tuple(self.iter_tokens())

    def first_token(self) -> SyntaxToken | None:
        return next(self.iter_tokens(), None)

    def last_token(self) -> SyntaxToken | None:
        for child in reversed(self._children):
            if isinstance(child, SyntaxToken):
                return child
            token = child.last_token()
            if token is not None:
                return token
        return None

    def next_sibling(self) -> SyntaxElement | None:
        if self.parent is None:
            return None
        index = self.index_in_parent + 1
        if index >= len(self.parent.children):
            return None
        return self.parent.children[index]

    def prev_sibling(self) -> SyntaxElement | None:
        if self.parent is None or self.index_in_parent == 0:
            return None
        return self.parent.children[self.index_in_parent - 1]

    def __repr__(self) -> str:
        return f"SyntaxNode({self.kind.name}, {self._start}..{self._end})"


type SyntaxElement = SyntaxNode | SyntaxToken


def from_green(root: GreenNode, source: str = "") -> SyntaxNode:
    red_root, _ = _build_node(
        green=root,
        parent=None,
        index_in_parent=0,
        source=source,
        start=0,
    )
    return red_root


def _build_node(
    *,
    green: GreenNode,
    parent: SyntaxNode | None,
    index_in_parent: int,
    source: str,
    start: int,
) -> tuple[SyntaxNode, int]:
    node = SyntaxNode(
        kind=green.kind,
        parent=parent,
        index_in_parent=index_in_parent,
        source=source,
        start=start,
    )

    current = start
    children: list[SyntaxElement] = []
    for child_index, child in enumerate(green.children):
        if isinstance(child, GreenNode):
            red_child, next_offset = _build_node(
                green=child,
                parent=node,
                index_in_parent=child_index,
                source=source,
                start=current,
            )
            children.append(red_child)
            current = next_offset
            continue

        token = SyntaxToken(
            kind=child.kind,
            text=child.text,
            leading_trivia=child.leading_trivia,
            parent=node,
            index_in_parent=child_index,
            start=current,
        )
        children.append(token)
        current = token.end

    node._children = tuple(children)
    node._end = start + green.width
    return node, node._end


def dump_tree(node: SyntaxNode, indent: int = 0) -> str:
    """Render the tree as an indented outline for debugging."""
    lines = [f"{'  ' * indent}{node.kind.name}@{node.start}..{node.end}"]
    for child in node.children:
        if isinstance(child, SyntaxNode):
            lines.append(dump_tree(child, indent + 1))
        else:
            lines.append(f"{'  ' * (indent + 1)}{child.kind.name} {child.text!r}")
    return "\n".join(lines)


__all__ = [
    "SyntaxElement",
    "SyntaxNode",
    "SyntaxToken",
    "dump_tree",
    "from_green",
]
