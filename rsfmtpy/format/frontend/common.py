"""Front-end dispatch shared by items, types, patterns and expressions.

Every CST node kind that has a layout registers a rule here; a node without one
is copied verbatim. Rules emit through the `SegmentBuilder` and must request the
gap of every token they consume (`tok` or `skip`), otherwise the comments in
that gap are reported lost.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from rsfmtpy.cst import SyntaxElement, SyntaxNode, SyntaxToken
from rsfmtpy.format.arena import GroupKind, TextMode
from rsfmtpy.format.builder import SegmentBuilder
from rsfmtpy.syntax import RustSyntaxKind

type Rule = Callable[[Frontend, SyntaxNode], None]

RULES: dict[RustSyntaxKind, Rule] = {}


def rule(*kinds: RustSyntaxKind) -> Callable[[Rule], Rule]:
    def register(function: Rule) -> Rule:
        for kind in kinds:
            if kind in RULES:
                raise ValueError(f"Duplicate layout rule for {kind.name}")
            RULES[kind] = function
        return function

    return register


OPENERS: frozenset[RustSyntaxKind] = frozenset(
    {RustSyntaxKind.LPAREN, RustSyntaxKind.LBRACKET, RustSyntaxKind.LBRACE, RustSyntaxKind.LESS_THAN}
)
CLOSERS: frozenset[RustSyntaxKind] = frozenset(
    {RustSyntaxKind.RPAREN, RustSyntaxKind.RBRACKET, RustSyntaxKind.RBRACE, RustSyntaxKind.GREATER_THAN}
)

_RANGE_TOKENS = frozenset({RustSyntaxKind.DOT_DOT, RustSyntaxKind.DOT_DOT_EQUAL, RustSyntaxKind.DOT_DOT_DOT})
_SPACED = frozenset(
    {
        RustSyntaxKind.EQUAL,
        RustSyntaxKind.PLUS,
        RustSyntaxKind.THIN_ARROW,
        RustSyntaxKind.FAT_ARROW,
        RustSyntaxKind.AT,
    }
)
_GLUE_BEFORE = frozenset(
    {
        RustSyntaxKind.COLON,
        RustSyntaxKind.SEMICOLON,
        RustSyntaxKind.COMMA,
        RustSyntaxKind.COLON_COLON,
        RustSyntaxKind.DOT,
        RustSyntaxKind.QUESTION,
        RustSyntaxKind.RPAREN,
        RustSyntaxKind.RBRACKET,
        RustSyntaxKind.GREATER_THAN,
        *_RANGE_TOKENS,
    }
)
_GLUE_AFTER = frozenset(
    {
        RustSyntaxKind.AMP,
        RustSyntaxKind.AMP_AMP,
        RustSyntaxKind.STAR,
        RustSyntaxKind.MINUS,
        RustSyntaxKind.BANG,
        RustSyntaxKind.POUND,
        RustSyntaxKind.DOLLAR,
        RustSyntaxKind.TILDE,
        RustSyntaxKind.QUESTION,
        RustSyntaxKind.COLON_COLON,
        RustSyntaxKind.DOT,
        RustSyntaxKind.LPAREN,
        RustSyntaxKind.LBRACKET,
        RustSyntaxKind.LESS_THAN,
        *_RANGE_TOKENS,
    }
)


def separator(previous: SyntaxElement | None, current: SyntaxElement) -> str:
    """Space between two adjacent elements of a simple token run."""
    if previous is None:
        return ""
    if previous.kind in _SPACED or current.kind in _SPACED:
        return " "
    if current.kind in _GLUE_BEFORE:
        return ""
    if previous.kind == RustSyntaxKind.COLON:
        return " "
    if previous.kind in _GLUE_AFTER:
        return ""
    return " "


class Trailing(StrEnum):
    """What happens to the separator after the last list element."""

    SPLIT = "split"  # written only when the list splits
    PRESERVE = "preserve"  # kept exactly when the source had one
    NEVER = "never"


@dataclass(slots=True)
class ListParts:
    open: SyntaxToken | None
    items: list[tuple[list[SyntaxElement], SyntaxToken | None]] = field(default_factory=list)
    close: SyntaxToken | None = None


def split_list(
    elements: Sequence[SyntaxElement],
    open_kinds: Iterable[RustSyntaxKind] = OPENERS,
    close_kinds: Iterable[RustSyntaxKind] = CLOSERS,
    separator_kind: RustSyntaxKind = RustSyntaxKind.COMMA,
) -> ListParts:
    """Cut `open items.. close` into comma-terminated items."""
    open_kinds = frozenset(open_kinds)
    close_kinds = frozenset(close_kinds)
    start = next(
        (i for i, el in enumerate(elements) if isinstance(el, SyntaxToken) and el.kind in open_kinds),
        None,
    )
    end = next(
        (
            i
            for i in range(len(elements) - 1, -1, -1)
            if isinstance(elements[i], SyntaxToken) and elements[i].kind in close_kinds and i != start
        ),
        None,
    )
    parts = ListParts(
        open=elements[start] if start is not None else None,
        close=elements[end] if end is not None else None,
    )
    body = elements[(start + 1 if start is not None else 0) : (end if end is not None else len(elements))]
    current: list[SyntaxElement] = []
    for element in body:
        if isinstance(element, SyntaxToken) and element.kind == separator_kind:
            parts.items.append((current, element))
            current = []
            continue
        current.append(element)
    if current:
        parts.items.append((current, None))
    return parts


class Frontend:
    """Walks a CST and records its layout in split groups."""

    def __init__(self, builder: SegmentBuilder) -> None:
        self.b = builder

    # -- dispatch -------------------------------------------------------

    def node(self, node: SyntaxNode, kind: GroupKind = GroupKind.PLAIN) -> None:
        with self.b.group(kind):
            self.inline(node)

    def inline(self, node: SyntaxNode) -> None:
        """Emit `node` into the current group."""
        layout = RULES.get(node.kind)
        if layout is None:
            self.verbatim(node)
            return
        layout(self, node)

    def element(self, element: SyntaxElement) -> None:
        if isinstance(element, SyntaxNode):
            self.node(element)
        else:
            self.tok(element)

    def verbatim(self, node: SyntaxNode) -> None:
        first = node.first_token()
        if first is None:
            return
        self.skip(first)
        self.b.verbatim(first.token_start, node.end)

    # -- tokens ---------------------------------------------------------

    def tok(self, token: SyntaxToken | None, text: str | None = None) -> None:
        if token is None:
            return
        self.b.gap(token.token_start)
        self.b.text(token.text if text is None else text)

    def skip(self, token: SyntaxToken | None) -> None:
        """Consume a token's gap without writing the token."""
        if token is not None:
            self.b.gap(token.token_start)

    def close(self, token: SyntaxToken | None, *, trim_leading: bool = False) -> None:
        """Consume the gap before a closing token, keeping blank lines that precede a comment."""
        if token is not None:
            self.b.gap(token.token_start, keep_blanks=True, trim_leading=trim_leading, trim_trailing=True)

    def keyword(self, token: SyntaxToken | None) -> None:
        if token is not None:
            self.tok(token)
            self.b.text(" ")

    def spaced(self, elements: Iterable[SyntaxElement], glue: frozenset[RustSyntaxKind] = frozenset()) -> None:
        """Simple token run with canonical spacing; `glue` kinds attach to what precedes them."""
        previous: SyntaxElement | None = None
        for element in elements:
            if element.kind not in glue:
                self.b.text(separator(previous, element))
            self.element(element)
            previous = element

    def children(self, node: SyntaxNode) -> None:
        """Every child, glued together."""
        for child in node.children:
            self.element(child)

    # -- attributes -----------------------------------------------------

    def attributed(self, node: SyntaxNode, body: Callable[[list[SyntaxElement]], None]) -> None:
        """Outer attributes one per line (policy permitting), then `body` of the rest."""
        attributes = [child for child in node.children if _is_attribute(child)]
        rest = [child for child in node.children if not _is_attribute(child)]
        if not attributes:
            body(rest)
            return
        self.b.tag(GroupKind.ATTRIBUTES)
        for attribute in attributes:
            self.node(attribute)
            self.b.soft_break(indent=False)
        with self.b.group():
            body(rest)

    def inline_attributes(self, elements: Sequence[SyntaxElement]) -> list[SyntaxElement]:
        """Write leading attributes on the same line; returns the remaining elements."""
        index = 0
        while index < len(elements) and _is_attribute(elements[index]):
            self.node(elements[index])
            self.b.text(" ")
            index += 1
        return list(elements[index:])

    # -- lists ----------------------------------------------------------

    def emit_list(
        self,
        parts: ListParts,
        *,
        pad: bool = False,
        trailing: Trailing = Trailing.SPLIT,
        item: Callable[[list[SyntaxElement]], None] | None = None,
    ) -> None:
        """`open item, item close`; split, one item per indented line."""
        b = self.b
        write = item if item is not None else self.spaced
        self.tok(parts.open)
        close_text = parts.close.text if parts.close is not None else ""
        if not parts.items:
            if parts.close is not None and b.has_comments(parts.close.token_start):
                b.line_break(indent=True)
                self.skip(parts.close)
                b.line_break()
            else:
                self.skip(parts.close)
            b.text(close_text)
            return

        if any(elements and _has_attributes(elements[0]) for elements, _ in parts.items):
            b.force_split()
        if pad:
            b.text(" ", TextMode.INLINE_ONLY)
        for index, (elements, comma) in enumerate(parts.items):
            b.line_break(indent=True)
            write(elements)
            if index < len(parts.items) - 1:
                if comma is not None:
                    self.tok(comma)
                else:
                    b.text(",")
                b.text(" ", TextMode.INLINE_ONLY)
                continue
            self.skip(comma)
            if _is_rest(elements):
                continue
            match trailing:
                case Trailing.SPLIT:
                    b.text(",", TextMode.SPLIT_ONLY)
                case Trailing.PRESERVE if comma is not None:
                    b.text(",")
                case _:
                    pass
        self.skip(parts.close)
        if pad:
            b.text(" ", TextMode.INLINE_ONLY)
        b.line_break()
        b.text(close_text)

    def statements(self, nodes: Sequence[SyntaxNode], *, indent: bool = True) -> None:
        from rsfmtpy.format.frontend.items import margin_of

        self.b.statement_list(nodes, self.element, margin_of, indent=indent)

    def braced(self, node: SyntaxNode) -> None:
        """`{ statements }` for blocks and item lists; always split when not empty."""
        b = self.b
        open_ = node.find_token(RustSyntaxKind.LBRACE)
        close = last_token(node, RustSyntaxKind.RBRACE)
        nodes = node.child_nodes()
        self.tok(open_)
        if nodes:
            b.force_split()
            self.statements(nodes)
            self.close(close)
            b.line_break()
        elif close is not None and b.has_comments(close.token_start):
            b.line_break(indent=True)
            self.close(close, trim_leading=True)
            b.line_break()
        else:
            self.skip(close)
        if close is not None:
            b.text(close.text)


def _is_attribute(element: SyntaxElement) -> bool:
    return isinstance(element, SyntaxNode) and element.kind == RustSyntaxKind.ATTRIBUTE


def _has_attributes(element: SyntaxElement) -> bool:
    return isinstance(element, SyntaxNode) and any(_is_attribute(child) for child in element.children)


def _is_rest(elements: list[SyntaxElement]) -> bool:
    if not elements:
        return False
    first = elements[0]
    return first.kind in (RustSyntaxKind.DOT_DOT, RustSyntaxKind.REST_PAT)


def last_token(node: SyntaxNode, kind: RustSyntaxKind) -> SyntaxToken | None:
    for child in reversed(node.children):
        if isinstance(child, SyntaxToken) and child.kind == kind:
            return child
    return None


# -- shared node kinds ---------------------------------------------------


@rule(RustSyntaxKind.ROOT)
def _root(f: Frontend, node: SyntaxNode) -> None:
    f.children(node)


@rule(RustSyntaxKind.SOURCE_FILE)
def _source_file(f: Frontend, node: SyntaxNode) -> None:
    nodes = node.child_nodes()
    f.b.force_split()
    f.statements(nodes, indent=False)
    f.b.line_break()
    f.close(node.find_token(RustSyntaxKind.EOF), trim_leading=not nodes)


@rule(RustSyntaxKind.ATTRIBUTE)
def _attribute(f: Frontend, node: SyntaxNode) -> None:
    f.children(node)


@rule(RustSyntaxKind.TOKEN_TREE)
def _token_tree(f: Frontend, node: SyntaxNode) -> None:
    """Opaque macro input; respaced only when it is a single commentless line."""
    tokens = list(node.iter_tokens())
    if "\n" in node.text or any(f.b.has_comments(token.token_start) for token in tokens[1:]):
        f.verbatim(node)
        return
    for index, token in enumerate(tokens):
        if index and token.leading_trivia:
            f.b.text(" ")
        f.tok(token)


@rule(RustSyntaxKind.VISIBILITY)
def _visibility(f: Frontend, node: SyntaxNode) -> None:
    for child in node.children:
        if isinstance(child, SyntaxToken) and child.text == "in":
            f.keyword(child)
        else:
            f.element(child)


@rule(RustSyntaxKind.ERROR)
def _error(f: Frontend, node: SyntaxNode) -> None:
    f.verbatim(node)
