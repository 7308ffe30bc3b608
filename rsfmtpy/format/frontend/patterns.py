"""Layout of patterns."""

from rsfmtpy.cst import SyntaxNode, SyntaxToken
from rsfmtpy.format.frontend.common import Frontend, rule, split_list
from rsfmtpy.format.frontend.types import tuple_trailing
from rsfmtpy.syntax import RustSyntaxKind


@rule(
    RustSyntaxKind.IDENT_PAT,
    RustSyntaxKind.WILDCARD_PAT,
    RustSyntaxKind.LITERAL_PAT,
    RustSyntaxKind.RANGE_PAT,
    RustSyntaxKind.REF_PAT,
    RustSyntaxKind.PATH_PAT,
)
def _simple(f: Frontend, node: SyntaxNode) -> None:
    f.spaced(node.children)


@rule(RustSyntaxKind.REST_PAT, RustSyntaxKind.RECORD_PAT_FIELD)
def _field(f: Frontend, node: SyntaxNode) -> None:
    f.spaced(f.inline_attributes(node.children))


@rule(RustSyntaxKind.TUPLE_PAT)
def _tuple(f: Frontend, node: SyntaxNode) -> None:
    parts = split_list(node.children)
    f.emit_list(parts, trailing=tuple_trailing(parts))


@rule(RustSyntaxKind.SLICE_PAT)
def _slice(f: Frontend, node: SyntaxNode) -> None:
    f.emit_list(split_list(node.children))


@rule(RustSyntaxKind.TUPLE_STRUCT_PAT)
def _tuple_struct(f: Frontend, node: SyntaxNode) -> None:
    f.element(node.children[0])
    f.emit_list(split_list(node.children[1:]))


@rule(RustSyntaxKind.RECORD_PAT)
def _record(f: Frontend, node: SyntaxNode) -> None:
    f.element(node.children[0])
    f.b.text(" ")
    f.emit_list(split_list(node.children[1:]), pad=True)


@rule(RustSyntaxKind.OR_PAT)
def _or(f: Frontend, node: SyntaxNode) -> None:
    """`a | b`; a leading `|` is dropped and long alternatives go one per line."""
    parts = split_list(node.children, (), (), separator_kind=RustSyntaxKind.PIPE)
    items = parts.items
    if items and not items[0][0]:
        f.skip(items[0][1])
        items = items[1:]
    pipe: SyntaxToken | None = None
    for index, (elements, separator) in enumerate(items):
        if index:
            f.b.text(" ")
            f.tok(pipe)
            f.b.soft_break(indent=False)
        f.spaced(elements)
        pipe = separator
    f.skip(pipe)

