"""Layout of items and the margin table for their statement lists."""

from rsfmtpy.cst import SyntaxElement, SyntaxNode
from rsfmtpy.format.arena import GroupKind, TextMode
from rsfmtpy.format.frontend.common import Frontend, rule, split_list
from rsfmtpy.format.frontend.expressions import assignment
from rsfmtpy.format.frontend.types import SIGNATURE_GLUE
from rsfmtpy.format.margin import NO_MARGIN, Margin, MarginGroup
from rsfmtpy.syntax import RustSyntaxKind

# Trailing item parts that open a body.
_BODY_KINDS: frozenset[RustSyntaxKind] = frozenset(
    {
        RustSyntaxKind.BLOCK,
        RustSyntaxKind.RECORD_FIELD_LIST,
        RustSyntaxKind.VARIANT_LIST,
        RustSyntaxKind.ASSOC_ITEM_LIST,
        RustSyntaxKind.ITEM_LIST,
    }
)

_ALWAYS_BODY: frozenset[RustSyntaxKind] = frozenset(
    {
        RustSyntaxKind.ENUM_ITEM,
        RustSyntaxKind.IMPL_ITEM,
        RustSyntaxKind.TRAIT_ITEM,
        RustSyntaxKind.EXTERN_BLOCK,
        RustSyntaxKind.MACRO_CALL,
        RustSyntaxKind.MACRO_RULES,
    }
)


def margin_of(element: SyntaxElement) -> Margin:
    """Blank-line class of a statement-list entry."""
    if not isinstance(element, SyntaxNode):
        return NO_MARGIN
    kind = element.kind
    if kind == RustSyntaxKind.USE_ITEM:
        return Margin(MarginGroup.IMPORT)
    if _in_extern_block(element):
        return NO_MARGIN
    if kind in _ALWAYS_BODY:
        return Margin(MarginGroup.BLOCK_DEF, True)
    match kind:
        case RustSyntaxKind.FN_ITEM:
            return Margin(MarginGroup.BLOCK_DEF, element.find_node(RustSyntaxKind.BLOCK) is not None)
        case RustSyntaxKind.STRUCT_ITEM | RustSyntaxKind.UNION_ITEM:
            fields = element.find_node(RustSyntaxKind.RECORD_FIELD_LIST, RustSyntaxKind.TUPLE_FIELD_LIST)
            return Margin(MarginGroup.BLOCK_DEF, fields is not None)
        case RustSyntaxKind.MOD_ITEM:
            return Margin(MarginGroup.BLOCK_DEF, element.find_node(RustSyntaxKind.ITEM_LIST) is not None)
        case _:
            return NO_MARGIN


def _in_extern_block(node: SyntaxNode) -> bool:
    parent = node.parent
    return (
        parent is not None
        and parent.kind == RustSyntaxKind.ITEM_LIST
        and parent.parent is not None
        and parent.parent.kind == RustSyntaxKind.EXTERN_BLOCK
    )


# -- where clauses -------------------------------------------------------


def where_clause(f: Frontend, node: SyntaxNode, *, has_body: bool) -> None:
    """`where` on its own line and one predicate per indented line when split.

    With a body the group ends on a break, so the opening brace of the body
    starts a fresh line too.
    """
    b = f.b
    b.tag(GroupKind.WHERE)
    keyword, *rest = node.children
    b.soft_break(indent=False)
    f.tok(keyword)
    parts = split_list(rest, (), ())
    for index, (elements, comma) in enumerate(parts.items):
        b.soft_break(indent=True)
        f.spaced(elements)
        if index < len(parts.items) - 1:
            if comma is not None:
                f.tok(comma)
            else:
                b.text(",")
            continue
        f.skip(comma)
        if has_body:
            b.text(",", TextMode.SPLIT_ONLY)
    if has_body:
        b.line_break()


@rule(RustSyntaxKind.WHERE_CLAUSE)
def _where(f: Frontend, node: SyntaxNode) -> None:
    where_clause(f, node, has_body=False)


# -- item skeleton -------------------------------------------------------


def _item(f: Frontend, elements: list[SyntaxElement], *, reverse: bool = False) -> None:
    """`header [where ..] body-or-;` shared by every braced item."""
    b = f.b
    where = next((e for e in elements if e.kind == RustSyntaxKind.WHERE_CLAUSE), None)
    body = elements[-1] if elements and elements[-1].kind in _BODY_KINDS else None
    semicolon = elements[-1] if elements and elements[-1].kind == RustSyntaxKind.SEMICOLON else None
    head = [e for e in elements if e is not where and e is not body and e is not semicolon]
    if reverse:
        b.reverse_children()
    with b.group():
        f.spaced(head, glue=SIGNATURE_GLUE)
    if isinstance(where, SyntaxNode):
        with b.group():
            where_clause(f, where, has_body=body is not None)
    if body is not None:
        b.text(" ")
        f.element(body)
    f.tok(semicolon)


@rule(
    RustSyntaxKind.STRUCT_ITEM,
    RustSyntaxKind.UNION_ITEM,
    RustSyntaxKind.ENUM_ITEM,
    RustSyntaxKind.IMPL_ITEM,
    RustSyntaxKind.TRAIT_ITEM,
    RustSyntaxKind.MOD_ITEM,
    RustSyntaxKind.EXTERN_BLOCK,
)
def _braced_item(f: Frontend, node: SyntaxNode) -> None:
    f.attributed(node, lambda rest: _item(f, rest))


@rule(RustSyntaxKind.FN_ITEM)
def _fn(f: Frontend, node: SyntaxNode) -> None:
    # The body is decided first so the signature sees the real width of `{`.
    f.attributed(node, lambda rest: _item(f, rest, reverse=True))


@rule(
    RustSyntaxKind.CONST_ITEM,
    RustSyntaxKind.STATIC_ITEM,
    RustSyntaxKind.TYPE_ALIAS,
)
def _assigned_item(f: Frontend, node: SyntaxNode) -> None:
    f.attributed(node, lambda rest: assignment(f, rest))


@rule(
    RustSyntaxKind.USE_ITEM,
    RustSyntaxKind.EXTERN_CRATE,
    RustSyntaxKind.RECORD_FIELD,
    RustSyntaxKind.TUPLE_FIELD,
)
def _simple_item(f: Frontend, node: SyntaxNode) -> None:
    f.attributed(node, f.spaced)


@rule(RustSyntaxKind.VARIANT)
def _variant(f: Frontend, node: SyntaxNode) -> None:
    f.attributed(node, lambda rest: f.spaced(rest, glue=SIGNATURE_GLUE))


@rule(RustSyntaxKind.MACRO_RULES)
def _macro_rules(f: Frontend, node: SyntaxNode) -> None:
    f.attributed(node, lambda rest: _macro_rules_body(f, rest))


def _macro_rules_body(f: Frontend, elements: list[SyntaxElement]) -> None:
    keyword, bang, *rest = elements
    f.tok(keyword)
    f.tok(bang)
    for element in rest:
        if element.kind != RustSyntaxKind.SEMICOLON:
            f.b.text(" ")
        f.element(element)


# -- bodies --------------------------------------------------------------


@rule(RustSyntaxKind.ITEM_LIST, RustSyntaxKind.ASSOC_ITEM_LIST)
def _item_list(f: Frontend, node: SyntaxNode) -> None:
    f.braced(node)


@rule(RustSyntaxKind.RECORD_FIELD_LIST, RustSyntaxKind.VARIANT_LIST)
def _brace_list(f: Frontend, node: SyntaxNode) -> None:
    parts = split_list(node.children)
    f.b.tag(GroupKind.BRACE, len(parts.items))
    f.emit_list(parts, pad=True)


@rule(RustSyntaxKind.TUPLE_FIELD_LIST)
def _tuple_fields(f: Frontend, node: SyntaxNode) -> None:
    f.emit_list(split_list(node.children))


@rule(RustSyntaxKind.USE_TREE)
def _use_tree(f: Frontend, node: SyntaxNode) -> None:
    f.spaced(node.children)


@rule(RustSyntaxKind.USE_TREE_LIST)
def _use_tree_list(f: Frontend, node: SyntaxNode) -> None:
    parts = split_list(node.children)
    f.b.tag(GroupKind.BRACE, len(parts.items))
    f.emit_list(parts)

