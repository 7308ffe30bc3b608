"""Layout of statements and expressions."""

from collections.abc import Sequence

from rsfmtpy.cst import SyntaxElement, SyntaxNode, SyntaxToken
from rsfmtpy.format.frontend.common import Frontend, Trailing, rule, split_list
from rsfmtpy.format.frontend.types import SIGNATURE_GLUE, tuple_trailing
from rsfmtpy.syntax import RustSyntaxKind

# Receivers after which `.call()` moves to its own line when the chain splits.
_CHAIN_KINDS: frozenset[RustSyntaxKind] = frozenset(
    {RustSyntaxKind.METHOD_CALL_EXPR, RustSyntaxKind.AWAIT_EXPR}
)

# Match arm bodies that end in `}` and so need no comma.
_BLOCK_BODIES: frozenset[RustSyntaxKind] = frozenset({RustSyntaxKind.BLOCK_EXPR})


def assignment(f: Frontend, elements: Sequence[SyntaxElement]) -> None:
    """`lhs = rhs` runs; the right-hand side may drop to an indented line."""
    head: list[SyntaxElement] = []
    for index, element in enumerate(elements):
        if isinstance(element, SyntaxToken) and element.kind == RustSyntaxKind.EQUAL:
            f.spaced(head, glue=SIGNATURE_GLUE)
            f.b.text(" ")
            f.tok(element)
            f.b.soft_break(indent=True)
            f.spaced(elements[index + 1 :])
            return
        head.append(element)
    f.spaced(head, glue=SIGNATURE_GLUE)


def _is_chain(node: SyntaxElement) -> bool:
    while isinstance(node, SyntaxNode) and node.kind == RustSyntaxKind.TRY_EXPR:
        node = node.children[0]
    return isinstance(node, SyntaxNode) and node.kind in _CHAIN_KINDS


# -- statements ----------------------------------------------------------


@rule(RustSyntaxKind.BLOCK, RustSyntaxKind.MATCH_ARM_LIST)
def _block(f: Frontend, node: SyntaxNode) -> None:
    f.braced(node)


@rule(RustSyntaxKind.LET_STMT)
def _let(f: Frontend, node: SyntaxNode) -> None:
    f.attributed(node, lambda rest: assignment(f, rest))


@rule(RustSyntaxKind.EXPR_STMT)
def _expr_stmt(f: Frontend, node: SyntaxNode) -> None:
    f.attributed(node, f.spaced)


# -- simple runs ---------------------------------------------------------


@rule(
    RustSyntaxKind.LITERAL,
    RustSyntaxKind.PATH_EXPR,
    RustSyntaxKind.CALL_EXPR,
    RustSyntaxKind.FIELD_EXPR,
    RustSyntaxKind.INDEX_EXPR,
    RustSyntaxKind.TRY_EXPR,
    RustSyntaxKind.LABEL,
    RustSyntaxKind.UNDERSCORE_EXPR,
    RustSyntaxKind.EMPTY_STMT,
)
def _glued(f: Frontend, node: SyntaxNode) -> None:
    f.children(node)


@rule(
    RustSyntaxKind.PREFIX_EXPR,
    RustSyntaxKind.REF_EXPR,
    RustSyntaxKind.CAST_EXPR,
    RustSyntaxKind.RANGE_EXPR,
    RustSyntaxKind.BLOCK_EXPR,
    RustSyntaxKind.IF_EXPR,
    RustSyntaxKind.LET_EXPR,
    RustSyntaxKind.LET_ELSE,
    RustSyntaxKind.MATCH_EXPR,
    RustSyntaxKind.MATCH_GUARD,
    RustSyntaxKind.WHILE_EXPR,
    RustSyntaxKind.LOOP_EXPR,
    RustSyntaxKind.FOR_EXPR,
    RustSyntaxKind.CLOSURE_EXPR,
    RustSyntaxKind.RETURN_EXPR,
    RustSyntaxKind.BREAK_EXPR,
    RustSyntaxKind.CONTINUE_EXPR,
    RustSyntaxKind.DISCRIMINANT,
)
def _spaced(f: Frontend, node: SyntaxNode) -> None:
    f.spaced(node.children)


# -- operators and chains ------------------------------------------------


def _starts_with_comment(f: Frontend, element: SyntaxElement) -> bool:
    token = element if isinstance(element, SyntaxToken) else element.first_token()
    return token is not None and f.b.has_comments(token.token_start)


@rule(RustSyntaxKind.BIN_EXPR)
def _binary(f: Frontend, node: SyntaxNode) -> None:
    """`lhs op rhs`; when it splits the right operand continues one level deeper.

    A comment before the operator moves the operator to the continuation line
    so the comment keeps a line of its own.
    """
    lhs, *operators, rhs = node.children
    f.element(lhs)
    if operators and _starts_with_comment(f, operators[0]):
        f.b.soft_break(indent=True)
        for operator in operators:
            f.element(operator)
        f.b.text(" ")
        f.element(rhs)
        return
    f.b.text(" ")
    for operator in operators:
        f.element(operator)
    f.b.soft_break(indent=True)
    f.element(rhs)


@rule(RustSyntaxKind.METHOD_CALL_EXPR, RustSyntaxKind.AWAIT_EXPR)
def _method_call(f: Frontend, node: SyntaxNode) -> None:
    receiver, *rest = node.children
    f.element(receiver)
    if _is_chain(receiver) or (rest and _starts_with_comment(f, rest[0])):
        f.b.line_break(indent=True)
    for element in rest:
        f.element(element)


# -- delimited -----------------------------------------------------------


@rule(RustSyntaxKind.ARG_LIST)
def _arg_list(f: Frontend, node: SyntaxNode) -> None:
    parts = split_list(node.children)
    if node.parent is not None and node.parent.kind == RustSyntaxKind.MACRO_CALL:
        # Macros may reject a trailing comma they did not have.
        braced = parts.open is not None and parts.open.kind == RustSyntaxKind.LBRACE
        f.emit_list(parts, pad=braced, trailing=Trailing.PRESERVE)
        return
    f.emit_list(parts)


@rule(RustSyntaxKind.TUPLE_EXPR, RustSyntaxKind.PAREN_EXPR)
def _tuple(f: Frontend, node: SyntaxNode) -> None:
    parts = split_list(node.children)
    f.emit_list(parts, trailing=tuple_trailing(parts))


@rule(RustSyntaxKind.ARRAY_EXPR)
def _array(f: Frontend, node: SyntaxNode) -> None:
    if node.find_token(RustSyntaxKind.SEMICOLON) is not None:
        f.spaced(node.children)
        return
    f.emit_list(split_list(node.children))


@rule(RustSyntaxKind.RECORD_EXPR)
def _record(f: Frontend, node: SyntaxNode) -> None:
    path, fields = node.children
    f.element(path)
    f.b.text(" ")
    f.element(fields)


@rule(RustSyntaxKind.RECORD_EXPR_FIELD_LIST)
def _record_fields(f: Frontend, node: SyntaxNode) -> None:
    f.emit_list(split_list(node.children), pad=True)


@rule(RustSyntaxKind.RECORD_EXPR_FIELD)
def _record_field(f: Frontend, node: SyntaxNode) -> None:
    f.spaced(f.inline_attributes(node.children))


@rule(RustSyntaxKind.CLOSURE_PARAM_LIST)
def _closure_params(f: Frontend, node: SyntaxNode) -> None:
    if node.find_token(RustSyntaxKind.PIPE_PIPE) is not None:
        f.children(node)
        return
    pipes = (RustSyntaxKind.PIPE,)
    f.emit_list(split_list(node.children, pipes, pipes), trailing=Trailing.NEVER)


# -- match ---------------------------------------------------------------


@rule(RustSyntaxKind.MATCH_ARM)
def _match_arm(f: Frontend, node: SyntaxNode) -> None:
    f.attributed(node, lambda rest: _arm(f, rest))


def _arm(f: Frontend, elements: list[SyntaxElement]) -> None:
    arrow_index = next(
        (
            index
            for index, element in enumerate(elements)
            if isinstance(element, SyntaxToken) and element.kind == RustSyntaxKind.FAT_ARROW
        ),
        None,
    )
    if arrow_index is None:
        f.spaced(elements)
        return
    f.spaced(elements[:arrow_index])
    f.b.text(" ")
    f.tok(elements[arrow_index])
    body = [element for element in elements[arrow_index + 1 :] if element.kind != RustSyntaxKind.COMMA]
    comma = next((element for element in elements[arrow_index + 1 :] if element.kind == RustSyntaxKind.COMMA), None)
    if len(body) == 1 and body[0].kind in _BLOCK_BODIES:
        f.b.text(" ")
        f.element(body[0])
        f.skip(comma)
        return
    f.b.soft_break(indent=True)
    f.spaced(body)
    f.skip(comma)
    f.b.text(",")


# -- macros --------------------------------------------------------------


@rule(RustSyntaxKind.MACRO_CALL)
def _macro_call(f: Frontend, node: SyntaxNode) -> None:
    """`path!(args)`, `path! name { .. }`; brace bodies are set off by a space."""
    f.attributed(node, lambda rest: _macro(f, rest))


def _macro(f: Frontend, elements: list[SyntaxElement]) -> None:
    for index, element in enumerate(elements):
        if index and (element.kind == RustSyntaxKind.IDENT or _opens_brace(element)):
            f.b.text(" ")
        f.element(element)


def _opens_brace(element: SyntaxElement) -> bool:
    if not isinstance(element, SyntaxNode) or element.kind not in (
        RustSyntaxKind.TOKEN_TREE,
        RustSyntaxKind.ARG_LIST,
    ):
        return False
    first = element.first_token()
    return first is not None and first.kind == RustSyntaxKind.LBRACE
