"""Layout of paths, generics and types."""

from rsfmtpy.cst import SyntaxNode
from rsfmtpy.format.frontend.common import Frontend, ListParts, Trailing, rule, split_list
from rsfmtpy.syntax import RustSyntaxKind

# Argument and parameter lists attach directly to the name in front of them.
SIGNATURE_GLUE: frozenset[RustSyntaxKind] = frozenset(
    {
        RustSyntaxKind.GENERIC_PARAM_LIST,
        RustSyntaxKind.GENERIC_ARG_LIST,
        RustSyntaxKind.PARAM_LIST,
        RustSyntaxKind.TUPLE_FIELD_LIST,
    }
)


def tuple_trailing(parts: ListParts) -> Trailing:
    """`(a,)` needs its comma; longer tuples follow the list policy."""
    return Trailing.PRESERVE if len(parts.items) == 1 else Trailing.SPLIT


@rule(
    RustSyntaxKind.PATH,
    RustSyntaxKind.PATH_TYPE,
    RustSyntaxKind.FOR_BINDER,
)
def _glued(f: Frontend, node: SyntaxNode) -> None:
    f.children(node)


@rule(RustSyntaxKind.PATH_SEGMENT)
def _path_segment(f: Frontend, node: SyntaxNode) -> None:
    # `Fn(A) -> B` sugar keeps a space in front of the return type.
    f.spaced(node.children, glue=SIGNATURE_GLUE)


@rule(
    RustSyntaxKind.QUALIFIED_SELF,
    RustSyntaxKind.ASSOC_TYPE_ARG,
    RustSyntaxKind.TYPE_BOUND,
    RustSyntaxKind.TYPE_BOUND_LIST,
    RustSyntaxKind.WHERE_PRED,
    RustSyntaxKind.REF_TYPE,
    RustSyntaxKind.PTR_TYPE,
    RustSyntaxKind.ARRAY_TYPE,
    RustSyntaxKind.SLICE_TYPE,
    RustSyntaxKind.IMPL_TRAIT_TYPE,
    RustSyntaxKind.DYN_TRAIT_TYPE,
    RustSyntaxKind.NEVER_TYPE,
    RustSyntaxKind.INFER_TYPE,
    RustSyntaxKind.RET_TYPE,
    RustSyntaxKind.ABI,
)
def _spaced(f: Frontend, node: SyntaxNode) -> None:
    f.spaced(node.children)


@rule(
    RustSyntaxKind.TYPE_PARAM,
    RustSyntaxKind.LIFETIME_PARAM,
    RustSyntaxKind.CONST_PARAM,
    RustSyntaxKind.PARAM,
    RustSyntaxKind.SELF_PARAM,
)
def _param(f: Frontend, node: SyntaxNode) -> None:
    f.spaced(f.inline_attributes(node.children))


@rule(RustSyntaxKind.GENERIC_ARG_LIST, RustSyntaxKind.GENERIC_PARAM_LIST, RustSyntaxKind.PARAM_LIST)
def _angle_or_param_list(f: Frontend, node: SyntaxNode) -> None:
    f.emit_list(split_list(node.children))


@rule(RustSyntaxKind.TUPLE_TYPE, RustSyntaxKind.PAREN_TYPE)
def _tuple_type(f: Frontend, node: SyntaxNode) -> None:
    parts = split_list(node.children)
    f.emit_list(parts, trailing=tuple_trailing(parts))


@rule(RustSyntaxKind.FN_PTR_TYPE)
def _fn_ptr_type(f: Frontend, node: SyntaxNode) -> None:
    f.spaced(node.children, glue=SIGNATURE_GLUE)
