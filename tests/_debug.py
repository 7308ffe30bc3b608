"""Shared debug printers for lexer/parser/format tests."""

from __future__ import annotations

import os

from rsfmtpy.cst import GreenNode, GreenToken
from rsfmtpy.diagnostics import Diagnostic
from rsfmtpy.format.arena import Break, Child, Gap, SegmentArena, Text
from rsfmtpy.lexer import Token, token_text


def _flag(name: str) -> bool:
    return os.getenv(name, "0").lower() in {"1", "true", "yes", "on"}


PRINT_TOKENS = _flag("PRINT_TOKENS")
PRINT_CST = _flag("PRINT_CST")
PRINT_GROUPS = _flag("PRINT_GROUPS")
PRINT_SOURCE = _flag("PRINT_SOURCE")
PRINT_DIAGNOSTICS = _flag("PRINT_DIAGNOSTICS")


def debug_print_source(test_name: str, source: str) -> None:
    if not PRINT_SOURCE:
        return
    print(f"\n===== {test_name} SOURCE =====")
    print(source)


def debug_dump_tokens(test_name: str, source: str, tokens: list[Token]) -> None:
    if not PRINT_TOKENS:
        return
    debug_print_source(test_name, source)
    print(f"\n===== {test_name} TOKENS =====")
    for index, tok in enumerate(tokens):
        text = token_text(source, tok)
        print(f"{index:03d} {tok.kind.name:<24} range={tok.range.as_tuple()} flags={tok.flags} text={text!r}")


def debug_dump_cst(test_name: str, source: str, root: GreenNode) -> None:
    if not PRINT_CST:
        return
    if not PRINT_SOURCE:
        print(f"\n===== {test_name} SOURCE =====")
        print(source)
    else:
        debug_print_source(test_name, source)
    print(f"===== {test_name} CST =====")
    print(_dump_cst(root))


def debug_dump_groups(test_name: str, arena: SegmentArena, root: int) -> None:
    if not PRINT_GROUPS:
        return
    print(f"\n===== {test_name} SPLIT GROUPS =====")
    print(_dump_groups(arena, root))


def debug_dump_diagnostics(test_name: str, diagnostics: list[Diagnostic], source: str | None = None) -> None:
    if not PRINT_DIAGNOSTICS:
        return
    if source is not None:
        debug_print_source(test_name, source)
    print(f"===== {test_name} DIAGNOSTICS =====")
    if not diagnostics:
        print("(none)")
        return
    for diagnostic in diagnostics:
        print(diagnostic)


def _dump_cst(node: GreenNode) -> str:
    lines: list[str] = []

    def walk_node(current: GreenNode, depth: int) -> None:
        indent = "  " * depth
        lines.append(f"{indent}{current.kind.name}")
        for child in current.children:
            if isinstance(child, GreenNode):
                walk_node(child, depth + 1)
            else:
                walk_token(child, depth + 1)

    def walk_token(token: GreenToken, depth: int) -> None:
        indent = "  " * depth
        text = token.text.replace("\n", "\\n").replace("\r", "\\r")
        lines.append(f"{indent}{token.kind.name} text={text!r} leading={token.leading_trivia!r}")

    walk_node(node, 0)
    return "\n".join(lines)


def _dump_groups(arena: SegmentArena, root: int) -> str:
    lines: list[str] = []

    def walk(handle: int, depth: int) -> None:
        group = arena.get(handle)
        indent = "  " * depth
        flags = [name for name in ("forced", "reversed", "has_hard_break") if getattr(group, name)]
        lines.append(f"{indent}#{handle} {group.kind} count={group.element_count} {' '.join(flags)}".rstrip())
        for entry in group.entries:
            match entry:
                case Text(text=text, mode=mode):
                    lines.append(f"{indent}  text {text!r} {mode}")
                case Break(indent=deeper):
                    lines.append(f"{indent}  break{' +1' if deeper else ''}")
                case Child(handle=child):
                    walk(child, depth + 1)
                case Gap(items=items):
                    lines.append(f"{indent}  gap {items!r}")

    walk(root, 0)
    return "\n".join(lines)
