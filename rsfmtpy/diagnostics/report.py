"""Diagnostics helpers."""

from __future__ import annotations

from collections.abc import Iterable

from rsfmtpy.diagnostics.diagnostic import Diagnostic
from rsfmtpy.text import LineIndex


def collect_diagnostics(*groups: Iterable[Diagnostic]) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for group in groups:
        diagnostics.extend(group)
    return diagnostics


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
    return any(d.severity == "error" for d in diagnostics)


def render_diagnostic(diagnostic: Diagnostic, source: str) -> str:
    """One-line `line:col: severity CODE message` rendering for terminals."""
    position = LineIndex.of(source).line_col(diagnostic.range.start)
    text = f"{position}: {diagnostic.severity} {diagnostic.code} {diagnostic.message}"
    if diagnostic.hint:
        text += f" ({diagnostic.hint})"
    return text
