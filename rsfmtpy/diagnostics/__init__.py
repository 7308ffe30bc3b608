"""Diagnostics."""

from rsfmtpy.diagnostics.codes import (
    FORMAT_LOST_COMMENT,
    FORMAT_REPARSE_FAILED,
    FORMAT_UNPLACEABLE_COMMENT,
    LEXER_UNTERMINATED_CHAR,
    LEXER_UNTERMINATED_COMMENT,
    LEXER_UNTERMINATED_STRING,
    PARSER_EXPECTED_EXPRESSION,
    PARSER_EXPECTED_ITEM,
    PARSER_EXPECTED_PATTERN,
    PARSER_EXPECTED_TOKEN,
    PARSER_EXPECTED_TYPE,
    PARSER_UNEXPECTED_TOKEN,
    DiagnosticSpec,
)
from rsfmtpy.diagnostics.diagnostic import Diagnostic, Severity
from rsfmtpy.diagnostics.report import collect_diagnostics, has_errors, render_diagnostic

__all__ = [
    "FORMAT_LOST_COMMENT",
    "FORMAT_REPARSE_FAILED",
    "FORMAT_UNPLACEABLE_COMMENT",
    "LEXER_UNTERMINATED_CHAR",
    "LEXER_UNTERMINATED_COMMENT",
    "LEXER_UNTERMINATED_STRING",
    "PARSER_EXPECTED_EXPRESSION",
    "PARSER_EXPECTED_ITEM",
    "PARSER_EXPECTED_PATTERN",
    "PARSER_EXPECTED_TOKEN",
    "PARSER_EXPECTED_TYPE",
    "PARSER_UNEXPECTED_TOKEN",
    "Diagnostic",
    "DiagnosticSpec",
    "Severity",
    "collect_diagnostics",
    "has_errors",
    "render_diagnostic",
]
