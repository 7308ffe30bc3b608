"""Diagnostic codes and messages."""

from dataclasses import dataclass
from typing import Final, Literal

Severity = Literal["error", "warning"]


@dataclass(frozen=True, slots=True)
class DiagnosticSpec:
    code: str
    message: str
    hint: str | None = None
    severity: Severity = "error"
    category: str | None = None


LEXER_UNTERMINATED_STRING: Final[DiagnosticSpec] = DiagnosticSpec(
    code="LEXER_UNTERMINATED_STRING",
    message="Unterminated string literal.",
    hint="Close the string with a matching quote.",
    severity="error",
    category="lexer",
)

LEXER_UNTERMINATED_COMMENT: Final[DiagnosticSpec] = DiagnosticSpec(
    code="LEXER_UNTERMINATED_COMMENT",
    message="Unterminated block comment.",
    hint="Close every `/*` with a matching `*/`.",
    severity="error",
    category="lexer",
)

LEXER_UNTERMINATED_CHAR: Final[DiagnosticSpec] = DiagnosticSpec(
    code="LEXER_UNTERMINATED_CHAR",
    message="Unterminated character literal.",
    severity="error",
    category="lexer",
)

PARSER_EXPECTED_TOKEN: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_EXPECTED_TOKEN",
    message="Expected token",
    severity="error",
    category="parser",
)

PARSER_EXPECTED_ITEM: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_EXPECTED_ITEM",
    message="Expected an item",
    severity="error",
    category="parser",
)

PARSER_EXPECTED_EXPRESSION: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_EXPECTED_EXPRESSION",
    message="Expected an expression",
    severity="error",
    category="parser",
)

PARSER_EXPECTED_TYPE: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_EXPECTED_TYPE",
    message="Expected a type",
    severity="error",
    category="parser",
)

PARSER_EXPECTED_PATTERN: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_EXPECTED_PATTERN",
    message="Expected a pattern",
    severity="error",
    category="parser",
)

PARSER_UNEXPECTED_TOKEN: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_UNEXPECTED_TOKEN",
    message="Unexpected token",
    severity="error",
    category="parser",
)

FORMAT_UNPLACEABLE_COMMENT: Final[DiagnosticSpec] = DiagnosticSpec(
    code="FORMAT_UNPLACEABLE_COMMENT",
    message="Comment has no legal position in the formatted output.",
    hint="Move the comment next to a line break, e.g. onto its own line before the statement.",
    severity="error",
    category="format",
)

FORMAT_LOST_COMMENT: Final[DiagnosticSpec] = DiagnosticSpec(
    code="FORMAT_LOST_COMMENT",
    message="Comment was dropped during formatting.",
    severity="warning",
    category="format",
)

FORMAT_REPARSE_FAILED: Final[DiagnosticSpec] = DiagnosticSpec(
    code="FORMAT_REPARSE_FAILED",
    message="Formatted output no longer parses.",
    hint="This is a formatter bug; the input was left unchanged.",
    severity="error",
    category="format",
)
