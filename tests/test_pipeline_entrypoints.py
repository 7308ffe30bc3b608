import pytest

from rsfmtpy.format import FormatConfig
from rsfmtpy.parser import parse_result
from rsfmtpy.pipeline import run_format, run_parse


def test_run_parse_returns_shared_carrier() -> None:
    result = run_parse("fn a() {}\n")

    assert result.source_text == "fn a() {}\n"
    assert result.has_errors is False
    assert result.syntax_root() is result.syntax_root()


def test_run_format_reuses_provided_parse_result() -> None:
    source = "fn a(){}\n"
    parsed = parse_result(source)

    result = run_format(source, parse=parsed)

    assert result.parse is parsed
    assert result.formatted_text == "fn a() {}\n"
    assert result.changed is True
    assert result.diagnostics == []
    assert result.has_errors is False


def test_run_format_rejects_parse_of_different_text() -> None:
    parsed = parse_result("fn a() {}\n")

    with pytest.raises(ValueError, match="different text"):
        run_format("fn b() {}\n", parse=parsed)


def test_run_format_leaves_formatted_source_unchanged() -> None:
    source = "fn a() {}\n"

    result = run_format(source)

    assert result.formatted_text == source
    assert result.changed is False
    assert result.diagnostics == []


def test_run_format_reports_parse_errors_without_formatting() -> None:
    source = "fn a( {}\n"

    result = run_format(source)

    assert result.formatted_text == source
    assert result.changed is False
    assert result.has_errors is True
    assert result.diagnostics == result.parse.diagnostics


def test_run_format_honours_config() -> None:
    source = "struct S { a: i32 }\n"

    default = run_format(source)
    inline = run_format(source, FormatConfig(split_brace_threshold=None))

    assert default.formatted_text == "struct S {\n    a: i32,\n}\n"
    assert inline.formatted_text == source
