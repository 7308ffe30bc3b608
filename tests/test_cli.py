import io
import textwrap
from pathlib import Path

import pytest

from rsfmtpy.cli import find_manifest, main, package_dirs, rust_files, should_skip


def _stdin(monkeypatch: pytest.MonkeyPatch, text: str) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(text))


def test_stdin_is_formatted_to_stdout(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _stdin(monkeypatch, "fn a(){}\n")

    assert main(["--quiet"]) == 0
    assert capsys.readouterr().out == "fn a() {}\n"


def test_stdin_with_skip_marker_is_echoed(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    source = "// `nofmt`\nfn a(){}\n"
    _stdin(monkeypatch, source)

    assert main(["--quiet"]) == 0
    assert capsys.readouterr().out == source


def test_stdin_syntax_error_fails(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _stdin(monkeypatch, "fn a( {}\n")

    assert main(["--quiet"]) == 1
    assert capsys.readouterr().out == ""


def test_stdin_too_deeply_nested_fails(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _stdin(monkeypatch, "fn f() { let x = " + "(" * 3000 + "1" + ")" * 3000 + "; }\n")

    assert main(["--quiet"]) == 1
    assert capsys.readouterr().out == ""


def test_command_line_flags_override_defaults(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    _stdin(monkeypatch, "struct S { a: i32 }\n")

    assert main(["--quiet", "--split-brace-threshold", "off"]) == 0
    assert capsys.readouterr().out == "struct S { a: i32 }\n"


def test_should_skip_only_checks_the_first_lines() -> None:
    assert should_skip("// `nofmt`\n")
    assert not should_skip("\n" * 5 + "// `nofmt`\n")


def test_files_are_rewritten_in_place(tmp_path: Path) -> None:
    good = tmp_path / "good.rs"
    good.write_text("fn a(){}\n", encoding="utf-8")
    skipped = tmp_path / "skipped.rs"
    skipped.write_text("// `nofmt`\nfn a(){}\n", encoding="utf-8")

    assert main(["--quiet", str(good), str(skipped)]) == 0
    assert good.read_text(encoding="utf-8") == "fn a() {}\n"
    assert skipped.read_text(encoding="utf-8") == "// `nofmt`\nfn a(){}\n"


def test_file_with_syntax_error_is_left_alone(tmp_path: Path) -> None:
    broken = tmp_path / "broken.rs"
    broken.write_text("fn a( {}\n", encoding="utf-8")
    good = tmp_path / "good.rs"
    good.write_text("fn a(){}\n", encoding="utf-8")

    assert main(["--quiet", str(broken), str(good)]) == 1
    assert broken.read_text(encoding="utf-8") == "fn a( {}\n"
    assert good.read_text(encoding="utf-8") == "fn a() {}\n"


def test_config_file_in_working_directory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / "rsfmt.toml").write_text('split_brace_threshold = "off"\n', encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    _stdin(monkeypatch, "struct S { a: i32 }\n")

    assert main(["--quiet"]) == 0
    assert capsys.readouterr().out == "struct S { a: i32 }\n"


def test_invalid_config_exits_with_usage_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = tmp_path / "custom.toml"
    config.write_text("max_width = 0\n", encoding="utf-8")
    _stdin(monkeypatch, "fn a() {}\n")

    assert main(["--quiet", "--config", str(config)]) == 2


def _write_package(root: Path) -> None:
    (root / "Cargo.toml").write_text(
        textwrap.dedent(
            """\
            [package]
            name = "demo"

            [workspace]
            members = ["member"]

            [[bin]]
            name = "tool"
            path = "tools/tool.rs"
            """
        ),
        encoding="utf-8",
    )
    for relative in ("src/lib.rs", "src/nested/mod.rs", "tools/tool.rs", "member/src/lib.rs"):
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("fn a(){}\n", encoding="utf-8")
    (root / "member" / "Cargo.toml").write_text('[package]\nname = "member"\n', encoding="utf-8")
    (root / "target").mkdir()
    (root / "target" / "generated.rs").write_text("fn a(){}\n", encoding="utf-8")


def test_package_discovery(tmp_path: Path) -> None:
    _write_package(tmp_path)

    manifest = find_manifest(tmp_path / "src" / "nested")
    assert manifest == tmp_path / "Cargo.toml"

    files = rust_files(package_dirs(manifest))
    names = {path.relative_to(tmp_path.resolve()).as_posix() for path in files}
    assert names == {"src/lib.rs", "src/nested/mod.rs", "tools/tool.rs", "member/src/lib.rs"}


def test_package_mode_formats_every_source(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_package(tmp_path)
    monkeypatch.chdir(tmp_path / "src")

    assert main(["--quiet", "--package", "--thread-count", "2"]) == 0
    for relative in ("src/lib.rs", "src/nested/mod.rs", "tools/tool.rs", "member/src/lib.rs"):
        assert (tmp_path / relative).read_text(encoding="utf-8") == "fn a() {}\n"
    assert (tmp_path / "target" / "generated.rs").read_text(encoding="utf-8") == "fn a(){}\n"


def test_package_mode_without_manifest_fails(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    assert main(["--quiet", "--package"]) == 1
