import textwrap

from _debug import debug_dump_tokens

from rsfmtpy.lexer import Lexer, Token, TokenKind, token_text


def lex(text: str) -> list[Token]:
    return Lexer(text).lex()


def significant(text: str) -> list[tuple[TokenKind, str]]:
    return [(tok.kind, token_text(text, tok)) for tok in lex(text) if not tok.kind.is_trivia]


def test_tokens_tile_the_source() -> None:
    src = textwrap.dedent(
        """
        // leading comment
        pub fn main() -> Result<(), E> {
            let x = r#"raw "quoted""#; /* block /* nested */ */
            x?.await
        }
        """
    ).lstrip()
    tokens = lex(src)
    debug_dump_tokens("tokens_tile_the_source", src, tokens)

    assert tokens[-1].kind == TokenKind.EOF
    position = 0
    for tok in tokens:
        assert tok.range.start.value == position
        position = tok.range.end.value
    assert position == len(src)
    assert "".join(token_text(src, tok) for tok in tokens) == src


def test_keywords_are_identifiers() -> None:
    assert significant("struct S;") == [
        (TokenKind.IDENT, "struct"),
        (TokenKind.IDENT, "S"),
        (TokenKind.SEMICOLON, ";"),
        (TokenKind.EOF, ""),
    ]


def test_shift_and_comparison_are_never_glued() -> None:
    kinds = [kind for kind, _ in significant("a >> b >= c << d")]
    assert kinds == [
        TokenKind.IDENT,
        TokenKind.GREATER_THAN,
        TokenKind.GREATER_THAN,
        TokenKind.IDENT,
        TokenKind.GREATER_THAN,
        TokenKind.EQUAL,
        TokenKind.IDENT,
        TokenKind.LESS_THAN,
        TokenKind.LESS_THAN,
        TokenKind.IDENT,
        TokenKind.EOF,
    ]


def test_multi_char_operators() -> None:
    kinds = [kind for kind, _ in significant("=> -> :: ..= ... .. && || += != ==")]
    assert kinds[:-1] == [
        TokenKind.FAT_ARROW,
        TokenKind.THIN_ARROW,
        TokenKind.COLON_COLON,
        TokenKind.DOT_DOT_EQUAL,
        TokenKind.DOT_DOT_DOT,
        TokenKind.DOT_DOT,
        TokenKind.AMP_AMP,
        TokenKind.PIPE_PIPE,
        TokenKind.PLUS_EQUAL,
        TokenKind.NOT_EQUAL,
        TokenKind.EQUAL_EQUAL,
    ]


def test_lifetimes_and_chars() -> None:
    assert significant("'a 'static 'x' '\\n' b'q'")[:-1] == [
        (TokenKind.LIFETIME, "'a"),
        (TokenKind.LIFETIME, "'static"),
        (TokenKind.CHAR, "'x'"),
        (TokenKind.CHAR, "'\\n'"),
        (TokenKind.CHAR, "b'q'"),
    ]


def test_string_literal_forms() -> None:
    src = '"a\\"b" b"bytes" r"raw" br##"x"#y"## c"c"'
    tokens = significant(src)[:-1]
    assert [kind for kind, _ in tokens] == [TokenKind.STRING] * 5
    assert tokens[3][1] == 'br##"x"#y"##'


def test_number_literals() -> None:
    assert significant("1 1.5 1e10 0xff_u8 2f32 1_000i64 1..2")[:-1] == [
        (TokenKind.INT, "1"),
        (TokenKind.FLOAT, "1.5"),
        (TokenKind.FLOAT, "1e10"),
        (TokenKind.INT, "0xff_u8"),
        (TokenKind.FLOAT, "2f32"),
        (TokenKind.INT, "1_000i64"),
        (TokenKind.INT, "1"),
        (TokenKind.DOT_DOT, ".."),
        (TokenKind.INT, "2"),
    ]


def test_tuple_field_access_is_not_a_float() -> None:
    assert [kind for kind, _ in significant("x.0.1")][:-1] == [
        TokenKind.IDENT,
        TokenKind.DOT,
        TokenKind.INT,
        TokenKind.DOT,
        TokenKind.INT,
    ]


def test_method_call_on_integer_is_not_a_float() -> None:
    assert [kind for kind, _ in significant("1.max(2)")][:3] == [
        TokenKind.INT,
        TokenKind.DOT,
        TokenKind.IDENT,
    ]


def test_comments_are_trivia_with_flags() -> None:
    src = "a // line\n/* block */ b"
    tokens = lex(src)
    comments = [tok for tok in tokens if tok.kind == TokenKind.COMMENT]
    assert [token_text(src, tok) for tok in comments] == ["// line", "/* block */"]
    assert not comments[0].is_block_comment()
    assert comments[1].is_block_comment()
    b = [tok for tok in tokens if tok.kind == TokenKind.IDENT][-1]
    assert b.has_preceding_line_break()
    assert b.has_preceding_trivia()


def test_glued_tokens_have_no_preceding_trivia() -> None:
    tokens = [tok for tok in lex("a>>b") if not tok.kind.is_trivia]
    assert not tokens[2].has_preceding_trivia()


def test_crlf_newlines() -> None:
    src = "a\r\nb\n"
    newlines = [token_text(src, tok) for tok in lex(src) if tok.kind == TokenKind.NEWLINE]
    assert newlines == ["\r\n", "\n"]


def test_unterminated_literals_report_diagnostics() -> None:
    for src, code in (
        ('"open', "LEXER_UNTERMINATED_STRING"),
        ("/* open", "LEXER_UNTERMINATED_COMMENT"),
        ("'\\n", "LEXER_UNTERMINATED_CHAR"),
    ):
        lexer = Lexer(src)
        lexer.lex()
        assert [diagnostic.code for diagnostic in lexer.diagnostics] == [code]


def test_unknown_bytes_are_preserved() -> None:
    src = "a € b"
    tokens = lex(src)
    assert TokenKind.SKIPPED in [tok.kind for tok in tokens]
    assert "".join(token_text(src, tok) for tok in tokens) == src


def test_sliced_lexing_keeps_source_offsets() -> None:
    src = "fn a() {}\n\n// note\nfn b() {}"
    start = src.index("\n")
    end = src.index("fn b")
    tokens = Lexer(src, start=start, end=end).lex()
    assert tokens[0].range.start.value == start
    comment = next(tok for tok in tokens if tok.kind == TokenKind.COMMENT)
    assert token_text(src, comment) == "// note"
    assert tokens[-1].kind == TokenKind.EOF
