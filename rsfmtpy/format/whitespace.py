"""Comment and blank-line reattachment.

The CST keeps all trivia in front of a token as one raw string. Before the tree
is built, each of those gaps is re-scanned with the lexer and turned into a
sequence of `Blank` markers and `Comment`s, keyed by the offset of the token
that owns the gap. The builder pulls each gap exactly once; whatever is never
pulled is reported as lost.
"""

from __future__ import annotations

import logging
import re
import textwrap
from dataclasses import dataclass

from rsfmtpy.cst import SyntaxNode
from rsfmtpy.format.arena import GapItem
from rsfmtpy.format.config import FormatConfig
from rsfmtpy.lexer import Lexer, Token, TokenKind
from rsfmtpy.text import TextRange

logger = logging.getLogger(__name__)

_LINE_PREFIXES: tuple[str, ...] = ("///", "//!", "//")
_LIST_ITEM = re.compile(r"^([-*+]|\d+[.)])\s")


@dataclass(frozen=True, slots=True)
class Blank:
    """Run of empty source lines, already capped."""

    count: int


@dataclass(frozen=True, slots=True)
class Comment:
    text: str
    range: TextRange
    attach: int  # offset of the token whose gap held the comment
    own_line: bool
    block: bool
    # Started on the same line as the previous token.
    trailing: bool = False

    @property
    def lines(self) -> list[str]:
        return self.text.split("\n")

    @property
    def width(self) -> int:
        return max(len(line) for line in self.lines)


class GapTable:
    """Reattachable trivia of one source file, keyed by owning token offset."""

    def __init__(self, entries: dict[int, tuple[GapItem, ...]]) -> None:
        self._entries = entries

    @classmethod
    def from_tree(cls, root: SyntaxNode, config: FormatConfig) -> GapTable:
        source = root.source
        entries: dict[int, tuple[GapItem, ...]] = {}
        first = True
        for token in root.iter_tokens():
            if token.start != token.token_start:
                items = scan_gap(
                    source,
                    token.start,
                    token.token_start,
                    config=config,
                    at_file_start=first,
                )
                if items:
                    entries[token.token_start] = items
            first = False
        logger.debug("Reattached trivia for %d token gaps", len(entries))
        return cls(entries)

    def take(self, offset: int) -> tuple[GapItem, ...]:
        """Items in front of the token at `offset`; a gap is handed out once."""
        return self._entries.pop(offset, ())

    def has_comments(self, offset: int) -> bool:
        return any(isinstance(item, Comment) for item in self._entries.get(offset, ()))

    def take_range(self, start: int, end: int) -> list[Comment]:
        """Claim the gaps of every token strictly inside `start..end` (a verbatim span)."""
        comments: list[Comment] = []
        for offset in sorted(key for key in self._entries if start < key < end):
            comments.extend(item for item in self._entries.pop(offset) if isinstance(item, Comment))
        return comments

    def remaining(self) -> list[Comment]:
        """Comments whose gap nobody requested."""
        comments: list[Comment] = []
        for offset in sorted(self._entries):
            comments.extend(item for item in self._entries[offset] if isinstance(item, Comment))
        return comments


def scan_gap(
    source: str,
    start: int,
    end: int,
    *,
    config: FormatConfig,
    at_file_start: bool = False,
) -> tuple[GapItem, ...]:
    tokens = [token for token in Lexer(source, start=start, end=end).lex() if token.kind != TokenKind.EOF]
    items: list[GapItem] = []
    newlines = 0
    seen_comment = False
    index = 0
    while index < len(tokens):
        token = tokens[index]
        match token.kind:
            case TokenKind.NEWLINE:
                newlines += 1
                index += 1
                continue
            case TokenKind.COMMENT:
                pass
            case _:
                index += 1
                continue

        if newlines >= 2 and config.max_blank_lines > 0:
            items.append(Blank(min(newlines - 1, config.max_blank_lines)))
        trailing = newlines == 0 and not seen_comment and not at_file_start
        seen_comment = True

        if token.is_block_comment():
            index, newlines = _block_comment(source, tokens, index, end, trailing, items)
            continue
        index, newlines = _line_comments(source, tokens, index, end, trailing, config, items)

    if newlines >= 2 and config.max_blank_lines > 0:
        items.append(Blank(min(newlines - 1, config.max_blank_lines)))
    return tuple(items)


def _block_comment(
    source: str,
    tokens: list[Token],
    index: int,
    attach: int,
    trailing: bool,
    items: list[GapItem],
) -> tuple[int, int]:
    token = tokens[index]
    index += 1
    newlines = 0
    while index < len(tokens) and tokens[index].kind != TokenKind.COMMENT:
        if tokens[index].kind == TokenKind.NEWLINE:
            newlines += 1
        index += 1
    text = source[token.range.start.value : token.range.end.value]
    items.append(
        Comment(
            text=text,
            range=token.range,
            attach=attach,
            own_line=newlines > 0,
            block=True,
            trailing=trailing,
        )
    )
    return index, newlines


def _line_comments(
    source: str,
    tokens: list[Token],
    index: int,
    attach: int,
    trailing: bool,
    config: FormatConfig,
    items: list[GapItem],
) -> tuple[int, int]:
    """Merge a run of same-prefix line comments with no blank line between them."""
    first = tokens[index]
    prefix = line_comment_prefix(_token_text(source, first))
    lines = [_token_text(source, first).rstrip()]
    last = first
    index += 1
    newlines = 0
    while index < len(tokens):
        token = tokens[index]
        if token.kind == TokenKind.NEWLINE:
            newlines += 1
        elif token.kind == TokenKind.COMMENT:
            text = _token_text(source, token)
            # A trailing comment never absorbs the own-line comments after it.
            if (
                trailing
                or newlines > 1
                or token.is_block_comment()
                or line_comment_prefix(text) != prefix
            ):
                break
            lines.append(text.rstrip())
            last = token
            newlines = 0
        index += 1

    text = "\n".join(lines)
    if config.comment_width is not None and not trailing:
        text = reflow(text, config.comment_width)
    items.append(
        Comment(
            text=text,
            range=TextRange.new(first.range.start, last.range.end),
            attach=attach,
            own_line=True,
            block=False,
            trailing=trailing,
        )
    )
    # Rewind to the newline run that ended the merge so the caller counts it.
    return _rewind_to_newlines(tokens, index), 0


def _rewind_to_newlines(tokens: list[Token], index: int) -> int:
    while index > 0 and tokens[index - 1].kind in (TokenKind.NEWLINE, TokenKind.WHITESPACE):
        index -= 1
    return index


def _token_text(source: str, token: Token) -> str:
    return source[token.range.start.value : token.range.end.value]


def line_comment_prefix(text: str) -> str:
    if text.startswith("////"):
        return "//"
    for prefix in _LINE_PREFIXES:
        if text.startswith(prefix):
            return prefix
    return "//"


def reflow(text: str, width: int) -> str:
    """Greedy re-wrap of a merged line comment.

    Only paragraphs that have a line over `width` are re-wrapped, so comments
    that already fit keep their author's line breaks. Blank comment lines split
    paragraphs; fenced code, list items and indented lines are left alone.
    """
    lines = text.split("\n")
    prefix = line_comment_prefix(lines[0])
    available = width - len(prefix) - 1
    if available < 1:
        return text

    out: list[str] = []
    paragraph: list[str] = []
    in_fence = False

    def flush() -> None:
        if not paragraph:
            return
        if any(len(line) > width for line in paragraph):
            words = " ".join(_content(line, prefix) for line in paragraph)
            wrapped = textwrap.wrap(words, width=available, break_long_words=False, break_on_hyphens=False)
            out.extend(f"{prefix} {line}" for line in wrapped)
        else:
            out.extend(paragraph)
        paragraph.clear()

    for line in lines:
        content = line[len(prefix) :]
        stripped = content.strip()
        if stripped.startswith("```"):
            flush()
            in_fence = not in_fence
            out.append(line)
            continue
        if in_fence or not stripped or content.startswith("  ") or _LIST_ITEM.match(stripped):
            flush()
            out.append(line)
            continue
        paragraph.append(line)
    flush()
    return "\n".join(out)


def _content(line: str, prefix: str) -> str:
    return line[len(prefix) :].strip()
