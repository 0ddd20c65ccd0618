# src/phinx_phar/minifier.py
"""Comment and whitespace stripping for PHP sources.

Line numbers survive the transform: every newline a comment held is
written back out, so errors raised from inside the packaged archive
still point at the right line of the original file.
"""

import re
from collections.abc import Iterator

from .types import Token, TokenKind

# --------------------------------------------------------------------------- #
# lexer
# --------------------------------------------------------------------------- #

_IDENT_START = r"A-Za-z_\x80-\U0010ffff"
_IDENT_CHAR = r"A-Za-z0-9_\x80-\U0010ffff"

_OPEN_TAG = re.compile(r"<\?(?:php(?:\r\n|[ \t\r\n]|\Z)|=)", re.IGNORECASE)
_CLOSE_TAG = re.compile(r"\?>(?:\r\n|\n)?")
_WHITESPACE = re.compile(r"[ \t\r\n]+")
# `#` and `//` comments stop before the newline or a closing tag
_LINE_COMMENT = re.compile(r"(?:#|//)(?:[^\r\n?]|\?(?!>))*")
_QUOTED = {
    "'": re.compile(r"'(?:[^'\\]|\\.)*'?", re.DOTALL),
    '"': re.compile(r'"(?:[^"\\]|\\.)*"?', re.DOTALL),
    "`": re.compile(r"`(?:[^`\\]|\\.)*`?", re.DOTALL),
}
_HEREDOC_START = re.compile(
    rf"<<<[ \t]*(?:\"([{_IDENT_START}][{_IDENT_CHAR}]*)\""
    rf"|'([{_IDENT_START}][{_IDENT_CHAR}]*)'"
    rf"|([{_IDENT_START}][{_IDENT_CHAR}]*))(?:\r\n|\r|\n)"
)
_WORD = re.compile(rf"[$\\{_IDENT_CHAR}]+")


def _heredoc_end(source: str, label: str, start: int) -> int:
    closing = re.compile(
        rf"^[ \t]*{re.escape(label)}(?![{_IDENT_CHAR}])", re.MULTILINE
    )
    match = closing.search(source, start)
    return match.end() if match else len(source)


def _block_comment(source: str, pos: int) -> Token:
    end = source.find("*/", pos + 2)
    end = len(source) if end == -1 else end + 2
    text = source[pos:end]
    # "/**" only opens a doc comment when whitespace follows it
    is_doc = len(text) > 3 and text.startswith("/**") and text[3] in " \t\r\n"
    return Token(TokenKind.DOC_COMMENT if is_doc else TokenKind.COMMENT, text)


def _php_token(source: str, pos: int) -> Token:  # noqa: PLR0911
    """Lex the single token starting at `pos` inside a PHP code region."""
    char = source[pos]

    if char in " \t\r\n":
        match = _WHITESPACE.match(source, pos)
        assert match is not None  # noqa: S101
        return Token(TokenKind.WHITESPACE, match.group())

    if source.startswith("#[", pos):
        return Token(TokenKind.CODE, "#[")

    if char == "#" or source.startswith("//", pos):
        match = _LINE_COMMENT.match(source, pos)
        assert match is not None  # noqa: S101
        return Token(TokenKind.COMMENT, match.group())

    if source.startswith("/*", pos):
        return _block_comment(source, pos)

    if char in _QUOTED:
        match = _QUOTED[char].match(source, pos)
        assert match is not None  # noqa: S101
        return Token(TokenKind.CODE, match.group())

    if source.startswith("<<<", pos):
        match = _HEREDOC_START.match(source, pos)
        if match:
            label = match.group(1) or match.group(2) or match.group(3)
            end = _heredoc_end(source, label, match.end())
            return Token(TokenKind.CODE, source[pos:end])

    match = _WORD.match(source, pos)
    if match:
        return Token(TokenKind.CODE, match.group())

    return Token(TokenKind.CODE, char)


def tokenize(source: str) -> Iterator[Token]:
    """Split PHP source into tokens.

    Text outside `<?php` / `<?=` ... `?>` is markup and comes back as a
    single OTHER token per run, so files that are not PHP at all (JSON,
    YAML templates, licenses) pass through as one untouched token.
    Unterminated comments and strings simply run to the end of input.
    """
    pos = 0
    length = len(source)
    in_php = False

    while pos < length:
        if not in_php:
            match = _OPEN_TAG.search(source, pos)
            if match is None:
                yield Token(TokenKind.OTHER, source[pos:])
                return
            if match.start() > pos:
                yield Token(TokenKind.OTHER, source[pos : match.start()])
            yield Token(TokenKind.OTHER, match.group())
            pos = match.end()
            in_php = True
            continue

        if source.startswith("?>", pos):
            match = _CLOSE_TAG.match(source, pos)
            assert match is not None  # noqa: S101
            yield Token(TokenKind.OTHER, match.group())
            pos = match.end()
            in_php = False
            continue

        token = _php_token(source, pos)
        yield token
        pos += len(token.text)


# --------------------------------------------------------------------------- #
# transform
# --------------------------------------------------------------------------- #

_SPACES = re.compile(r"[ \t]+")
_NEWLINES = re.compile(r"\r\n|\r|\n")
_INDENT = re.compile(r"\n +")


def squeeze_whitespace(whitespace: str) -> str:
    """Collapse blanks, normalize newlines to \\n and drop indentation."""
    whitespace = _SPACES.sub(" ", whitespace)
    whitespace = _NEWLINES.sub("\n", whitespace)
    return _INDENT.sub("\n", whitespace)


def minify(source: str) -> str:
    """Remove comments and redundant whitespace while preserving line numbers.

    Comments turn into as many newlines as they contained. Whitespace
    tokens and comment leftovers that end up next to each other are
    squeezed as one run, so minifying an already minified text is a
    no-op.
    """
    output: list[str] = []
    pending: list[str] = []

    for token in tokenize(source):
        if token.kind is TokenKind.WHITESPACE:
            pending.append(token.text)
            continue
        if token.kind in (TokenKind.COMMENT, TokenKind.DOC_COMMENT):
            pending.append("\n" * token.text.count("\n"))
            continue

        # CODE and OTHER are copied verbatim
        if pending:
            output.append(squeeze_whitespace("".join(pending)))
            pending.clear()
        output.append(token.text)

    if pending:
        output.append(squeeze_whitespace("".join(pending)))

    return "".join(output)


def minify_bytes(data: bytes) -> bytes:
    """Minify raw file content; undecodable bytes survive untouched."""
    text = data.decode("utf-8", errors="surrogateescape")
    return minify(text).encode("utf-8", errors="surrogateescape")
