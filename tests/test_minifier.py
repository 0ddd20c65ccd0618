# tests/test_minifier.py

import pytest

import phinx_phar.minifier as mod_minifier
from phinx_phar.types import TokenKind

SAMPLES = [
    "<?php\n/**\n * Doc.\n */\nfunction f() {}\n",
    "<?php\n\tif ($a)  {\r\n        return;\r\n    }\n",
    "<?php\n$a = 1; // set a\n$b = 2; # set b\n",
    "<?php $a /* x */ = 1; ?>\n<p>tail</p>\n",
    "<?php\n$h = <<<EOT\n  /* keep */  # keep\nEOT;\n",
    "<html>\n<?= $title ?>\n</html>\n",
    '{\n    "name": "robmorgan/phinx"\n}\n',
    "<?php /* open",
]


def test_block_comment_becomes_its_newlines() -> None:
    assert mod_minifier.minify("<?php\n/* hello\nworld */") == "<?php\n\n"


def test_single_line_block_comment_disappears() -> None:
    assert mod_minifier.minify("<?php\n/* only */\n$a;") == "<?php\n\n$a;"


def test_doc_comment_keeps_line_numbers() -> None:
    # --- setup ---
    source = "<?php\n/**\n * Doc.\n */\nfunction f() {}\n"

    # --- execute ---
    result = mod_minifier.minify(source)

    # --- verify ---
    assert result == "<?php\n\n\n\nfunction f() {}\n"
    assert result.splitlines()[4] == "function f() {}"


def test_whitespace_is_squeezed() -> None:
    # --- setup ---
    source = "<?php\n\tif ($a)  {\r\n        return;\r\n    }\n"

    # --- execute and verify ---
    assert mod_minifier.minify(source) == "<?php\n if ($a) {\nreturn;\n}\n"


def test_line_comments_are_removed_but_not_their_newline() -> None:
    source = "<?php\n$a = 1; // set a\n$b = 2; # set b\n"
    assert mod_minifier.minify(source) == "<?php\n$a = 1; \n$b = 2; \n"


def test_line_comment_ends_at_close_tag() -> None:
    assert mod_minifier.minify("<?php // c ?>tail") == "<?php ?>tail"


def test_comment_between_blanks_leaves_one_blank() -> None:
    assert mod_minifier.minify("<?php $a /* x */ = 1;") == "<?php $a = 1;"


def test_unterminated_comment_runs_to_end() -> None:
    assert mod_minifier.minify("<?php /* open") == "<?php "


def test_crlf_after_open_tag_is_kept_verbatim() -> None:
    assert mod_minifier.minify("<?php\r\n$a;\r\n") == "<?php\r\n$a;\n"


@pytest.mark.parametrize(
    "source",
    [
        "<?php\n$s = '/* not a comment */ // nor this';\n",
        '<?php\necho "a \\" // b";\n',
        "<?php\n$h = <<<EOT\n  /* keep */  # keep\nEOT;\n",
        "<?php\n$n = <<<'EOT'\n// raw\nEOT;\n",
        "<html>\n<!-- x -->\n<?= $title ?>\n</html>\n",
        '{\n    "name": "robmorgan/phinx"\n}\n',
        "<?php\n#[Attribute]\nclass A {}\n",
        "<?php\n$a = 1;\n\n\n$b = 2;\n",
    ],
)
def test_code_and_markup_are_untouched(source: str) -> None:
    assert mod_minifier.minify(source) == source


@pytest.mark.parametrize("source", SAMPLES)
def test_minify_is_idempotent(source: str) -> None:
    once = mod_minifier.minify(source)
    assert mod_minifier.minify(once) == once


@pytest.mark.parametrize("source", SAMPLES)
def test_minify_preserves_line_count(source: str) -> None:
    # CRLF collapses to LF, so count LF-terminated lines after normalizing
    expected = source.replace("\r\n", "\n").count("\n")
    assert mod_minifier.minify(source).replace("\r\n", "\n").count("\n") == expected


@pytest.mark.parametrize("source", SAMPLES)
def test_tokenize_is_lossless(source: str) -> None:
    assert "".join(t.text for t in mod_minifier.tokenize(source)) == source


def test_tokenize_kinds() -> None:
    # --- execute ---
    tokens = list(mod_minifier.tokenize("<?php /**/ /** d */ # c\n$a"))

    # --- verify ---
    assert [(t.kind, t.text) for t in tokens] == [
        (TokenKind.OTHER, "<?php "),
        (TokenKind.COMMENT, "/**/"),
        (TokenKind.WHITESPACE, " "),
        (TokenKind.DOC_COMMENT, "/** d */"),
        (TokenKind.WHITESPACE, " "),
        (TokenKind.COMMENT, "# c"),
        (TokenKind.WHITESPACE, "\n"),
        (TokenKind.CODE, "$a"),
    ]


def test_tokenize_non_php_is_one_token() -> None:
    tokens = list(mod_minifier.tokenize("just text\n"))
    assert tokens == [mod_minifier.Token(TokenKind.OTHER, "just text\n")]


def test_squeeze_whitespace() -> None:
    assert mod_minifier.squeeze_whitespace(" \t \r\n    \r") == " \n\n"


def test_minify_bytes_keeps_undecodable_bytes() -> None:
    # --- setup ---
    data = b"<?php\n$a = '\xff';  // c\n"

    # --- execute and verify ---
    assert mod_minifier.minify_bytes(data) == b"<?php\n$a = '\xff'; \n"
