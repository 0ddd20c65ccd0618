# tests/test_utils.py

from pathlib import Path
from types import SimpleNamespace

import pytest

import phinx_phar.utils as mod_utils


@pytest.mark.parametrize(
    ("env", "isatty", "expected"),
    [
        ({"NO_COLOR": "1"}, True, False),
        ({"FORCE_COLOR": "true"}, False, True),
        ({}, True, True),
        ({}, False, False),
    ],
)
def test_should_use_color(
    monkeypatch: pytest.MonkeyPatch,
    env: dict[str, str],
    isatty: bool,  # noqa: FBT001
    expected: bool,  # noqa: FBT001
) -> None:
    # --- setup ---
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.delenv("FORCE_COLOR", raising=False)
    for key, value in env.items():
        monkeypatch.setenv(key, value)
    stream = SimpleNamespace(isatty=lambda: isatty)

    # --- execute and verify ---
    assert mod_utils.should_use_color(stream) is expected  # type: ignore[arg-type]


def test_load_jsonc_keeps_markers_inside_strings(tmp_path: Path) -> None:
    # --- setup ---
    path = tmp_path / "c.jsonc"
    path.write_text(
        '{"repository": "https://github.com/cakephp/phinx.git#main", // url\n'
        ' "phar_file": "a,}.phar", /* odd, but legal */\n'
        "}\n"
    )

    # --- execute and verify ---
    assert mod_utils.load_jsonc(path) == {
        "repository": "https://github.com/cakephp/phinx.git#main",
        "phar_file": "a,}.phar",
    }


def test_load_jsonc_comment_only_file_is_none(tmp_path: Path) -> None:
    path = tmp_path / "c.jsonc"
    path.write_text("# nothing\n/* here */\n")

    assert mod_utils.load_jsonc(path) is None


def test_load_jsonc_error_reports_original_line(tmp_path: Path) -> None:
    # --- setup ---
    path = tmp_path / "c.jsonc"
    path.write_text('{\n  /* two\n  lines */\n  "version" "x"\n}\n')

    # --- execute and verify ---
    with pytest.raises(ValueError, match=r"line 4,"):
        mod_utils.load_jsonc(path)


def test_strip_jsonc_drops_trailing_commas() -> None:
    assert mod_utils.strip_jsonc('[1, 2, ]') == "[1, 2 ]"


@pytest.mark.parametrize(
    ("obj", "expected"),
    [(0, "s"), (1, ""), (2, "s"), (1.0, ""), ([1], ""), ([], "s")],
)
def test_plural(obj: object, expected: str) -> None:
    assert mod_utils.plural(obj) == expected


def test_posix_path() -> None:
    assert mod_utils.posix_path("vendor\\acme\\Lib.php") == "vendor/acme/Lib.php"
    assert mod_utils.posix_path(Path("a") / "b") == "a/b"
