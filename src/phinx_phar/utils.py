# src/phinx_phar/utils.py

import json
import os
import re
import sys
from contextlib import suppress
from pathlib import Path
from typing import Any, TextIO, cast

# Strings come first in each alternation so comment markers and commas
# inside them are matched as part of the string and written back as-is.
_JSON_STRING = r'"(?:[^"\\]|\\.)*"'
_JSONC_COMMENT = re.compile(
    rf"({_JSON_STRING})|//[^\n]*|#[^\n]*|/\*.*?\*/", re.DOTALL
)
_JSONC_TRAILING_COMMA = re.compile(rf"({_JSON_STRING})|,(?=\s*[}}\]])")


def should_use_color(stream: TextIO | None = None) -> bool:
    """Return True if colored output should be enabled for `stream`.

    NO_COLOR wins over FORCE_COLOR; otherwise color follows whether the
    stream (stdout by default) is a terminal.
    """
    if "NO_COLOR" in os.environ:
        return False
    if os.getenv("FORCE_COLOR", "").lower() in {"1", "true", "yes"}:
        return True

    stream = stream if stream is not None else sys.stdout
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def _keep_strings(match: re.Match[str]) -> str:
    if match.group(1):
        return match.group(1)
    # keep line numbers in syntax errors pointing at the original text
    return "\n" * match.group(0).count("\n")


def strip_jsonc(text: str) -> str:
    """Turn JSONC into plain JSON: drop comments and trailing commas."""
    text = _JSONC_COMMENT.sub(_keep_strings, text)
    return _JSONC_TRAILING_COMMA.sub(_keep_strings, text)


def load_jsonc(path: Path) -> Any | None:
    """Load a JSONC file.

    Returns None for files that are empty once comments are removed.
    Syntax errors raise ValueError with line and column, but without the
    path; callers name the file in their own message.
    """
    text = strip_jsonc(path.read_text(encoding="utf-8"))
    if not text.strip():
        return None

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        xmsg = f"Invalid JSONC syntax: {e.msg} (line {e.lineno}, column {e.colno})"
        raise ValueError(xmsg) from e


def plural(obj: Any) -> str:
    """Return 's' unless `obj` (a number or a sized object) counts exactly one."""
    count = obj if isinstance(obj, (int, float)) else len(obj)
    return "" if count == 1 else "s"


def posix_path(path: Path | str) -> str:
    """Return `path` as a string with every separator forced to '/'."""
    return str(path).replace("\\", "/")


def safe_log(msg: str) -> None:
    """Last-resort writer for when logging itself is broken."""
    stream = cast("TextIO", sys.__stderr__)
    with suppress(Exception):
        print(msg, file=stream)
