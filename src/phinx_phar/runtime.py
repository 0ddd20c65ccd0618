# src/phinx_phar/runtime.py
"""Process-wide settings that the CLI can change while a build runs."""

import os
from typing import TypedDict

from .constants import DEFAULT_ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL
from .meta import PROGRAM_ENV
from .utils import should_use_color


class Runtime(TypedDict):
    log_level: str
    use_color: bool


def _initial_log_level() -> str:
    return (
        os.getenv(f"{PROGRAM_ENV}_LOG_LEVEL")
        or os.getenv(DEFAULT_ENV_LOG_LEVEL)
        or DEFAULT_LOG_LEVEL
    )


current_runtime: Runtime = {
    "log_level": _initial_log_level(),
    "use_color": should_use_color(),
}
