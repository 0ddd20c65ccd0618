# src/phinx_phar/config_validate.py

from dataclasses import dataclass
from difflib import get_close_matches
from typing import Any, get_type_hints

from .constants import (
    DEFAULT_HINT_CUTOFF,
    DEFAULT_STRICT_CONFIG,
    SIGNATURE_ALGORITHMS,
)
from .logs import LEVEL_ORDER
from .types import CompilerConfigInput

# --- dataclasses ------------------------------------------------------


@dataclass
class ValidationSummary:
    valid: bool
    errors: list[str]
    strict_warnings: list[str]
    warnings: list[str]
    strict: bool


# --- constants ------------------------------------------------------

CONFIG_SCHEMA: dict[str, Any] = get_type_hints(CompilerConfigInput)

ALLOWED_VALUES: dict[str, tuple[str, ...]] = {
    "signature_algorithm": SIGNATURE_ALGORITHMS,
    "log_level": tuple(LEVEL_ORDER),
}

# --- helpers --------------------------------------------------------


def collect_msg(
    strict: bool,
    msg: str,
    summary: ValidationSummary,  # modified in function, not returned
    *,
    is_error: bool = False,
) -> None:
    """
    Route a message to the appropriate bucket.
    Errors are always fatal.
    Warnings may escalate to strict_warnings in strict mode.
    """
    if is_error:
        summary.errors.append(msg)
    elif strict:
        summary.strict_warnings.append(msg)
    else:
        summary.warnings.append(msg)


def _hint(key: str) -> str:
    close = get_close_matches(
        key, list(CONFIG_SCHEMA), n=1, cutoff=DEFAULT_HINT_CUTOFF
    )
    return f" (did you mean '{close[0]}'?)" if close else ""


def _check_value(key: str, value: Any, summary: ValidationSummary) -> None:
    expected = CONFIG_SCHEMA[key]
    # bool is an int subclass, so compare exact types for flags
    ok = type(value) is bool if expected is bool else isinstance(value, expected)
    if not ok:
        collect_msg(
            True,
            f"Config key '{key}' must be {expected.__name__},"
            f" not {type(value).__name__}",
            summary,
            is_error=True,
        )
        return

    allowed = ALLOWED_VALUES.get(key)
    if allowed is not None and value.lower() not in allowed:
        collect_msg(
            True,
            f"Config key '{key}' has invalid value {value!r}"
            f" (expected one of: {', '.join(allowed)})",
            summary,
            is_error=True,
        )
        return

    if expected is str and not value.strip():
        xmsg = f"Config key '{key}' must not be empty"
        collect_msg(True, xmsg, summary, is_error=True)


# ---------------------------------------------------------------------------
# main validator
# ---------------------------------------------------------------------------


def validate_config(
    parsed_cfg: dict[str, Any], *, strict: bool | None = None
) -> ValidationSummary:
    """Validate a loaded config mapping.

    strict=True  →  unknown keys are fatal, but still listed separately
    strict=False →  unknown keys only warn

    When `strict` is None, the `strict_config` key in the file decides,
    falling back to DEFAULT_STRICT_CONFIG.
    """
    strict_from_cfg = parsed_cfg.get("strict_config")
    if strict is None:
        strict = (
            strict_from_cfg
            if isinstance(strict_from_cfg, bool)
            else DEFAULT_STRICT_CONFIG
        )

    summary = ValidationSummary(
        valid=True,
        errors=[],
        strict_warnings=[],
        warnings=[],
        strict=strict,
    )

    for key, value in parsed_cfg.items():
        if key not in CONFIG_SCHEMA:
            collect_msg(strict, f"Unknown config key '{key}'{_hint(key)}", summary)
            continue
        _check_value(key, value, summary)

    summary.valid = not summary.errors and not summary.strict_warnings
    return summary
