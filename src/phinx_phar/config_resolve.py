# src/phinx_phar/config_resolve.py


import argparse
import os
from pathlib import Path
from typing import Any

from .constants import (
    DEFAULT_BUILD_DIR,
    DEFAULT_DIST_DIR,
    DEFAULT_ENV_LOG_LEVEL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PHAR_FILE,
    DEFAULT_REPLACE_DUPLICATES,
    DEFAULT_REPOSITORY,
    DEFAULT_SIGNATURE_ALGORITHM,
    DEFAULT_VERSION,
)
from .config_validate import ALLOWED_VALUES
from .logs import get_logger
from .meta import PROGRAM_ENV
from .types import (
    CompilerConfig,
    CompilerConfigInput,
    MetaCompilerConfig,
    OriginType,
)

DEFAULTS: dict[str, Any] = {
    "repository": DEFAULT_REPOSITORY,
    "version": DEFAULT_VERSION,
    "build_dir": DEFAULT_BUILD_DIR,
    "dist_dir": DEFAULT_DIST_DIR,
    "phar_file": DEFAULT_PHAR_FILE,
    "signature_algorithm": DEFAULT_SIGNATURE_ALGORITHM,
    "replace_duplicates": DEFAULT_REPLACE_DUPLICATES,
    "log_level": DEFAULT_LOG_LEVEL,
}

# CLI argument names that differ from their config key
CLI_DEST: dict[str, str] = {
    "version": "tag",
}

PATH_KEYS = ("build_dir", "dist_dir")
BOOL_KEYS = ("replace_duplicates",)
TRUE_STRINGS = {"1", "true", "yes", "on"}
FALSE_STRINGS = {"0", "false", "no", "off", ""}

# --------------------------------------------------------------------------- #
# helpers
# --------------------------------------------------------------------------- #


def env_name(key: str) -> str:
    return f"{PROGRAM_ENV}_{key.upper()}"


def _from_env(key: str) -> str | None:
    value = os.getenv(env_name(key))
    if value is None and key == "log_level":
        value = os.getenv(DEFAULT_ENV_LOG_LEVEL)
    return value


def _coerce_env(key: str, raw: str) -> Any:
    if key in BOOL_KEYS:
        lowered = raw.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
        xmsg = f"Environment variable {env_name(key)} must be a boolean, got {raw!r}"
        raise ValueError(xmsg)

    allowed = ALLOWED_VALUES.get(key)
    if allowed is not None and raw.lower() not in allowed:
        xmsg = (
            f"Environment variable {env_name(key)} has invalid value {raw!r}"
            f" (expected one of: {', '.join(allowed)})"
        )
        raise ValueError(xmsg)
    return raw


def _pick(
    key: str,
    args: argparse.Namespace,
    cfg: CompilerConfigInput,
) -> tuple[Any, OriginType]:
    """Resolve one key: CLI → env → config file → default."""
    cli_value = getattr(args, CLI_DEST.get(key, key), None)
    if cli_value is not None:
        return cli_value, "cli"

    env_value = _from_env(key)
    if env_value is not None:
        return _coerce_env(key, env_value), "env"

    if key in cfg:
        return cfg[key], "config"  # type: ignore[literal-required]

    return DEFAULTS[key], "default"


def _overlaps(a: Path, b: Path) -> bool:
    return a == b or a.is_relative_to(b) or b.is_relative_to(a)


def _check_working_dirs(
    build_dir: Path, dist_dir: Path, protected: set[Path]
) -> None:
    """Refuse directory layouts where clearing one directory wipes another."""
    if _overlaps(build_dir, dist_dir):
        xmsg = (
            f"Build and dist directories must not overlap: {build_dir}, {dist_dir}"
        )
        raise ValueError(xmsg)
    for path in (build_dir, dist_dir):
        for keep in protected:
            if keep.resolve().is_relative_to(path):
                xmsg = (
                    f"Refusing to use {path} as a working directory:"
                    f" it contains {keep}"
                )
                raise ValueError(xmsg)


def determine_log_level(
    args: argparse.Namespace,
    cfg: CompilerConfigInput | None = None,
) -> str:
    """Resolve log level from CLI → env → config → default."""
    value, _origin = _pick("log_level", args, cfg or {})
    return str(value).lower()


# --------------------------------------------------------------------------- #
# main resolver
# --------------------------------------------------------------------------- #


def resolve_config(
    raw_cfg: CompilerConfigInput | None,
    args: argparse.Namespace,
    config_path: Path | None,
    cwd: Path,
) -> CompilerConfig:
    """Merge CLI args, environment, config file and defaults.

    Relative directories given on the CLI or in the environment are taken
    from `cwd`; those from the config file (or the defaults) are taken
    from the config file's directory, or `cwd` when there is none.
    """
    logger = get_logger()
    cfg: CompilerConfigInput = raw_cfg or {}
    config_dir = config_path.parent if config_path else cwd

    values: dict[str, Any] = {}
    origins: dict[str, OriginType] = {}
    for key in DEFAULTS:
        values[key], origins[key] = _pick(key, args, cfg)

    for key in PATH_KEYS:
        base = cwd if origins[key] in ("cli", "env") else config_dir
        path = Path(values[key]).expanduser()
        values[key] = (path if path.is_absolute() else base / path).resolve()

    _check_working_dirs(values["build_dir"], values["dist_dir"], {cwd, config_dir})

    values["signature_algorithm"] = str(values["signature_algorithm"]).lower()
    values["log_level"] = str(values["log_level"]).lower()

    meta: MetaCompilerConfig = {"cli_base": cwd}
    if config_path is not None:
        meta["config_path"] = config_path

    for key, origin in origins.items():
        logger.trace("[RESOLVE] %s=%r (%s)", key, values[key], origin)

    resolved: CompilerConfig = {
        "repository": values["repository"],
        "version": values["version"],
        "build_dir": values["build_dir"],
        "dist_dir": values["dist_dir"],
        "phar_file": values["phar_file"],
        "signature_algorithm": values["signature_algorithm"],
        "replace_duplicates": bool(values["replace_duplicates"]),
        "log_level": values["log_level"],
        "origins": origins,
        "__meta__": meta,
    }
    return resolved
