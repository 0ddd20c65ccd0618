# src/phinx_phar/config.py

import argparse
from pathlib import Path
from typing import Any, cast

from .config_validate import validate_config
from .logs import LEVEL_MAP, get_logger
from .meta import PROGRAM_SCRIPT
from .types import CompilerConfigInput
from .utils import load_jsonc, plural


# Looked up in this order when no --config is given.
CONFIG_NAMES = (f".{PROGRAM_SCRIPT}.jsonc", f".{PROGRAM_SCRIPT}.json")


def _explicit_config(raw: str) -> Path:
    path = Path(raw).expanduser().resolve()
    if not path.exists():
        xmsg = f"Config file not found: {path}"
        raise FileNotFoundError(xmsg)
    if path.is_dir():
        xmsg = f"Config path {path} is a directory, expected a JSON/JSONC file"
        raise ValueError(xmsg)
    return path


def find_config(
    args: argparse.Namespace,
    cwd: Path,
    *,
    missing_level: str = "debug",
) -> Path | None:
    """Return the config file to use, or None when there is none.

    An explicit ``--config`` must point at an existing file. Otherwise the
    names in CONFIG_NAMES are tried inside `cwd`; when several exist the
    first one wins and a warning is logged. `missing_level` is the level
    used to report that nothing was found.
    """
    explicit = getattr(args, "config", None)
    if explicit:
        return _explicit_config(explicit)

    logger = get_logger()
    present = [cwd / name for name in CONFIG_NAMES if (cwd / name).exists()]
    if not present:
        logger.log(LEVEL_MAP[missing_level.upper()], "No config file found in %s", cwd)
        return None

    chosen, *ignored = present
    if ignored:
        logger.warning(
            "Multiple config files detected (%s); using %s.",
            ", ".join(p.name for p in present),
            chosen.name,
        )
    return chosen


def load_config(config_path: Path) -> dict[str, Any] | None:
    """Load configuration data from a JSON/JSONC file.

    Returns:
        The mapping defined in the file, or None for intentionally empty
        configs (empty files or files holding only comments).

    Raises:
        ValueError when the file cannot be read or parsed,
        TypeError when its root is not an object.

    """
    try:
        data = load_jsonc(config_path)
    except (OSError, ValueError) as e:
        xmsg = f"Error while loading configuration file '{config_path.name}': {e}"
        raise ValueError(xmsg) from e

    if data is not None and not isinstance(data, dict):
        xmsg = (
            f"Configuration file '{config_path.name}' must contain an object,"
            f" not {type(data).__name__}"
        )
        raise TypeError(xmsg)
    return data


def load_and_validate_config(
    args: argparse.Namespace,
    cwd: Path | None = None,
) -> tuple[Path, CompilerConfigInput | None] | None:
    """Find, load and validate the config file.

    Returns None when there is no config file at all, otherwise the path
    and the validated (possibly empty) config.
    """
    logger = get_logger()
    cwd = (cwd or Path.cwd()).resolve()

    config_path = find_config(args, cwd)
    if config_path is None:
        return None

    raw_config = load_config(config_path)
    if raw_config is None:
        logger.debug("Config file %s is empty", config_path.name)
        return config_path, None

    summary = validate_config(raw_config)
    for msg in summary.warnings:
        logger.warning("%s", msg)

    if not summary.valid:
        problems = summary.errors + summary.strict_warnings
        details = "\n".join(f"  • {p}" for p in problems)
        xmsg = (
            f"Invalid configuration in {config_path.name}"
            f" ({len(problems)} problem{plural(problems)}):\n{details}"
        )
        raise ValueError(xmsg)

    return config_path, cast("CompilerConfigInput", raw_config)
