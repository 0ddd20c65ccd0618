# src/phinx_phar/cli.py

import argparse
import platform
import re
import sys
from collections.abc import Callable
from difflib import get_close_matches
from pathlib import Path
from typing import NoReturn

from .actions import get_metadata, run_selftest, verify_archive
from .compiler import Compiler
from .config import load_and_validate_config
from .config_resolve import determine_log_level, resolve_config
from .constants import (
    DEFAULT_BUILD_DIR,
    DEFAULT_DIST_DIR,
    DEFAULT_HINT_CUTOFF,
    DEFAULT_PHAR_FILE,
    DEFAULT_SIGNATURE_ALGORITHM,
    DEFAULT_VERSION,
    SIGNATURE_ALGORITHMS,
)
from .logs import LEVEL_ORDER, get_logger, set_log_level
from .meta import DESCRIPTION, PROGRAM_DISPLAY, PROGRAM_SCRIPT
from .runtime import current_runtime
from .types import CompilerConfigInput
from .utils import safe_log


# --------------------------------------------------------------------------- #
# CLI setup and helpers
# --------------------------------------------------------------------------- #


_INVALID_CHOICE = re.compile(
    r"argument (?P<option>[^:]+): invalid choice: '(?P<value>[^']*)'"
)


class HintingArgumentParser(argparse.ArgumentParser):
    """Argument parser that suggests the closest flag or choice on errors."""

    def _hints(self, message: str) -> list[str]:
        """Return "did you mean" lines for a parse error message."""
        pairs: list[tuple[str, list[str]]] = []

        # "unrecognized arguments: --tga 0.12.4"
        if "unrecognized arguments:" in message:
            known = [opt for a in self._actions for opt in a.option_strings]
            bad = message.split("unrecognized arguments:", 1)[1].split()
            pairs = [(tok, known) for tok in bad if tok.startswith("-")]

        # "argument --signature: invalid choice: 'sha265' (choose from ...)"
        match = _INVALID_CHOICE.search(message)
        if match:
            names = match.group("option").split("/")
            for action in self._actions:
                if action.choices and set(names) & set(action.option_strings):
                    pairs.append((match.group("value"), list(action.choices)))

        hints: list[str] = []
        for value, candidates in pairs:
            close = get_close_matches(
                value, candidates, n=1, cutoff=DEFAULT_HINT_CUTOFF
            )
            if close:
                hints.append(f"Hint: did you mean {close[0]}?")
        return hints

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        lines = [f"{self.prog}: error: {message}", *self._hints(message)]
        self.exit(2, "\n".join(lines) + "\n")


def _setup_parser() -> argparse.ArgumentParser:
    """Define and return the CLI argument parser."""
    parser = HintingArgumentParser(prog=PROGRAM_SCRIPT, description=DESCRIPTION)

    # --- Build inputs ---
    parser.add_argument(
        "--tag",
        metavar="TAG",
        help=f"Upstream release tag to package (default: {DEFAULT_VERSION}).",
    )
    parser.add_argument("--repository", metavar="URL", help="Upstream git URL.")
    parser.add_argument(
        "--build-dir",
        metavar="DIR",
        help=f"Scratch directory for the clone (default: {DEFAULT_BUILD_DIR}).",
    )
    parser.add_argument(
        "--dist-dir",
        metavar="DIR",
        help=f"Directory receiving the archive (default: {DEFAULT_DIST_DIR}).",
    )
    parser.add_argument(
        "-o",
        "--phar-file",
        metavar="NAME",
        help=f"Archive file name (default: {DEFAULT_PHAR_FILE}).",
    )
    parser.add_argument(
        "--signature",
        dest="signature_algorithm",
        choices=SIGNATURE_ALGORITHMS,
        default=None,
        help=f"Signature algorithm (default: {DEFAULT_SIGNATURE_ALGORITHM}).",
    )
    parser.add_argument(
        "--replace-duplicates",
        action="store_const",
        const=True,
        default=None,
        help=(
            "Also write dependency files verbatim after the stub;"
            " later writes replace earlier entries instead of failing."
        ),
    )
    parser.add_argument("-c", "--config", help="Path to config file.")

    # --- Color ---
    color = parser.add_mutually_exclusive_group()
    color.add_argument(
        "--no-color",
        dest="use_color",
        action="store_const",
        const=False,
        help="Disable ANSI color output.",
    )
    color.add_argument(
        "--color",
        dest="use_color",
        action="store_const",
        const=True,
        help="Force-enable ANSI color output (overrides auto-detect).",
    )
    color.set_defaults(use_color=None)

    # --- Version and verbosity ---
    parser.add_argument("--version", action="store_true", help="Show version info.")

    log_level = parser.add_mutually_exclusive_group()
    log_level.add_argument(
        "-q",
        "--quiet",
        action="store_const",
        const="warning",
        dest="log_level",
        help="Suppress non-critical output (same as --log-level warning).",
    )
    log_level.add_argument(
        "-v",
        "--verbose",
        action="store_const",
        const="debug",
        dest="log_level",
        help="Verbose output (same as --log-level debug).",
    )
    log_level.add_argument(
        "--log-level",
        choices=LEVEL_ORDER,
        default=None,
        dest="log_level",
        help="Set log verbosity level.",
    )

    # --- Other actions ---
    parser.add_argument(
        "--selftest",
        action="store_true",
        help="Run a built-in sanity test to verify tool correctness.",
    )
    parser.add_argument(
        "--verify",
        metavar="ARCHIVE",
        help="Check the signature of a built archive and exit.",
    )
    return parser


# --------------------------------------------------------------------------- #
# Main entry
# --------------------------------------------------------------------------- #


def _report(log: Callable[..., None], msg: str, error: BaseException) -> None:
    try:
        log(msg, error)
    except Exception:  # noqa: BLE001
        safe_log(f"[FATAL] Logging failed while reporting: {error}")


def main(argv: list[str] | None = None) -> int:  # noqa: PLR0911
    logger = get_logger()  # init (use env + defaults)

    try:
        parser = _setup_parser()
        args = parser.parse_args(argv)

        # --- Early runtime init (use CLI + env + defaults) ---
        set_log_level(determine_log_level(args))
        if args.use_color is not None:
            current_runtime["use_color"] = args.use_color
        logger.trace("[BOOT] log-level initialized: %s", logger.level_name)

        logger.debug(
            "Runtime: Python %s (%s)\n    %s",
            platform.python_version(),
            platform.python_implementation(),
            sys.version.replace("\n", " "),
        )

        # --- Version flag ---
        if args.version:
            meta = get_metadata()
            logger.info("%s %s (%s)", PROGRAM_DISPLAY, meta.version, meta.commit)
            return 0

        # --- Self-test / verify modes ---
        if args.selftest:
            return 0 if run_selftest() else 1
        if args.verify:
            return 0 if verify_archive(args.verify) else 1

        # --- Load configuration ---
        cwd = Path.cwd().resolve()
        config_path: Path | None = None
        raw_cfg: CompilerConfigInput | None = None
        config_result = load_and_validate_config(args, cwd)
        if config_result is not None:
            config_path, raw_cfg = config_result

        # log-level may come from the config file
        set_log_level(determine_log_level(args, raw_cfg))
        logger.trace(
            "[CONFIG] log-level re-resolved from config: %s", logger.level_name
        )

        # --- Resolve config with args, env and defaults ---
        config = resolve_config(raw_cfg, args, config_path, cwd)

        if config_path:
            logger.info("🔧 Using config: %s", config_path.name)
        logger.debug("📂 Invoked from: %s", cwd)
        logger.debug("📁 Build dir: %s", config["build_dir"])
        logger.debug("📦 Dist dir: %s", config["dist_dir"])

        compiler = Compiler.from_config(config)
        compiler.compile(config["phar_file"])

    except (FileNotFoundError, ValueError, TypeError, RuntimeError) as e:
        # controlled termination: PharBuildError and config problems
        _report(logger.error_if_not_debug, "%s", e)
        return getattr(e, "code", 1)

    except Exception as e:  # noqa: BLE001
        _report(logger.critical_if_not_debug, "Unexpected internal error: %s", e)
        return 1

    return 0

