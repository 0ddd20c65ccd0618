# src/phinx_phar/process.py
"""The one seam through which external tools (git, composer) are run."""

import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import NamedTuple

from .logs import get_logger

COMMAND_NOT_FOUND = 127
BAD_WORKING_DIR = 1


class ProcessResult(NamedTuple):
    exit_status: int
    stderr: str
    stdout: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_status == 0


Runner = Callable[[str, Sequence[str], Path | None], ProcessResult]


def run(
    command: str,
    args: Sequence[str] = (),
    cwd: Path | str | None = None,
) -> ProcessResult:
    """Run `command` with `args` in `cwd` and wait for it to exit.

    There is no timeout: a hung tool hangs the run. A missing executable
    is reported like a shell would, with exit status 127. A `cwd` that is
    not an existing directory fails with status 1 before anything runs.
    """
    logger = get_logger()
    argv = [command, *args]
    logger.debug("$ %s", " ".join(argv))
    logger.trace("[RUN] cwd=%s", cwd)

    if cwd is not None and not Path(cwd).is_dir():
        return ProcessResult(
            BAD_WORKING_DIR, f"{command}: working directory not found: {cwd}"
        )

    try:
        proc = subprocess.run(  # noqa: S603
            argv,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        return ProcessResult(COMMAND_NOT_FOUND, f"{command}: command not found ({e})")

    logger.trace("[RUN] exit=%d", proc.returncode)
    return ProcessResult(proc.returncode, proc.stderr or "", proc.stdout or "")
