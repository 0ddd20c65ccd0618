# tests/test_process.py

import sys
from pathlib import Path

import phinx_phar.process as mod_process


def test_run_captures_exit_status_and_streams() -> None:
    # --- execute ---
    result = mod_process.run(
        sys.executable,
        ["-c", "import sys; print('out'); sys.stderr.write('err'); sys.exit(3)"],
    )

    # --- verify ---
    assert result.exit_status == 3
    assert not result.ok
    assert result.stderr == "err"
    assert result.stdout.strip() == "out"


def test_run_uses_working_directory(tmp_path: Path) -> None:
    result = mod_process.run(
        sys.executable, ["-c", "import os; print(os.getcwd())"], tmp_path
    )

    assert result.ok
    assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()


def test_missing_command_reports_127() -> None:
    result = mod_process.run("phinx-phar-no-such-tool-xyz", ["--help"])

    assert result.exit_status == mod_process.COMMAND_NOT_FOUND
    assert "command not found" in result.stderr


def test_missing_working_directory_is_not_reported_as_missing_command(
    tmp_path: Path,
) -> None:
    # --- execute ---
    result = mod_process.run(sys.executable, ["-c", "pass"], tmp_path / "gone")

    # --- verify ---
    assert result.exit_status == mod_process.BAD_WORKING_DIR
    assert "working directory not found" in result.stderr
    assert "command not found" not in result.stderr
