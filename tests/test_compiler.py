# tests/test_compiler.py

import zipfile
from pathlib import Path

import pytest

import phinx_phar.archive as mod_archive
import phinx_phar.compiler as mod_compiler
from phinx_phar.errors import (
    DependencyError,
    NotFoundError,
    SourceControlError,
)
from phinx_phar.process import ProcessResult
from tests.utils import FakeRunner, make_upstream_tree


def _compiler(
    tmp_path: Path, runner: FakeRunner, **kwargs: object
) -> mod_compiler.Compiler:
    return mod_compiler.Compiler(
        "0.12.4",
        tmp_path / "build",
        tmp_path / "dist",
        runner=runner,
        **kwargs,  # type: ignore[arg-type]
    )


def test_compile_produces_signed_archive(tmp_path: Path) -> None:
    # --- setup ---
    runner = FakeRunner()
    compiler = _compiler(tmp_path, runner)

    # --- execute ---
    out = compiler.compile()

    # --- verify ---
    assert out == tmp_path / "dist" / "phinx.phar"
    assert mod_archive.verify_signature(out)
    with zipfile.ZipFile(out) as zf:
        assert "bin/phinx" in zf.namelist()
    # build directory is cleared but kept
    assert (tmp_path / "build").is_dir()
    assert list((tmp_path / "build").iterdir()) == []


def test_compile_runs_tools_in_order_inside_build_dir(tmp_path: Path) -> None:
    # --- setup ---
    runner = FakeRunner()
    compiler = _compiler(
        tmp_path, runner, repository="https://example.invalid/phinx.git"
    )

    # --- execute ---
    compiler.compile()

    # --- verify ---
    assert [(c.command, c.args) for c in runner.calls] == [
        ("git", ["clone", "https://example.invalid/phinx.git", "."]),
        ("git", ["checkout", "tags/0.12.4"]),
        ("composer", ["update"]),
    ]
    assert all(c.cwd == tmp_path / "build" for c in runner.calls)


def test_compile_uses_custom_phar_name(tmp_path: Path) -> None:
    out = _compiler(tmp_path, FakeRunner()).compile("custom.phar")

    assert out.name == "custom.phar"
    assert out.is_file()


def test_old_dist_content_is_removed(tmp_path: Path) -> None:
    # --- setup ---
    stale = tmp_path / "dist" / "old.phar"
    stale.parent.mkdir()
    stale.write_text("old")

    # --- execute ---
    _compiler(tmp_path, FakeRunner()).compile()

    # --- verify ---
    assert not stale.exists()
    assert [p.name for p in (tmp_path / "dist").iterdir()] == ["phinx.phar"]


def test_clone_failure_stops_the_run(tmp_path: Path) -> None:
    # --- setup ---
    runner = FakeRunner(
        results={"git clone": ProcessResult(128, "fatal: repository not found\n")}
    )

    # --- execute ---
    with pytest.raises(SourceControlError) as exc_info:
        _compiler(tmp_path, runner).compile()

    # --- verify ---
    assert "repository not found" in str(exc_info.value)
    assert exc_info.value.detail == "fatal: repository not found"
    assert runner.keys == ["git clone"]
    assert not (tmp_path / "dist" / "phinx.phar").exists()


def test_checkout_failure_raises_source_control_error(tmp_path: Path) -> None:
    runner = FakeRunner(
        results={"git checkout": ProcessResult(1, "error: pathspec 'tags/9.9'")}
    )

    with pytest.raises(SourceControlError, match="tags/0.12.4"):
        _compiler(tmp_path, runner).compile()

    assert runner.keys == ["git clone", "git checkout"]
    # tool output is left for inspection
    assert (tmp_path / "build" / "bin" / "phinx").is_file()


def test_composer_failure_raises_dependency_error(tmp_path: Path) -> None:
    runner = FakeRunner(
        results={"composer update": ProcessResult(2, "Your requirements could not")}
    )

    with pytest.raises(DependencyError, match="exit 2"):
        _compiler(tmp_path, runner).compile()

    assert not (tmp_path / "dist" / "phinx.phar").exists()


def test_missing_named_file_fails_and_clears_build(tmp_path: Path) -> None:
    # --- setup ---
    def clone_without_bin(root: Path) -> None:
        make_upstream_tree(root, skip=["bin/phinx"])

    runner = FakeRunner(on_clone=clone_without_bin)

    # --- execute ---
    with pytest.raises(NotFoundError, match="bin/phinx"):
        _compiler(tmp_path, runner).compile()

    # --- verify ---
    assert list((tmp_path / "build").iterdir()) == []
    assert not (tmp_path / "dist" / "phinx.phar").exists()


def test_unreachable_repository_with_real_runner(tmp_path: Path) -> None:
    # --- setup ---
    compiler = mod_compiler.Compiler(
        "0.12.4",
        tmp_path / "build",
        tmp_path / "dist",
        repository=(tmp_path / "no-such-repo").as_uri(),
    )

    # --- execute and verify ---
    # fails at clone whether or not git is installed
    with pytest.raises(SourceControlError, match="Cloning"):
        compiler.compile()


def test_from_config(tmp_path: Path) -> None:
    # --- setup ---
    config = {
        "repository": "r",
        "version": "1.0.0",
        "build_dir": tmp_path / "b",
        "dist_dir": tmp_path / "d",
        "phar_file": "x.phar",
        "signature_algorithm": "md5",
        "replace_duplicates": True,
        "log_level": "info",
        "origins": {},
        "__meta__": {"cli_base": tmp_path},
    }

    # --- execute ---
    compiler = mod_compiler.Compiler.from_config(config)  # type: ignore[arg-type]

    # --- verify ---
    assert compiler.version == "1.0.0"
    assert compiler.repository == "r"
    assert compiler.build_dir == tmp_path / "b"
    assert compiler.signature_algorithm == "md5"
    assert compiler.replace_duplicates is True
