# src/phinx_phar/actions.py
import re
import shutil
import subprocess
import tempfile
import zipfile
from importlib import metadata as importlib_metadata
from pathlib import Path

from .archive import assemble, make_stub, read_signature, verify_signature
from .collector import collect
from .logs import get_logger
from .meta import PROGRAM_DISPLAY, PROGRAM_PACKAGE, PROGRAM_SCRIPT, Metadata

_SELFTEST_SOURCE = """<?php
/**
 * Console entry.
 */
namespace Phinx\\Console;

class PhinxApplication   // trailing note
{
    public function name()
    {
        return 'phinx';   /* inline */
    }
}
"""

_SELFTEST_TREE = {
    "data/phinx.yml.dist": "paths:\n    migrations: db/migrations\n",
    "vendor/autoload.php": "<?php\n// autoload\nreturn 1;\n",
    "vendor/acme/lib/Tests/LibTest.php": "<?php\n",
    "src/Phinx/Console/PhinxApplication.php": _SELFTEST_SOURCE,
    "src/composer_autoloader.php": "<?php\nrequire 'vendor/autoload.php';\n",
    "app/phinx.php": "<?php\nreturn new Phinx\\Console\\PhinxApplication();\n",
    "bin/phinx": "#!/usr/bin/env php\n<?php\n$app = require 'app/phinx.php';\n",
    "composer.json": '{"name": "robmorgan/phinx"}\n',
    "LICENSE": "The MIT License (MIT)\n",
}

_VERSION_LINE = re.compile(r"""(?m)^\s*version\s*=\s*["']([^"']+)["']""")


def _source_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _read_version(root: Path) -> str:
    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        get_logger().trace("reading version from %s", pyproject)
        found = _VERSION_LINE.search(pyproject.read_text(encoding="utf-8"))
        return found.group(1) if found else "unknown"
    try:
        return importlib_metadata.version(PROGRAM_SCRIPT)
    except importlib_metadata.PackageNotFoundError:
        return "unknown"


def _read_commit(root: Path) -> str:
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],  # noqa: S607
            cwd=root,
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return "unknown"
    return result.stdout.strip() or "unknown"


def get_metadata() -> Metadata:
    """Return (version, commit) for this tool.

    From a source checkout the version comes from pyproject.toml; an
    installed copy asks the distribution metadata instead.
    """
    root = _source_root()
    meta = Metadata(_read_version(root), _read_commit(root))
    get_logger().trace("version %s, commit %s", meta.version, meta.commit)
    return meta


def verify_archive(path: Path | str) -> bool:
    """Check the signature stored in a built archive."""
    logger = get_logger()
    path = Path(path)
    if not path.is_file():
        xmsg = f"Archive not found: {path}"
        raise FileNotFoundError(xmsg)

    algorithm, digest = read_signature(path)
    if verify_signature(path):
        logger.info(
            "✅ %s: %s signature OK (%s)", path.name, algorithm.upper(), digest
        )
        return True

    logger.error("%s: %s signature mismatch", path.name, algorithm.upper())
    return False


def _write_selftest_tree(build: Path) -> None:
    for rel, text in _SELFTEST_TREE.items():
        target = build / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")


def _selftest_checks(output: Path) -> dict[str, bool]:
    with zipfile.ZipFile(output) as zf:
        names = set(zf.namelist())
        app = zf.read("src/Phinx/Console/PhinxApplication.php").decode("utf-8")
    return {
        "signature": verify_signature(output),
        "tests excluded": "vendor/acme/lib/Tests/LibTest.php" not in names,
        "license kept": "LICENSE" in names,
        "comments stripped": "trailing note" not in app and "/*" not in app,
        "lines preserved": app.count("\n") == _SELFTEST_SOURCE.count("\n"),
    }


def run_selftest() -> bool:
    """Package a tiny fake upstream tree and check the result."""
    logger = get_logger()
    logger.info("🧪 Running self-test...")

    work = Path(tempfile.mkdtemp(prefix=f"{PROGRAM_SCRIPT}-selftest-"))
    logger.debug("self-test workspace: %s", work)
    try:
        build = work / "build"
        _write_selftest_tree(build)
        output = assemble(
            collect(build), make_stub(), work / f"{PROGRAM_PACKAGE}.phar"
        )
        failed = [name for name, ok in _selftest_checks(output).items() if not ok]
    except PermissionError as e:
        logger.error(  # noqa: TRY400
            "Self-test failed: cannot write to %s (%s)", work, e
        )
        return False
    except Exception:
        logger.exception(
            "Unexpected self-test failure. "
            "Please report this issue with the following traceback:"
        )
        return False
    finally:
        shutil.rmtree(work, ignore_errors=True)

    if failed:
        logger.error("Self-test failed: %s", ", ".join(failed))
        return False
    logger.info("✅ Self-test passed: %s is working correctly.", PROGRAM_DISPLAY)
    return True
