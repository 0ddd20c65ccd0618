# src/phinx_phar/compiler.py
"""End-to-end packaging run: clone, checkout, install, assemble, clean up."""

import shutil
from pathlib import Path

from .archive import assemble, make_stub
from .collector import DEFAULT_LAYOUT, UpstreamLayout, collect
from .constants import (
    DEFAULT_PHAR_FILE,
    DEFAULT_REPOSITORY,
    DEFAULT_SIGNATURE_ALGORITHM,
    PHAR_ALIAS,
    PHAR_ENTRY_POINT,
)
from .errors import DependencyError, SourceControlError
from .logs import get_logger
from .process import Runner, run
from .types import CompilerConfig


def _reset_dir(path: Path) -> None:
    """Remove `path` recursively (if present) and recreate it empty."""
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True, exist_ok=True)


class Compiler:
    """Builds `phinx.phar` from a tagged upstream release.

    Steps run strictly in order and the first failure stops the run.
    A failed clone, checkout or install leaves the build directory as the
    failing tool left it; once assembly starts, the build directory is
    cleared whether assembly succeeds or not.
    """

    def __init__(
        self,
        version: str,
        build_dir: Path | str,
        dist_dir: Path | str,
        *,
        repository: str = DEFAULT_REPOSITORY,
        signature_algorithm: str = DEFAULT_SIGNATURE_ALGORITHM,
        replace_duplicates: bool = False,
        layout: UpstreamLayout = DEFAULT_LAYOUT,
        runner: Runner = run,
    ) -> None:
        self.version = version
        self.build_dir = Path(build_dir)
        self.dist_dir = Path(dist_dir)
        self.repository = repository
        self.signature_algorithm = signature_algorithm
        self.replace_duplicates = replace_duplicates
        self.layout = layout
        self._run = runner

    @classmethod
    def from_config(cls, config: CompilerConfig, **kwargs: object) -> "Compiler":
        return cls(
            config["version"],
            config["build_dir"],
            config["dist_dir"],
            repository=config["repository"],
            signature_algorithm=config["signature_algorithm"],
            replace_duplicates=config["replace_duplicates"],
            **kwargs,  # type: ignore[arg-type]
        )

    # --- pipeline ------------------------------------------------------------

    def compile(self, phar_file: str = DEFAULT_PHAR_FILE) -> Path:
        self.clear_dist()
        self.clear_build()

        self.clone_repository()
        self.switch_version()
        self.install_dependencies()
        try:
            return self.make_phar(phar_file)
        finally:
            self.clear_build()

    def clone_repository(self) -> None:
        logger = get_logger()
        logger.info("Cloning the Phinx repository...")

        result = self._run("git", ["clone", self.repository, "."], self.build_dir)
        if not result.ok:
            xmsg = f"Cloning {self.repository} failed (exit {result.exit_status})"
            raise SourceControlError(xmsg, detail=result.stderr)

        logger.info("Cloning has been completed.")

    def switch_version(self) -> None:
        logger = get_logger()

        result = self._run("git", ["checkout", f"tags/{self.version}"], self.build_dir)
        if not result.ok:
            xmsg = (
                f"Checking out tags/{self.version} failed"
                f" (exit {result.exit_status})"
            )
            raise SourceControlError(xmsg, detail=result.stderr)

        logger.info("Switched to %s", self.version)

    def install_dependencies(self) -> None:
        logger = get_logger()
        logger.info("Installation of Phinx dependencies...")

        result = self._run("composer", ["update"], self.build_dir)
        if not result.ok:
            xmsg = f"Dependency installation failed (exit {result.exit_status})"
            raise DependencyError(xmsg, detail=result.stderr)

        logger.info("Dependency installation completed")

    def make_phar(self, phar_file: str = DEFAULT_PHAR_FILE) -> Path:
        logger = get_logger()
        logger.info("Compilation...")

        output = self.dist_dir / phar_file
        files = collect(self.build_dir, self.layout)
        assemble(
            files,
            make_stub(PHAR_ALIAS, PHAR_ENTRY_POINT),
            output,
            self.signature_algorithm,
            alias=PHAR_ALIAS,
            replace_duplicates=self.replace_duplicates,
        )

        logger.info("Successful compilation. File: %s", output)
        return output

    # --- working directories -------------------------------------------------

    def clear_build(self) -> None:
        """Remove build files."""
        get_logger().trace("[CLEAN] %s", self.build_dir)
        _reset_dir(self.build_dir)

    def clear_dist(self) -> None:
        """Remove dist files."""
        get_logger().trace("[CLEAN] %s", self.dist_dir)
        _reset_dir(self.dist_dir)
