# src/phinx_phar/collector.py
"""Select the upstream files that go into the archive, in a stable order."""

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path

from .constants import (
    DEPENDENCY_DIR,
    EXCLUDED_DEPENDENCY_MARKER,
    LICENSE_FILE,
    PHP_PATTERN,
    SINGLETON_FILES,
    SOURCE_DIR,
    TEMPLATE_DIR,
    TEMPLATE_PATTERNS,
    VCS_DIRS,
)
from .errors import NotFoundError
from .logs import get_logger
from .types import FileGroup, SourceFile
from .utils import plural, posix_path


@dataclass(frozen=True)
class UpstreamLayout:
    """Where each file group lives inside the cloned upstream project."""

    template_dir: str = TEMPLATE_DIR
    template_patterns: tuple[str, ...] = TEMPLATE_PATTERNS
    dependency_dir: str = DEPENDENCY_DIR
    source_dir: str = SOURCE_DIR
    php_pattern: str = PHP_PATTERN
    excluded_marker: str = EXCLUDED_DEPENDENCY_MARKER
    singletons: tuple[str, ...] = SINGLETON_FILES
    license_file: str = LICENSE_FILE


DEFAULT_LAYOUT = UpstreamLayout()


# --------------------------------------------------------------------------- #
# helpers
# --------------------------------------------------------------------------- #


def sort_key(path: Path) -> bytes:
    """Order by the resolved absolute path, '/'-separated, compared as bytes."""
    return os.fsencode(posix_path(path.resolve()))


def archive_path(path: Path, build_root: Path) -> str:
    """Return the name `path` gets inside the archive."""
    real = path.resolve()
    try:
        rel = real.relative_to(build_root.resolve())
    except ValueError:
        # Not under the build root: keep the full path, normalized
        return posix_path(real)
    return posix_path(rel)


def _hidden(name: str) -> bool:
    return name.startswith(".") or name in VCS_DIRS


def _walk_files(root: Path) -> Iterator[Path]:
    """Yield every file below `root`, skipping dot-files and VCS directories."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if not _hidden(d)]
        for name in filenames:
            if not name.startswith("."):
                yield Path(dirpath) / name


def _require_dir(path: Path) -> Path:
    if not path.is_dir():
        xmsg = f"Directory not found: {path}"
        raise NotFoundError(xmsg)
    return path


def _matches(name: str, patterns: Iterable[str]) -> bool:
    return any(fnmatchcase(name, pattern) for pattern in patterns)


def _make_sources(
    paths: Iterable[Path],
    build_root: Path,
    group: FileGroup,
) -> list[SourceFile]:
    return [
        SourceFile(path.resolve(), archive_path(path, build_root), group)
        for path in sorted(paths, key=sort_key)
    ]


# --------------------------------------------------------------------------- #
# groups
# --------------------------------------------------------------------------- #


def collect_templates(
    build_root: Path, layout: UpstreamLayout = DEFAULT_LAYOUT
) -> list[SourceFile]:
    root = _require_dir(build_root / layout.template_dir)
    paths = (
        p for p in _walk_files(root) if _matches(p.name, layout.template_patterns)
    )
    return _make_sources(paths, build_root, FileGroup.TEMPLATE)


def collect_dependencies(
    build_root: Path, layout: UpstreamLayout = DEFAULT_LAYOUT
) -> list[SourceFile]:
    logger = get_logger()
    root = _require_dir(build_root / layout.dependency_dir)
    marker = layout.excluded_marker.lower()

    paths: list[Path] = []
    for path in _walk_files(root):
        if not fnmatchcase(path.name, layout.php_pattern):
            continue
        if marker in archive_path(path, build_root).lower():
            logger.trace("🚫  Skipped: %s", path)
            continue
        paths.append(path)

    return _make_sources(paths, build_root, FileGroup.DEPENDENCY)


def collect_sources(
    build_root: Path, layout: UpstreamLayout = DEFAULT_LAYOUT
) -> list[SourceFile]:
    root = _require_dir(build_root / layout.source_dir)
    paths = (p for p in _walk_files(root) if fnmatchcase(p.name, layout.php_pattern))
    return _make_sources(paths, build_root, FileGroup.SOURCE)


def collect_singletons(
    build_root: Path, layout: UpstreamLayout = DEFAULT_LAYOUT
) -> list[SourceFile]:
    """Named files, in listed order, followed by the license (kept verbatim)."""
    named = [(rel, FileGroup.SINGLETON) for rel in layout.singletons]
    named.append((layout.license_file, FileGroup.LICENSE))

    files: list[SourceFile] = []
    for rel, group in named:
        path = build_root / rel
        if not path.is_file():
            xmsg = f"Required file not found: {path}"
            raise NotFoundError(xmsg)
        files.append(
            SourceFile(
                path.resolve(),
                archive_path(path, build_root),
                group,
                minify=group is not FileGroup.LICENSE,
            )
        )
    return files


def collect(
    build_root: Path | str, layout: UpstreamLayout = DEFAULT_LAYOUT
) -> list[SourceFile]:
    """Return every file that belongs in the archive.

    Groups come in a fixed order (templates, dependencies, project
    sources, named files); inside the first three groups files are
    sorted by `sort_key`.
    """
    logger = get_logger()
    build_root = Path(build_root)
    if not build_root.is_dir():
        xmsg = f"Build root not found: {build_root}"
        raise NotFoundError(xmsg)

    files: list[SourceFile] = []
    for label, collector in (
        ("templates", collect_templates),
        ("dependencies", collect_dependencies),
        ("sources", collect_sources),
        ("named files", collect_singletons),
    ):
        group_files = collector(build_root, layout)
        logger.debug(
            "Collected %d file%s (%s)", len(group_files), plural(group_files), label
        )
        for f in group_files:
            logger.trace("[COLLECT] %s", f.archive_path)
        files.extend(group_files)

    return files
