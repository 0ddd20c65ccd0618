# src/phinx_phar/archive.py
"""Self-executing archive writer.

The archive is a ZIP file with a launcher script in front of it, the
same trick `zipapp` uses: the interpreter runs the stub, and ZIP readers
find the central directory from the end of the file. The stub and alias
are also stored under `.phar/` so PHP's phar extension can map it.

A signature over the stub and every entry is recorded as the ZIP comment,
formatted as "<ALGO>:<hexdigest>".
"""

import hashlib
import os
import zipfile
from collections.abc import Generator, Iterable
from contextlib import contextmanager
from pathlib import Path

from .constants import (
    DEFAULT_SIGNATURE_ALGORITHM,
    PHAR_ALIAS,
    PHAR_ENTRY_POINT,
    SIGNATURE_ALGORITHMS,
)
from .errors import PharBuildError, WriteError
from .logs import get_logger
from .minifier import minify_bytes
from .types import FileGroup, SourceFile
from .utils import plural

HALT_COMPILER = "__HALT_COMPILER();"
META_DIR = ".phar/"
STUB_ENTRY = ".phar/stub.php"
ALIAS_ENTRY = ".phar/alias.txt"

# Fixed entry metadata keeps two builds of the same tree byte-identical
_ENTRY_DATE_TIME = (1980, 1, 1, 0, 0, 0)
_ENTRY_MODE = 0o644
_ARCHIVE_MODE = 0o755


def make_stub(alias: str = PHAR_ALIAS, entry_point: str = PHAR_ENTRY_POINT) -> str:
    """Return the launcher that maps the archive and runs its entry point."""
    return (
        "#!/usr/bin/env php\n"
        "<?php\n"
        f"Phar::mapPhar('{alias}');\n"
        f"require 'phar://{alias}/{entry_point}';\n"
        f"{HALT_COMPILER}"
    )


def _digest(
    algorithm: str, stub: bytes, entries: Iterable[tuple[str, bytes]]
) -> str:
    h = hashlib.new(algorithm)
    h.update(stub)
    for name, data in entries:
        h.update(name.encode("utf-8"))
        h.update(b"\0")
        h.update(data)
    return h.hexdigest()


def _zipinfo(name: str) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(name, date_time=_ENTRY_DATE_TIME)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = _ENTRY_MODE << 16
    return info


class PharArchive:
    """A buffered archive writer.

    While buffering, additions only update the in-memory manifest.
    `stop_buffering()` commits everything in one go: the archive is written
    to a temporary file beside `path` and renamed over it, so readers
    never see a half-written file. Outside a buffering session every
    addition commits immediately.
    """

    def __init__(
        self,
        path: Path | str,
        alias: str = PHAR_ALIAS,
        signature_algorithm: str = DEFAULT_SIGNATURE_ALGORITHM,
        *,
        replace_duplicates: bool = False,
    ) -> None:
        if signature_algorithm not in SIGNATURE_ALGORITHMS:
            xmsg = (
                f"Unsupported signature algorithm {signature_algorithm!r}"
                f" (expected one of: {', '.join(SIGNATURE_ALGORITHMS)})"
            )
            raise ValueError(xmsg)
        self.path = Path(path)
        self.alias = alias
        self.signature_algorithm = signature_algorithm
        self.replace_duplicates = replace_duplicates
        self._entries: dict[str, bytes] = {}
        self._stub = b""
        self._buffering = False
        self._committed = False

    # --- state ---------------------------------------------------------------

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    # --- writing -------------------------------------------------------------

    def start_buffering(self) -> None:
        self._buffering = True

    def stop_buffering(self) -> None:
        self._buffering = False
        self._commit()

    @contextmanager
    def buffering(self) -> Generator["PharArchive", None, None]:
        """Buffer additions; commit only if the block finishes cleanly."""
        self.start_buffering()
        try:
            yield self
        except BaseException:
            self._buffering = False
            raise
        self.stop_buffering()

    def add_from_string(self, name: str, content: bytes | str) -> None:
        logger = get_logger()
        if not name or name.startswith("/") or "\\" in name:
            xmsg = f"Invalid archive entry name: {name!r}"
            raise WriteError(xmsg)
        if name.startswith(META_DIR):
            xmsg = f"Archive entry name is reserved: {name}"
            raise WriteError(xmsg)
        if name in self._entries:
            if not self.replace_duplicates:
                xmsg = f"Duplicate archive entry: {name}"
                raise WriteError(xmsg)
            logger.debug("Replacing archive entry: %s", name)

        data = content.encode("utf-8") if isinstance(content, str) else content
        self._entries[name] = data
        logger.trace("[ARCHIVE] %s (%d bytes)", name, len(data))

        if not self._buffering:
            self._commit()

    def set_stub(self, stub: str) -> None:
        if HALT_COMPILER not in stub:
            xmsg = f"Stub must contain {HALT_COMPILER}"
            raise WriteError(xmsg)
        if stub.rstrip().endswith(HALT_COMPILER):
            # Same closing the phar extension appends to bare stubs
            stub = stub.rstrip() + " ?>\r\n"
        self._stub = stub.encode("utf-8")
        if not self._buffering:
            self._commit()

    def signature(self) -> str:
        """Return the signature of the manifest as it stands in memory."""
        digest = _digest(self.signature_algorithm, self._stub, self._all_entries())
        return f"{self.signature_algorithm.upper()}:{digest}"

    def discard(self) -> None:
        """Remove whatever this archive committed to disk."""
        if self._committed:
            self.path.unlink(missing_ok=True)
            self._committed = False

    # --- internals -----------------------------------------------------------

    def _all_entries(self) -> list[tuple[str, bytes]]:
        return [
            (STUB_ENTRY, self._stub),
            (ALIAS_ENTRY, self.alias.encode("utf-8")),
            *self._entries.items(),
        ]

    def _commit(self) -> None:
        logger = get_logger()
        tmp = self.path.with_name(f".{self.path.name}.tmp")
        entries = self._all_entries()

        try:
            with tmp.open("wb") as fp:
                fp.write(self._stub)
                with zipfile.ZipFile(fp, "w") as zf:
                    zf.comment = self.signature().encode("ascii")
                    for name, data in entries:
                        zf.writestr(_zipinfo(name), data)
            tmp.chmod(_ARCHIVE_MODE)
            os.replace(tmp, self.path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            xmsg = f"Cannot write archive {self.path}"
            raise WriteError(xmsg, detail=str(e)) from e

        self._committed = True
        logger.trace(
            "[ARCHIVE] committed %d entr%s → %s",
            len(self._entries),
            "y" if len(self._entries) == 1 else "ies",
            self.path,
        )


# --------------------------------------------------------------------------- #
# verification
# --------------------------------------------------------------------------- #


def read_signature(path: Path | str) -> tuple[str, str]:
    """Return the (algorithm, hexdigest) recorded in an archive."""
    path = Path(path)
    try:
        with zipfile.ZipFile(path) as zf:
            comment = zf.comment.decode("ascii", errors="replace")
    except (OSError, zipfile.BadZipFile) as e:
        xmsg = f"Cannot read archive {path}: {e}"
        raise ValueError(xmsg) from e

    algorithm, sep, digest = comment.partition(":")
    if not sep or algorithm.lower() not in SIGNATURE_ALGORITHMS:
        xmsg = f"Archive {path} carries no signature"
        raise ValueError(xmsg)
    return algorithm.lower(), digest


def verify_signature(path: Path | str) -> bool:
    """Recompute the signature of an archive and compare it to the stored one."""
    path = Path(path)
    algorithm, expected = read_signature(path)

    raw = path.read_bytes()
    with zipfile.ZipFile(path) as zf:
        infos = zf.infolist()
        stub_end = min((i.header_offset for i in infos), default=0)
        entries = [(i.filename, zf.read(i)) for i in infos]

    return _digest(algorithm, raw[:stub_end], entries) == expected


# --------------------------------------------------------------------------- #
# assembly
# --------------------------------------------------------------------------- #


def _add_file(archive: PharArchive, source: SourceFile, *, strip: bool) -> None:
    try:
        content = source.read()
    except OSError as e:
        xmsg = f"Cannot read {source.path}"
        raise WriteError(xmsg, detail=str(e)) from e

    if strip:
        content = minify_bytes(content)
    archive.add_from_string(source.archive_path, content)


def assemble(
    files: list[SourceFile],
    stub: str,
    output_path: Path | str,
    signature_algorithm: str = DEFAULT_SIGNATURE_ALGORITHM,
    *,
    alias: str = PHAR_ALIAS,
    replace_duplicates: bool = False,
) -> Path:
    """Write `files` into a signed, self-executing archive at `output_path`.

    First pass: every file flagged for minification, then the stub, then
    a commit. Second pass: the files kept verbatim (the license). With
    `replace_duplicates` the dependency group is written again verbatim
    in the second pass and its unminified copies win; otherwise any name
    written twice is a WriteError.
    """
    logger = get_logger()
    archive = PharArchive(
        output_path,
        alias,
        signature_algorithm,
        replace_duplicates=replace_duplicates,
    )

    stripped = [f for f in files if f.minify]
    verbatim = [f for f in files if not f.minify]
    if replace_duplicates:
        verbatim += [f for f in files if f.group is FileGroup.DEPENDENCY]

    try:
        with archive.buffering():
            for source in stripped:
                _add_file(archive, source, strip=True)
            archive.set_stub(stub)
        logger.debug(
            "Wrote %d minified file%s", len(stripped), plural(stripped)
        )

        if verbatim:
            with archive.buffering():
                for source in verbatim:
                    _add_file(archive, source, strip=False)
            logger.debug(
                "Wrote %d verbatim file%s", len(verbatim), plural(verbatim)
            )
    except PharBuildError:
        archive.discard()
        raise

    names = archive.entries
    logger.debug("%s holds %d file%s", archive.path.name, len(names), plural(names))
    return archive.path
