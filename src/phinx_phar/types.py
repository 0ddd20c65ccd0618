# src/phinx_phar/types.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Literal, TypedDict

from typing_extensions import NotRequired

OriginType = Literal["cli", "env", "config", "default", "code", "test"]


# --- source files ------------------------------------------------------------


class FileGroup(Enum):
    TEMPLATE = "template"
    DEPENDENCY = "dependency"
    SOURCE = "source"
    SINGLETON = "singleton"
    LICENSE = "license"


@dataclass
class SourceFile:
    path: Path  # absolute
    archive_path: str  # relative to the build root, forward slashes
    group: FileGroup
    minify: bool = True

    def read(self) -> bytes:
        return self.path.read_bytes()


# --- tokens ------------------------------------------------------------------


class TokenKind(Enum):
    CODE = "code"
    COMMENT = "comment"
    DOC_COMMENT = "doc_comment"
    WHITESPACE = "whitespace"
    OTHER = "other"  # inline markup, open/close tags


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str


# --- config ------------------------------------------------------------------


class MetaCompilerConfig(TypedDict):
    # sources of parameters
    cli_base: Path
    config_path: NotRequired[Path]


class CompilerConfigInput(TypedDict, total=False):
    repository: str
    version: str
    build_dir: str
    dist_dir: str
    phar_file: str
    signature_algorithm: str
    replace_duplicates: bool
    log_level: str

    # validation behavior
    strict_config: bool


class CompilerConfig(TypedDict):
    repository: str
    version: str
    build_dir: Path
    dist_dir: Path
    phar_file: str
    signature_algorithm: str
    replace_duplicates: bool
    log_level: str

    # provenance, for audit/debug
    origins: dict[str, OriginType]
    __meta__: MetaCompilerConfig
