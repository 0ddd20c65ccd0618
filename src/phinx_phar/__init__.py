# src/phinx_phar/__init__.py

"""Phinx Phar: package a tagged Phinx release into one executable archive.

Full developer API
==================
This package re-exports all non-private symbols from its submodules,
making it suitable for programmatic use or custom build scripts.
Anything prefixed with "_" is considered internal and may change.

Highlights:
    - main()              → CLI entrypoint
    - Compiler            → Clone, install and package an upstream release
    - minify()            → Strip comments/whitespace, keep line numbers
    - collect()           → Select archive files in a stable order
    - assemble()          → Write a signed, self-executing archive
"""

from .actions import (
    get_metadata,
    run_selftest,
    verify_archive,
)
from .archive import (
    PharArchive,
    assemble,
    make_stub,
    read_signature,
    verify_signature,
)
from .cli import (
    main,
)
from .collector import (
    DEFAULT_LAYOUT,
    UpstreamLayout,
    collect,
    collect_dependencies,
    collect_singletons,
    collect_sources,
    collect_templates,
)
from .compiler import Compiler
from .config import (
    find_config,
    load_and_validate_config,
    load_config,
)
from .config_resolve import determine_log_level, resolve_config
from .config_validate import ValidationSummary, validate_config
from .constants import (
    DEFAULT_BUILD_DIR,
    DEFAULT_DIST_DIR,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PHAR_FILE,
    DEFAULT_REPOSITORY,
    DEFAULT_SIGNATURE_ALGORITHM,
    DEFAULT_VERSION,
    PHAR_ALIAS,
    SIGNATURE_ALGORITHMS,
)
from .errors import (
    DependencyError,
    NotFoundError,
    PharBuildError,
    SourceControlError,
    WriteError,
)
from .logs import (
    LEVEL_ORDER,
    RESET,
    colorize,
    get_logger,
)
from .meta import (
    PROGRAM_DISPLAY,
    PROGRAM_ENV,
    PROGRAM_PACKAGE,
    PROGRAM_SCRIPT,
    Metadata,
)
from .minifier import minify, minify_bytes, tokenize
from .process import ProcessResult, run
from .runtime import Runtime, current_runtime
from .types import (
    CompilerConfig,
    CompilerConfigInput,
    FileGroup,
    SourceFile,
    Token,
    TokenKind,
)
from .utils import (
    load_jsonc,
    should_use_color,
)


__all__ = [  # noqa: RUF022
    # --- CLI / Actions ---
    "get_metadata",  # version info
    "main",
    "run_selftest",
    "verify_archive",
    #
    # --- Pipeline ---
    "Compiler",
    "DEFAULT_LAYOUT",
    "PharArchive",
    "UpstreamLayout",
    "assemble",
    "collect",
    "collect_dependencies",
    "collect_singletons",
    "collect_sources",
    "collect_templates",
    "make_stub",
    "minify",
    "minify_bytes",
    "read_signature",
    "run",
    "tokenize",
    "verify_signature",
    #
    # --- Config Handling ---
    "ValidationSummary",
    "determine_log_level",
    "find_config",
    "load_and_validate_config",
    "load_config",
    "resolve_config",
    "validate_config",
    #
    # --- Errors ---
    "DependencyError",
    "NotFoundError",
    "PharBuildError",
    "SourceControlError",
    "WriteError",
    #
    # --- Constants / Metadata / Runtime ---
    "DEFAULT_BUILD_DIR",
    "DEFAULT_DIST_DIR",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_PHAR_FILE",
    "DEFAULT_REPOSITORY",
    "DEFAULT_SIGNATURE_ALGORITHM",
    "DEFAULT_VERSION",
    "Metadata",
    "PHAR_ALIAS",
    "PROGRAM_DISPLAY",
    "PROGRAM_ENV",
    "PROGRAM_PACKAGE",
    "PROGRAM_SCRIPT",
    "SIGNATURE_ALGORITHMS",
    "current_runtime",
    #
    # --- utils ---
    "LEVEL_ORDER",
    "RESET",
    "colorize",
    "get_logger",
    "load_jsonc",
    "should_use_color",
    #
    # --- Types ---
    "CompilerConfig",
    "CompilerConfigInput",
    "FileGroup",
    "ProcessResult",
    "Runtime",
    "SourceFile",
    "Token",
    "TokenKind",
]
