# src/phinx_phar/meta.py

"""Centralized program identity constants for Phinx Phar."""

from typing import NamedTuple

_BASE = "phinx-phar"

# CLI script name (the console entrypoint)
PROGRAM_SCRIPT = _BASE

# Human-readable name for banners, help text, etc.
PROGRAM_DISPLAY = _BASE.replace("-", " ").title()

# Python package / import name
PROGRAM_PACKAGE = _BASE.replace("-", "_")

# Environment variable prefix (used for PHINX_PHAR_LOG_LEVEL, etc.)
PROGRAM_ENV = _BASE.replace("-", "_").upper()

# Short tagline or description for help screens and metadata
DESCRIPTION = "Package a tagged Phinx release into a single executable archive."


class Metadata(NamedTuple):
    version: str
    commit: str
