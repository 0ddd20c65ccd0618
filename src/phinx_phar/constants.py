# src/phinx_phar/constants.py
"""
Central constants used across the project.
"""

# --- env keys ---
DEFAULT_ENV_LOG_LEVEL: str = "LOG_LEVEL"

# --- config defaults ---
DEFAULT_STRICT_CONFIG: bool = True
DEFAULT_LOG_LEVEL: str = "info"
DEFAULT_REPOSITORY: str = "https://github.com/cakephp/phinx.git"
DEFAULT_VERSION: str = "0.12.4"
DEFAULT_BUILD_DIR: str = "build"
DEFAULT_DIST_DIR: str = "dist"
DEFAULT_PHAR_FILE: str = "phinx.phar"
DEFAULT_SIGNATURE_ALGORITHM: str = "sha1"
DEFAULT_REPLACE_DUPLICATES: bool = False
DEFAULT_HINT_CUTOFF: float = 0.6

# --- archive ---
PHAR_ALIAS: str = "phinx.phar"
PHAR_ENTRY_POINT: str = "bin/phinx"
SIGNATURE_ALGORITHMS: tuple[str, ...] = ("md5", "sha1", "sha256", "sha512")

# --- upstream layout ---
TEMPLATE_DIR: str = "data"
TEMPLATE_PATTERNS: tuple[str, ...] = ("phinx.*.dist", "phinx.dist.*")
DEPENDENCY_DIR: str = "vendor"
SOURCE_DIR: str = "src/Phinx"
PHP_PATTERN: str = "*.php"
EXCLUDED_DEPENDENCY_MARKER: str = "tests"
SINGLETON_FILES: tuple[str, ...] = (
    "src/composer_autoloader.php",
    "app/phinx.php",
    "bin/phinx",
    "composer.json",
)
LICENSE_FILE: str = "LICENSE"
VCS_DIRS: frozenset[str] = frozenset(
    {".git", ".svn", ".hg", ".bzr", "CVS", "_darcs", ".arch-params", ".monotone"}
)
