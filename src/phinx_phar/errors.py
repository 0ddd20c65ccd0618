# src/phinx_phar/errors.py
"""Error kinds raised by a packaging run.

Every one of them is fatal to the run: nothing is retried and nothing is
downgraded to a warning. `cli.main` turns them into a logged message and
the exception's `code` as the process exit status.
"""


class PharBuildError(RuntimeError):
    """Base class for packaging failures."""

    code: int = 1

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        self.detail = detail.strip() if detail else None
        full = f"{message}\n{self.detail}" if self.detail else message
        super().__init__(full)


class SourceControlError(PharBuildError):
    """`git clone` or `git checkout` exited non-zero."""


class DependencyError(PharBuildError):
    """The dependency manager exited non-zero."""


class NotFoundError(PharBuildError):
    """An expected file or directory is missing from the build root."""


class WriteError(PharBuildError):
    """The archive could not be written, committed or signed."""
