"""
Custom exception classes for the GitHub project importer.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError


class ImporterError(Exception):
    """Base exception for import errors."""


class ClientError(ImporterError):
    """Raised when a request against the GitHub API fails."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url: str | None = url


class GitCommandError(ImporterError):
    """Raised when a git invocation on a local repository fails."""


class BranchNotFoundError(GitCommandError):
    """Raised when deleting a branch that does not exist."""


# Failures a single imported item may run into: malformed payloads (missing
# keys or fields of the wrong JSON type), remote or git errors, and
# constraint violations on write.
ITEM_ERRORS: tuple[type[Exception], ...] = (
    ImporterError,
    SQLAlchemyError,
    AttributeError,
    KeyError,
    TypeError,
    ValueError,
)
