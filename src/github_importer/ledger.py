"""Error records accumulated during an import."""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterator
from dataclasses import dataclass

from .utils import sanitize_message, sanitize_url, strip_url_credentials

logger: logging.Logger = logging.getLogger(__name__)


class EntityKind(enum.Enum):
    """What an error record is about."""

    PROJECT = "project"
    WIKI = "wiki"
    LABEL = "label"
    MILESTONE = "milestone"
    PULL_REQUEST = "pull_request"
    ISSUE = "issue"
    COMMENT = "comment"
    REVIEW_COMMENT = "review_comment"
    RELEASE = "release"
    BRANCH = "branch"


@dataclass(frozen=True)
class ErrorRecord:
    kind: EntityKind
    url: str | None
    message: str


class ErrorLedger:
    """Append-only list of failures, with URLs and messages sanitized."""

    def __init__(self, tokens: list[str | None] | None = None) -> None:
        self._tokens: list[str | None] = list(tokens or [])
        self._records: list[ErrorRecord] = []

    def record(self, kind: EntityKind, url: str | None, message: str) -> ErrorRecord:
        message = strip_url_credentials(sanitize_message(message, self._tokens))
        entry = ErrorRecord(kind=kind, url=sanitize_url(url), message=message)
        self._records.append(entry)
        logger.warning(f"Failed to import {kind.value} {entry.url or ''}: {message}")
        return entry

    @property
    def errors(self) -> list[ErrorRecord]:
        return list(self._records)

    def __iter__(self) -> Iterator[ErrorRecord]:
        return iter(list(self._records))

    def __len__(self) -> int:
        return len(self._records)
