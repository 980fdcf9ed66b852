"""Run-scoped state shared by the synchronizers of one import."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .github_utils import DEFAULT_API_URL, git_host_url
from .ledger import EntityKind, ErrorLedger, ErrorRecord

if TYPE_CHECKING:
    from .protocols import CollectionClient, RepositoryEngine
    from .records import Project
    from .store import RecordStore


@dataclass
class ImportOptions:
    token: str | None = None
    api_url: str = DEFAULT_API_URL
    include_releases: bool = False

    @property
    def git_url(self) -> str:
        return git_host_url(self.api_url)


@dataclass
class ImportJob:
    """Everything one import run reads and writes.

    The caches are never shared between runs:

    - ``label_ids``: label title -> local label id, filled after the label stage
    - ``user_ids``: remote user id -> matched local user id, None on a miss
    - ``known_users``: remote user id -> whether a real local account matched
    """

    project: Project
    repository: RepositoryEngine
    store: RecordStore
    client: CollectionClient
    options: ImportOptions = field(default_factory=ImportOptions)
    ledger: ErrorLedger = field(init=False)
    label_ids: dict[str, int] = field(default_factory=dict)
    user_ids: dict[int, int | None] = field(default_factory=dict)
    known_users: dict[int, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.ledger = ErrorLedger(tokens=[self.options.token])

    @property
    def repo(self) -> str:
        """Remote repository coordinate, ``owner/name``."""
        if not self.project.import_source:
            msg = f"Project {self.project.path_with_namespace} has no import source"
            raise ValueError(msg)
        return self.project.import_source

    @property
    def creator_id(self) -> int:
        return self.project.creator_id

    def error(self, kind: EntityKind, url: str | None, message: str) -> ErrorRecord:
        return self.ledger.record(kind, url, message)
