"""Import orchestrator that runs the stages of a GitHub import.

The Importer owns the stage order and nothing else; each stage lives in
its own module and reports failures into the job's error ledger.

Import Flow
-----------
Stages always run in this order, and every stage runs even when earlier
ones recorded errors:

Stage 1: Repository mirror
    - Create the local bare repository
    - Register GitHub as a mirror remote and force-fetch every ref

Stage 2: Labels
    - Create labels missing by title
    - Cache title -> local id for the issue stage

Stage 3: Milestones
    - Create milestones missing by number, open and closed alike

Stage 4: Pull requests
    For each pull request (oldest first) not imported yet:
        a. Restore source and target branches at their recorded SHAs
        b. Create the merge request and its empty diff snapshot
        c. Import review comments, then conversation comments
        d. Delete the restored branches unless the pull request is open

Stage 5: Issues
    - Create issues with labels and comments
    - Pull requests listed by the issues API only contribute labels

Stage 6: Releases (only with ``include_releases``)

Stage 7: Wiki mirror
    - Clone the wiki unless a local wiki repository already exists

Stage 8: Cache invalidation
    - Drop cached repository content so reads see the imported refs

The session is committed after every stage, so a partial import is kept.

Error Handling
--------------
Per-item failures (remote errors, malformed payloads, constraint
violations, git errors) are recorded in the ledger and the stage moves on
to the next item. Anything else is a bug and propagates.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .branches import BranchReconciler
from .git_migration import mirror_repository, mirror_wiki
from .identity import IdentityResolver
from .issues import import_issues
from .labels import import_labels
from .milestones import import_milestones
from .pull_requests import import_pull_requests
from .releases import import_releases

if TYPE_CHECKING:
    from .context import ImportJob
    from .ledger import ErrorRecord

logger = logging.getLogger(__name__)


class ImportStage(enum.Enum):
    IDLE = "idle"
    MIRRORING_REPOSITORY = "mirroring_repository"
    IMPORTING_LABELS = "importing_labels"
    IMPORTING_MILESTONES = "importing_milestones"
    IMPORTING_PULL_REQUESTS = "importing_pull_requests"
    IMPORTING_ISSUES = "importing_issues"
    IMPORTING_RELEASES = "importing_releases"
    MIRRORING_WIKI = "mirroring_wiki"
    INVALIDATING = "invalidating"
    DONE = "done"


@dataclass
class ImportStats:
    """Statistics collected during an import."""

    repository_mirrored: bool = False
    labels_created: int = 0
    milestones_created: int = 0
    merge_requests_created: int = 0
    issues_created: int = 0
    releases_created: int = 0
    wiki_imported: bool = False


class Importer:
    """Runs one import of a GitHub repository into a local project.

    Usage:
        job = ImportJob(project, LocalRepository(project.repository_path), RecordStore(session), client, options)
        errors = Importer(job).execute()

    The importer keeps no state between runs; create a new job per run.
    """

    def __init__(self, job: ImportJob) -> None:
        self.job: ImportJob = job
        self.resolver: IdentityResolver = IdentityResolver(job)
        self.reconciler: BranchReconciler = BranchReconciler(job.repository, job.ledger)
        self.stats: ImportStats = ImportStats()
        self.stage: ImportStage = ImportStage.IDLE

    def _enter(self, stage: ImportStage) -> None:
        self.stage = stage
        logger.info(f"{self.job.repo}: {stage.value.replace('_', ' ')}")

    def _checkpoint(self) -> None:
        self.job.store.commit()

    def execute(self) -> list[ErrorRecord]:
        """Run every stage and return the errors recorded along the way."""
        job = self.job
        logger.info(f"Starting import of {job.repo} into {job.project.path_with_namespace}")

        self._enter(ImportStage.MIRRORING_REPOSITORY)
        self.stats.repository_mirrored = mirror_repository(job)

        self._enter(ImportStage.IMPORTING_LABELS)
        self.stats.labels_created = import_labels(job, self.resolver)
        self._checkpoint()

        self._enter(ImportStage.IMPORTING_MILESTONES)
        self.stats.milestones_created = import_milestones(job)
        self._checkpoint()

        self._enter(ImportStage.IMPORTING_PULL_REQUESTS)
        self.stats.merge_requests_created = import_pull_requests(job, self.resolver, self.reconciler)
        self._checkpoint()

        self._enter(ImportStage.IMPORTING_ISSUES)
        self.stats.issues_created = import_issues(job, self.resolver)
        self._checkpoint()

        if job.options.include_releases:
            self._enter(ImportStage.IMPORTING_RELEASES)
            self.stats.releases_created = import_releases(job)
            self._checkpoint()

        self._enter(ImportStage.MIRRORING_WIKI)
        self.stats.wiki_imported = mirror_wiki(job)

        self._enter(ImportStage.INVALIDATING)
        job.repository.expire_content_cache()

        self.stage = ImportStage.DONE
        errors = job.ledger.errors
        logger.info(f"Import of {job.repo} finished with {len(errors)} errors: {self.stats}")
        return errors
