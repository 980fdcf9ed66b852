"""Temporary branches needed to diff imported pull requests."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, NamedTuple

from .exceptions import BranchNotFoundError, GitCommandError
from .ledger import EntityKind

if TYPE_CHECKING:
    from .ledger import ErrorLedger
    from .models import Branch, PullRequest
    from .protocols import RepositoryEngine

logger: logging.Logger = logging.getLogger(__name__)


class DiffRefs(NamedTuple):
    """Local branch names a merge request diffs between."""

    source_branch: str
    target_branch: str


class BranchReconciler:
    """Makes both sides of a pull request available as local branches.

    The remote branch of a merged or closed pull request is often gone, so
    a branch is created at the recorded SHA when needed. Branches created
    this way for pull requests that are not open are deleted again once
    the pull request has been processed.
    """

    def __init__(self, repository: RepositoryEngine, ledger: ErrorLedger) -> None:
        self.repository: RepositoryEngine = repository
        self.ledger: ErrorLedger = ledger

    @contextmanager
    def restore(self, pull_request: PullRequest) -> Iterator[DiffRefs]:
        created: list[str] = []
        try:
            source = self._ensure_branch(
                pull_request, pull_request.source, created, reuse_ref=not pull_request.cross_project
            )
            target = self._ensure_branch(pull_request, pull_request.target, created, reuse_ref=True)
            yield DiffRefs(source_branch=source, target_branch=target)
        finally:
            if not pull_request.opened:
                for name in created:
                    self._remove_branch(name)

    def _ensure_branch(self, pull_request: PullRequest, branch: Branch, created: list[str], *, reuse_ref: bool) -> str:
        if branch.ref is None or branch.sha is None:
            msg = f"Pull request #{pull_request.iid} has no ref or SHA for one of its branches"
            raise ValueError(msg)

        if reuse_ref and self.repository.branch_exists(branch.ref):
            return branch.ref

        name = pull_request.restored_branch_name(branch)
        if not self.repository.branch_exists(name):
            self.repository.create_branch(name, branch.sha)
            created.append(name)
            logger.debug(f"Restored branch {name} for pull request #{pull_request.iid}")
        return name

    def _remove_branch(self, name: str) -> None:
        try:
            self.repository.delete_branch(name)
        except BranchNotFoundError:
            self.ledger.record(EntityKind.BRANCH, None, f"Could not clean up restored branch: {name}")
        except GitCommandError as e:
            self.ledger.record(EntityKind.BRANCH, None, f"Could not clean up restored branch {name}: {e}")
