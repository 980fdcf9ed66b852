"""
Pull request import from GitHub.

Each pull request becomes a merge request with an empty diff snapshot,
followed by its review comments and its conversation comments. The
branches both sides point at are restored locally for the duration of
the import (see ``branches.BranchReconciler``).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from . import records
from .comments import import_comments
from .exceptions import ITEM_ERRORS, ClientError
from .labels import item_url
from .ledger import EntityKind
from .models import PullRequest
from .pagination import paginate

if TYPE_CHECKING:
    from .branches import BranchReconciler, DiffRefs
    from .context import ImportJob
    from .identity import IdentityResolver

logger: logging.Logger = logging.getLogger(__name__)


def _create_merge_request(
    job: ImportJob, resolver: IdentityResolver, pull_request: PullRequest, refs: DiffRefs
) -> records.MergeRequest:
    # Resolve the author first: format_description depends on the outcome.
    author_id = resolver.resolve_user(pull_request.author, job.creator_id)

    merge_request = job.store.import_record(
        records.MergeRequest(
            iid=pull_request.iid,
            source_project_id=job.project.id,
            target_project_id=job.project.id,
            title=pull_request.title,
            description=resolver.format_description(pull_request.description, pull_request.author),
            source_branch=refs.source_branch,
            source_branch_sha=pull_request.source.sha,
            target_branch=refs.target_branch,
            target_branch_sha=pull_request.target.sha,
            state=pull_request.state,
            milestone_id=resolver.resolve_milestone(pull_request.milestone),
            author_id=author_id,
            assignee_id=resolver.resolve_user(pull_request.assignee),
            created_at=pull_request.created_at,
            updated_at=pull_request.updated_at,
        )
    )
    job.store.import_record(
        records.MergeRequestDiff(merge_request_id=merge_request.id, state="empty", created_at=pull_request.created_at)
    )
    return merge_request


def import_pull_requests(job: ImportJob, resolver: IdentityResolver, reconciler: BranchReconciler) -> int:
    """Import pull requests in creation order, skipping those already imported.

    Pull requests missing a branch ref, SHA or repository on either side
    are skipped without an error record.

    Returns:
        Number of merge requests created
    """
    created = 0

    try:
        pages = paginate(job.client, f"/repos/{job.repo}/pulls", state="all", sort="created", direction="asc")
        for batch in pages:
            for raw in batch:
                try:
                    pull_request = PullRequest.from_raw(raw)
                except ITEM_ERRORS as e:
                    job.error(EntityKind.PULL_REQUEST, item_url(raw), str(e))
                    continue

                if job.store.merge_request_exists(job.project, pull_request.iid):
                    continue
                if not pull_request.valid:
                    logger.debug(f"Skipping pull request #{pull_request.iid}: source or target branch unknown")
                    continue

                try:
                    with reconciler.restore(pull_request) as refs:
                        merge_request = _create_merge_request(job, resolver, pull_request, refs)

                        import_comments(
                            job,
                            resolver,
                            merge_request,
                            EntityKind.REVIEW_COMMENT,
                            f"/repos/{job.repo}/pulls/{pull_request.iid}/comments",
                        )
                        import_comments(
                            job,
                            resolver,
                            merge_request,
                            EntityKind.COMMENT,
                            f"/repos/{job.repo}/issues/{pull_request.iid}/comments",
                        )
                    created += 1
                    logger.debug(f"Created merge request !{pull_request.iid}: {pull_request.title}")
                except ITEM_ERRORS as e:
                    job.error(EntityKind.PULL_REQUEST, pull_request.url, str(e))
    except ClientError as e:
        job.error(EntityKind.PULL_REQUEST, e.url, str(e))

    logger.info(f"Imported {created} pull requests")
    return created
