"""
Issue import from GitHub.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from . import records
from .comments import import_comments
from .exceptions import ITEM_ERRORS, ClientError, ImporterError
from .labels import item_url
from .ledger import EntityKind
from .models import Issue
from .pagination import paginate

if TYPE_CHECKING:
    from .context import ImportJob
    from .identity import IdentityResolver

logger: logging.Logger = logging.getLogger(__name__)


def _merge_pull_request_labels(job: ImportJob, resolver: IdentityResolver, issue: Issue) -> None:
    """Apply the labels of a pull request, as listed by the issues API, to its merge request."""
    merge_request = job.store.find_merge_request(job.project, issue.iid)
    if merge_request is None:
        msg = f"Merge request !{issue.iid} not found"
        raise ImporterError(msg)

    labels = job.store.labels_by_id(resolver.resolve_labels(issue.labels))
    job.store.add_labels(merge_request, labels)


def _create_issue(job: ImportJob, resolver: IdentityResolver, issue: Issue) -> records.Issue:
    author_id = resolver.resolve_user(issue.author, job.creator_id)

    return job.store.import_record(
        records.Issue(
            iid=issue.iid,
            project_id=job.project.id,
            title=issue.title,
            description=resolver.format_description(issue.description, issue.author),
            state=issue.state,
            labels=job.store.labels_by_id(resolver.resolve_labels(issue.labels)),
            milestone_id=resolver.resolve_milestone(issue.milestone),
            author_id=author_id,
            assignee_id=resolver.resolve_user(issue.assignee),
            created_at=issue.created_at,
            updated_at=issue.updated_at,
        )
    )


def import_issues(job: ImportJob, resolver: IdentityResolver) -> int:
    """Import issues in creation order, with their comments.

    Every pull request is also an issue in the GitHub issues API, which is
    where its labels live. Those items never create an issue: their labels
    are merged onto the merge request imported with the same number.

    Returns:
        Number of issues created
    """
    created = 0

    try:
        pages = paginate(job.client, f"/repos/{job.repo}/issues", state="all", sort="created", direction="asc")
        for batch in pages:
            for raw in batch:
                try:
                    issue = Issue.from_raw(raw)

                    if issue.pull_request:
                        if issue.has_labels:
                            _merge_pull_request_labels(job, resolver, issue)
                        continue

                    if job.store.issue_exists(job.project, issue.iid):
                        continue

                    local_issue = _create_issue(job, resolver, issue)
                    created += 1
                    logger.debug(f"Created issue #{issue.iid}: {issue.title}")

                    if issue.has_comments:
                        import_comments(
                            job,
                            resolver,
                            local_issue,
                            EntityKind.COMMENT,
                            f"/repos/{job.repo}/issues/{issue.iid}/comments",
                        )
                except ITEM_ERRORS as e:
                    job.error(EntityKind.ISSUE, item_url(raw), str(e))
    except ClientError as e:
        job.error(EntityKind.ISSUE, e.url, str(e))

    logger.info(f"Imported {created} issues")
    return created
