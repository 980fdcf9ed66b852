"""
Comment import for merge requests and issues.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from . import records
from .exceptions import ITEM_ERRORS, ClientError
from .labels import item_url
from .models import Comment
from .pagination import paginate

if TYPE_CHECKING:
    from .context import ImportJob
    from .identity import IdentityResolver
    from .ledger import EntityKind

logger: logging.Logger = logging.getLogger(__name__)


def _noteable_type(noteable: records.MergeRequest | records.Issue) -> str:
    return "MergeRequest" if isinstance(noteable, records.MergeRequest) else "Issue"


def import_comments(
    job: ImportJob,
    resolver: IdentityResolver,
    noteable: records.MergeRequest | records.Issue,
    kind: EntityKind,
    url: str,
) -> int:
    """Import every comment of ``url`` as a note on ``noteable``.

    Review comments keep their commit id and line code. Writing notes
    never touches the noteable itself, so its ``updated_at`` stays as
    imported.

    Args:
        job: The running import
        resolver: Identity resolver of the run
        noteable: Merge request or issue owning the comments
        kind: Entity kind used for error records
        url: API path of the comment collection

    Returns:
        Number of notes created
    """
    created = 0
    noteable_type = _noteable_type(noteable)

    try:
        for batch in paginate(job.client, url):
            for raw in batch:
                try:
                    comment = Comment.from_raw(raw)
                    author_id = resolver.resolve_user(comment.author, job.creator_id)

                    job.store.import_record(
                        records.Note(
                            project_id=job.project.id,
                            noteable_type=noteable_type,
                            noteable_id=noteable.id,
                            note=resolver.format_description(comment.note, comment.author),
                            commit_id=comment.commit_id,
                            line_code=comment.line_code,
                            author_id=author_id,
                            type=comment.type,
                            created_at=comment.created_at,
                            updated_at=comment.updated_at,
                        )
                    )
                    created += 1
                except ITEM_ERRORS as e:
                    job.error(kind, item_url(raw), str(e))
    except ClientError as e:
        job.error(kind, e.url, str(e))

    logger.debug(f"Imported {created} comments on {noteable_type} #{noteable.iid}")
    return created
