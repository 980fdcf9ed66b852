from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from . import records
from .exceptions import ITEM_ERRORS, ClientError
from .labels import item_url
from .ledger import EntityKind
from .models import Milestone
from .pagination import paginate

if TYPE_CHECKING:
    from .context import ImportJob

logger: logging.Logger = logging.getLogger(__name__)


def import_milestones(job: ImportJob) -> int:
    """Create milestones in every state, keyed by their number (iid)."""
    created = 0

    try:
        for batch in paginate(job.client, f"/repos/{job.repo}/milestones", state="all"):
            for raw in batch:
                try:
                    milestone = Milestone.from_raw(raw)
                    if job.store.milestone_exists(job.project, milestone.iid):
                        continue

                    job.store.import_record(
                        records.Milestone(
                            project_id=job.project.id,
                            iid=milestone.iid,
                            title=milestone.title,
                            description=milestone.description,
                            due_date=milestone.due_date,
                            state=milestone.state,
                            created_at=milestone.created_at,
                            updated_at=milestone.updated_at,
                        )
                    )
                    created += 1
                    logger.debug(f"Created milestone #{milestone.iid}: {milestone.title}")
                except ITEM_ERRORS as e:
                    job.error(EntityKind.MILESTONE, item_url(raw), str(e))
    except ClientError as e:
        job.error(EntityKind.MILESTONE, e.url, str(e))

    logger.info(f"Imported {created} milestones")
    return created
