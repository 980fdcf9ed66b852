"""
Label import from GitHub.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from . import records
from .exceptions import ITEM_ERRORS, ClientError
from .ledger import EntityKind
from .models import Label
from .pagination import paginate

if TYPE_CHECKING:
    from .context import ImportJob
    from .identity import IdentityResolver

logger: logging.Logger = logging.getLogger(__name__)


def item_url(raw: Any) -> str | None:
    """Best-effort API URL of a raw item, for error records."""
    return raw.get("url") if isinstance(raw, dict) else None


def import_labels(job: ImportJob, resolver: IdentityResolver) -> int:
    """Create the project labels that do not exist yet, then cache title -> id.

    Labels are matched by exact title. Existing labels are never updated, so
    on duplicate titles the first occurrence wins.

    Returns:
        Number of labels created
    """
    created = 0

    try:
        for batch in paginate(job.client, f"/repos/{job.repo}/labels"):
            for raw in batch:
                try:
                    label = Label.from_raw(raw)
                    if job.store.label_exists(job.project, label.title):
                        continue

                    job.store.import_record(
                        records.Label(project_id=job.project.id, title=label.title, color=label.color)
                    )
                    created += 1
                    logger.debug(f"Created label {label.title}")
                except ITEM_ERRORS as e:
                    job.error(EntityKind.LABEL, item_url(raw), str(e))
    except ClientError as e:
        job.error(EntityKind.LABEL, e.url, str(e))

    resolver.cache_labels()
    logger.info(f"Imported {created} labels")
    return created
