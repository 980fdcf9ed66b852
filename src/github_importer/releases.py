from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from . import records
from .exceptions import ITEM_ERRORS, ClientError
from .labels import item_url
from .ledger import EntityKind
from .models import Release
from .pagination import paginate

if TYPE_CHECKING:
    from .context import ImportJob

logger: logging.Logger = logging.getLogger(__name__)


def import_releases(job: ImportJob) -> int:
    """Create a release for every published tag not imported yet. Drafts are skipped."""
    created = 0

    try:
        for batch in paginate(job.client, f"/repos/{job.repo}/releases"):
            for raw in batch:
                try:
                    release = Release.from_raw(raw)
                    if release.tag is None or not release.valid:
                        continue
                    if job.store.release_exists(job.project, release.tag):
                        continue

                    job.store.import_record(
                        records.Release(
                            project_id=job.project.id,
                            tag=release.tag,
                            description=release.description,
                            created_at=release.created_at,
                            updated_at=release.updated_at,
                        )
                    )
                    created += 1
                except ITEM_ERRORS as e:
                    job.error(EntityKind.RELEASE, item_url(raw), str(e))
    except ClientError as e:
        job.error(EntityKind.RELEASE, e.url, str(e))

    logger.info(f"Imported {created} releases")
    return created
