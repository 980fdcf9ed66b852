"""Git repository and wiki mirroring from GitHub."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from .exceptions import GitCommandError
from .ledger import EntityKind
from .repository import LocalRepository, import_repository
from .utils import inject_token

if TYPE_CHECKING:
    from .context import ImportJob

logger: logging.Logger = logging.getLogger(__name__)

REMOTE_NAME: Final[str] = "github"

# What git reports for a wiki that is enabled but has no pages yet.
_WIKI_NOT_EXPORTED: Final[str] = "repository not exported"


def _is_empty_wiki(error: str, url: str) -> bool:
    """Whether a failed wiki clone means the wiki simply has no pages.

    GitHub also answers "Repository not found" when the token lacks access,
    so a "not found" only counts when git names the wiki repository itself.
    """
    error = error.lower()
    return _WIKI_NOT_EXPORTED in error or f"repository '{url.lower()}/' not found" in error


def mirror_repository(job: ImportJob) -> bool:
    """Create the local repository and force-fetch every ref from GitHub.

    Failures are recorded; the remaining stages still run against whatever
    the local repository holds.

    Returns:
        True if the fetch succeeded
    """
    url = f"{job.options.git_url}/{job.repo}.git"

    try:
        job.repository.create_repository()
        job.repository.add_remote(REMOTE_NAME, inject_token(url, job.options.token))
        job.repository.set_remote_as_mirror(REMOTE_NAME)
        job.repository.fetch_remote(REMOTE_NAME, forced=True)
    except GitCommandError as e:
        job.error(EntityKind.PROJECT, url, str(e))
        return False

    logger.info("Repository content imported successfully")
    return True


def mirror_wiki(job: ImportJob) -> bool:
    """Clone the GitHub wiki unless the project already has a wiki repository.

    Returns:
        True if a wiki was imported
    """
    wiki_path = job.project.wiki_repository_path
    if LocalRepository(wiki_path).exists():
        logger.debug("Wiki repository already exists, skipping")
        return False

    url = f"{job.options.git_url}/{job.repo}.wiki.git"
    try:
        import_repository(wiki_path, inject_token(url, job.options.token))
    except GitCommandError as e:
        if _is_empty_wiki(str(e), url):
            logger.info("Wiki is enabled but has no pages, skipping")
            return False
        job.error(EntityKind.WIKI, url, str(e))
        return False

    logger.info("Wiki imported successfully")
    return True
