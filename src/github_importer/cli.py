"""
Command-line interface for the GitHub project importer.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy import select

from . import github_utils as ghu
from .client import GitHubClient
from .context import ImportJob, ImportOptions
from .database import create_db_engine, get_database_url, session_factory
from .exceptions import ImporterError
from .orchestrator import Importer
from .records import Project, User
from .repository import LocalRepository
from .store import RecordStore
from .utils import PassError, setup_logging

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from .ledger import ErrorRecord

logger: logging.Logger = logging.getLogger(__name__)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Import a GitHub repository with its history into a local project")

    # Positional arguments
    _ = parser.add_argument("github_repo", help="GitHub repository path (owner/repo)")
    _ = parser.add_argument("project_path", help="Local project path (namespace/project)")

    _ = parser.add_argument(
        "--owner", help="Username of the local account owning the project; required if the project does not exist"
    )
    _ = parser.add_argument(
        "--database-url", help="SQLAlchemy database URL (default: $GITHUB_IMPORTER_DATABASE_URL or sqlite:///importer.db)"
    )
    _ = parser.add_argument(
        "--storage-path", default="repositories", help="Directory holding local git repositories (default: repositories)"
    )
    _ = parser.add_argument(
        "--github-pass-token", help="Path for GitHub token in pass utility (default: $GITHUB_TOKEN or github/cli/token)"
    )
    _ = parser.add_argument("--api-url", default=ghu.DEFAULT_API_URL, help="GitHub API base URL")
    _ = parser.add_argument("--include-releases", action="store_true", help="Also import releases")
    _ = parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return parser.parse_args(argv)


def get_or_create_project(
    session: Session, project_path: str, github_repo: str, owner: str | None, storage_path: str
) -> Project:
    """Load the target project, creating it when missing.

    Raises:
        ImporterError: If the project must be created and the owner is missing or unknown
    """
    project = session.scalar(select(Project).where(Project.path_with_namespace == project_path))
    if project is not None:
        if project.import_source != github_repo:
            project.import_source = github_repo
        return project

    if not owner:
        msg = f"Project {project_path} does not exist; pass --owner to create it"
        raise ImporterError(msg)

    creator_id = session.scalar(select(User.id).where(User.username == owner))
    if creator_id is None:
        msg = f"Unknown owner: {owner}"
        raise ImporterError(msg)

    project = Project(
        path_with_namespace=project_path,
        creator_id=creator_id,
        import_source=github_repo,
        repository_path=str(Path(storage_path) / f"{project_path}.git"),
    )
    session.add(project)
    session.commit()
    logger.info(f"Created project {project_path}")
    return project


def _print_error_report(github_repo: str, project_path: str, errors: list[ErrorRecord]) -> None:
    print(f"Import of {github_repo} into {project_path}: {'PASSED' if not errors else 'COMPLETED WITH ERRORS'}")
    for error in errors:
        print(f"  - [{error.kind.value}] {error.url or '-'}: {error.message}")


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)

    verbose: bool = getattr(args, "verbose", False)
    setup_logging(verbose=verbose)

    try:
        token = ghu.get_token(args.github_pass_token)
        engine = create_db_engine(get_database_url(args.database_url))

        with session_factory(engine)() as session:
            project = get_or_create_project(
                session, args.project_path, args.github_repo, args.owner, args.storage_path
            )
            github = ghu.get_client(token, base_url=args.api_url)
            job = ImportJob(
                project=project,
                repository=LocalRepository(project.repository_path),
                store=RecordStore(session),
                client=GitHubClient(github),
                options=ImportOptions(token=token, api_url=args.api_url, include_releases=args.include_releases),
            )
            errors = Importer(job).execute()

        # Partial imports still exit 0
        _print_error_report(args.github_repo, args.project_path, errors)

    except (ImporterError, PassError):
        logger.exception("Import failed")
        sys.exit(1)
