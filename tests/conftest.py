"""
Pytest configuration and fixtures.

Integration tests (full imports against the fakes in ``tests/fakes.py``)
fail on any WARNING logged by the code under test: the importer logs a
warning for every error it records, and these tests expect none.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import pytest
from typing_extensions import override

from github_importer.context import ImportJob, ImportOptions
from github_importer.database import create_db_engine, session_factory
from github_importer.identity import IdentityResolver
from github_importer.records import Project, User
from github_importer.store import RecordStore
from tests.fakes import FakeClient, FakeRepository

if TYPE_CHECKING:
    from collections.abc import Generator

    from sqlalchemy.orm import Session

# Store warning records during test execution
_integration_test_warnings: dict[str, list[logging.LogRecord]] = {}


class IntegrationTestWarningHandler(logging.Handler):
    """Logging handler capturing warnings during integration tests."""

    test_nodeid: str

    def __init__(self, test_nodeid: str) -> None:
        super().__init__()
        self.test_nodeid = test_nodeid
        self.setLevel(logging.WARNING)

    @override
    def emit(self, record: logging.LogRecord) -> None:
        if record.name.startswith("github_importer"):
            _integration_test_warnings.setdefault(self.test_nodeid, []).append(record)


@pytest.fixture(autouse=True)
def fail_on_log_warnings_for_integration_tests(
    request: pytest.FixtureRequest,
) -> Generator[None]:
    """Capture WARNING logs from the importer during integration tests."""
    if request.node.get_closest_marker("integration") is None:
        yield
        return

    test_nodeid = request.node.nodeid
    _integration_test_warnings[test_nodeid] = []

    handler = IntegrationTestWarningHandler(test_nodeid)
    root_logger = logging.getLogger()
    root_logger.addHandler(handler)

    try:
        yield
    finally:
        root_logger.removeHandler(handler)


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[None]
) -> Generator[None]:  # type: ignore[misc]
    """Mark a passed integration test as failed if it logged warnings."""
    outcome = yield
    report = outcome.get_result()

    if call.when == "call" and report.outcome == "passed":
        warning_records = _integration_test_warnings.get(item.nodeid, [])

        if warning_records:
            warning_messages = [
                f"{record.levelname}: {record.getMessage()} (in {record.name}:{record.lineno})"
                for record in warning_records
            ]
            report.outcome = "failed"
            report.longrepr = f"Integration test failed: {len(warning_records)} warning(s) detected:\n" + "\n".join(
                f"  - {msg}" for msg in warning_messages
            )

        _integration_test_warnings.pop(item.nodeid, None)


@pytest.fixture
def session() -> Generator[Session]:
    engine = create_db_engine("sqlite://")
    with session_factory(engine)() as db:
        yield db
    engine.dispose()


@pytest.fixture
def owner(session: Session) -> User:
    user = User(username="owner", email="owner@example.com")
    session.add(user)
    session.commit()
    return user


@pytest.fixture
def project(session: Session, owner: User, tmp_path: Path) -> Project:
    project = Project(
        path_with_namespace="group/project",
        creator_id=owner.id,
        import_source="octo/repo",
        repository_path=str(tmp_path / "group" / "project.git"),
    )
    session.add(project)
    session.commit()
    return project


@pytest.fixture
def store(session: Session) -> RecordStore:
    return RecordStore(session)


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def repository() -> FakeRepository:
    return FakeRepository()


@pytest.fixture
def job(project: Project, repository: FakeRepository, store: RecordStore, client: FakeClient) -> ImportJob:
    return ImportJob(
        project=project,
        repository=repository,
        store=store,
        client=client,
        options=ImportOptions(token="s3cr3t"),
    )


@pytest.fixture
def resolver(job: ImportJob) -> IdentityResolver:
    return IdentityResolver(job)


@pytest.fixture
def wiki_import() -> Generator[MagicMock]:
    """Replace the wiki clone, which would otherwise hit the network."""
    with patch("github_importer.git_migration.import_repository") as mock_import:
        yield mock_import
