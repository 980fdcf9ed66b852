"""End-to-end imports through the Importer, against in-memory fakes."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select

from github_importer.context import ImportJob
from github_importer.ledger import EntityKind
from github_importer.orchestrator import Importer, ImportStage
from github_importer.records import Issue, Label, MergeRequest, Milestone, Note, Release
from tests.fakes import (
    comment_payload,
    issue_payload,
    label_payload,
    milestone_payload,
    pull_request_payload,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from github_importer.records import User
    from tests.fakes import FakeClient, FakeRepository

REPO = "/repos/octo/repo"


def _count(session: Session, model: type) -> int:
    return session.scalar(select(func.count()).select_from(model)) or 0


@pytest.fixture
def remote(client: FakeClient) -> FakeClient:
    """One label, one closed milestone and one closed pull request with an inline comment."""
    client.add(f"{REPO}/labels", [label_payload("bug", "f00")])
    client.add(f"{REPO}/milestones", [milestone_payload(1, "v1", state="closed")])
    client.add(f"{REPO}/pulls", [pull_request_payload(5, milestone=milestone_payload(1, "v1", state="closed"))])
    client.add(
        f"{REPO}/pulls/5/comments",
        [comment_payload(1, "Typo here", path="README.md", diff_hunk="@@ -1 +1 @@\n-helo\n+hello", commit_id="a" * 40)],
    )
    client.add(f"{REPO}/issues", [issue_payload(5, labels=["bug"], pull_request=True)])
    return client


@pytest.mark.integration
class TestImporter:
    def test_full_import(
        self,
        session: Session,
        job: ImportJob,
        remote: FakeClient,
        repository: FakeRepository,
        owner: User,
        wiki_import: MagicMock,
    ) -> None:
        importer = Importer(job)

        errors = importer.execute()

        assert errors == []
        assert importer.stage is ImportStage.DONE
        assert session.scalar(select(Label.color)) == "#f00"
        assert session.scalar(select(Milestone.state)) == "closed"

        merge_request = session.scalars(select(MergeRequest)).one()
        assert merge_request.state == "closed"
        assert merge_request.author_id == owner.id
        assert merge_request.description.startswith("*Created by: stranger*\n\n")
        assert merge_request.milestone_id is not None
        assert [label.title for label in merge_request.labels] == ["bug"]

        note = session.scalars(select(Note)).one()
        assert note.type == "DiffNote"
        assert note.author_id == owner.id
        assert note.note == "*Created by: stranger*\n\nTypo here"

        assert not any(name.startswith("gh-") for name in repository.branches)
        assert repository.fetched == ["github"]
        assert repository.cache_expired >= 1
        wiki_import.assert_called_once()

    def test_second_run_creates_nothing(
        self,
        session: Session,
        job: ImportJob,
        remote: FakeClient,
        repository: FakeRepository,
        wiki_import: MagicMock,
    ) -> None:
        Importer(job).execute()
        rerun = ImportJob(
            project=job.project, repository=repository, store=job.store, client=remote, options=job.options
        )

        assert Importer(rerun).execute() == []

        assert _count(session, Label) == 1
        assert _count(session, Milestone) == 1
        assert _count(session, MergeRequest) == 1
        assert _count(session, Note) == 1
        assert _count(session, Issue) == 0

    def test_missing_milestone_is_silent(
        self, session: Session, job: ImportJob, client: FakeClient, wiki_import: MagicMock
    ) -> None:
        client.add(f"{REPO}/pulls", [pull_request_payload(5, milestone=milestone_payload(99, "deleted"))])

        assert Importer(job).execute() == []
        assert session.scalar(select(MergeRequest.milestone_id)) is None

    def test_invalid_pull_request_is_silent(
        self, session: Session, job: ImportJob, client: FakeClient, wiki_import: MagicMock
    ) -> None:
        client.add(f"{REPO}/pulls", [pull_request_payload(5, head_repo=None)])

        assert Importer(job).execute() == []
        assert _count(session, MergeRequest) == 0

    def test_releases_only_when_enabled(
        self, session: Session, job: ImportJob, client: FakeClient, wiki_import: MagicMock
    ) -> None:
        client.add(f"{REPO}/releases", [{"tag_name": "v1.0", "body": "First", "draft": False}])

        Importer(job).execute()
        assert _count(session, Release) == 0

        job.options.include_releases = True
        Importer(job).execute()
        assert _count(session, Release) == 1


@pytest.mark.unit
class TestImporterFailures:
    def test_comment_failure_still_cleans_up_branches(
        self,
        session: Session,
        job: ImportJob,
        remote: FakeClient,
        repository: FakeRepository,
        wiki_import: MagicMock,
    ) -> None:
        remote.fail(f"{REPO}/pulls/5/comments", "500 Internal Server Error")

        errors = Importer(job).execute()

        assert [error.kind for error in errors] == [EntityKind.REVIEW_COMMENT]
        assert _count(session, MergeRequest) == 1
        assert repository.branches == {}

    def test_mirror_failure_does_not_stop_later_stages(
        self,
        session: Session,
        job: ImportJob,
        remote: FakeClient,
        repository: FakeRepository,
        wiki_import: MagicMock,
    ) -> None:
        repository.fetch_error = "fatal: repository not reachable"

        errors = Importer(job).execute()

        assert [error.kind for error in errors] == [EntityKind.PROJECT]
        assert _count(session, Label) == 1
        assert _count(session, MergeRequest) == 1
        wiki_import.assert_called_once()

    def test_stage_work_is_committed(
        self, session: Session, job: ImportJob, remote: FakeClient, wiki_import: MagicMock
    ) -> None:
        Importer(job).execute()
        session.rollback()

        assert _count(session, Label) == 1
        assert _count(session, MergeRequest) == 1
