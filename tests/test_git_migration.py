"""Tests for repository and wiki mirroring."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest

from github_importer.exceptions import GitCommandError
from github_importer.git_migration import mirror_repository, mirror_wiki
from github_importer.ledger import EntityKind

if TYPE_CHECKING:
    from github_importer.context import ImportJob
    from tests.fakes import FakeRepository


@pytest.mark.unit
class TestMirrorRepository:
    def test_remote_carries_token_and_is_fetched(self, job: ImportJob, repository: FakeRepository) -> None:
        assert mirror_repository(job)

        assert repository.remotes == {"github": "https://s3cr3t@github.com/octo/repo.git"}
        assert repository.mirrors == {"github"}
        assert repository.fetched == ["github"]

    def test_enterprise_host(self, job: ImportJob, repository: FakeRepository) -> None:
        job.options.api_url = "https://ghe.example.com/api/v3"

        mirror_repository(job)

        assert repository.remotes["github"] == "https://s3cr3t@ghe.example.com/octo/repo.git"

    def test_fetch_failure_is_recorded_without_token(self, job: ImportJob, repository: FakeRepository) -> None:
        repository.fetch_error = "fatal: could not read from https://s3cr3t@github.com/octo/repo.git"

        assert not mirror_repository(job)

        [error] = job.ledger.errors
        assert error.kind is EntityKind.PROJECT
        assert error.url == "https://github.com/octo/repo.git"
        assert "s3cr3t" not in error.message


@pytest.mark.unit
class TestMirrorWiki:
    def test_wiki_is_cloned(self, job: ImportJob, wiki_import: MagicMock) -> None:
        assert mirror_wiki(job)

        wiki_import.assert_called_once_with(
            job.project.wiki_repository_path, "https://s3cr3t@github.com/octo/repo.wiki.git"
        )

    def test_existing_wiki_is_left_alone(self, job: ImportJob, wiki_import: MagicMock) -> None:
        wiki = Path(job.project.wiki_repository_path)
        wiki.mkdir(parents=True)
        (wiki / "HEAD").write_text("ref: refs/heads/master\n")

        assert not mirror_wiki(job)
        wiki_import.assert_not_called()

    @pytest.mark.parametrize(
        "stderr",
        [
            "git clone failed: remote: Repository not exported.",
            "git clone failed: remote: Repository not found.\nfatal: repository 'https://github.com/octo/repo.wiki.git/' not found",
        ],
    )
    def test_empty_wiki_is_not_an_error(self, job: ImportJob, wiki_import: MagicMock, stderr: str) -> None:
        wiki_import.side_effect = GitCommandError(stderr)

        assert not mirror_wiki(job)
        assert job.ledger.errors == []

    def test_other_failures_are_recorded(self, job: ImportJob, wiki_import: MagicMock) -> None:
        wiki_import.side_effect = GitCommandError("git clone failed: fatal: early EOF")

        assert not mirror_wiki(job)

        [error] = job.ledger.errors
        assert error.kind is EntityKind.WIKI
        assert error.url == "https://github.com/octo/repo.wiki.git"

    @pytest.mark.parametrize(
        "stderr",
        [
            "git clone failed: remote: Repository not found.\nfatal: Authentication failed",
            "git clone failed: fatal: repository 'https://github.com/octo/other.wiki.git/' not found",
        ],
    )
    def test_not_found_for_another_url_is_recorded(self, job: ImportJob, wiki_import: MagicMock, stderr: str) -> None:
        wiki_import.side_effect = GitCommandError(stderr)

        assert not mirror_wiki(job)
        assert [e.kind for e in job.ledger] == [EntityKind.WIKI]
