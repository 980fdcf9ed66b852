"""Tests for error records and message sanitizing."""

from __future__ import annotations

import subprocess
from unittest.mock import patch

import pytest

from github_importer.ledger import EntityKind, ErrorLedger, ErrorRecord
from github_importer.utils import (
    InvalidPassPathError,
    PassError,
    get_pass_value,
    inject_token,
    sanitize_message,
    sanitize_url,
    strip_url_credentials,
)


@pytest.mark.unit
class TestSanitizing:
    def test_inject_token(self) -> None:
        assert inject_token("https://github.com/octo/repo.git", "tok") == "https://tok@github.com/octo/repo.git"

    def test_inject_token_without_token(self) -> None:
        assert inject_token("https://github.com/octo/repo.git", None) == "https://github.com/octo/repo.git"

    def test_inject_token_ignores_ssh(self) -> None:
        assert inject_token("git@github.com:octo/repo.git", "tok") == "git@github.com:octo/repo.git"

    def test_sanitize_url(self) -> None:
        assert sanitize_url("https://tok@github.com/octo/repo.git") == "https://github.com/octo/repo.git"
        assert sanitize_url("https://github.com/octo/repo.git") == "https://github.com/octo/repo.git"
        assert sanitize_url(None) is None

    def test_strip_url_credentials_in_text(self) -> None:
        text = "fatal: unable to access 'https://user:pw@github.com/octo/repo.git/': 403"
        assert strip_url_credentials(text) == "fatal: unable to access 'https://github.com/octo/repo.git/': 403"

    def test_sanitize_message(self) -> None:
        assert sanitize_message("token abc leaked", ["abc", None]) == "token ***TOKEN*** leaked"


@pytest.mark.unit
class TestErrorLedger:
    def test_record_sanitizes_url_and_message(self) -> None:
        ledger = ErrorLedger(tokens=["s3cr3t"])

        entry = ledger.record(
            EntityKind.PROJECT,
            "https://s3cr3t@github.com/octo/repo.git",
            "clone of https://s3cr3t@github.com/octo/repo.git failed (s3cr3t)",
        )

        assert entry == ErrorRecord(
            kind=EntityKind.PROJECT,
            url="https://github.com/octo/repo.git",
            message="clone of https://github.com/octo/repo.git failed (***TOKEN***)",
        )

    def test_records_are_kept_in_order(self) -> None:
        ledger = ErrorLedger()
        ledger.record(EntityKind.LABEL, "u1", "first")
        ledger.record(EntityKind.ISSUE, None, "second")

        assert len(ledger) == 2
        assert [entry.message for entry in ledger] == ["first", "second"]
        assert ledger.errors[1].kind is EntityKind.ISSUE

    def test_errors_returns_a_copy(self) -> None:
        ledger = ErrorLedger()
        ledger.record(EntityKind.LABEL, None, "x")
        ledger.errors.clear()
        assert len(ledger) == 1

    def test_record_logs_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        ErrorLedger().record(EntityKind.RELEASE, "https://api.github.com/r/1", "bad tag")
        assert "Failed to import release https://api.github.com/r/1: bad tag" in caplog.text


@pytest.mark.unit
class TestGetPassValue:
    def test_invalid_path_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid pass path"):
            get_pass_value("../etc/passwd")

    def test_pass_not_installed(self) -> None:
        with (
            patch("github_importer.utils.subprocess.run", side_effect=FileNotFoundError()),
            pytest.raises(PassError, match="not installed"),
        ):
            get_pass_value("github/cli/token")

    def test_missing_entry(self) -> None:
        error = subprocess.CalledProcessError(1, ["pass"], stderr="Error: github/x is not in the password store.")
        with (
            patch("github_importer.utils.subprocess.run", side_effect=error),
            pytest.raises(InvalidPassPathError),
        ):
            get_pass_value("github/x")

    def test_value_is_stripped(self) -> None:
        completed = subprocess.CompletedProcess(["pass"], 0, stdout="tok\n", stderr="")
        with patch("github_importer.utils.subprocess.run", return_value=completed):
            assert get_pass_value("github/cli/token") == "tok"
