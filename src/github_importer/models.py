"""Typed views of raw GitHub API payloads.

Every class decodes one payload shape with ``from_raw`` and exposes the
fields and validity predicates the synchronizers rely on. Decoding is pure:
nothing here touches the network or local storage.
"""

from __future__ import annotations

import datetime as dt
import hashlib
import re
from dataclasses import dataclass, field
from typing import Any, Literal

_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,\d+)? \+(\d+)(?:,\d+)? @@")


def parse_timestamp(value: str | None) -> dt.datetime | None:
    """Parse a GitHub ISO 8601 timestamp into a naive UTC datetime."""
    if not value:
        return None
    parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(dt.UTC).replace(tzinfo=None)
    return parsed


def parse_date(value: str | None) -> dt.date | None:
    timestamp = parse_timestamp(value)
    return timestamp.date() if timestamp else None


@dataclass
class User:
    """A GitHub account referenced as author or assignee."""

    id: int
    login: str
    email: str | None = None

    @classmethod
    def from_raw(cls, raw: dict[str, Any] | None) -> User | None:
        if not raw:
            return None
        return cls(id=raw["id"], login=raw["login"], email=raw.get("email"))


@dataclass
class Label:
    title: str
    color: str  # Always "#rrggbb"
    url: str | None = None

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> Label:
        color = raw.get("color") or "428bca"
        return cls(title=raw["name"], color=f"#{color.lstrip('#')}", url=raw.get("url"))


@dataclass
class Milestone:
    iid: int
    title: str
    description: str | None = None
    due_date: dt.date | None = None
    state: Literal["active", "closed"] = "active"
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None
    url: str | None = None

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> Milestone:
        return cls(
            iid=raw["number"],
            title=raw["title"],
            description=raw.get("description"),
            due_date=parse_date(raw.get("due_on")),
            state="closed" if raw.get("state") == "closed" else "active",
            created_at=parse_timestamp(raw.get("created_at")),
            updated_at=parse_timestamp(raw.get("updated_at")),
            url=raw.get("url"),
        )


@dataclass
class Branch:
    """One side (head or base) of a pull request."""

    ref: str | None
    sha: str | None
    repo: str | None  # "owner/name", None when the repository was deleted

    @classmethod
    def from_raw(cls, raw: dict[str, Any] | None) -> Branch:
        raw = raw or {}
        repo = raw.get("repo") or {}
        return cls(ref=raw.get("ref"), sha=raw.get("sha"), repo=repo.get("full_name"))

    @property
    def valid(self) -> bool:
        return bool(self.ref and self.sha and self.repo)

    @property
    def short_sha(self) -> str:
        return (self.sha or "")[:7]


@dataclass
class PullRequest:
    iid: int
    title: str
    description: str | None
    source: Branch
    target: Branch
    state: Literal["opened", "closed", "merged"]
    author: User | None = None
    assignee: User | None = None
    milestone: Milestone | None = None
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None
    url: str | None = None

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> PullRequest:
        if raw.get("state") == "open":
            state: Literal["opened", "closed", "merged"] = "opened"
        elif raw.get("merged_at"):
            state = "merged"
        else:
            state = "closed"

        milestone = raw.get("milestone")
        return cls(
            iid=raw["number"],
            title=raw.get("title") or "",
            description=raw.get("body"),
            source=Branch.from_raw(raw.get("head")),
            target=Branch.from_raw(raw.get("base")),
            state=state,
            author=User.from_raw(raw.get("user")),
            assignee=User.from_raw(raw.get("assignee")),
            milestone=Milestone.from_raw(milestone) if milestone else None,
            created_at=parse_timestamp(raw.get("created_at")),
            updated_at=parse_timestamp(raw.get("updated_at")),
            url=raw.get("url"),
        )

    @property
    def valid(self) -> bool:
        return self.source.valid and self.target.valid

    @property
    def opened(self) -> bool:
        return self.state == "opened"

    @property
    def cross_project(self) -> bool:
        return self.source.repo != self.target.repo

    def restored_branch_name(self, branch: Branch) -> str:
        """Name of the throwaway branch holding ``branch`` for diffing."""
        return f"gh-{branch.short_sha}/{self.iid}/{branch.ref}"


@dataclass
class Issue:
    iid: int
    title: str
    description: str | None
    state: Literal["opened", "closed"]
    labels: list[str] = field(default_factory=list)
    author: User | None = None
    assignee: User | None = None
    milestone: Milestone | None = None
    comments: int = 0
    pull_request: bool = False
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None
    url: str | None = None

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> Issue:
        milestone = raw.get("milestone")
        return cls(
            iid=raw["number"],
            title=raw.get("title") or "",
            description=raw.get("body"),
            state="opened" if raw.get("state") == "open" else "closed",
            labels=[label["name"] for label in raw.get("labels") or []],
            author=User.from_raw(raw.get("user")),
            assignee=User.from_raw(raw.get("assignee")),
            milestone=Milestone.from_raw(milestone) if milestone else None,
            comments=raw.get("comments") or 0,
            pull_request="pull_request" in raw,
            created_at=parse_timestamp(raw.get("created_at")),
            updated_at=parse_timestamp(raw.get("updated_at")),
            url=raw.get("url"),
        )

    @property
    def has_labels(self) -> bool:
        return bool(self.labels)

    @property
    def has_comments(self) -> bool:
        return self.comments > 0


def _last_line_positions(diff_hunk: str) -> tuple[int, int] | None:
    """Return (old_line, new_line) of the last line of a unified diff hunk."""
    old_pos = new_pos = 0
    last: tuple[int, int] | None = None

    for line in diff_hunk.splitlines():
        header = _HUNK_HEADER.match(line)
        if header:
            old_pos, new_pos = int(header.group(1)), int(header.group(2))
            continue
        if line.startswith("\\"):
            # "\ No newline at end of file"
            continue
        if line.startswith("+"):
            last = (old_pos, new_pos)
            new_pos += 1
        elif line.startswith("-"):
            last = (old_pos, new_pos)
            old_pos += 1
        else:
            last = (old_pos, new_pos)
            old_pos += 1
            new_pos += 1

    return last


def generate_line_code(path: str, new_line: int, old_line: int) -> str:
    return f"{hashlib.sha1(path.encode('utf-8')).hexdigest()}_{old_line}_{new_line}"  # noqa: S324


@dataclass
class Comment:
    note: str | None
    author: User | None = None
    commit_id: str | None = None
    path: str | None = None
    diff_hunk: str | None = None
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None
    url: str | None = None

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> Comment:
        return cls(
            note=raw.get("body"),
            author=User.from_raw(raw.get("user")),
            commit_id=raw.get("commit_id"),
            path=raw.get("path"),
            diff_hunk=raw.get("diff_hunk"),
            created_at=parse_timestamp(raw.get("created_at")),
            updated_at=parse_timestamp(raw.get("updated_at")),
            url=raw.get("url"),
        )

    @property
    def on_diff(self) -> bool:
        return bool(self.diff_hunk and self.path)

    @property
    def line_code(self) -> str | None:
        if not self.diff_hunk or not self.path:
            return None
        positions = _last_line_positions(self.diff_hunk)
        if positions is None:
            return None
        old_line, new_line = positions
        return generate_line_code(self.path, new_line, old_line)

    @property
    def type(self) -> str | None:
        return "DiffNote" if self.on_diff else None


@dataclass
class Release:
    tag: str | None
    description: str | None
    draft: bool = False
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None
    url: str | None = None

    @classmethod
    def from_raw(cls, raw: dict[str, Any]) -> Release:
        created_at = parse_timestamp(raw.get("created_at"))
        return cls(
            tag=raw.get("tag_name"),
            description=raw.get("body"),
            draft=bool(raw.get("draft")),
            created_at=created_at,
            updated_at=parse_timestamp(raw.get("published_at")) or created_at,
            url=raw.get("url"),
        )

    @property
    def valid(self) -> bool:
        return bool(self.tag) and not self.draft
