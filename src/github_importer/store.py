"""Record store used by the synchronizers.

Two kinds of operations live here: existence checks by natural key, and
``import_record``, the bulk-import write path. Imported records are
written as-is; the only checks applied are the database constraints.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, TypeVar

from sqlalchemy import func, select

from .records import Identity, Issue, Label, MergeRequest, Milestone, Project, Release, User, UserEmail

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from .records import Base

logger: logging.Logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound="Base")


class RecordStore:
    """Project-scoped queries and writes over a SQLAlchemy session."""

    def __init__(self, session: Session) -> None:
        self.session: Session = session

    def commit(self) -> None:
        self.session.commit()

    def import_record(self, record: RecordT) -> RecordT:
        """Insert a record inside a SAVEPOINT.

        A constraint violation only rolls back this record; everything
        written before it in the current transaction is kept.
        """
        with self.session.begin_nested():
            self.session.add(record)
            self.session.flush()
        return record

    # Labels

    def label_exists(self, project: Project, title: str) -> bool:
        stmt = select(Label.id).where(Label.project_id == project.id, Label.title == title).limit(1)
        return self.session.scalar(stmt) is not None

    def label_ids_by_title(self, project: Project) -> dict[str, int]:
        stmt = select(Label.title, Label.id).where(Label.project_id == project.id)
        return {title: label_id for title, label_id in self.session.execute(stmt)}

    def labels_by_id(self, label_ids: set[int]) -> list[Label]:
        if not label_ids:
            return []
        return list(self.session.scalars(select(Label).where(Label.id.in_(label_ids))))

    # Milestones

    def milestone_id(self, project: Project, iid: int) -> int | None:
        stmt = select(Milestone.id).where(Milestone.project_id == project.id, Milestone.iid == iid)
        return self.session.scalar(stmt)

    def milestone_exists(self, project: Project, iid: int) -> bool:
        return self.milestone_id(project, iid) is not None

    # Merge requests

    def merge_request_exists(self, project: Project, iid: int) -> bool:
        stmt = (
            select(MergeRequest.id)
            .where(MergeRequest.source_project_id == project.id, MergeRequest.iid == iid)
            .limit(1)
        )
        return self.session.scalar(stmt) is not None

    def find_merge_request(self, project: Project, iid: int) -> MergeRequest | None:
        stmt = select(MergeRequest).where(MergeRequest.target_project_id == project.id, MergeRequest.iid == iid)
        return self.session.scalar(stmt)

    def add_labels(self, record: MergeRequest | Issue, labels: list[Label]) -> None:
        """Merge ``labels`` into the labels of ``record``; existing ones are kept."""
        with self.session.begin_nested():
            for label in labels:
                if label not in record.labels:
                    record.labels.append(label)
            self.session.flush()

    # Issues

    def issue_exists(self, project: Project, iid: int) -> bool:
        stmt = select(Issue.id).where(Issue.project_id == project.id, Issue.iid == iid).limit(1)
        return self.session.scalar(stmt) is not None

    # Releases

    def release_exists(self, project: Project, tag: str) -> bool:
        stmt = select(Release.id).where(Release.project_id == project.id, Release.tag == tag).limit(1)
        return self.session.scalar(stmt) is not None

    # Identities

    def find_user_by_external_uid(self, provider: str, extern_uid: str) -> int | None:
        stmt = select(Identity.user_id).where(Identity.provider == provider, Identity.extern_uid == extern_uid)
        return self.session.scalar(stmt)

    def find_user_by_any_email(self, email: str) -> int | None:
        """Match an email against primary and secondary addresses, ignoring case."""
        email = email.strip().lower()
        user_id = self.session.scalar(select(User.id).where(func.lower(User.email) == email))
        if user_id is not None:
            return user_id
        return self.session.scalar(select(UserEmail.user_id).where(func.lower(UserEmail.email) == email))
