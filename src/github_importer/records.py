"""Local records written by the importer.

Imported tables carry no ``onupdate`` hooks or defaults on their
timestamps: they store exactly what the remote reported.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, String, Table, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models."""
    pass


merge_request_labels = Table(
    "merge_request_labels",
    Base.metadata,
    Column("merge_request_id", ForeignKey("merge_requests.id", ondelete="CASCADE"), primary_key=True),
    Column("label_id", ForeignKey("labels.id", ondelete="CASCADE"), primary_key=True),
)

issue_labels = Table(
    "issue_labels",
    Base.metadata,
    Column("issue_id", ForeignKey("issues.id", ondelete="CASCADE"), primary_key=True),
    Column("label_id", ForeignKey("labels.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    """A local account."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True)

    emails: Mapped[list["UserEmail"]] = relationship(back_populates="user", cascade="all, delete-orphan")
    identities: Mapped[list["Identity"]] = relationship(back_populates="user", cascade="all, delete-orphan")


class UserEmail(Base):
    """A secondary email address of a local account."""
    __tablename__ = "user_emails"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    user: Mapped[User] = relationship(back_populates="emails")


class Identity(Base):
    """Link between a local account and an account on an external provider."""
    __tablename__ = "identities"
    __table_args__ = (
        UniqueConstraint("provider", "extern_uid", name="uq_identity_provider_uid"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    extern_uid: Mapped[str] = mapped_column(String(255), nullable=False)

    user: Mapped[User] = relationship(back_populates="identities")


class Project(Base):
    """The project receiving an import."""
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    path_with_namespace: Mapped[str] = mapped_column(String(500), unique=True, nullable=False)
    creator_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    import_source: Mapped[Optional[str]] = mapped_column(String(500))
    repository_path: Mapped[str] = mapped_column(String(1000), nullable=False)

    @property
    def wiki_repository_path(self) -> str:
        return self.repository_path.removesuffix(".git") + ".wiki.git"


class Label(Base):
    __tablename__ = "labels"
    __table_args__ = (
        UniqueConstraint("project_id", "title", name="uq_label_project_title"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    color: Mapped[str] = mapped_column(String(7), nullable=False)


class Milestone(Base):
    __tablename__ = "milestones"
    __table_args__ = (
        UniqueConstraint("project_id", "iid", name="uq_milestone_project_iid"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    iid: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    due_date: Mapped[Optional[date]] = mapped_column(Date)
    state: Mapped[str] = mapped_column(String(20), nullable=False)  # "active" or "closed"
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime)


class MergeRequest(Base):
    __tablename__ = "merge_requests"
    __table_args__ = (
        UniqueConstraint("source_project_id", "iid", name="uq_merge_request_source_project_iid"),
        Index("idx_merge_request_target_project_iid", "target_project_id", "iid"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    iid: Mapped[int] = mapped_column(Integer, nullable=False)
    source_project_id: Mapped[int] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    target_project_id: Mapped[int] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    source_branch: Mapped[str] = mapped_column(String(255), nullable=False)
    source_branch_sha: Mapped[Optional[str]] = mapped_column(String(40))
    target_branch: Mapped[str] = mapped_column(String(255), nullable=False)
    target_branch_sha: Mapped[Optional[str]] = mapped_column(String(40))
    state: Mapped[str] = mapped_column(String(20), nullable=False)  # "opened", "closed" or "merged"
    milestone_id: Mapped[Optional[int]] = mapped_column(ForeignKey("milestones.id", ondelete="SET NULL"))
    author_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    assignee_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    labels: Mapped[list[Label]] = relationship(secondary=merge_request_labels)
    diffs: Mapped[list["MergeRequestDiff"]] = relationship(cascade="all, delete-orphan")


class MergeRequestDiff(Base):
    """Diff snapshot of a merge request; imports start with an empty one."""
    __tablename__ = "merge_request_diffs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    merge_request_id: Mapped[int] = mapped_column(
        ForeignKey("merge_requests.id", ondelete="CASCADE"), nullable=False
    )
    state: Mapped[str] = mapped_column(String(20), nullable=False, default="empty")
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime)


class Issue(Base):
    __tablename__ = "issues"
    __table_args__ = (
        UniqueConstraint("project_id", "iid", name="uq_issue_project_iid"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    iid: Mapped[int] = mapped_column(Integer, nullable=False)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    state: Mapped[str] = mapped_column(String(20), nullable=False)  # "opened" or "closed"
    milestone_id: Mapped[Optional[int]] = mapped_column(ForeignKey("milestones.id", ondelete="SET NULL"))
    author_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    assignee_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    labels: Mapped[list[Label]] = relationship(secondary=issue_labels)


class Note(Base):
    """A comment attached to a merge request or an issue."""
    __tablename__ = "notes"
    __table_args__ = (
        Index("idx_note_noteable", "noteable_type", "noteable_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    noteable_type: Mapped[str] = mapped_column(String(50), nullable=False)  # "MergeRequest" or "Issue"
    noteable_id: Mapped[int] = mapped_column(Integer, nullable=False)
    author_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    note: Mapped[Optional[str]] = mapped_column(Text)
    commit_id: Mapped[Optional[str]] = mapped_column(String(40))
    line_code: Mapped[Optional[str]] = mapped_column(String(255))
    type: Mapped[Optional[str]] = mapped_column(String(50))  # "DiffNote" for inline review comments
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime)


class Release(Base):
    __tablename__ = "releases"
    __table_args__ = (
        UniqueConstraint("project_id", "tag", name="uq_release_project_tag"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    tag: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
