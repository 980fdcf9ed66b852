"""Mapping of remote users, labels and milestones to local ids."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from .exceptions import ClientError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .context import ImportJob
    from .models import Milestone, User

logger: logging.Logger = logging.getLogger(__name__)

PROVIDER: Final[str] = "github"


class IdentityResolver:
    """Resolves remote references against local records.

    User lookups are cached on the job by remote id, including misses, so
    a user who authored thousands of comments costs one lookup. Only the
    lookup result is cached: the fallback depends on the role the user
    appears in and is applied on every call.
    """

    def __init__(self, job: ImportJob) -> None:
        self.job: ImportJob = job

    def resolve_user(self, user: User | None, fallback_id: int | None = None) -> int | None:
        if user is None:
            return None
        if user.id in self.job.user_ids:
            local_id = self.job.user_ids[user.id]
        else:
            local_id = self._find_by_external_uid(user) or self._find_by_email(user)
            self.job.user_ids[user.id] = local_id
            self.job.known_users[user.id] = local_id is not None
            logger.debug(f"Resolved GitHub user {user.login} to {local_id}")

        return local_id if local_id is not None else fallback_id

    def _find_by_external_uid(self, user: User) -> int | None:
        return self.job.store.find_user_by_external_uid(PROVIDER, str(user.id))

    def _find_by_email(self, user: User) -> int | None:
        email = user.email or self._fetch_public_email(user)
        if not email:
            return None
        return self.job.store.find_user_by_any_email(email)

    def _fetch_public_email(self, user: User) -> str | None:
        try:
            profile = self.job.client.get_object(f"/users/{user.login}")
        except ClientError as e:
            logger.debug(f"Could not fetch profile of {user.login}: {e}")
            return None
        return profile.get("email")

    def is_known(self, user: User | None) -> bool:
        """Whether ``user`` resolved to a real local account."""
        return user is not None and self.job.known_users.get(user.id, False)

    def resolve_milestone(self, milestone: Milestone | None) -> int | None:
        if milestone is None:
            return None
        milestone_id = self.job.store.milestone_id(self.job.project, milestone.iid)
        if milestone_id is None:
            logger.debug(f"Milestone #{milestone.iid} not found locally")
        return milestone_id

    def cache_labels(self) -> None:
        self.job.label_ids = self.job.store.label_ids_by_title(self.job.project)

    def resolve_labels(self, names: Iterable[str]) -> set[int]:
        return {self.job.label_ids[name] for name in names if name in self.job.label_ids}

    def format_description(self, body: str | None, author: User | None) -> str:
        """Prefix ``body`` with its original author unless they map to a local account."""
        body = body or ""
        if author is None or self.is_known(author):
            return body
        return f"*Created by: {author.login}*\n\n{body}"
