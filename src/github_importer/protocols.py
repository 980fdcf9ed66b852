"""Protocols for the collaborators the importer depends on.

The importer core only talks to these interfaces:

1. CollectionClient: authenticated, paginated reads from the remote platform
2. RepositoryEngine: the local git repository the project owns

``GitHubClient`` and ``LocalRepository`` are the production implementations;
tests substitute mocks.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .client import Page


class CollectionClient(Protocol):
    """Protocol for reading collections from the remote platform."""

    def get(self, url: str, **params: Any) -> Page:
        """Fetch one page of a collection.

        Args:
            url: API path for the first page, or the ``next_url`` of the previous page
            **params: Query parameters, only meaningful for the first page

        Raises:
            ClientError: On transport, authorization or HTTP failures
        """
        ...

    def get_object(self, url: str) -> dict[str, Any]:
        """Fetch a single JSON object.

        Raises:
            ClientError: On transport, authorization or HTTP failures
        """
        ...


class RepositoryEngine(Protocol):
    """Protocol for the local git repository of the target project."""

    def exists(self) -> bool: ...

    def create_repository(self) -> None: ...

    def add_remote(self, name: str, url: str) -> None: ...

    def set_remote_as_mirror(self, name: str) -> None: ...

    def fetch_remote(self, name: str, *, forced: bool = False) -> None:
        """Fetch all refs of a remote.

        Raises:
            GitCommandError: If the fetch fails
        """
        ...

    def branch_exists(self, name: str) -> bool: ...

    def create_branch(self, name: str, sha: str) -> None:
        """Create a branch pointing at ``sha``.

        Raises:
            GitCommandError: If the commit is unknown or the name is invalid
        """
        ...

    def delete_branch(self, name: str) -> None:
        """Delete a branch.

        Raises:
            BranchNotFoundError: If the branch does not exist
        """
        ...

    def expire_content_cache(self) -> None: ...
