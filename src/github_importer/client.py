"""Collection client for the GitHub REST API.

Requests go through PyGithub's ``Requester``, which takes care of
authentication, the API base URL, retries and rate-limit back-off. This
module only adds what the importer needs on top: raw JSON pages and the
``rel="next"`` cursor from the ``Link`` header.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import requests
from github import GithubException
from requests.utils import parse_header_links

from .exceptions import ClientError
from .utils import sanitize_url

if TYPE_CHECKING:
    from github import Github

logger: logging.Logger = logging.getLogger(__name__)


@dataclass
class Page:
    """One page of a remote collection."""

    items: list[dict[str, Any]] = field(default_factory=list)
    next_url: str | None = None


def next_page_url(link_header: str | None) -> str | None:
    """Return the ``rel="next"`` URL of a ``Link`` header, if any."""
    if not link_header:
        return None
    for link in parse_header_links(link_header):
        if link.get("rel") == "next":
            return link.get("url")
    return None


class GitHubClient:
    """Thin GET-only client over a PyGithub ``Github`` instance."""

    def __init__(self, github: Github, per_page: int = 100) -> None:
        self._requester = github.requester
        self.per_page: int = per_page

    def _request(self, url: str, params: dict[str, Any] | None) -> tuple[dict[str, Any], Any]:
        try:
            return self._requester.requestJsonAndCheck("GET", url, parameters=params)
        except GithubException as e:
            msg = f"GitHub API request failed with status {e.status}: {e.data}"
            raise ClientError(msg, url=sanitize_url(url)) from e
        except requests.RequestException as e:
            msg = f"GitHub API request failed: {e}"
            raise ClientError(msg, url=sanitize_url(url)) from e

    def get(self, url: str, **params: Any) -> Page:
        """Fetch one page of a collection.

        ``url`` is either an API path (``/repos/o/r/labels``) or a full
        ``next`` URL returned by a previous page, which already carries its
        query string; ``params`` should then be empty.
        """
        query = {key: str(value) for key, value in params.items()}
        # A next URL already carries every query parameter, page size included
        if "?" not in url and "per_page" not in query:
            query["per_page"] = str(self.per_page)

        headers, data = self._request(url, query or None)
        if not isinstance(data, list):
            msg = f"Expected a JSON list, got {type(data).__name__}"
            raise ClientError(msg, url=sanitize_url(url))

        next_url = next_page_url(headers.get("link"))
        logger.debug(f"Fetched {len(data)} items from {url} (next: {next_url is not None})")
        return Page(items=data, next_url=next_url)

    def get_object(self, url: str) -> dict[str, Any]:
        """Fetch a single JSON object."""
        _headers, data = self._request(url, None)
        if not isinstance(data, dict):
            msg = f"Expected a JSON object, got {type(data).__name__}"
            raise ClientError(msg, url=sanitize_url(url))
        return data
