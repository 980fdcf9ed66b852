from __future__ import annotations

import logging
import os
from typing import Final

from github import Auth, Github

from . import utils

# Module-wide logger
logger: logging.Logger = logging.getLogger(__name__)

_TOKEN_ENV_VAR: Final[str] = "GITHUB_TOKEN"  # noqa: S105
_DEFAULT_TOKEN_PASS_PATH: Final[str] = "github/cli/token"  # noqa: S105
DEFAULT_API_URL: Final[str] = "https://api.github.com"


def get_token(pass_path: str | None = None) -> str | None:
    """Get GitHub token from pass path, env var GITHUB_TOKEN, or default pass location."""
    if pass_path:
        return utils.get_pass_value(pass_path)

    token: str | None = os.environ.get(_TOKEN_ENV_VAR)
    if token:
        return token

    try:
        return utils.get_pass_value(_DEFAULT_TOKEN_PASS_PATH)
    except utils.PassError:
        logger.warning("No GitHub token specified nor found, using anonymous access")
        return None


def get_client(token: str | None = None, base_url: str = DEFAULT_API_URL, per_page: int = 100) -> Github:
    """Get a GitHub client, authenticated when a token is given."""
    if token:
        return Github(auth=Auth.Token(token), base_url=base_url, per_page=per_page)
    return Github(base_url=base_url, per_page=per_page)


def git_host_url(api_url: str) -> str:
    """Derive the git clone host from the REST API base URL.

    ``https://api.github.com`` maps to ``https://github.com``; GitHub
    Enterprise ``https://ghe.example.com/api/v3`` maps to ``https://ghe.example.com``.
    """
    url = api_url.rstrip("/")
    if url == DEFAULT_API_URL:
        return "https://github.com"
    return url.removesuffix("/api/v3")
