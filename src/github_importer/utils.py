"""
Utility functions for the GitHub project importer.
"""

from __future__ import annotations

import logging
import re
import subprocess
from subprocess import CompletedProcess
from urllib.parse import urlsplit, urlunsplit


class PassError(Exception):
    """Base class for pass-related errors."""


class InvalidPassPathError(PassError):
    """Raised when the pass path does not exist in the password store."""


def setup_logging(*, verbose: bool = False) -> None:
    """Configure logging for the import process."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(), logging.FileHandler("import.log", mode="a")],
    )


def inject_token(url: str, token: str | None) -> str:
    """Inject an authentication token into an HTTPS URL.

    Returns the original URL when there is no token or the URL is not HTTPS.
    """
    if not token or not url.startswith("https://"):
        return url
    return url.replace("https://", f"https://{token}@", 1)


def sanitize_url(url: str | None) -> str | None:
    """Strip any credentials from the network location of a URL."""
    if not url:
        return url

    parts = urlsplit(url)
    if "@" not in parts.netloc:
        return url
    host = parts.netloc.rsplit("@", 1)[1]
    return urlunsplit((parts.scheme, host, parts.path, parts.query, parts.fragment))


_URL_CREDENTIALS = re.compile(r"(https?://)[^/@\s]+@")


def strip_url_credentials(text: str) -> str:
    """Remove ``user:password@`` parts from every URL embedded in a text."""
    return _URL_CREDENTIALS.sub(r"\1", text)


def sanitize_message(message: str, tokens: list[str | None]) -> str:
    """Remove tokens from a message to prevent leakage.

    Args:
        message: Text that may contain tokens
        tokens: Tokens to redact (None values are ignored)

    Returns:
        Message with tokens replaced by ***TOKEN***
    """
    result = message
    for token in tokens:
        if token:
            result = result.replace(token, "***TOKEN***")
    return result


def _validate_pass_path(pass_path: str) -> None:
    if not re.fullmatch(r"(?:[A-Za-z0-9_-]+)(?:/[A-Za-z0-9_-]+)*", pass_path):
        msg = f"Invalid pass path: {pass_path}"
        raise ValueError(msg)


def get_pass_value(pass_path: str) -> str:
    """Get value from the pass utility at the specified path."""
    _validate_pass_path(pass_path)

    try:
        result: CompletedProcess[str] = subprocess.run(  # noqa: S603
            ["pass", pass_path], capture_output=True, text=True, check=True
        )
    except FileNotFoundError as e:
        msg = "The pass utility is not installed"
        raise PassError(msg) from e
    except subprocess.CalledProcessError as e:
        if e.returncode == 1 and "not in the password store" in e.stderr.lower():
            msg = f"Pass path '{pass_path}' not found or invalid."
            raise InvalidPassPathError(msg) from e
        msg = (
            f"Failed to get value from pass at '{pass_path}'.\n"
            f"Error: {e.stderr.strip()}\n"
            f"Return code: {e.returncode}"
        )
        raise PassError(msg) from e

    return result.stdout.strip()
