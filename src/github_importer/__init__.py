"""
GitHub Project Importer

Imports a GitHub repository into a local project: git refs, wiki, labels,
milestones, pull requests, issues, comments and optionally releases.
Re-running an import skips everything imported before.
"""

from __future__ import annotations

from .cli import main
from .context import ImportJob, ImportOptions
from .exceptions import ClientError, GitCommandError, ImporterError
from .ledger import EntityKind, ErrorRecord
from .orchestrator import Importer
from .utils import setup_logging

# Package version
__version__ = "0.1.0"

__all__ = [
    "ClientError",
    "EntityKind",
    "ErrorRecord",
    "GitCommandError",
    "ImportJob",
    "ImportOptions",
    "Importer",
    "ImporterError",
    "main",
    "setup_logging",
]
