"""Local bare git repositories, driven through the git CLI."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from .exceptions import BranchNotFoundError, GitCommandError
from .utils import strip_url_credentials

logger: logging.Logger = logging.getLogger(__name__)


def _run_git(args: list[str], cwd: Path | None = None) -> str:
    """Run a git command and return its stdout.

    Raises:
        GitCommandError: If git exits with a non-zero status; the message
            carries stderr with any URL credentials removed.
    """
    try:
        result = subprocess.run(  # noqa: S603
            ["git", *args],
            cwd=cwd,
            check=False,
            capture_output=True,
            text=True,
        )
    except OSError as e:
        msg = f"Failed to run git {args[0]}: {e}"
        raise GitCommandError(msg) from e

    if result.returncode != 0:
        msg = f"git {args[0]} failed: {strip_url_credentials(result.stderr.strip())}"
        raise GitCommandError(msg)
    return result.stdout


class LocalRepository:
    """A bare repository on disk.

    Branch names are read once and cached; ``expire_content_cache`` drops
    the cache so later reads see refs written by other processes or by a
    fetch.
    """

    def __init__(self, path: str | Path) -> None:
        self.path: Path = Path(path)
        self._branch_names: set[str] | None = None

    def exists(self) -> bool:
        return (self.path / "HEAD").is_file()

    def create_repository(self) -> None:
        if self.exists():
            logger.debug(f"Repository {self.path} already exists")
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        _run_git(["init", "--bare", "--quiet", str(self.path)])
        logger.debug(f"Created repository {self.path}")

    def _git(self, *args: str) -> str:
        return _run_git(list(args), cwd=self.path)

    def add_remote(self, name: str, url: str) -> None:
        remotes = self._git("remote").split()
        if name in remotes:
            self._git("remote", "set-url", name, url)
        else:
            self._git("remote", "add", name, url)

    def set_remote_as_mirror(self, name: str) -> None:
        self._git("config", "--replace-all", f"remote.{name}.fetch", "+refs/*:refs/*")
        self._git("config", f"remote.{name}.mirror", "true")
        self._git("config", f"remote.{name}.prune", "true")

    def fetch_remote(self, name: str, *, forced: bool = False) -> None:
        args = ["fetch", "--quiet", "--tags"]
        if forced:
            args.append("--force")
        self._git(*args, name)
        self.expire_content_cache()

    @property
    def branch_names(self) -> set[str]:
        if self._branch_names is None:
            output = self._git("for-each-ref", "--format=%(refname:short)", "refs/heads")
            self._branch_names = {line.strip() for line in output.splitlines() if line.strip()}
        return self._branch_names

    def branch_exists(self, name: str) -> bool:
        if not self.exists():
            return False
        return name in self.branch_names

    def create_branch(self, name: str, sha: str) -> None:
        self._git("branch", name, sha)
        self._branch_names = None
        logger.debug(f"Created branch {name} at {sha}")

    def delete_branch(self, name: str) -> None:
        """Delete a branch.

        Raises:
            BranchNotFoundError: If the branch does not exist
        """
        if not self.branch_exists(name):
            msg = f"Branch {name} does not exist"
            raise BranchNotFoundError(msg)
        self._git("branch", "-D", name)
        self._branch_names = None
        logger.debug(f"Deleted branch {name}")

    def expire_content_cache(self) -> None:
        self._branch_names = None


def import_repository(path: str | Path, url: str) -> LocalRepository:
    """Clone ``url`` as a bare mirror at ``path``."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    _run_git(["clone", "--mirror", "--quiet", url, str(target)])
    return LocalRepository(target)
