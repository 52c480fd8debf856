"""Read-only git queries for the project being published.

The publish flow needs three things from git: the current branch (for
`--auto`), the HEAD commit and its subject (recorded on the update), and
whether the working tree is dirty.

Usage:
    repo = Repository(project_dir)
    match repo.head_commit():
        case Ok(sha):
            print(sha)
        case Err(e):
            print(f"git failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ota.core.result import Err, Ok, Result
from ota.platform.process import ProcessError
from ota.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0

__all__ = [
    "GitError",
    "Repository",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class Repository:
    """A git work tree rooted at (or containing) `path`."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """True if `path` is inside a git work tree."""
        result = self._run(["rev-parse", "--is-inside-work-tree"])
        match result:
            case Ok(stdout):
                return stdout.strip() == "true"
            case Err(_):
                return False

    def current_branch(self) -> Result[str, GitError]:
        """Name of the checked-out branch. Detached HEAD is an error."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Err(e):
                return Err(self._error("rev-parse --abbrev-ref HEAD", e, "not a git repository"))
            case Ok(stdout):
                branch = stdout.strip()
                if not branch or branch == "HEAD":
                    return Err(
                        GitError(
                            command="rev-parse --abbrev-ref HEAD",
                            message="HEAD is detached; check out a branch first",
                        )
                    )
                return Ok(branch)

    def head_commit(self) -> Result[str, GitError]:
        result = self._run(["rev-parse", "HEAD"])
        match result:
            case Err(e):
                return Err(self._error("rev-parse HEAD", e, "no commits yet"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def last_commit_message(self) -> Result[str, GitError]:
        """Subject line of the HEAD commit."""
        result = self._run(["log", "-1", "--pretty=%s"])
        match result:
            case Err(e):
                return Err(self._error("log -1", e, "no commits yet"))
            case Ok(stdout):
                return Ok(stdout.strip())

    def is_dirty(self) -> Result[bool, GitError]:
        result = self._run(["status", "--porcelain"])
        match result:
            case Err(e):
                return Err(self._error("status", e, "git status failed"))
            case Ok(stdout):
                return Ok(stdout.strip() != "")

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        return run_process(
            ["git", "-C", str(self.path), *args], cwd=self.path, timeout=_GIT_TIMEOUT_SECONDS
        )

    @staticmethod
    def _error(command: str, error: ProcessError, fallback: str) -> GitError:
        return GitError(
            command=command,
            message=error.stderr.strip() or fallback,
            returncode=error.returncode,
        )
