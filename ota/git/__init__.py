"""Git queries used while publishing."""

from ota.git.repository import GitError, Repository

__all__ = [
    "GitError",
    "Repository",
]
