from __future__ import annotations

from dataclasses import dataclass

from ota.api.model import AppInfo, UpdateFragment
from ota.project.assets import UploadStats


@dataclass(frozen=True, slots=True)
class PublishFlags:
    """Flags of `update publish`, as parsed. Validation happens elsewhere."""

    branch: str | None = None
    channel: str | None = None
    auto: bool = False
    non_interactive: bool = False
    message: str | None = None
    # Deprecated; rejected with a pointer to `update republish`.
    republish: bool = False
    group: str | None = None
    platform: str = "all"
    input_dir: str = "dist"
    skip_bundler: bool = False
    json: bool = False


@dataclass(frozen=True, slots=True)
class ByBranch:
    name: str


@dataclass(frozen=True, slots=True)
class ByChannel:
    name: str


@dataclass(frozen=True, slots=True)
class ByAuto:
    pass


type PublishTarget = ByBranch | ByChannel | ByAuto


@dataclass(frozen=True, slots=True)
class BranchRef:
    """A branch known to exist on the server.

    `created_branch` only changes what the user is told.
    """

    branch_id: str
    branch_name: str
    created_branch: bool


@dataclass(frozen=True, slots=True)
class PublishSummary:
    app: AppInfo
    branch: BranchRef
    message: str
    updates: tuple[UpdateFragment, ...]
    upload: UploadStats
    git_commit_hash: str | None

    @property
    def groups(self) -> tuple[str, ...]:
        """Distinct update group ids, in publish order."""
        return tuple(dict.fromkeys(u.group for u in self.updates))
