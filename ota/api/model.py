from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


UpdatePlatform = Literal["ios", "android"]
AssetStatus = Literal["EXISTS", "DOES_NOT_EXIST"]


@dataclass(frozen=True, slots=True)
class AppInfo:
    id: str
    slug: str
    full_name: str  # @owner/slug
    owner_name: str


@dataclass(frozen=True, slots=True)
class BranchInfo:
    id: str
    name: str


@dataclass(frozen=True, slots=True)
class BranchMappingEntry:
    branch_id: str
    # "true" for an unconditional mapping; rollouts carry an expression.
    logic: str


@dataclass(frozen=True, slots=True)
class ChannelInfo:
    id: str
    name: str
    mapping: tuple[BranchMappingEntry, ...]
    branches: tuple[BranchInfo, ...]

    def single_branch(self) -> BranchInfo | None:
        """The branch this channel always serves, if it maps to exactly one."""
        if len(self.mapping) != 1 or self.mapping[0].logic != "true":
            return None
        branch_id = self.mapping[0].branch_id
        for branch in self.branches:
            if branch.id == branch_id:
                return branch
        return None


@dataclass(frozen=True, slots=True)
class AssetMetadata:
    storage_key: str
    status: AssetStatus


@dataclass(frozen=True, slots=True)
class UpdateFragment:
    """One platform's update record as returned by the publish mutation."""

    id: str
    group: str
    branch: BranchInfo
    message: str | None
    runtime_version: str
    platform: str
    git_commit_hash: str | None
    manifest_permalink: str | None
    created_at: str | None

    def as_json(self) -> dict[str, object]:
        return {
            "id": self.id,
            "group": self.group,
            "branch": {"id": self.branch.id, "name": self.branch.name},
            "message": self.message,
            "runtimeVersion": self.runtime_version,
            "platform": self.platform,
            "gitCommitHash": self.git_commit_hash,
            "manifestPermalink": self.manifest_permalink,
            "createdAt": self.created_at,
        }
