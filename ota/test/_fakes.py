"""Test doubles shared by service and CLI tests.

FakeServer keeps branches, channels and stored assets in memory and answers
the GraphQL operations of a publish through MockGraphqlClient, so tests can
assert on server state instead of on individual calls.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from ota.api.client import MockGraphqlClient
from ota.api.upload import MockAssetUploader, UploadError, UploadSpecification
from ota.core.result import Err, Ok, Result
from ota.core.structured import StrDict, as_obj_list, as_str_dict, get_str
from ota.git.repository import GitError, Repository
from ota.project.assets import content_hash, storage_key

APP_ID = "1234"


@dataclass
class FakeServer:
    app_id: str = APP_ID
    asset_limit: int = 1400
    # branch name -> branch id
    branches: dict[str, str] = field(default_factory=lambda: {})
    # channel name -> branch mapping entries (branch id, logic)
    channels: dict[str, list[tuple[str, str]]] = field(default_factory=lambda: {})
    stored_keys: set[str] = field(default_factory=lambda: set())
    published: list[StrDict] = field(default_factory=lambda: [])
    client: MockGraphqlClient = field(default_factory=MockGraphqlClient)

    def __post_init__(self) -> None:
        self.client.set("AppByIdQuery", self._app)
        self.client.set("ViewBranchQuery", self._view_branch)
        self.client.set("CreateUpdateBranchForAppMutation", self._create_branch)
        self.client.set("ViewUpdateChannelOnAppQuery", self._view_channel)
        self.client.set("CreateUpdateChannelOnAppMutation", self._create_channel)
        self.client.set("GetAssetMetadataQuery", self._asset_metadata)
        self.client.set("GetSignedUploadMutation", self._signed_upload)
        self.client.set("GetAssetLimitPerUpdateGroupForApp", self._asset_limit)
        self.client.set("UpdatePublishMutation", self._publish)

    def add_branch(self, name: str) -> str:
        branch_id = f"branch-{len(self.branches) + 1}"
        self.branches[name] = branch_id
        return branch_id

    def add_channel(self, name: str, branch_name: str) -> None:
        self.channels[name] = [(self.branches[branch_name], "true")]

    def branch_name(self, branch_id: str) -> str:
        for name, bid in self.branches.items():
            if bid == branch_id:
                return name
        return ""

    def uploader(self) -> StoringUploader:
        return StoringUploader(server=self)

    # Handlers

    def _app_node(self, extra: StrDict) -> StrDict:
        return {"app": {"byId": {"id": self.app_id, **extra}}}

    def _app(self, variables: Mapping[str, object]) -> StrDict:
        return self._app_node(
            {
                "slug": "my-app",
                "fullName": "@owner/my-app",
                "ownerAccount": {"id": "owner-1", "name": "owner"},
            }
        )

    def _view_branch(self, variables: Mapping[str, object]) -> StrDict:
        name = str(variables["name"])
        branch_id = self.branches.get(name)
        node = {"id": branch_id, "name": name} if branch_id else None
        return self._app_node({"updateBranchByName": node})

    def _create_branch(self, variables: Mapping[str, object]) -> StrDict:
        name = str(variables["name"])
        branch_id = self.add_branch(name)
        return {"updateBranch": {"createUpdateBranchForApp": {"id": branch_id, "name": name}}}

    def _view_channel(self, variables: Mapping[str, object]) -> StrDict:
        name = str(variables["channelName"])
        mapping = self.channels.get(name)
        if mapping is None:
            return self._app_node({"updateChannelByName": None})

        data = [{"branchId": bid, "branchMappingLogic": logic} for bid, logic in mapping]
        return self._app_node(
            {
                "updateChannelByName": {
                    "id": f"channel-{name}",
                    "name": name,
                    "branchMapping": json.dumps({"version": 0, "data": data}),
                    "updateBranches": [
                        {"id": bid, "name": self.branch_name(bid)} for bid, _ in mapping
                    ],
                }
            }
        )

    def _create_channel(self, variables: Mapping[str, object]) -> StrDict:
        name = str(variables["name"])
        mapping = as_str_dict(json.loads(str(variables["branchMapping"]))) or {}
        entries: list[tuple[str, str]] = []
        for item in as_obj_list(mapping.get("data")) or []:
            entry = as_str_dict(item) or {}
            entries.append(
                (get_str(entry, "branchId") or "", get_str(entry, "branchMappingLogic") or "")
            )
        self.channels[name] = entries
        return {"updateChannel": {"createUpdateChannelForApp": {"id": f"channel-{name}"}}}

    def _asset_metadata(self, variables: Mapping[str, object]) -> StrDict:
        keys = [str(k) for k in as_obj_list(variables["storageKeys"]) or []]
        return {
            "asset": {
                "metadata": [
                    {
                        "storageKey": k,
                        "status": "EXISTS" if k in self.stored_keys else "DOES_NOT_EXIST",
                    }
                    for k in keys
                ]
            }
        }

    def _signed_upload(self, variables: Mapping[str, object]) -> StrDict:
        content_types = as_obj_list(variables["contentTypes"]) or []
        specs = [
            json.dumps({"url": f"https://upload.test/{i}", "headers": {"x-test": "1"}})
            for i in range(len(content_types))
        ]
        return {"asset": {"getSignedAssetUploadSpecifications": {"specifications": specs}}}

    def _asset_limit(self, variables: Mapping[str, object]) -> StrDict:
        return self._app_node({"assetLimitPerUpdateGroup": self.asset_limit})

    def _publish(self, variables: Mapping[str, object]) -> StrDict:
        updates: list[StrDict] = []
        for index, item in enumerate(as_obj_list(variables["publishUpdateGroupsInput"]) or []):
            group = as_str_dict(item) or {}
            self.published.append(group)
            branch_id = str(group["branchId"])
            for platform in as_str_dict(group["updateInfoGroup"]) or {}:
                updates.append(
                    {
                        "id": f"update-{len(updates) + 1}",
                        "group": f"group-{index + 1}",
                        "runtimeVersion": group["runtimeVersion"],
                        "platform": platform,
                        "message": group["message"],
                        "gitCommitHash": group["gitCommitHash"],
                        "manifestPermalink": f"https://u.test/manifest/{len(updates) + 1}",
                        "createdAt": "2026-01-01T00:00:00.000Z",
                        "branch": {"id": branch_id, "name": self.branch_name(branch_id)},
                    }
                )
        return {"updateBranch": {"publishUpdateGroups": updates}}


@dataclass
class StoringUploader:
    """Uploader whose successful uploads become stored assets on `server`."""

    server: FakeServer
    inner: MockAssetUploader = field(default_factory=MockAssetUploader)

    @property
    def uploads(self) -> list[tuple[str, Path, str]]:
        return self.inner.uploads

    def upload(
        self, spec: UploadSpecification, path: Path, content_type: str
    ) -> Result[None, UploadError]:
        result = self.inner.upload(spec, path, content_type)
        if isinstance(result, Ok):
            key = storage_key(content_type, content_hash(path.read_bytes()))
            self.server.stored_keys.add(key)
        return result


class FakeRepository(Repository):
    """Repository answering from fixed values instead of running git."""

    def __init__(
        self,
        path: Path,
        *,
        branch: str | None = "main",
        commit: str | None = "abc123",
        subject: str = "Fix the login screen",
        dirty: bool = False,
    ) -> None:
        super().__init__(path)
        self.branch = branch
        self.commit = commit
        self.subject = subject
        self.dirty = dirty

    def exists(self) -> bool:
        return self.commit is not None

    def current_branch(self) -> Result[str, GitError]:
        if self.branch is None:
            return Err(GitError(command="rev-parse --abbrev-ref HEAD", message="detached"))
        return Ok(self.branch)

    def head_commit(self) -> Result[str, GitError]:
        if self.commit is None:
            return Err(GitError(command="rev-parse HEAD", message="not a git repository"))
        return Ok(self.commit)

    def last_commit_message(self) -> Result[str, GitError]:
        if self.commit is None:
            return Err(GitError(command="log -1", message="not a git repository"))
        return Ok(self.subject)

    def is_dirty(self) -> Result[bool, GitError]:
        return Ok(self.dirty)


def app_json(**overrides: object) -> StrDict:
    exp: StrDict = {
        "name": "My App",
        "slug": "my-app",
        "version": "1.0.0",
        "runtimeVersion": "1.0.0",
        "extra": {"eas": {"projectId": APP_ID}},
    }
    exp.update(overrides)
    return {"expo": exp}


def write_project(root: Path, app: StrDict | None = None) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / "package.json").write_text('{"name": "my-app"}', encoding="utf-8")
    (root / "app.json").write_text(json.dumps(app or app_json()), encoding="utf-8")
    return root


def write_export(
    project_dir: Path,
    *,
    input_dir: str = "dist",
    platforms: tuple[str, ...] = ("ios", "android"),
) -> Path:
    """Write a bundler export where every platform shares one image asset."""
    out = project_dir / input_dir
    (out / "bundles").mkdir(parents=True, exist_ok=True)
    (out / "assets").mkdir(parents=True, exist_ok=True)
    (out / "assets" / "4f1cb2cac2370cd5050681232e8575a8").write_bytes(b"\x89PNG fake image")

    file_metadata: StrDict = {}
    for platform in platforms:
        bundle = f"bundles/{platform}-9b2c.js"
        (out / bundle).write_text(f"console.log('{platform}');", encoding="utf-8")
        file_metadata[platform] = {
            "bundle": bundle,
            "assets": [{"path": "assets/4f1cb2cac2370cd5050681232e8575a8", "ext": "png"}],
        }

    metadata = {"version": 0, "bundler": "metro", "fileMetadata": file_metadata}
    (out / "metadata.json").write_text(json.dumps(metadata), encoding="utf-8")
    return out
