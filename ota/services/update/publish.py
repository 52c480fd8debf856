from __future__ import annotations

from dataclasses import dataclass

from ota.api.client import GraphqlClient
from ota.api.model import UpdatePlatform
from ota.api.mutations import publish_update_groups
from ota.api.queries import app_by_id, asset_limit_per_update_group
from ota.api.upload import AssetUploader
from ota.core.result import Err, Ok, Result
from ota.core.structured import StrDict
from ota.git.repository import Repository
from ota.output.console import ConsoleProtocol, Style
from ota.project.assets import build_update_info_group, prepare_assets, upload_assets
from ota.project.config import ProjectConfig
from ota.project.export import (
    ExportPlatform,
    build_bundles,
    collect_assets,
    requested_platforms,
    resolve_input_directory,
)
from ota.project.runtime import resolve_runtime_version
from ota.services.update.errors import (
    UpdateError,
    from_git_error,
    from_graphql_error,
    from_project_error,
)
from ota.services.update.model import BranchRef, PublishSummary


@dataclass(frozen=True, slots=True)
class PublishRequest:
    project: ProjectConfig
    branch: BranchRef
    message: str
    platform: ExportPlatform = "all"
    input_dir: str = "dist"
    skip_bundler: bool = False


@dataclass(frozen=True, slots=True)
class GitInfo:
    commit_hash: str | None
    is_dirty: bool


def read_git_info(repository: Repository) -> Result[GitInfo, UpdateError]:
    """Commit metadata recorded on the update. Empty outside a git checkout."""
    if not repository.exists():
        return Ok(GitInfo(commit_hash=None, is_dirty=False))

    commit = repository.head_commit()
    if isinstance(commit, Err):
        return Err(from_git_error(commit.error))
    dirty = repository.is_dirty()
    if isinstance(dirty, Err):
        return Err(from_git_error(dirty.error))
    return Ok(GitInfo(commit_hash=commit.value, is_dirty=dirty.value))


def resolve_runtime_versions(
    project: ProjectConfig, platform: ExportPlatform
) -> Result[dict[UpdatePlatform, str], UpdateError]:
    versions: dict[UpdatePlatform, str] = {}
    for p in requested_platforms(platform):
        version = resolve_runtime_version(project.exp, p)
        if isinstance(version, Err):
            return Err(from_project_error(version.error))
        versions[p] = version.value
    return Ok(versions)


def build_publish_groups(
    *,
    branch_id: str,
    message: str,
    runtime_versions: dict[UpdatePlatform, str],
    update_info_group: dict[UpdatePlatform, StrDict],
    git: GitInfo,
) -> list[StrDict]:
    """One publish input per distinct runtime version.

    Platforms sharing a runtime version share an update group.
    """
    by_runtime: dict[str, dict[UpdatePlatform, StrDict]] = {}
    for platform, info in update_info_group.items():
        by_runtime.setdefault(runtime_versions[platform], {})[platform] = info

    return [
        {
            "branchId": branch_id,
            "updateInfoGroup": dict(infos),
            "runtimeVersion": runtime_version,
            "message": message,
            "gitCommitHash": git.commit_hash,
            "isGitWorkingTreeDirty": git.is_dirty,
            "awaitingCodeSigningInfo": False,
        }
        for runtime_version, infos in by_runtime.items()
    ]


def publish_update(
    *,
    client: GraphqlClient,
    uploader: AssetUploader,
    repository: Repository,
    request: PublishRequest,
    console: ConsoleProtocol,
) -> Result[PublishSummary, UpdateError]:
    """Export, upload and publish an update group to `request.branch`."""
    project = request.project

    app = app_by_id(client, app_id=project.project_id)
    if isinstance(app, Err):
        return Err(from_graphql_error(app.error, message="cannot load app"))

    runtime_versions = resolve_runtime_versions(project, request.platform)
    if isinstance(runtime_versions, Err):
        return runtime_versions

    git = read_git_info(repository)
    if isinstance(git, Err):
        return git

    if request.skip_bundler:
        console.print("skipping bundler export", Style.DIM)
    else:
        built = build_bundles(
            project_dir=project.project_dir,
            input_dir=request.input_dir,
            platform=request.platform,
        )
        if isinstance(built, Err):
            return Err(from_project_error(built.error))

    input_dir = resolve_input_directory(
        project_dir=project.project_dir, input_dir=request.input_dir
    )
    if isinstance(input_dir, Err):
        return Err(from_project_error(input_dir.error))

    collected = collect_assets(input_dir=input_dir.value, platform=request.platform)
    if isinstance(collected, Err):
        return Err(from_project_error(collected.error))

    prepared = prepare_assets(collected.value)
    if isinstance(prepared, Err):
        return Err(from_project_error(prepared.error))

    limit = asset_limit_per_update_group(client, app_id=project.project_id)
    if isinstance(limit, Err):
        return Err(from_graphql_error(limit.error, message="cannot read asset limit"))

    stats = upload_assets(
        client=client, uploader=uploader, prepared=prepared.value, asset_limit=limit.value
    )
    if isinstance(stats, Err):
        return Err(from_project_error(stats.error))
    console.success(
        f"uploaded {stats.value.unique_uploaded_asset_count} of "
        f"{stats.value.unique_asset_count} unique assets"
    )

    groups = build_publish_groups(
        branch_id=request.branch.branch_id,
        message=request.message,
        runtime_versions=runtime_versions.value,
        update_info_group=build_update_info_group(prepared.value),
        git=git.value,
    )
    updates = publish_update_groups(client, groups=groups)
    if isinstance(updates, Err):
        return Err(from_graphql_error(updates.error, message="publish failed"))

    return Ok(
        PublishSummary(
            app=app.value,
            branch=request.branch,
            message=request.message,
            updates=tuple(updates.value),
            upload=stats.value,
            git_commit_hash=git.value.commit_hash,
        )
    )
