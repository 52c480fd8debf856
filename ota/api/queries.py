"""Read-only GraphQL operations used by `update publish`."""

from __future__ import annotations

import json

from ota.api.client import GraphqlClient, GraphqlError
from ota.api.model import AppInfo, AssetMetadata, BranchInfo, BranchMappingEntry, ChannelInfo
from ota.core.result import Err, Ok, Result
from ota.core.structured import StrDict, as_obj_list, as_str_dict, get_int, get_path, get_str

APP_BY_ID_QUERY = """
query AppByIdQuery($appId: String!) {
  app {
    byId(appId: $appId) {
      id
      slug
      fullName
      ownerAccount { id name }
    }
  }
}
"""

VIEW_BRANCH_QUERY = """
query ViewBranchQuery($appId: String!, $name: String!) {
  app {
    byId(appId: $appId) {
      id
      updateBranchByName(name: $name) { id name }
    }
  }
}
"""

VIEW_CHANNEL_QUERY = """
query ViewUpdateChannelOnAppQuery($appId: String!, $channelName: String!) {
  app {
    byId(appId: $appId) {
      id
      updateChannelByName(name: $channelName) {
        id
        name
        branchMapping
        updateBranches(offset: 0, limit: 5) { id name }
      }
    }
  }
}
"""

ASSET_METADATA_QUERY = """
query GetAssetMetadataQuery($storageKeys: [String!]!) {
  asset {
    metadata(storageKeys: $storageKeys) { storageKey status }
  }
}
"""

ASSET_LIMIT_QUERY = """
query GetAssetLimitPerUpdateGroupForApp($appId: String!) {
  app {
    byId(appId: $appId) { id assetLimitPerUpdateGroup }
  }
}
"""


def _app_node(data: StrDict, operation: str) -> Result[StrDict, GraphqlError]:
    app = as_str_dict(get_path(data, "app", "byId"))
    if app is None:
        return Err(GraphqlError(operation=operation, message="app not found"))
    return Ok(app)


def _branch_info(obj: object) -> BranchInfo | None:
    d = as_str_dict(obj)
    if d is None:
        return None
    branch_id = get_str(d, "id")
    name = get_str(d, "name")
    if branch_id is None or name is None:
        return None
    return BranchInfo(id=branch_id, name=name)


def app_by_id(client: GraphqlClient, *, app_id: str) -> Result[AppInfo, GraphqlError]:
    result = client.execute(APP_BY_ID_QUERY, {"appId": app_id})
    if isinstance(result, Err):
        return result

    app = _app_node(result.value, "AppByIdQuery")
    if isinstance(app, Err):
        return app

    owner = as_str_dict(app.value.get("ownerAccount")) or {}
    slug = get_str(app.value, "slug")
    owner_name = get_str(owner, "name")
    if slug is None or owner_name is None:
        return Err(GraphqlError(operation="AppByIdQuery", message="incomplete app payload"))

    return Ok(
        AppInfo(
            id=get_str(app.value, "id") or app_id,
            slug=slug,
            full_name=get_str(app.value, "fullName") or f"@{owner_name}/{slug}",
            owner_name=owner_name,
        )
    )


def branch_by_name(
    client: GraphqlClient, *, app_id: str, name: str
) -> Result[BranchInfo | None, GraphqlError]:
    """Look a branch up by name. Ok(None) when the app has no such branch."""
    result = client.execute(VIEW_BRANCH_QUERY, {"appId": app_id, "name": name})
    if isinstance(result, Err):
        return result

    app = _app_node(result.value, "ViewBranchQuery")
    if isinstance(app, Err):
        return app

    node = app.value.get("updateBranchByName")
    if node is None:
        return Ok(None)

    branch = _branch_info(node)
    if branch is None:
        return Err(GraphqlError(operation="ViewBranchQuery", message="malformed branch payload"))
    return Ok(branch)


def _parse_branch_mapping(raw: object) -> tuple[BranchMappingEntry, ...] | None:
    if not isinstance(raw, str):
        return None
    try:
        mapping = as_str_dict(json.loads(raw))
    except json.JSONDecodeError:
        return None
    if mapping is None:
        return None

    entries: list[BranchMappingEntry] = []
    for item in as_obj_list(mapping.get("data")) or []:
        entry = as_str_dict(item)
        if entry is None:
            return None
        branch_id = get_str(entry, "branchId")
        if branch_id is None:
            return None
        logic = entry.get("branchMappingLogic")
        # Rollout logic is an object; only the literal "true" is unconditional.
        entries.append(
            BranchMappingEntry(
                branch_id=branch_id,
                logic=logic if isinstance(logic, str) else json.dumps(logic),
            )
        )
    return tuple(entries)


def channel_by_name(
    client: GraphqlClient, *, app_id: str, channel_name: str
) -> Result[ChannelInfo | None, GraphqlError]:
    """Look a channel up by name. Ok(None) when the app has no such channel."""
    result = client.execute(VIEW_CHANNEL_QUERY, {"appId": app_id, "channelName": channel_name})
    if isinstance(result, Err):
        return result

    app = _app_node(result.value, "ViewUpdateChannelOnAppQuery")
    if isinstance(app, Err):
        return app

    node = app.value.get("updateChannelByName")
    if node is None:
        return Ok(None)

    channel = as_str_dict(node)
    channel_id = get_str(channel, "id") if channel is not None else None
    mapping = _parse_branch_mapping(channel.get("branchMapping")) if channel is not None else None
    if channel is None or channel_id is None or mapping is None:
        return Err(
            GraphqlError(
                operation="ViewUpdateChannelOnAppQuery", message="malformed channel payload"
            )
        )

    branches = tuple(
        b for b in (_branch_info(o) for o in as_obj_list(channel.get("updateBranches")) or []) if b
    )
    return Ok(
        ChannelInfo(
            id=channel_id,
            name=get_str(channel, "name") or channel_name,
            mapping=mapping,
            branches=branches,
        )
    )


def asset_metadata(
    client: GraphqlClient, *, storage_keys: list[str]
) -> Result[list[AssetMetadata], GraphqlError]:
    result = client.execute(ASSET_METADATA_QUERY, {"storageKeys": storage_keys})
    if isinstance(result, Err):
        return result

    items = as_obj_list(get_path(result.value, "asset", "metadata"))
    if items is None:
        return Err(GraphqlError(operation="GetAssetMetadataQuery", message="missing metadata"))

    out: list[AssetMetadata] = []
    for item in items:
        entry = as_str_dict(item) or {}
        key = get_str(entry, "storageKey")
        status = get_str(entry, "status")
        if key is None or status not in ("EXISTS", "DOES_NOT_EXIST"):
            return Err(
                GraphqlError(operation="GetAssetMetadataQuery", message="malformed metadata entry")
            )
        out.append(
            AssetMetadata(
                storage_key=key,
                status="EXISTS" if status == "EXISTS" else "DOES_NOT_EXIST",
            )
        )
    return Ok(out)


def asset_limit_per_update_group(
    client: GraphqlClient, *, app_id: str
) -> Result[int, GraphqlError]:
    result = client.execute(ASSET_LIMIT_QUERY, {"appId": app_id})
    if isinstance(result, Err):
        return result

    app = _app_node(result.value, "GetAssetLimitPerUpdateGroupForApp")
    if isinstance(app, Err):
        return app

    limit = get_int(app.value, "assetLimitPerUpdateGroup")
    if limit is None:
        return Err(
            GraphqlError(
                operation="GetAssetLimitPerUpdateGroupForApp", message="missing asset limit"
            )
        )
    return Ok(limit)
