"""GraphQL mutations used by `update publish`."""

from __future__ import annotations

import json
from collections.abc import Sequence

from ota.api.client import GraphqlClient, GraphqlError
from ota.api.model import BranchInfo, UpdateFragment
from ota.api.upload import UploadSpecification
from ota.core.result import Err, Ok, Result
from ota.core.structured import StrDict, as_obj_list, as_str_dict, get_path, get_str

CREATE_BRANCH_MUTATION = """
mutation CreateUpdateBranchForAppMutation($appId: ID!, $name: String!) {
  updateBranch {
    createUpdateBranchForApp(appId: $appId, name: $name) { id name }
  }
}
"""

CREATE_CHANNEL_MUTATION = """
mutation CreateUpdateChannelOnAppMutation($appId: ID!, $name: String!, $branchMapping: String!) {
  updateChannel {
    createUpdateChannelForApp(appId: $appId, name: $name, branchMapping: $branchMapping) {
      id
      name
    }
  }
}
"""

SIGNED_UPLOAD_MUTATION = """
mutation GetSignedUploadMutation($contentTypes: [String!]!) {
  asset {
    getSignedAssetUploadSpecifications(assetContentTypes: $contentTypes) {
      specifications
    }
  }
}
"""

PUBLISH_MUTATION = """
mutation UpdatePublishMutation($publishUpdateGroupsInput: [PublishUpdateGroupInput!]!) {
  updateBranch {
    publishUpdateGroups(publishUpdateGroupsInput: $publishUpdateGroupsInput) {
      id
      group
      runtimeVersion
      platform
      message
      gitCommitHash
      manifestPermalink
      createdAt
      branch { id name }
    }
  }
}
"""


def single_branch_mapping(branch_id: str) -> str:
    """Branch mapping JSON that always serves `branch_id`."""
    return json.dumps(
        {"version": 0, "data": [{"branchId": branch_id, "branchMappingLogic": "true"}]}
    )


def create_branch(
    client: GraphqlClient, *, app_id: str, name: str
) -> Result[BranchInfo, GraphqlError]:
    result = client.execute(CREATE_BRANCH_MUTATION, {"appId": app_id, "name": name})
    if isinstance(result, Err):
        return result

    node = as_str_dict(get_path(result.value, "updateBranch", "createUpdateBranchForApp")) or {}
    branch_id = get_str(node, "id")
    if branch_id is None:
        return Err(
            GraphqlError(operation="CreateUpdateBranchForAppMutation", message="no branch id")
        )
    return Ok(BranchInfo(id=branch_id, name=get_str(node, "name") or name))


def create_channel(
    client: GraphqlClient, *, app_id: str, name: str, branch_id: str
) -> Result[str, GraphqlError]:
    """Create a channel pointing at `branch_id`. Returns the channel id."""
    result = client.execute(
        CREATE_CHANNEL_MUTATION,
        {"appId": app_id, "name": name, "branchMapping": single_branch_mapping(branch_id)},
    )
    if isinstance(result, Err):
        return result

    node = as_str_dict(get_path(result.value, "updateChannel", "createUpdateChannelForApp")) or {}
    channel_id = get_str(node, "id")
    if channel_id is None:
        return Err(
            GraphqlError(operation="CreateUpdateChannelOnAppMutation", message="no channel id")
        )
    return Ok(channel_id)


def _upload_specification(raw: object) -> UploadSpecification | None:
    # Specifications arrive as JSON-encoded strings.
    if not isinstance(raw, str):
        return None
    try:
        spec = as_str_dict(json.loads(raw))
    except json.JSONDecodeError:
        return None
    if spec is None:
        return None

    url = get_str(spec, "url")
    if url is None:
        return None
    headers = as_str_dict(spec.get("headers")) or {}
    return UploadSpecification(
        url=url,
        headers=tuple((k, v) for k, v in headers.items() if isinstance(v, str)),
    )


def signed_upload_specifications(
    client: GraphqlClient, *, content_types: Sequence[str]
) -> Result[list[UploadSpecification], GraphqlError]:
    """One specification per requested content type, in request order."""
    result = client.execute(SIGNED_UPLOAD_MUTATION, {"contentTypes": list(content_types)})
    if isinstance(result, Err):
        return result

    raw_specs = as_obj_list(
        get_path(result.value, "asset", "getSignedAssetUploadSpecifications", "specifications")
    )
    if raw_specs is None or len(raw_specs) != len(content_types):
        return Err(
            GraphqlError(
                operation="GetSignedUploadMutation",
                message="expected one upload specification per asset",
            )
        )

    specs: list[UploadSpecification] = []
    for raw in raw_specs:
        spec = _upload_specification(raw)
        if spec is None:
            return Err(
                GraphqlError(
                    operation="GetSignedUploadMutation", message="malformed upload specification"
                )
            )
        specs.append(spec)
    return Ok(specs)


def _update_fragment(obj: object) -> UpdateFragment | None:
    d = as_str_dict(obj)
    if d is None:
        return None
    branch = as_str_dict(d.get("branch")) or {}
    update_id = get_str(d, "id")
    group = get_str(d, "group")
    branch_id = get_str(branch, "id")
    runtime_version = get_str(d, "runtimeVersion")
    platform = get_str(d, "platform")
    if not (update_id and group and branch_id and runtime_version and platform):
        return None

    return UpdateFragment(
        id=update_id,
        group=group,
        branch=BranchInfo(id=branch_id, name=get_str(branch, "name") or ""),
        message=get_str(d, "message"),
        runtime_version=runtime_version,
        platform=platform,
        git_commit_hash=get_str(d, "gitCommitHash"),
        manifest_permalink=get_str(d, "manifestPermalink"),
        created_at=get_str(d, "createdAt"),
    )


def publish_update_groups(
    client: GraphqlClient, *, groups: Sequence[StrDict]
) -> Result[list[UpdateFragment], GraphqlError]:
    """Publish one update group per input. Returns every created update."""
    result = client.execute(PUBLISH_MUTATION, {"publishUpdateGroupsInput": list(groups)})
    if isinstance(result, Err):
        return result

    items = as_obj_list(get_path(result.value, "updateBranch", "publishUpdateGroups"))
    if items is None:
        return Err(GraphqlError(operation="UpdatePublishMutation", message="no updates returned"))

    updates: list[UpdateFragment] = []
    for item in items:
        update = _update_fragment(item)
        if update is None:
            return Err(
                GraphqlError(operation="UpdatePublishMutation", message="malformed update payload")
            )
        updates.append(update)
    return Ok(updates)
