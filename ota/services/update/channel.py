from __future__ import annotations

from ota.api.client import GraphqlClient
from ota.api.mutations import create_channel
from ota.api.queries import channel_by_name
from ota.core.result import Err, Ok, Result
from ota.services.update.errors import UpdateError, from_graphql_error


def get_branch_name_from_channel_name(
    client: GraphqlClient, *, app_id: str, channel_name: str
) -> Result[str, UpdateError]:
    """Name of the branch an update for `channel_name` should go to.

    A channel that does not exist yet publishes to a branch of the same
    name. A channel rolling out between several branches has no single
    answer, so the user must pick the branch.
    """
    channel = channel_by_name(client, app_id=app_id, channel_name=channel_name)
    if isinstance(channel, Err):
        return Err(
            from_graphql_error(channel.error, message=f"cannot look up channel {channel_name}")
        )

    if channel.value is None:
        return Ok(channel_name)

    branch = channel.value.single_branch()
    if branch is None:
        return Err(
            UpdateError(
                kind="invalid_flags",
                message=f"channel {channel_name} does not map to a single branch",
                hint="The channel has a rollout in progress; publish with --branch instead.",
            )
        )
    return Ok(branch.name)


def ensure_channel_exists(
    client: GraphqlClient, *, app_id: str, channel_name: str, branch_id: str
) -> Result[bool, UpdateError]:
    """Create `channel_name` pointing at `branch_id` if absent.

    Returns True if the channel was created. An existing channel is left
    untouched.
    """
    channel = channel_by_name(client, app_id=app_id, channel_name=channel_name)
    if isinstance(channel, Err):
        return Err(
            from_graphql_error(channel.error, message=f"cannot look up channel {channel_name}")
        )
    if channel.value is not None:
        return Ok(False)

    created = create_channel(client, app_id=app_id, name=channel_name, branch_id=branch_id)
    if isinstance(created, Err):
        return Err(
            from_graphql_error(created.error, message=f"cannot create channel {channel_name}")
        )
    return Ok(True)
