from __future__ import annotations

from ota.api.client import GraphqlClient
from ota.api.mutations import create_branch
from ota.api.queries import branch_by_name
from ota.core.result import Err, Ok, Result
from ota.services.update.errors import UpdateError, from_graphql_error
from ota.services.update.model import BranchRef


def ensure_branch_exists(
    client: GraphqlClient, *, app_id: str, branch_name: str
) -> Result[BranchRef, UpdateError]:
    """Return the branch named `branch_name`, creating it if the app has none.

    Repeated calls with the same arguments return the same branch id. Two
    processes creating the same new branch at once is resolved server-side.
    """
    existing = branch_by_name(client, app_id=app_id, name=branch_name)
    if isinstance(existing, Err):
        return Err(
            from_graphql_error(existing.error, message=f"cannot look up branch {branch_name}")
        )

    if existing.value is not None:
        return Ok(
            BranchRef(
                branch_id=existing.value.id,
                branch_name=existing.value.name,
                created_branch=False,
            )
        )

    created = create_branch(client, app_id=app_id, name=branch_name)
    if isinstance(created, Err):
        return Err(
            from_graphql_error(created.error, message=f"cannot create branch {branch_name}")
        )

    return Ok(
        BranchRef(branch_id=created.value.id, branch_name=created.value.name, created_branch=True)
    )
