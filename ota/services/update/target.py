"""Publish target resolution.

`--branch`, `--channel` and `--auto` are mutually exclusive ways of naming
the branch an update goes to. Flags are checked up front, before any file
or network access, and turned into a single PublishTarget; only then is the
branch looked up (and created if needed).
"""

from __future__ import annotations

from ota.api.client import GraphqlClient
from ota.core.result import Err, Ok, Result
from ota.git.repository import Repository
from ota.output.console import ConsoleProtocol, Style
from ota.project.export import parse_export_platform
from ota.services.update.branch import ensure_branch_exists
from ota.services.update.channel import ensure_channel_exists, get_branch_name_from_channel_name
from ota.services.update.errors import UpdateError, from_git_error
from ota.services.update.model import (
    BranchRef,
    ByAuto,
    ByBranch,
    ByChannel,
    PublishFlags,
    PublishTarget,
)

DEPRECATED_FLAGS_MESSAGE = (
    "--group and --republish flags are deprecated. "
    "To publish an existing update group again, use `ota update republish`."
)
BRANCH_AND_CHANNEL_MESSAGE = (
    "Cannot specify both --channel and --branch. Specify either --channel, --branch, or --auto."
)
AUTO_CONFLICT_MESSAGE = (
    "Cannot combine --auto with --channel or --branch. "
    "Specify either --channel, --branch, or --auto."
)
NON_INTERACTIVE_TARGET_MESSAGE = (
    "--channel, --branch, or --auto is required in non-interactive mode"
)


def _invalid(message: str, hint: str | None = None) -> Err[UpdateError]:
    return Err(UpdateError(kind="invalid_flags", message=message, hint=hint))


def validate_publish_flags(flags: PublishFlags) -> Result[PublishTarget | None, UpdateError]:
    """Check flag combinations and pick the target selection mode.

    Ok(None) means no target was given in an interactive session; the caller
    asks the user for a branch name.
    """
    if flags.republish or flags.group is not None:
        return Err(
            UpdateError(
                kind="deprecated_flag",
                message=DEPRECATED_FLAGS_MESSAGE,
                hint="ota update republish --group <group-id> --branch <branch>",
            )
        )

    if flags.branch is not None and flags.channel is not None:
        return _invalid(BRANCH_AND_CHANNEL_MESSAGE)

    branch = (flags.branch or "").strip()
    channel = (flags.channel or "").strip()
    if flags.branch is not None and not branch:
        return _invalid("--branch must not be empty")
    if flags.channel is not None and not channel:
        return _invalid("--channel must not be empty")
    if parse_export_platform(flags.platform) is None:
        return _invalid(
            f"unknown platform: {flags.platform}", hint="Use one of: all, ios, android."
        )

    if flags.auto and (branch or channel):
        return _invalid(AUTO_CONFLICT_MESSAGE)

    if channel:
        return Ok(ByChannel(name=channel))
    if branch:
        return Ok(ByBranch(name=branch))
    if flags.auto:
        return Ok(ByAuto())

    if flags.non_interactive:
        return _invalid(
            NON_INTERACTIVE_TARGET_MESSAGE,
            hint="Pass --branch <name>, --channel <name>, or --auto.",
        )
    return Ok(None)


def resolve_update_message(
    flags: PublishFlags, repository: Repository
) -> Result[str | None, UpdateError]:
    """The update message, or Ok(None) when the user should be prompted.

    With --auto and no --message, the HEAD commit subject is used.
    """
    if flags.message is not None:
        message = flags.message.strip()
        if not message:
            return _invalid("--message must not be empty")
        return Ok(message)

    if flags.auto:
        subject = repository.last_commit_message()
        if isinstance(subject, Err):
            return Err(from_git_error(subject.error))
        if not subject.value:
            return _invalid("the last commit has no message", hint="Pass --message.")
        return Ok(subject.value)

    if flags.non_interactive:
        return _invalid(
            "--message is required in non-interactive mode",
            hint="Pass --message <text>, or --auto to use the last commit message.",
        )
    return Ok(None)


def resolve_publish_target(
    client: GraphqlClient,
    *,
    target: PublishTarget,
    app_id: str,
    repository: Repository,
    console: ConsoleProtocol,
) -> Result[BranchRef, UpdateError]:
    """Ensure the branch named by `target` exists and return it."""
    match target:
        case ByChannel(name=channel_name):
            derived = get_branch_name_from_channel_name(
                client, app_id=app_id, channel_name=channel_name
            )
            if isinstance(derived, Err):
                return derived

            branch = ensure_branch_exists(client, app_id=app_id, branch_name=derived.value)
            if isinstance(branch, Err):
                return branch

            created = ensure_channel_exists(
                client,
                app_id=app_id,
                channel_name=channel_name,
                branch_id=branch.value.branch_id,
            )
            if isinstance(created, Err):
                return created
            if created.value:
                console.print(
                    f"created channel {channel_name} -> branch {branch.value.branch_name}",
                    Style.DIM,
                )
            return branch

        case ByBranch(name=branch_name):
            return ensure_branch_exists(client, app_id=app_id, branch_name=branch_name)

        case ByAuto():
            current = repository.current_branch()
            if isinstance(current, Err):
                return Err(
                    UpdateError(
                        kind="git_failed",
                        message=f"--auto needs the current git branch: {current.error.message}",
                        hint="Run inside a git checkout, or pass --branch.",
                    )
                )
            return ensure_branch_exists(client, app_id=app_id, branch_name=current.value)
