from __future__ import annotations

import json
from pathlib import Path

import typer

from ota.cli.commands._helpers import exit_early, exit_update_error
from ota.cli.context import build_context, create_asset_uploader, create_graphql_client
from ota.core.result import Err, Ok
from ota.git.repository import Repository
from ota.project.config import load_project_config
from ota.project.export import parse_export_platform
from ota.services.update.errors import UpdateError, from_project_error
from ota.services.update.model import ByBranch, PublishFlags, PublishTarget
from ota.services.update.publish import PublishRequest, publish_update
from ota.services.update.summary import print_publish_summary, summary_json
from ota.services.update.target import (
    resolve_publish_target,
    resolve_update_message,
    validate_publish_flags,
)


update_app = typer.Typer(add_completion=False, no_args_is_help=True)


def _prompt_branch(repository: Repository) -> PublishTarget:
    current = repository.current_branch()
    default = current.value if isinstance(current, Ok) else None
    name = str(typer.prompt("Branch to publish to", default=default)).strip()
    if not name:
        exit_early(UpdateError(kind="invalid_flags", message="branch name must not be empty"))
    return ByBranch(name=name)


def _prompt_message() -> str:
    message = str(typer.prompt("Update message")).strip()
    if not message:
        exit_early(UpdateError(kind="invalid_flags", message="update message must not be empty"))
    return message


@update_app.command("publish")
def publish(
    branch: str | None = typer.Option(None, "--branch", help="Branch to publish to"),
    channel: str | None = typer.Option(
        None, "--channel", help="Channel whose branch to publish to"
    ),
    message: str | None = typer.Option(None, "--message", "-m", help="Update message"),
    auto: bool = typer.Option(
        False, "--auto", help="Use the current git branch and last commit message"
    ),
    non_interactive: bool = typer.Option(
        False, "--non-interactive", help="Never prompt; fail on missing input"
    ),
    platform: str = typer.Option("all", "--platform", "-p", help="all, ios or android"),
    input_dir: str = typer.Option("dist", "--input-dir", help="Bundler export directory"),
    skip_bundler: bool = typer.Option(
        False, "--skip-bundler", help="Publish an existing export as is"
    ),
    json_output: bool = typer.Option(False, "--json", help="Print created updates as JSON"),
    project_dir: Path | None = typer.Option(
        None, "--project-dir", help="Project root (defaults to the current directory)"
    ),
    group: str | None = typer.Option(None, "--group", hidden=True),
    republish: bool = typer.Option(False, "--republish", hidden=True),
) -> None:
    """Publish an update group to a branch."""
    flags = PublishFlags(
        branch=branch,
        channel=channel,
        auto=auto,
        non_interactive=non_interactive,
        message=message,
        republish=republish,
        group=group,
        platform=platform,
        input_dir=input_dir,
        skip_bundler=skip_bundler,
        json=json_output,
    )

    validated = validate_publish_flags(flags)
    if isinstance(validated, Err):
        exit_early(validated.error)

    export_platform = parse_export_platform(platform) or "all"

    ctx = build_context(json_output=json_output)
    console = ctx.console

    root = (project_dir or Path.cwd()).expanduser().resolve()
    project = load_project_config(root)
    if isinstance(project, Err):
        exit_update_error(from_project_error(project.error), console)

    repository = Repository(root)

    resolved_message = resolve_update_message(flags, repository)
    if isinstance(resolved_message, Err):
        exit_update_error(resolved_message.error, console)
    update_message = resolved_message.value or _prompt_message()

    target = validated.value or _prompt_branch(repository)

    client = create_graphql_client(ctx)
    if isinstance(client, Err):
        exit_update_error(client.error, console)

    branch_ref = resolve_publish_target(
        client.value,
        target=target,
        app_id=project.value.project_id,
        repository=repository,
        console=console,
    )
    if isinstance(branch_ref, Err):
        exit_update_error(branch_ref.error, console)

    summary = publish_update(
        client=client.value,
        uploader=create_asset_uploader(ctx),
        repository=repository,
        request=PublishRequest(
            project=project.value,
            branch=branch_ref.value,
            message=update_message,
            platform=export_platform,
            input_dir=input_dir,
            skip_bundler=skip_bundler,
        ),
        console=console,
    )
    if isinstance(summary, Err):
        exit_update_error(summary.error, console)

    if json_output:
        typer.echo(json.dumps(summary_json(summary.value), indent=2))
        return

    print_publish_summary(
        summary=summary.value, console=console, website_url=ctx.config.website_url
    )
