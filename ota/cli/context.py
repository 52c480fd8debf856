from __future__ import annotations

from dataclasses import dataclass

import typer

from ota import __version__
from ota.api.client import GraphqlClient, HttpGraphqlClient
from ota.api.upload import AssetUploader, HttpAssetUploader
from ota.core.config import ENV_TOKEN, Config, apply_env, load_config_or_default
from ota.core.errors import ErrorCode
from ota.core.result import Err, Ok, Result
from ota.output.console import ConsoleProtocol, RichConsole
from ota.platform.paths import user_config_path
from ota.services.update.errors import UpdateError


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol


def build_context(*, json_output: bool = False) -> CLIContext:
    """Load user config and pick the console.

    With --json, human-readable output goes to stderr so stdout stays
    parseable.
    """
    path = user_config_path()
    config_result = load_config_or_default(path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        config=apply_env(config_result.value),
        console=RichConsole(stderr=json_output),
    )


def create_graphql_client(ctx: CLIContext) -> Result[GraphqlClient, UpdateError]:
    token = ctx.config.auth.token
    if token is None:
        return Err(
            UpdateError(
                kind="not_logged_in",
                message="not logged in",
                hint=f"Set {ENV_TOKEN}, or [auth] token in {user_config_path()}.",
            )
        )
    return Ok(
        HttpGraphqlClient(
            ctx.config.api.url,
            token=token,
            timeout=float(ctx.config.api.timeout),
            user_agent=f"ota-cli/{__version__}",
        )
    )


def create_asset_uploader(ctx: CLIContext) -> AssetUploader:
    del ctx
    return HttpAssetUploader(user_agent=f"ota-cli/{__version__}")
