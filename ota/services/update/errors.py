from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from ota.api.client import GraphqlError
from ota.git.repository import GitError
from ota.project.errors import ProjectError

UpdateErrorKind = Literal[
    "deprecated_flag",
    "invalid_flags",
    "project_config",
    "not_logged_in",
    "git_failed",
    "export_failed",
    "asset_limit",
    "network",
    "io_failed",
]


@dataclass(frozen=True, slots=True)
class UpdateError:
    kind: UpdateErrorKind
    message: str
    hint: str | None = None


def from_graphql_error(error: GraphqlError, *, message: str | None = None) -> UpdateError:
    detail = str(error)
    return UpdateError(
        kind="network",
        message=f"{message}: {detail}" if message else detail,
    )


def from_git_error(error: GitError) -> UpdateError:
    return UpdateError(kind="git_failed", message=f"git {error.command}: {error.message}")


def from_project_error(error: ProjectError) -> UpdateError:
    match error.kind:
        case "config_missing" | "config_invalid" | "runtime_version":
            kind: UpdateErrorKind = "project_config"
        case "export_failed" | "export_invalid":
            kind = "export_failed"
        case "asset_limit":
            kind = "asset_limit"
        case "asset_upload":
            kind = "network"
        case "file_unreadable":
            kind = "io_failed"
    return UpdateError(kind=kind, message=error.message, hint=error.hint)
