"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ota.core.errors import ErrorCode
from ota.output.console import Style
from ota.services.update.errors import UpdateError

if TYPE_CHECKING:
    from ota.output.console import ConsoleProtocol

__all__ = ["print_update_error", "update_error_exit_code"]


def print_update_error(error: UpdateError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def update_error_exit_code(error: UpdateError) -> int:
    match error.kind:
        case "deprecated_flag" | "invalid_flags":
            return int(ErrorCode.USER_ERROR)
        case "project_config" | "not_logged_in" | "git_failed":
            return int(ErrorCode.ENV_ERROR)
        case "export_failed" | "asset_limit":
            return int(ErrorCode.BUILD_ERROR)
        case "network":
            return int(ErrorCode.NETWORK_ERROR)
        case "io_failed":
            return int(ErrorCode.IO_ERROR)
