"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import NoReturn

import typer

from ota.output.console import ConsoleProtocol
from ota.output.errors import print_update_error, update_error_exit_code
from ota.services.update.errors import UpdateError


def exit_update_error(error: UpdateError, console: ConsoleProtocol) -> NoReturn:
    """Report `error` and exit with its mapped code."""
    print_update_error(error, console)
    raise typer.Exit(code=update_error_exit_code(error))


def exit_early(error: UpdateError) -> NoReturn:
    """Like exit_update_error, before a console exists (flag validation)."""
    typer.echo(f"error: {error.message}", err=True)
    if error.hint:
        typer.echo(f"hint: {error.hint}", err=True)
    raise typer.Exit(code=update_error_exit_code(error))
