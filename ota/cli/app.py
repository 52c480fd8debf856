from __future__ import annotations

import typer

from ota import __version__
from ota.cli.commands.update_cmd import update_app


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Sub-apps
app.add_typer(update_app, name="update", help="Publish over-the-air updates.")


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", callback=_print_version, is_eager=True
    ),
) -> None:
    del version


def main() -> None:
    app()
