"""
kaku-onboard - first-run provisioning and config migrations for Kaku.

Usage:
    kaku-onboard startup [-- CMD...]
    kaku-onboard install shell|theme|delta [--update-only]
    kaku-onboard announce [--from N] [--to N]
    kaku-onboard status
    kaku-onboard reset [--yes]
"""

from __future__ import annotations

import logging

import typer

from kaku_onboard.cli.commands.announce import announce
from kaku_onboard.cli.commands.install import install
from kaku_onboard.cli.commands.reset import reset as reset_command
from kaku_onboard.cli.commands.startup import startup
from kaku_onboard.cli.commands.status import status

__version__ = "0.6.0"

app = typer.Typer(
    name="kaku-onboard",
    help="First-run setup and config updates for the Kaku terminal",
    add_completion=False,
    no_args_is_help=True,
)


@app.callback()
def callback(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")


app.command(context_settings={"allow_interspersed_args": False})(startup)
app.command()(install)
app.command()(announce)
app.command()(status)
app.command(name="reset")(reset_command)


def main():
    app()


if __name__ == "__main__":
    main()
