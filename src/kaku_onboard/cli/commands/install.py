"""``kaku-onboard install``: run one feature installer directly.

Usage:
    kaku-onboard install shell                 # Ask, then install
    kaku-onboard install delta --update-only   # No prompt (scripts)
"""

from __future__ import annotations

from enum import Enum

import typer
from rich.console import Console

from kaku_onboard.cli.ui import print_report, print_warning
from kaku_onboard.errors import InstallWarning, ProvisioningEnvironmentError
from kaku_onboard.features.base import InstallMode
from kaku_onboard.orchestrator import make_installer
from kaku_onboard.runtime.home import ProfilePaths
from kaku_onboard.state.store import StateStore

console = Console()


class Feature(str, Enum):
    shell = "shell"
    theme = "theme"
    delta = "delta"


def install(
    feature: Feature = typer.Argument(..., help="Feature to install"),
    update_only: bool = typer.Option(
        False, "--update-only", help="Refresh without interactive prompts"
    ),
) -> None:
    """Install or refresh one optional feature."""
    paths = ProfilePaths.discover()
    recorded = StateStore(paths).read_version()
    installer = make_installer(feature.value, paths, recorded)

    if not update_only and not typer.confirm(f"Install {installer.label}?", default=True):
        console.print(f"[yellow]Skipped {installer.label}[/yellow]")
        raise typer.Exit(0)

    mode = InstallMode.UPDATE if update_only else InstallMode.FRESH
    try:
        report = installer.install(mode)
    except InstallWarning as exc:
        print_warning(console, str(exc), exc.retry_hint)
        raise typer.Exit(0)
    except ProvisioningEnvironmentError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    print_report(console, report, verbose=True)
    console.print(f"[green]{installer.label} is set up.[/green]")
