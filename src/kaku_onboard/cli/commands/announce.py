"""``kaku-onboard announce``: print what changed between config versions."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from kaku_onboard.changelog import CURRENT_CONFIG_VERSION, announce as collect_notes
from kaku_onboard.runtime.home import ProfilePaths
from kaku_onboard.state.store import StateStore

console = Console()


def announce(
    from_version: Optional[int] = typer.Option(
        None, "--from", help="Starting version (default: the recorded version)"
    ),
    to_version: int = typer.Option(CURRENT_CONFIG_VERSION, "--to", help="Last version to include"),
) -> None:
    """Show what's new since a config version."""
    if from_version is None:
        from_version = StateStore(ProfilePaths.discover()).read_version()

    bullets = collect_notes(from_version, to_version)
    if not bullets:
        console.print(f"[dim]Nothing new between v{from_version} and v{to_version}.[/dim]")
        return

    console.print(f"[bold]What's new (v{from_version} -> v{to_version}):[/bold]")
    for bullet in bullets:
        console.print(f"  • {bullet}")
