"""``kaku-onboard reset``: forget provisioning so onboarding runs again."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.markup import escape

from kaku_onboard.reset import reset_profile
from kaku_onboard.runtime.home import ProfilePaths

console = Console()


def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """Remove Kaku state, managed git defaults and the theme block."""
    if not yes:
        console.print(
            "This will remove Kaku provisioning state and reset Kaku-managed git defaults."
        )
        if not typer.confirm("Continue with reset?", default=False):
            console.print("Reset cancelled.")
            raise typer.Exit(0)

    report = reset_profile(ProfilePaths.discover())

    if report.changed:
        console.print("Applied reset actions:")
        for line in report.changed:
            console.print(f"  - {escape(line)}")
    if report.skipped:
        console.print("\nSkipped:")
        for line in report.skipped:
            console.print(f"  - [dim]{escape(line)}[/dim]")

    console.print("\n[green]Kaku reset completed.[/green] Onboarding runs on the next new window.")
