"""``kaku-onboard status``: report provisioning health for this profile."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from kaku_onboard.runtime.doctor import run_checks
from kaku_onboard.runtime.home import ProfilePaths

console = Console()

_SEVERITY_STYLE = {"error": "red", "warning": "yellow", "info": "dim"}


def status() -> None:
    """Show recorded version, legacy files and installed features."""
    paths = ProfilePaths.discover()

    table = Table(title=f"Kaku profile: {paths.config_home}", show_lines=False)
    table.add_column("Check", style="cyan")
    table.add_column("Status")
    table.add_column("Detail")

    for check in run_checks(paths):
        if check.passed:
            mark = "[green]ok[/green]"
        else:
            style = _SEVERITY_STYLE.get(check.severity, "white")
            mark = f"[{style}]{check.severity}[/{style}]"
        table.add_row(check.name, mark, check.message)

    console.print(table)
