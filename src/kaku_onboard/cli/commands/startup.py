"""``kaku-onboard startup``: the terminal's per-window entry point.

Invoked by the terminal's startup hook for every new top-level window.
Runs provisioning (a no-op once the profile is current) and then replaces
this process with the requested command or the user's login shell.
"""

from __future__ import annotations

from typing import List, Optional

import typer
from rich.console import Console

from kaku_onboard.cli.ui import KeypressPrompter
from kaku_onboard.errors import ProvisioningEnvironmentError
from kaku_onboard.orchestrator import Provisioner
from kaku_onboard.runtime.home import ProfilePaths
from kaku_onboard.runtime.shell import exec_login_shell

console = Console()


def startup(
    command: Optional[List[str]] = typer.Argument(
        None, help="Command to run instead of the login shell (after --)"
    ),
) -> None:
    """Provision the profile if needed, then start the shell."""
    try:
        paths = ProfilePaths.discover()
        Provisioner(paths, KeypressPrompter(console), console=console).run()
    except (ProvisioningEnvironmentError, FileNotFoundError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1)

    exec_login_shell(command or ())
