"""Provisioning orchestrator: first-run onboarding and incremental updates.

Runs once per new terminal window, before the login shell starts:

- **UP_TO_DATE**: the recorded version is current (or the newest legacy
  completion marker is present). No prompts, no writes.
- **FIRST_RUN**: nothing is recorded. Offer shell plugins, the theme and
  delta, install what was accepted.
- **UPDATE**: an older version is recorded. Show what's new, ask once,
  refresh the shell plugins and offer delta if it is missing.

Whatever happens in FIRST_RUN or UPDATE, the current version is persisted
before ``run`` returns, so one failing step cannot bring the whole prompt
sequence back on every launch.
"""

from __future__ import annotations

import atexit
import functools
import logging
import shutil
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, Optional

from rich.console import Console

from kaku_onboard.changelog import CURRENT_CONFIG_VERSION, announce
from kaku_onboard.cli.ui import Prompter, print_report, print_warning, show_banner
from kaku_onboard.errors import InstallWarning, ProvisioningEnvironmentError
from kaku_onboard.features.base import FeatureInstaller, InstallMode, InstallReport
from kaku_onboard.features.delta import DeltaInstaller
from kaku_onboard.features.shell_plugins import ShellPluginInstaller
from kaku_onboard.features.theme import ThemeInstaller
from kaku_onboard.runtime.home import ProfilePaths
from kaku_onboard.state.store import StateStore, VersionState

logger = logging.getLogger(__name__)

INSTALLERS: dict[str, type[FeatureInstaller]] = {
    ShellPluginInstaller.feature_id: ShellPluginInstaller,
    ThemeInstaller.feature_id: ThemeInstaller,
    DeltaInstaller.feature_id: DeltaInstaller,
}

InstallerFactory = Callable[[str, ProfilePaths, int], FeatureInstaller]


def make_installer(feature_id: str, paths: ProfilePaths, recorded_version: int) -> FeatureInstaller:
    return INSTALLERS[feature_id](paths, recorded_version)


@dataclass(frozen=True)
class Offer:
    feature_id: str
    heading: str
    details: tuple[str, ...]
    question: str


FIRST_RUN_OFFERS: tuple[Offer, ...] = (
    Offer(
        "shell",
        "Would you like to install Kaku's enhanced shell features?",
        (
            "This includes:",
            "  - z - Smart Directory Jumper",
            "  - zsh-completions - Rich Tab Completions",
            "  - Zsh Syntax Highlighting",
            "  - Zsh Autosuggestions",
        ),
        "Install enhanced shell features?",
    ),
    Offer(
        "theme",
        "Would you like to use the Kaku Theme?",
        ("A modern, high-contrast dark theme optimized for AI coding.",),
        "Apply Kaku Theme?",
    ),
    Offer(
        "delta",
        "Would you like to install Delta?",
        ("Beautiful git diffs with syntax highlighting.",),
        "Install Delta?",
    ),
)

RULE = "-" * 56


class ProvisionMode(Enum):
    FIRST_RUN = "first_run"
    UPDATE = "update"
    UP_TO_DATE = "up_to_date"


@dataclass
class ProvisionOutcome:
    """What a provisioning run did."""

    mode: ProvisionMode
    from_version: int
    state: Optional[VersionState] = None
    accepted: list[str] = field(default_factory=list)
    declined: list[str] = field(default_factory=list)
    reports: list[InstallReport] = field(default_factory=list)
    warnings: list[InstallWarning] = field(default_factory=list)


def decide_mode(
    recorded_version: int,
    paths: ProfilePaths,
    current_version: int = CURRENT_CONFIG_VERSION,
) -> ProvisionMode:
    """Pick the run mode from the recorded version and legacy markers."""
    if recorded_version >= current_version:
        return ProvisionMode.UP_TO_DATE
    if recorded_version == 0:
        if paths.setup_v1_marker.exists():
            return ProvisionMode.UP_TO_DATE
        return ProvisionMode.FIRST_RUN
    return ProvisionMode.UPDATE


class Provisioner:
    """Drives one provisioning run for a user profile."""

    def __init__(
        self,
        paths: ProfilePaths,
        prompter: Prompter,
        console: Optional[Console] = None,
        store: Optional[StateStore] = None,
        installer_factory: InstallerFactory = make_installer,
        which: Callable[[str], Optional[str]] = shutil.which,
        current_version: int = CURRENT_CONFIG_VERSION,
    ) -> None:
        self.paths = paths
        self.prompter = prompter
        self.console = console or Console()
        self.store = store or StateStore(paths)
        self.installer_factory = installer_factory
        self.which = which
        self.current_version = current_version

    def run(self) -> ProvisionOutcome:
        recorded = self.store.read_version()
        mode = decide_mode(recorded, self.paths, self.current_version)
        outcome = ProvisionOutcome(mode=mode, from_version=recorded)
        logger.debug("Recorded config version %s -> %s", recorded, mode.value)

        if mode is ProvisionMode.UP_TO_DATE:
            return outcome

        with self._persist_current(outcome):
            if mode is ProvisionMode.FIRST_RUN:
                self._first_run(outcome)
            else:
                self._update(outcome)
        return outcome

    @contextmanager
    def _persist_current(self, outcome: ProvisionOutcome) -> Iterator[None]:
        """Persist the current version on the way out, however we leave.

        The ``atexit`` hook only covers the process dying mid-run; the
        ``finally`` write is the one that normally lands, before hand-off.
        """
        safety_net = functools.partial(self.store.persist, self.current_version)
        atexit.register(safety_net)
        try:
            yield
        finally:
            try:
                outcome.state = self.store.persist(self.current_version)
            finally:
                atexit.unregister(safety_net)

    def _run_installer(
        self, feature_id: str, mode: InstallMode, outcome: ProvisionOutcome
    ) -> None:
        installer = self.installer_factory(feature_id, self.paths, outcome.from_version)
        self.console.print(f"\n[bold]Installing {installer.label}...[/bold]")
        try:
            report = installer.install(mode)
        except InstallWarning as exc:
            logger.warning("%s failed: %s", feature_id, exc)
            outcome.warnings.append(exc)
            print_warning(self.console, f"{installer.label} setup failed: {exc}", exc.retry_hint)
            return
        except ProvisioningEnvironmentError:
            raise
        except Exception as exc:
            logger.debug("%s failed unexpectedly", feature_id, exc_info=True)
            warning = InstallWarning(
                f"{type(exc).__name__}: {exc}", retry_hint=installer.retry_command
            )
            outcome.warnings.append(warning)
            print_warning(
                self.console, f"{installer.label} setup failed: {warning}", warning.retry_hint
            )
            return
        outcome.reports.append(report)
        print_report(self.console, report)

    def _first_run(self, outcome: ProvisionOutcome) -> None:
        show_banner(self.console)

        for offer in FIRST_RUN_OFFERS:
            self.console.print(RULE)
            self.console.print(offer.heading)
            for line in offer.details:
                self.console.print(line)
            self.console.print(RULE)
            if self.prompter.confirm(offer.question, default=True):
                outcome.accepted.append(offer.feature_id)
            else:
                outcome.declined.append(offer.feature_id)

        for feature_id in outcome.accepted:
            self._run_installer(feature_id, InstallMode.FRESH, outcome)

        for feature_id in outcome.declined:
            self.console.print(
                f"\nSkipping {feature_id} setup. You can run it manually later:\n"
                f"  kaku-onboard install {feature_id}"
            )

        self.console.print("\n[bold green]Kaku environment is ready! Enjoy coding.[/bold green]")

    def _update(self, outcome: ProvisionOutcome) -> None:
        recorded = outcome.from_version
        self.console.print(
            f"\n[bold]Kaku config update available![/bold] v{recorded} -> v{self.current_version}\n"
        )
        self.console.print("[bold]What's new:[/bold]")
        for bullet in announce(recorded, self.current_version):
            self.console.print(f"  • {bullet}")
        self.console.print()

        if not self.prompter.confirm("Apply update?", default=True):
            outcome.declined.append("update")
            self.console.print("[yellow]Skipped[/yellow]")
            self.prompter.pause("Press any key to continue...")
            return

        outcome.accepted.append("update")
        self._run_installer(ShellPluginInstaller.feature_id, InstallMode.UPDATE, outcome)

        if self.which("delta") is None:
            if self.prompter.confirm("Install Delta for better git diffs?", default=True):
                outcome.accepted.append(DeltaInstaller.feature_id)
                self._run_installer(DeltaInstaller.feature_id, InstallMode.UPDATE, outcome)
            else:
                outcome.declined.append(DeltaInstaller.feature_id)

        self.console.print(f"\n[bold green]Updated to v{self.current_version}![/bold green]")
        self.prompter.pause("Press any key to start...")


__all__ = [
    "FIRST_RUN_OFFERS",
    "INSTALLERS",
    "ProvisionMode",
    "ProvisionOutcome",
    "Provisioner",
    "decide_mode",
    "make_installer",
]
