"""Shared contract for the optional feature installers.

Every installer is idempotent and exposes ``install(mode)``. Success returns
an ``InstallReport``; a recoverable failure raises ``InstallWarning`` so the
orchestrator can report it and move on to the next feature.
"""

from __future__ import annotations

import shutil
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union

from kaku_onboard.runtime.home import ProfilePaths


class InstallMode(Enum):
    """Whether the installer runs during onboarding or a silent update."""

    FRESH = "fresh"
    UPDATE = "update"


@dataclass(frozen=True)
class NotOwned:
    """The artifact always belongs to the user."""

    def permits_overwrite(self, recorded_version: int) -> bool:
        return False


@dataclass(frozen=True)
class OwnedAtVersion:
    """The artifact may be overwritten only while the profile sits at *version*."""

    version: int

    def permits_overwrite(self, recorded_version: int) -> bool:
        return recorded_version == self.version


OwnershipPolicy = Union[NotOwned, OwnedAtVersion]


def may_write(destination: Path, policy: OwnershipPolicy, recorded_version: int) -> bool:
    """Return True when *destination* can be written without asking.

    A missing destination is always writable; an existing one only inside
    its ownership window.
    """
    if not destination.exists():
        return True
    return policy.permits_overwrite(recorded_version)


def backup_file(path: Path) -> Path:
    """Copy *path* to ``<path>.kaku-backup-<epoch>`` and return the copy.

    Existing backups are never replaced; a ``-<n>`` suffix is added when the
    name for this second is taken.
    """
    stem = f"{path.name}.kaku-backup-{int(time.time())}"
    backup = path.with_name(stem)
    counter = 1
    while backup.exists():
        backup = path.with_name(f"{stem}-{counter}")
        counter += 1
    shutil.copy2(path, backup)
    return backup


@dataclass
class InstallReport:
    """What an installer changed (or left alone)."""

    feature: str
    changed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    backups: list[Path] = field(default_factory=list)


class FeatureInstaller(ABC):
    """Base class for installers of one optional feature."""

    feature_id: str = ""
    label: str = ""

    def __init__(self, paths: ProfilePaths, recorded_version: int = 0) -> None:
        self.paths = paths
        self.recorded_version = recorded_version

    @property
    def retry_command(self) -> str:
        return f"kaku-onboard install {self.feature_id}"

    @abstractmethod
    def install(self, mode: InstallMode) -> InstallReport:
        """Install or refresh the feature.

        Raises:
            InstallWarning: On a recoverable failure.
        """


__all__ = [
    "FeatureInstaller",
    "InstallMode",
    "InstallReport",
    "NotOwned",
    "OwnedAtVersion",
    "OwnershipPolicy",
    "backup_file",
    "may_write",
]
