"""Delta: syntax-highlighted git diffs.

Two independent phases:

1. **Install if missing** -- copy the vendored binary into the user bin dir
   unless the ``delta`` on PATH already is that managed copy.
2. **Configure if unset** -- fill in each managed global git config key that
   has no value yet. Keys the user already set are left alone, key by key.
"""

from __future__ import annotations

import logging
import os
import shutil
import stat
import subprocess
from pathlib import Path
from typing import Callable, Optional, Protocol

from kaku_onboard.errors import (
    InstallWarning,
    MissingResourceError,
    ProvisioningEnvironmentError,
)
from kaku_onboard.features.base import FeatureInstaller, InstallMode, InstallReport
from kaku_onboard.runtime.home import ProfilePaths

logger = logging.getLogger(__name__)

MANUAL_INSTALL_HINT = "brew install git-delta"

DELTA_GIT_DEFAULTS: tuple[tuple[str, str], ...] = (
    ("core.pager", "delta"),
    ("interactive.diffFilter", "delta --color-only"),
    ("delta.navigate", "true"),
    ("delta.pager", "less --mouse --wheel-lines=3 -R -F -X"),
    ("delta.line-numbers", "true"),
    ("delta.side-by-side", "true"),
    ("delta.line-fill-method", "spaces"),
    ("delta.syntax-theme", "Coldark-Dark"),
    ("delta.file-style", "omit"),
    ("delta.file-decoration-style", "omit"),
    ("delta.hunk-header-style", "file line-number syntax"),
)


class GitConfigError(RuntimeError):
    """A ``git config`` invocation failed unexpectedly."""


class GitConfigStore(Protocol):
    """Global key/value tool configuration, one key at a time."""

    def get_all(self, key: str) -> list[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def unset_all(self, key: str) -> None: ...


class GlobalGitConfig:
    """``git config --global`` backed store."""

    def __init__(self, git: str = "git") -> None:
        self.git = git

    def _run(self, *args: str) -> subprocess.CompletedProcess[str]:
        try:
            return subprocess.run(
                [self.git, "config", "--global", *args],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise GitConfigError(f"Cannot run {self.git}: {exc}") from exc

    def get_all(self, key: str) -> list[str]:
        result = self._run("--get-all", key)
        # Exit code 1 means the key is not set
        if result.returncode == 1:
            return []
        if result.returncode != 0:
            raise GitConfigError(f"git config --get-all {key} failed: {result.stderr.strip()}")
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def set(self, key: str, value: str) -> None:
        result = self._run(key, value)
        if result.returncode != 0:
            raise GitConfigError(f"git config {key} failed: {result.stderr.strip()}")

    def unset_all(self, key: str) -> None:
        result = self._run("--unset-all", key)
        if result.returncode not in (0, 5):
            raise GitConfigError(f"git config --unset-all {key} failed: {result.stderr.strip()}")


def apply_missing_defaults(store: GitConfigStore) -> list[str]:
    """Set each managed key that has no value. Returns the keys set."""
    applied = []
    for key, value in DELTA_GIT_DEFAULTS:
        if store.get_all(key):
            continue
        store.set(key, value)
        applied.append(key)
    return applied


class DeltaInstaller(FeatureInstaller):
    feature_id = "delta"
    label = "Delta"

    def __init__(
        self,
        paths: ProfilePaths,
        recorded_version: int = 0,
        git_config: Optional[GitConfigStore] = None,
        which: Callable[[str], Optional[str]] = shutil.which,
    ) -> None:
        super().__init__(paths, recorded_version)
        self.git_config = git_config if git_config is not None else GlobalGitConfig()
        self.which = which

    @property
    def managed_binary(self) -> Path:
        return self.paths.user_bin_dir / "delta"

    def is_managed_on_path(self) -> bool:
        resolved = self.which("delta")
        return resolved is not None and os.path.abspath(resolved) == os.path.abspath(
            self.managed_binary
        )

    def install(self, mode: InstallMode) -> InstallReport:
        report = InstallReport(feature=self.feature_id)

        if self.is_managed_on_path():
            report.skipped.append("delta binary already installed")
        else:
            self._copy_binary(report)

        try:
            applied = apply_missing_defaults(self.git_config)
        except GitConfigError as exc:
            raise InstallWarning(str(exc), retry_hint=self.retry_command) from exc
        logger.debug("Applied delta git defaults: %s", applied)
        if applied:
            report.changed.append(f"set git config: {', '.join(applied)}")
        else:
            report.skipped.append("git config already has every delta key")
        return report

    def _copy_binary(self, report: InstallReport) -> None:
        source = self.paths.vendor_dir / "delta"
        if not source.is_file():
            raise MissingResourceError(source, retry_hint=MANUAL_INSTALL_HINT)

        bin_dir = self.paths.user_bin_dir
        try:
            bin_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ProvisioningEnvironmentError(bin_dir, exc) from exc

        target = self.managed_binary
        try:
            shutil.copyfile(source, target)
            perms = target.stat().st_mode
            target.chmod(perms | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        except OSError as exc:
            raise InstallWarning(
                f"Failed to install delta: {exc}", retry_hint=self.retry_command
            ) from exc
        report.changed.append(f"installed delta binary to {target}")


__all__ = [
    "DELTA_GIT_DEFAULTS",
    "DeltaInstaller",
    "GitConfigError",
    "GitConfigStore",
    "GlobalGitConfig",
    "apply_missing_defaults",
]
