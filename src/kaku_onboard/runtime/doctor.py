"""Profile health checks for ``kaku-onboard status``.

Provides reusable check functions that detect:
- A recorded config version behind the current one
- Legacy state files that were never folded into state.json
- Missing vendored shell plugins
- delta missing from PATH or not the managed copy
- A kaku.lua without the Kaku theme block
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from typing import Callable, Optional

from kaku_onboard.changelog import CURRENT_CONFIG_VERSION
from kaku_onboard.features.shell_plugins import VENDORED_PLUGINS
from kaku_onboard.features.theme import THEME_MARKER
from kaku_onboard.runtime.home import ProfilePaths
from kaku_onboard.state.store import StateStore


@dataclass
class DoctorCheck:
    """Result of a single health check."""

    name: str
    passed: bool
    message: str
    severity: str  # "error", "warning", "info"


def check_config_version(paths: ProfilePaths) -> DoctorCheck:
    recorded = StateStore(paths).read_version()
    if recorded >= CURRENT_CONFIG_VERSION:
        return DoctorCheck(
            "config_version", True, f"Config version: v{recorded} (current)", "info"
        )
    if recorded == 0:
        return DoctorCheck(
            "config_version",
            False,
            "No recorded state (onboarding runs on next launch)",
            "warning",
        )
    return DoctorCheck(
        "config_version",
        False,
        f"Config version v{recorded} behind v{CURRENT_CONFIG_VERSION} (update offered on next launch)",
        "warning",
    )


def check_legacy_artifacts(paths: ProfilePaths) -> DoctorCheck:
    leftovers = [p.name for p in paths.legacy_artifacts() if p.exists()]
    if not leftovers:
        return DoctorCheck("legacy_state", True, "No legacy state files", "info")
    return DoctorCheck(
        "legacy_state", False, f"Legacy state files: {', '.join(leftovers)}", "warning"
    )


def check_shell_plugins(paths: ProfilePaths) -> DoctorCheck:
    missing = [p.name for p in VENDORED_PLUGINS if not (paths.plugins_dir / p.name).is_dir()]
    if not missing:
        return DoctorCheck(
            "shell_plugins", True, f"{len(VENDORED_PLUGINS)} shell plugins installed", "info"
        )
    return DoctorCheck("shell_plugins", False, f"Missing: {', '.join(missing)}", "warning")


def check_delta(
    paths: ProfilePaths, which: Callable[[str], Optional[str]] = shutil.which
) -> DoctorCheck:
    resolved = which("delta")
    managed = paths.user_bin_dir / "delta"
    if resolved is None:
        if managed.is_file():
            return DoctorCheck(
                "delta", False, f"{managed} installed but not on PATH", "warning"
            )
        return DoctorCheck("delta", False, "delta not found on PATH", "warning")
    if resolved == str(managed):
        return DoctorCheck("delta", True, f"Managed delta: {resolved}", "info")
    return DoctorCheck("delta", True, f"Using delta from {resolved}", "info")


def check_theme(paths: ProfilePaths) -> DoctorCheck:
    config = paths.user_lua_config
    if not config.is_file():
        return DoctorCheck("theme", False, f"{config} not found", "info")
    if THEME_MARKER in config.read_text(encoding="utf-8", errors="replace"):
        return DoctorCheck("theme", True, "Kaku theme block present", "info")
    return DoctorCheck("theme", True, "Custom kaku.lua without Kaku theme block", "info")


def run_checks(paths: ProfilePaths) -> list[DoctorCheck]:
    return [
        check_config_version(paths),
        check_legacy_artifacts(paths),
        check_shell_plugins(paths),
        check_delta(paths),
        check_theme(paths),
    ]
