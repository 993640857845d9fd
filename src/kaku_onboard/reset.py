"""Undo provisioning so onboarding runs again on the next launch.

Removes the state record and every legacy marker, the git config keys that
still hold their managed default, and the managed theme block in
``kaku.lua``. Installed plugins and the delta binary are kept.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from kaku_onboard.features.delta import (
    DELTA_GIT_DEFAULTS,
    GitConfigError,
    GitConfigStore,
    GlobalGitConfig,
)
from kaku_onboard.features.theme import THEME_MARKER
from kaku_onboard.runtime.home import ProfilePaths

logger = logging.getLogger(__name__)

THEME_TERMINATOR = "return config"


@dataclass
class ResetReport:
    changed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def strip_theme_block(content: str) -> Optional[str]:
    """Return *content* without the managed theme block, or None if absent.

    Only strips when a ``return config`` line follows the marker; the
    terminator itself is kept.
    """
    lines = content.splitlines(keepends=True)
    start = next((i for i, line in enumerate(lines) if THEME_MARKER in line), None)
    if start is None:
        return None
    end = next(
        (i for i in range(start + 1, len(lines)) if lines[i].strip() == THEME_TERMINATOR),
        None,
    )
    if end is None:
        return None
    # Drop the blank line the installer put before the marker
    if start > 0 and not lines[start - 1].strip():
        start -= 1
    return "".join(lines[:start] + lines[end:])


def remove_git_defaults(store: GitConfigStore) -> list[str]:
    """Unset every managed key whose values all equal the managed default."""
    removed = []
    for key, expected in DELTA_GIT_DEFAULTS:
        values = store.get_all(key)
        if not values or any(value != expected for value in values):
            continue
        store.unset_all(key)
        removed.append(key)
    return removed


def reset_profile(
    paths: ProfilePaths, git_config: Optional[GitConfigStore] = None
) -> ResetReport:
    report = ResetReport()

    for path in (paths.state_file, *paths.legacy_artifacts()):
        if not path.exists():
            continue
        try:
            path.unlink()
        except OSError as exc:
            logger.warning("Cannot remove %s: %s", path, exc)
            report.skipped.append(f"could not remove {path}: {exc}")
        else:
            report.changed.append(f"removed {path}")

    try:
        removed = remove_git_defaults(git_config if git_config is not None else GlobalGitConfig())
    except GitConfigError as exc:
        logger.warning("git config cleanup failed: %s", exc)
        report.skipped.append(f"git config cleanup failed: {exc}")
    else:
        if removed:
            report.changed.append(f"removed git defaults: {', '.join(removed)}")
        else:
            report.skipped.append("no Kaku-managed git defaults to remove")

    _reset_theme(paths, report)
    return report


def _reset_theme(paths: ProfilePaths, report: ResetReport) -> None:
    config = paths.user_lua_config
    if not config.is_file():
        report.skipped.append(f"{config} not found")
        return

    try:
        content = config.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Cannot read %s: %s", config, exc)
        report.skipped.append(f"could not read {config}: {exc}")
        return

    stripped = strip_theme_block(content)
    if stripped is None:
        report.skipped.append(f"no managed Kaku theme block found in {config}")
        return

    try:
        config.write_text(stripped, encoding="utf-8")
    except OSError as exc:
        logger.warning("Cannot write %s: %s", config, exc)
        report.skipped.append(f"could not update {config}: {exc}")
        return
    report.changed.append(f"removed managed Kaku theme block from {config}")


__all__ = ["ResetReport", "remove_git_defaults", "reset_profile", "strip_theme_block"]
