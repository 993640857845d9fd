"""Kaku color theme, patched into the user's ``kaku.lua``.

The user config is only written when it does not exist yet or while the
profile is still at the version whose config this tool generated
(``THEME_OWNERSHIP``). Anything else is presumed user-modified and left alone.

The patch inserts ``THEME_BLOCK`` right before the trailing ``return config``
of the baseline. The baseline's shape is validated first; a baseline that
does not end in a return statement is refused rather than corrupted.
"""

from __future__ import annotations

import logging
import re

from kaku_onboard.errors import InstallWarning, MissingResourceError
from kaku_onboard.features.base import (
    FeatureInstaller,
    InstallMode,
    InstallReport,
    OwnedAtVersion,
    OwnershipPolicy,
    backup_file,
    may_write,
)

logger = logging.getLogger(__name__)

THEME_OWNERSHIP: OwnershipPolicy = OwnedAtVersion(1)
THEME_MARKER = "-- ===== Kaku Theme ====="

_RETURN_STATEMENT = re.compile(r"^\s*return\s+[A-Za-z_][A-Za-z0-9_]*\s*$")

THEME_BLOCK = f"""
{THEME_MARKER}
config.colors = {{
  foreground = '#d4d4d4',
  background = '#1e1e1e',
  cursor_bg = '#569cd6',
  cursor_fg = '#1e1e1e',
  cursor_border = '#569cd6',
  selection_bg = '#264f78',
  selection_fg = '#d4d4d4',
  ansi = {{'#000000', '#cd3131', '#0dbc79', '#e5e510', '#2472c8', '#bc3fbc', '#11a8cd', '#e5e5e5'}},
  brights = {{'#666666', '#f14c4c', '#23d18b', '#f5f543', '#3b8eea', '#d670d6', '#29b8db', '#e5e5e5'}},
  tab_bar = {{
    background = '#1e1e1e',
    active_tab = {{
      bg_color = '#1e1e1e',
      fg_color = '#569cd6',
      intensity = 'Bold',
    }},
    inactive_tab = {{
      bg_color = '#2d2d2d',
      fg_color = '#858585',
    }},
    inactive_tab_hover = {{
      bg_color = '#2d2d2d',
      fg_color = '#d4d4d4',
    }},
    new_tab = {{
      bg_color = '#1e1e1e',
      fg_color = '#858585',
    }},
    new_tab_hover = {{
      bg_color = '#2d2d2d',
      fg_color = '#d4d4d4',
    }},
  }},
}}
config.window_frame = {{
  active_titlebar_bg = '#1e1e1e',
  inactive_titlebar_bg = '#1e1e1e',
  button_bg = '#1e1e1e',
  button_fg = '#cccccc',
}}

"""


class ThemePatchError(ValueError):
    """The config does not end in the ``return <table>`` the patch expects."""


def patch_config(content: str) -> str:
    """Return *content* with ``THEME_BLOCK`` inserted before its final return.

    Raises:
        ThemePatchError: If the last non-blank line is not a return statement.
    """
    lines = content.splitlines()
    while lines and not lines[-1].strip():
        lines.pop()
    if not lines or not _RETURN_STATEMENT.match(lines[-1]):
        raise ThemePatchError("config does not end with a 'return <config>' statement")

    body, trailing_return = lines[:-1], lines[-1]
    return "\n".join(body) + "\n" + THEME_BLOCK + trailing_return + "\n"


class ThemeInstaller(FeatureInstaller):
    feature_id = "theme"
    label = "Kaku Theme"

    def install(self, mode: InstallMode) -> InstallReport:
        report = InstallReport(feature=self.feature_id)
        source = self.paths.baseline_lua_config
        dest = self.paths.user_lua_config

        if not source.is_file():
            raise MissingResourceError(source, retry_hint=self.retry_command)

        if not may_write(dest, THEME_OWNERSHIP, self.recorded_version):
            logger.info("Keeping custom %s (recorded version %s)", dest, self.recorded_version)
            report.skipped.append(
                f"Detected existing custom {dest.name}, skipping automatic overwrite. "
                f"To apply the theme manually, review: {source}"
            )
            return report

        try:
            patched = patch_config(source.read_text(encoding="utf-8"))
        except ThemePatchError as exc:
            raise InstallWarning(f"{source}: {exc}", retry_hint=self.retry_command) from exc

        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            if dest.exists():
                backup = backup_file(dest)
                report.backups.append(backup)
                report.changed.append(f"backup created at {backup}")
            dest.write_text(patched, encoding="utf-8")
        except OSError as exc:
            raise InstallWarning(
                f"Failed to write {dest}: {exc}", retry_hint=self.retry_command
            ) from exc

        report.changed.append(f"Kaku theme applied to {dest}")
        return report


__all__ = [
    "THEME_BLOCK",
    "THEME_MARKER",
    "THEME_OWNERSHIP",
    "ThemeInstaller",
    "ThemePatchError",
    "patch_config",
]
