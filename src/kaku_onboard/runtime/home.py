"""Per-user config home and bundled resource discovery.

Provides the canonical functions for locating:
- The user's Kaku config directory (cross-platform)
- The resources directory the installers read vendor bundles from
- Every file the provisioning flow reads or writes, as ``ProfilePaths``
"""

from __future__ import annotations

import importlib.resources
import os
from dataclasses import dataclass
from pathlib import Path

APP_BUNDLE_RESOURCES = Path("/Applications/Kaku.app/Contents/Resources")


def _is_windows() -> bool:
    """Return True when running on Windows."""
    return os.name == "nt"


def get_config_home() -> Path:
    """Return the path to the user's Kaku config directory.

    Resolution order:
    1. KAKU_CONFIG_HOME environment variable (all platforms)
    2. ~/.config/kaku/ on macOS/Linux
    3. %APPDATA%\\kaku\\ on Windows (via platformdirs)

    Returns:
        Path: Absolute path to the config directory.
    """
    if env_home := os.environ.get("KAKU_CONFIG_HOME"):
        return Path(env_home)

    if _is_windows():
        from platformdirs import user_config_dir

        return Path(user_config_dir("kaku", appauthor=False))

    return Path.home() / ".config" / "kaku"


def get_resources_dir() -> Path:
    """Return the directory holding ``kaku.lua`` and the ``vendor/`` bundles.

    Resolution order:
    1. KAKU_RESOURCES_DIR environment variable (CI/testing)
    2. /Applications/Kaku.app/Contents/Resources (installed app)
    3. ~/Applications/Kaku.app/Contents/Resources (per-user install)
    4. The package's bundled ``resources`` directory (development layout)

    Raises:
        FileNotFoundError: If KAKU_RESOURCES_DIR points at a missing path.
    """
    if env_root := os.environ.get("KAKU_RESOURCES_DIR"):
        root = Path(env_root)
        if root.is_dir():
            return root
        raise FileNotFoundError(f"KAKU_RESOURCES_DIR path does not exist: {env_root}")

    for candidate in (
        APP_BUNDLE_RESOURCES,
        Path.home() / "Applications" / "Kaku.app" / "Contents" / "Resources",
    ):
        if (candidate / "kaku.lua").is_file():
            return candidate

    return Path(str(importlib.resources.files("kaku_onboard"))) / "resources"


def get_zshrc_path() -> Path:
    """Return the ``.zshrc`` zsh reads, honoring ZDOTDIR."""
    if zdotdir := os.environ.get("ZDOTDIR"):
        return Path(zdotdir) / ".zshrc"
    return Path.home() / ".zshrc"


@dataclass(frozen=True)
class ProfilePaths:
    """Every path the provisioning flow touches for one user profile."""

    config_home: Path
    resources: Path
    zshrc: Path

    @classmethod
    def discover(cls) -> "ProfilePaths":
        return cls(
            config_home=get_config_home(),
            resources=get_resources_dir(),
            zshrc=get_zshrc_path(),
        )

    # State

    @property
    def state_file(self) -> Path:
        return self.config_home / "state.json"

    @property
    def state_lock(self) -> Path:
        return self.config_home / ".state.lock"

    @property
    def legacy_first_run_flag(self) -> Path:
        return self.config_home / ".first_run_completed"

    @property
    def legacy_version_file(self) -> Path:
        return self.config_home / ".kaku_config_version"

    @property
    def legacy_geometry_file(self) -> Path:
        return self.config_home / ".kaku_window_geometry"

    @property
    def legacy_position_file(self) -> Path:
        return self.config_home / ".kaku_window_position"

    @property
    def setup_v1_marker(self) -> Path:
        return self.config_home / ".kaku_setup_v1_completed"

    # User-owned artifacts

    @property
    def zsh_dir(self) -> Path:
        return self.config_home / "zsh"

    @property
    def plugins_dir(self) -> Path:
        return self.zsh_dir / "plugins"

    @property
    def user_bin_dir(self) -> Path:
        return self.zsh_dir / "bin"

    @property
    def zsh_loader(self) -> Path:
        return self.zsh_dir / "kaku.zsh"

    @property
    def user_lua_config(self) -> Path:
        return self.config_home / "kaku.lua"

    # Vendor bundles

    @property
    def vendor_dir(self) -> Path:
        return self.resources / "vendor"

    @property
    def baseline_lua_config(self) -> Path:
        return self.resources / "kaku.lua"

    def legacy_artifacts(self) -> tuple[Path, ...]:
        """All legacy state files, including ones only ``reset`` removes."""
        return (
            self.legacy_first_run_flag,
            self.legacy_version_file,
            self.legacy_geometry_file,
            self.legacy_position_file,
            self.setup_v1_marker,
        )
