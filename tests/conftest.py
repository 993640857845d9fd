from __future__ import annotations

from pathlib import Path

import pytest

from kaku_onboard.features.shell_plugins import VENDORED_PLUGINS
from kaku_onboard.runtime.home import ProfilePaths

BASELINE_LUA = """-- Kaku Configuration

local wezterm = require 'wezterm'

local config = {}

config.font_size = 17.0

return config
"""


@pytest.fixture()
def resources(tmp_path: Path) -> Path:
    """A resources dir with a baseline kaku.lua and vendored bundles."""
    root = tmp_path / "Resources"
    vendor = root / "vendor"
    for plugin in VENDORED_PLUGINS:
        plugin_dir = vendor / plugin.name
        plugin_dir.mkdir(parents=True)
        (plugin_dir / f"{plugin.name}.plugin.zsh").write_text(f"# {plugin.name}\n")
    (vendor / "delta").write_bytes(b"#!/bin/sh\necho delta\n")
    (root / "kaku.lua").write_text(BASELINE_LUA)
    return root


@pytest.fixture()
def profile(tmp_path: Path, resources: Path) -> ProfilePaths:
    """ProfilePaths rooted in tmp_path."""
    home = tmp_path / "home"
    home.mkdir()
    return ProfilePaths(
        config_home=home / ".config" / "kaku",
        resources=resources,
        zshrc=home / ".zshrc",
    )


@pytest.fixture()
def profile_env(
    profile: ProfilePaths, monkeypatch: pytest.MonkeyPatch
) -> ProfilePaths:
    """Point the environment-driven path discovery at ``profile``."""
    monkeypatch.setenv("KAKU_CONFIG_HOME", str(profile.config_home))
    monkeypatch.setenv("KAKU_RESOURCES_DIR", str(profile.resources))
    monkeypatch.setenv("ZDOTDIR", str(profile.zshrc.parent))
    return profile
