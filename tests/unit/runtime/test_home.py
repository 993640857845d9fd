"""Tests for kaku_onboard.runtime.home -- config home and resource discovery."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from kaku_onboard.runtime.home import (
    ProfilePaths,
    get_config_home,
    get_resources_dir,
    get_zshrc_path,
)


class TestGetConfigHome:
    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KAKU_CONFIG_HOME", str(tmp_path / "cfg"))
        assert get_config_home() == tmp_path / "cfg"

    def test_unix_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("KAKU_CONFIG_HOME", raising=False)
        monkeypatch.setattr("kaku_onboard.runtime.home._is_windows", lambda: False)
        assert get_config_home() == Path.home() / ".config" / "kaku"

    def test_windows_uses_platformdirs(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("KAKU_CONFIG_HOME", raising=False)
        monkeypatch.setattr("kaku_onboard.runtime.home._is_windows", lambda: True)
        with patch("platformdirs.user_config_dir", return_value=r"C:\Users\dev\AppData\Roaming\kaku"):
            assert get_config_home() == Path(r"C:\Users\dev\AppData\Roaming\kaku")


class TestGetResourcesDir:
    def test_env_override(self, resources: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KAKU_RESOURCES_DIR", str(resources))
        assert get_resources_dir() == resources

    def test_env_override_missing_raises(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("KAKU_RESOURCES_DIR", str(tmp_path / "missing"))
        with pytest.raises(FileNotFoundError):
            get_resources_dir()

    def test_bundled_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("KAKU_RESOURCES_DIR", raising=False)
        monkeypatch.setattr("kaku_onboard.runtime.home.APP_BUNDLE_RESOURCES", tmp_path / "none")
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        result = get_resources_dir()
        assert (result / "kaku.lua").is_file()
        assert (result / "changelog.yaml").is_file()


class TestZshrcPath:
    def test_honors_zdotdir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ZDOTDIR", str(tmp_path / "zdot"))
        assert get_zshrc_path() == tmp_path / "zdot" / ".zshrc"

    def test_default_home(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ZDOTDIR", raising=False)
        assert get_zshrc_path() == Path.home() / ".zshrc"


class TestProfilePaths:
    def test_discover_uses_env(self, profile_env: ProfilePaths) -> None:
        assert ProfilePaths.discover() == profile_env

    def test_layout(self, profile: ProfilePaths) -> None:
        home = profile.config_home
        assert profile.state_file == home / "state.json"
        assert profile.user_bin_dir == home / "zsh" / "bin"
        assert profile.plugins_dir == home / "zsh" / "plugins"
        assert profile.baseline_lua_config == profile.resources / "kaku.lua"
        assert len(profile.legacy_artifacts()) == 5
