"""End-to-end tests for the kaku-onboard command line."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from kaku_onboard import app
from kaku_onboard.features.delta import DELTA_GIT_DEFAULTS
from kaku_onboard.features.shell_plugins import VENDORED_PLUGINS
from kaku_onboard.features.theme import THEME_MARKER
from kaku_onboard.runtime.home import ProfilePaths
from tests.fakes import FakeGitConfig, ScriptedPrompter

runner = CliRunner()


@pytest.fixture()
def fake_git():
    store = FakeGitConfig()
    with patch("kaku_onboard.features.delta.GlobalGitConfig", return_value=store), patch(
        "kaku_onboard.reset.GlobalGitConfig", return_value=store
    ):
        yield store


@pytest.fixture(autouse=True)
def wide_terminal(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("COLUMNS", "200")


# ---------------------------------------------------------------------------
# startup
# ---------------------------------------------------------------------------


class TestStartup:
    def test_first_launch_then_silent_relaunch(self, profile_env: ProfilePaths) -> None:
        prompter = ScriptedPrompter([False, False, False])
        with patch(
            "kaku_onboard.cli.commands.startup.KeypressPrompter", return_value=prompter
        ), patch("kaku_onboard.cli.commands.startup.exec_login_shell") as mock_exec:
            first = runner.invoke(app, ["startup"])
            second = runner.invoke(app, ["startup"])

        assert first.exit_code == 0, first.output
        assert second.exit_code == 0, second.output
        assert len(prompter.questions) == 3
        assert "Welcome to Kaku!" in first.output
        assert "Welcome to Kaku!" not in second.output
        assert mock_exec.call_count == 2
        mock_exec.assert_called_with(())
        state = json.loads(profile_env.state_file.read_text())
        assert state["config_version"] == 6

    def test_requested_command_passed_through(self, profile_env: ProfilePaths) -> None:
        profile_env.config_home.mkdir(parents=True)
        profile_env.state_file.write_text('{"config_version": 6}')
        with patch("kaku_onboard.cli.commands.startup.exec_login_shell") as mock_exec:
            result = runner.invoke(app, ["startup", "--", "htop", "-d", "10"])

        assert result.exit_code == 0, result.output
        mock_exec.assert_called_once_with(["htop", "-d", "10"])

    def test_accepting_shell_installs_plugins(self, profile_env: ProfilePaths) -> None:
        prompter = ScriptedPrompter([True, False, False])
        with patch(
            "kaku_onboard.cli.commands.startup.KeypressPrompter", return_value=prompter
        ), patch("kaku_onboard.cli.commands.startup.exec_login_shell"):
            result = runner.invoke(app, ["startup"])

        assert result.exit_code == 0, result.output
        for plugin in VENDORED_PLUGINS:
            assert (profile_env.plugins_dir / plugin.name).is_dir()
        assert str(profile_env.zsh_loader) in profile_env.zshrc.read_text()

    def test_missing_resources_exit_one(
        self, profile_env: ProfilePaths, monkeypatch: pytest.MonkeyPatch, tmp_path
    ) -> None:
        monkeypatch.setenv("KAKU_RESOURCES_DIR", str(tmp_path / "nowhere"))
        with patch("kaku_onboard.cli.commands.startup.exec_login_shell") as mock_exec:
            result = runner.invoke(app, ["startup"])

        assert result.exit_code == 1
        assert "Error" in result.output
        mock_exec.assert_not_called()


# ---------------------------------------------------------------------------
# install
# ---------------------------------------------------------------------------


class TestInstall:
    def test_shell_update_only(self, profile_env: ProfilePaths) -> None:
        result = runner.invoke(app, ["install", "shell", "--update-only"])

        assert result.exit_code == 0, result.output
        assert profile_env.zsh_loader.is_file()
        assert not profile_env.zshrc.exists()
        assert "is set up" in result.output

    def test_declined_prompt_changes_nothing(self, profile_env: ProfilePaths) -> None:
        result = runner.invoke(app, ["install", "theme"], input="n\n")

        assert result.exit_code == 0, result.output
        assert "Skipped Kaku Theme" in result.output
        assert not profile_env.user_lua_config.exists()

    def test_theme_after_confirm(self, profile_env: ProfilePaths) -> None:
        result = runner.invoke(app, ["install", "theme"], input="y\n")

        assert result.exit_code == 0, result.output
        assert THEME_MARKER in profile_env.user_lua_config.read_text()

    def test_delta_configures_git(self, profile_env: ProfilePaths, fake_git) -> None:
        result = runner.invoke(app, ["install", "delta", "--update-only"])

        assert result.exit_code == 0, result.output
        assert (profile_env.user_bin_dir / "delta").is_file()
        assert fake_git.values["core.pager"] == ["delta"]

    def test_missing_delta_resource_prints_hint(
        self, profile_env: ProfilePaths, fake_git
    ) -> None:
        (profile_env.vendor_dir / "delta").unlink()
        result = runner.invoke(app, ["install", "delta", "--update-only"])

        assert result.exit_code == 0
        assert "brew install git-delta" in result.output
        assert fake_git.writes == []

    def test_unknown_feature_rejected(self, profile_env: ProfilePaths) -> None:
        result = runner.invoke(app, ["install", "emacs"])
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# announce / status / reset
# ---------------------------------------------------------------------------


class TestAnnounce:
    def test_from_recorded_version(self, profile_env: ProfilePaths) -> None:
        profile_env.config_home.mkdir(parents=True)
        profile_env.state_file.write_text('{"config_version": 5}')

        result = runner.invoke(app, ["announce"])

        assert result.exit_code == 0, result.output
        assert "v5 -> v6" in result.output
        assert "Added zsh-completions to default shell setup" in result.output
        assert "40% faster ZSH startup" not in result.output

    def test_nothing_new(self, profile_env: ProfilePaths) -> None:
        result = runner.invoke(app, ["announce", "--from", "6"])
        assert result.exit_code == 0
        assert "Nothing new" in result.output

    def test_debug_flag_accepted(self, profile_env: ProfilePaths) -> None:
        result = runner.invoke(app, ["--debug", "announce", "--from", "2", "--to", "3"])
        assert result.exit_code == 0, result.output
        assert "Respect ZDOTDIR when patching .zshrc" in result.output


class TestStatus:
    def test_fresh_profile(self, profile_env: ProfilePaths) -> None:
        result = runner.invoke(app, ["status"])

        assert result.exit_code == 0, result.output
        for name in ("config_version", "legacy_state", "shell_plugins", "delta", "theme"):
            assert name in result.output


class TestReset:
    def test_yes_skips_prompt(self, profile_env: ProfilePaths, fake_git) -> None:
        for key, value in DELTA_GIT_DEFAULTS:
            fake_git.set(key, value)
        profile_env.config_home.mkdir(parents=True)
        profile_env.state_file.write_text('{"config_version": 6}')

        result = runner.invoke(app, ["reset", "--yes"])

        assert result.exit_code == 0, result.output
        assert "Kaku reset completed" in result.output
        assert not profile_env.state_file.exists()
        assert fake_git.values == {}

    def test_cancelled(self, profile_env: ProfilePaths, fake_git) -> None:
        profile_env.config_home.mkdir(parents=True)
        profile_env.state_file.write_text('{"config_version": 6}')

        result = runner.invoke(app, ["reset"], input="n\n")

        assert result.exit_code == 0
        assert "Reset cancelled." in result.output
        assert profile_env.state_file.exists()


class TestStartupFailures:
    def test_unusable_state_lock_exits_one(self, profile_env: ProfilePaths) -> None:
        profile_env.config_home.mkdir(parents=True)
        profile_env.state_lock.mkdir()
        prompter = ScriptedPrompter([False, False, False])
        with patch(
            "kaku_onboard.cli.commands.startup.KeypressPrompter", return_value=prompter
        ), patch("kaku_onboard.cli.commands.startup.exec_login_shell") as mock_exec:
            result = runner.invoke(app, ["startup"])

        assert result.exit_code == 1
        assert "Error" in result.output
        assert not isinstance(result.exception, IsADirectoryError)
        mock_exec.assert_not_called()

    def test_non_utf8_zshrc_still_reaches_shell(self, profile_env: ProfilePaths) -> None:
        profile_env.zshrc.write_bytes(b"# caf\xe9\n")
        prompter = ScriptedPrompter([True, True, False])
        with patch(
            "kaku_onboard.cli.commands.startup.KeypressPrompter", return_value=prompter
        ), patch("kaku_onboard.cli.commands.startup.exec_login_shell") as mock_exec:
            result = runner.invoke(app, ["startup"])

        assert result.exit_code == 0, result.output
        assert THEME_MARKER in profile_env.user_lua_config.read_text()
        mock_exec.assert_called_once_with(())
