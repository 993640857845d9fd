"""Tests for kaku_onboard.features.delta -- install-if-missing, configure-if-unset."""

from __future__ import annotations

import os
import subprocess
from unittest.mock import patch

import pytest

from kaku_onboard.errors import InstallWarning, MissingResourceError
from kaku_onboard.features.base import InstallMode
from kaku_onboard.features.delta import (
    DELTA_GIT_DEFAULTS,
    DeltaInstaller,
    GitConfigError,
    GlobalGitConfig,
    apply_missing_defaults,
)
from kaku_onboard.runtime.home import ProfilePaths
from tests.fakes import FakeGitConfig


def not_found(name: str):
    return None


class TestApplyMissingDefaults:
    def test_empty_store_gets_everything(self) -> None:
        store = FakeGitConfig()
        applied = apply_missing_defaults(store)
        assert applied == [key for key, _ in DELTA_GIT_DEFAULTS]
        assert store.values["delta.side-by-side"] == ["true"]

    def test_existing_pager_preserved(self) -> None:
        store = FakeGitConfig({"core.pager": ["less -R"]})

        applied = apply_missing_defaults(store)

        assert store.values["core.pager"] == ["less -R"]
        assert "core.pager" not in applied
        for key, value in DELTA_GIT_DEFAULTS[1:]:
            assert store.values[key] == [value]

    def test_partial_configuration_fills_only_gaps(self) -> None:
        store = FakeGitConfig(
            {"delta.syntax-theme": ["Nord"], "delta.line-numbers": ["false"]}
        )
        apply_missing_defaults(store)
        written = {key for key, _ in store.writes}
        assert "delta.syntax-theme" not in written
        assert "delta.line-numbers" not in written
        assert store.values["delta.syntax-theme"] == ["Nord"]
        assert len(written) == len(DELTA_GIT_DEFAULTS) - 2

    def test_fully_configured_is_noop(self) -> None:
        store = FakeGitConfig({key: [value] for key, value in DELTA_GIT_DEFAULTS})
        assert apply_missing_defaults(store) == []
        assert store.writes == []


class TestDeltaInstaller:
    def test_copies_binary_and_configures(self, profile: ProfilePaths) -> None:
        store = FakeGitConfig()
        report = DeltaInstaller(profile, git_config=store, which=not_found).install(
            InstallMode.FRESH
        )

        target = profile.user_bin_dir / "delta"
        assert target.read_bytes() == (profile.vendor_dir / "delta").read_bytes()
        assert os.access(target, os.X_OK)
        assert store.values["core.pager"] == ["delta"]
        assert any("installed delta" in line for line in report.changed)

    def test_managed_binary_on_path_not_recopied(self, profile: ProfilePaths) -> None:
        target = profile.user_bin_dir / "delta"
        target.parent.mkdir(parents=True)
        target.write_text("already here")
        store = FakeGitConfig()

        report = DeltaInstaller(
            profile, git_config=store, which=lambda name: str(target)
        ).install(InstallMode.UPDATE)

        assert target.read_text() == "already here"
        assert "delta binary already installed" in report.skipped
        assert store.values["core.pager"] == ["delta"]

    def test_foreign_delta_on_path_still_installs_managed_copy(
        self, profile: ProfilePaths
    ) -> None:
        DeltaInstaller(
            profile, git_config=FakeGitConfig(), which=lambda name: "/opt/homebrew/bin/delta"
        ).install(InstallMode.FRESH)
        assert (profile.user_bin_dir / "delta").is_file()

    def test_missing_vendor_binary(self, profile: ProfilePaths) -> None:
        (profile.vendor_dir / "delta").unlink()
        store = FakeGitConfig()
        with pytest.raises(MissingResourceError) as excinfo:
            DeltaInstaller(profile, git_config=store, which=not_found).install(InstallMode.FRESH)
        assert "brew install git-delta" in excinfo.value.retry_hint
        assert store.writes == []

    def test_git_failure_is_warning(self, profile: ProfilePaths) -> None:
        class BrokenGit(FakeGitConfig):
            def get_all(self, key):
                raise GitConfigError("git exploded")

        with pytest.raises(InstallWarning):
            DeltaInstaller(profile, git_config=BrokenGit(), which=not_found).install(
                InstallMode.FRESH
            )

    def test_rerun_is_idempotent(self, profile: ProfilePaths) -> None:
        store = FakeGitConfig()
        installer = DeltaInstaller(profile, git_config=store, which=not_found)
        installer.install(InstallMode.FRESH)
        writes = list(store.writes)
        installer.install(InstallMode.FRESH)
        assert store.writes == writes


class TestGlobalGitConfig:
    def _completed(self, returncode: int, stdout: str = "", stderr: str = ""):
        return subprocess.CompletedProcess([], returncode, stdout=stdout, stderr=stderr)

    def test_unset_key_is_empty(self) -> None:
        with patch("subprocess.run", return_value=self._completed(1)):
            assert GlobalGitConfig().get_all("core.pager") == []

    def test_values_split_per_line(self) -> None:
        with patch("subprocess.run", return_value=self._completed(0, "a\nb\n")) as mock_run:
            assert GlobalGitConfig().get_all("x.y") == ["a", "b"]
        assert mock_run.call_args.args[0] == ["git", "config", "--global", "--get-all", "x.y"]

    def test_unexpected_failure_raises(self) -> None:
        with patch("subprocess.run", return_value=self._completed(128, stderr="bad")):
            with pytest.raises(GitConfigError):
                GlobalGitConfig().get_all("x.y")

    def test_missing_git_raises(self) -> None:
        with patch("subprocess.run", side_effect=FileNotFoundError("git")):
            with pytest.raises(GitConfigError):
                GlobalGitConfig().set("x.y", "z")
