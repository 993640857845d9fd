"""Optional features offered during onboarding and updates."""

from kaku_onboard.features.base import (
    FeatureInstaller,
    InstallMode,
    InstallReport,
    NotOwned,
    OwnedAtVersion,
    OwnershipPolicy,
)
from kaku_onboard.features.delta import DeltaInstaller, GitConfigStore, GlobalGitConfig
from kaku_onboard.features.shell_plugins import ShellPluginInstaller
from kaku_onboard.features.theme import ThemeInstaller

__all__ = [
    "DeltaInstaller",
    "FeatureInstaller",
    "GitConfigStore",
    "GlobalGitConfig",
    "InstallMode",
    "InstallReport",
    "NotOwned",
    "OwnedAtVersion",
    "OwnershipPolicy",
    "ShellPluginInstaller",
    "ThemeInstaller",
]
