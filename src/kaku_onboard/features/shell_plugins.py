"""Shell productivity plugins: vendored zsh plugins plus a managed loader.

Plugins are copied from ``<resources>/vendor/<name>`` into
``<config home>/zsh/plugins/<name>``. An existing plugin directory counts as
installed and is never touched, even if the vendored copy is newer.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

from kaku_onboard.errors import InstallWarning, ProvisioningEnvironmentError
from kaku_onboard.features.base import FeatureInstaller, InstallMode, InstallReport

logger = logging.getLogger(__name__)

LOADER_SOURCE_PATTERN = "kaku/zsh/kaku.zsh"
LOADER_HEADER = "# Managed by kaku-onboard. Regenerated on update; customize ~/.zshrc instead."


@dataclass(frozen=True)
class ZshPlugin:
    name: str
    entry: str
    completions_only: bool = False


# Load order matters: zsh-syntax-highlighting must be sourced last.
VENDORED_PLUGINS: tuple[ZshPlugin, ...] = (
    ZshPlugin("zsh-completions", "src", completions_only=True),
    ZshPlugin("zsh-z", "zsh-z.plugin.zsh"),
    ZshPlugin("zsh-autosuggestions", "zsh-autosuggestions.zsh"),
    ZshPlugin("zsh-syntax-highlighting", "zsh-syntax-highlighting.zsh"),
)


def _copy_tree_staged(source: Path, dest: Path) -> None:
    """Copy *source* to *dest* through a sibling temp dir, then rename.

    A failed copy leaves nothing at *dest*, so the next run retries it.
    """
    tmp_dir = Path(tempfile.mkdtemp(prefix=f".{dest.name}_", dir=dest.parent))
    try:
        staged = tmp_dir / dest.name
        shutil.copytree(source, staged)
        os.replace(staged, dest)
    finally:
        if tmp_dir.exists():
            shutil.rmtree(tmp_dir)


def render_loader(plugins_dir: Path, bin_dir: Path, installed: list[ZshPlugin]) -> str:
    """Return the ``kaku.zsh`` content for the installed plugins."""
    lines = [LOADER_HEADER, "", f'export PATH="{bin_dir}:$PATH"', ""]
    for plugin in installed:
        target = plugins_dir / plugin.name / plugin.entry
        if plugin.completions_only:
            lines.append(f'fpath=("{target}" $fpath)')
        else:
            lines.append(f'[[ -f "{target}" ]] && source "{target}"')
    lines.append("")
    return "\n".join(lines)


class ShellPluginInstaller(FeatureInstaller):
    feature_id = "shell"
    label = "enhanced shell features"

    def install(self, mode: InstallMode) -> InstallReport:
        report = InstallReport(feature=self.feature_id)
        plugins_dir = self.paths.plugins_dir
        try:
            plugins_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ProvisioningEnvironmentError(plugins_dir, exc) from exc

        installed: list[ZshPlugin] = []
        problems: list[str] = []
        for plugin in VENDORED_PLUGINS:
            dest = plugins_dir / plugin.name
            if dest.is_dir():
                report.skipped.append(f"{plugin.name} already installed")
                installed.append(plugin)
                continue

            source = self.paths.vendor_dir / plugin.name
            if not source.is_dir():
                logger.warning("Vendored plugin missing: %s", source)
                problems.append(f"{plugin.name} not found in {self.paths.vendor_dir}")
                continue

            try:
                _copy_tree_staged(source, dest)
            except OSError as exc:
                logger.warning("Failed to install %s: %s", plugin.name, exc)
                problems.append(f"{plugin.name} could not be copied ({exc})")
                continue
            report.changed.append(f"installed {plugin.name}")
            installed.append(plugin)

        self._write_loader(installed, report)
        if mode is InstallMode.FRESH:
            self._ensure_zshrc_sources_loader(report)

        if problems:
            raise InstallWarning(
                f"Some plugins were not installed: {'; '.join(problems)}",
                retry_hint=self.retry_command,
            )
        return report

    def _write_loader(self, installed: list[ZshPlugin], report: InstallReport) -> None:
        loader = self.paths.zsh_loader
        content = render_loader(self.paths.plugins_dir, self.paths.user_bin_dir, installed)
        if loader.is_file() and loader.read_text(encoding="utf-8", errors="replace") == content:
            report.skipped.append(f"{loader.name} up to date")
            return
        try:
            loader.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise InstallWarning(
                f"Failed to write {loader}: {exc}", retry_hint=self.retry_command
            ) from exc
        report.changed.append(f"wrote {loader}")

    def _ensure_zshrc_sources_loader(self, report: InstallReport) -> None:
        zshrc = self.paths.zshrc
        loader = self.paths.zsh_loader
        try:
            existing = (
                zshrc.read_text(encoding="utf-8", errors="surrogateescape")
                if zshrc.is_file()
                else ""
            )
        except OSError as exc:
            raise InstallWarning(
                f"Failed to read {zshrc}: {exc}", retry_hint=self.retry_command
            ) from exc
        if LOADER_SOURCE_PATTERN in existing or str(loader) in existing:
            report.skipped.append(f"{zshrc} already sources kaku.zsh")
            return

        block = f'\n# Kaku shell integration\n[[ -f "{loader}" ]] && source "{loader}"\n'
        if existing and not existing.endswith("\n"):
            block = "\n" + block
        try:
            zshrc.parent.mkdir(parents=True, exist_ok=True)
            with zshrc.open("a", encoding="utf-8", errors="surrogateescape") as handle:
                handle.write(block)
        except OSError as exc:
            raise InstallWarning(
                f"Failed to update {zshrc}: {exc}", retry_hint=self.retry_command
            ) from exc
        report.changed.append(f"added kaku.zsh to {zshrc}")


__all__ = ["ShellPluginInstaller", "VENDORED_PLUGINS", "ZshPlugin", "render_loader"]
