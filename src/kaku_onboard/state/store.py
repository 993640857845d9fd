"""Persisted provisioning state: ``state.json`` plus legacy marker files.

The state record is the migration cursor for a user profile. Reading never
raises: a missing or corrupt record falls back to the legacy marker files
and finally to version 0, which re-runs onboarding instead of crashing.

Writing (``persist``) is serialized by an exclusive file lock and lands via
atomic rename, so two terminal windows racing on first launch cannot leave
a half-written record behind. Every write also folds the legacy markers
into the record and deletes them.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Iterator, Optional

from kaku_onboard.errors import ProvisioningEnvironmentError
from kaku_onboard.runtime.home import ProfilePaths

logger = logging.getLogger(__name__)

# Recorded version implied by the previous generation's completion flag.
FIRST_RUN_FLAG_VERSION = 1


@dataclass(frozen=True)
class WindowGeometry:
    width: int
    height: int

    def to_dict(self) -> dict[str, int]:
        return {"width": self.width, "height": self.height}


@dataclass(frozen=True)
class VersionState:
    """The persisted record: ``{config_version, window_geometry?}``."""

    config_version: int
    window_geometry: Optional[WindowGeometry] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"config_version": self.config_version}
        if self.window_geometry is not None:
            data["window_geometry"] = self.window_geometry.to_dict()
        return data

    def render(self) -> str:
        return json.dumps(self.to_dict(), indent=2) + "\n"


def _positive_int(field: str) -> Optional[int]:
    if not field.isdigit():
        return None
    value = int(field)
    return value if value > 0 else None


def parse_legacy_geometry(raw: str) -> Optional[WindowGeometry]:
    """Parse the legacy ``a,b,c,d`` geometry tuple.

    Two encodings were written historically (position+size and size only),
    so the last two fields win when both parse as positive integers and the
    first two are used otherwise. A 2-field value cannot be told apart from
    a truncated 4-field one; this is a heuristic, not a proof.
    """
    fields = "".join(raw.split()).split(",")
    if len(fields) >= 4:
        width, height = _positive_int(fields[2]), _positive_int(fields[3])
        if width is not None and height is not None:
            return WindowGeometry(width, height)
    if len(fields) >= 2:
        width, height = _positive_int(fields[0]), _positive_int(fields[1])
        if width is not None and height is not None:
            return WindowGeometry(width, height)
    return None


def _geometry_from_record(record: dict[str, Any]) -> Optional[WindowGeometry]:
    geometry = record.get("window_geometry")
    if not isinstance(geometry, dict):
        return None
    width, height = geometry.get("width"), geometry.get("height")
    if isinstance(width, int) and isinstance(height, int) and width > 0 and height > 0:
        return WindowGeometry(width, height)
    return None


def _lock_exclusive(fd: IO[str]) -> None:
    """Acquire an exclusive file lock, blocking if another process holds it."""
    if sys.platform == "win32":
        import msvcrt

        msvcrt.locking(fd.fileno(), msvcrt.LK_LOCK, 1)
    else:
        import fcntl

        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            # Another window is persisting -- wait for it
            fcntl.flock(fd, fcntl.LOCK_EX)


class StateStore:
    """Reads and writes the versioned state record for one profile."""

    def __init__(self, paths: ProfilePaths) -> None:
        self.paths = paths

    def _read_record(self) -> Optional[dict[str, Any]]:
        """Return the parsed ``state.json`` or None if absent or corrupt."""
        try:
            raw = self.paths.state_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Cannot read %s: %s", self.paths.state_file, exc)
            return None

        try:
            record = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt state file %s", self.paths.state_file)
            return None

        if not isinstance(record, dict):
            return None
        version = record.get("config_version")
        # bool is an int subclass; reject it explicitly
        if not isinstance(version, int) or isinstance(version, bool) or version < 0:
            return None
        return record

    def _read_legacy_version(self) -> Optional[int]:
        try:
            raw = self.paths.legacy_version_file.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError):
            raw = ""
        if raw.isdigit():
            return int(raw)
        if self.paths.legacy_first_run_flag.exists():
            return FIRST_RUN_FLAG_VERSION
        return None

    def _read_legacy_geometry(self) -> Optional[WindowGeometry]:
        try:
            raw = self.paths.legacy_geometry_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None
        return parse_legacy_geometry(raw)

    def read_version(self) -> int:
        """Return the recorded version, 0 when nothing is recorded anywhere."""
        record = self._read_record()
        if record is not None:
            return record["config_version"]
        legacy = self._read_legacy_version()
        return legacy if legacy is not None else 0

    def read_state(self) -> Optional[VersionState]:
        """Return the effective state without writing anything."""
        record = self._read_record()
        if record is not None:
            return VersionState(record["config_version"], _geometry_from_record(record))
        legacy = self._read_legacy_version()
        if legacy is None:
            return None
        return VersionState(legacy, self._read_legacy_geometry())

    @contextmanager
    def _locked(self) -> Iterator[None]:
        lock_path = self.paths.state_lock
        try:
            lock_fd = open(lock_path, "w")  # noqa: SIM115 -- need fd for flock
        except OSError as exc:
            raise ProvisioningEnvironmentError(lock_path, exc) from exc
        try:
            try:
                _lock_exclusive(lock_fd)
            except OSError as exc:
                raise ProvisioningEnvironmentError(lock_path, exc) from exc
            yield
        finally:
            lock_fd.close()

    def persist(
        self, version: int, geometry: Optional[WindowGeometry] = None
    ) -> VersionState:
        """Write ``state.json`` and retire the legacy marker files.

        The recorded version never goes backwards: a *version* lower than
        what is already recorded keeps the recorded one.

        Raises:
            ProvisioningEnvironmentError: If the config home cannot be created
                or the record cannot be written.
        """
        config_home = self.paths.config_home
        try:
            config_home.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ProvisioningEnvironmentError(config_home, exc) from exc

        with self._locked():
            record = self._read_record()
            recorded = self.read_version()
            if geometry is None and record is not None:
                geometry = _geometry_from_record(record)
            if geometry is None:
                geometry = self._read_legacy_geometry()

            state = VersionState(max(version, recorded), geometry)
            self._write_atomic(state.render())

            for legacy in (
                self.paths.legacy_version_file,
                self.paths.legacy_geometry_file,
                self.paths.legacy_first_run_flag,
            ):
                try:
                    legacy.unlink(missing_ok=True)
                except OSError as exc:
                    logger.warning("Cannot remove legacy file %s: %s", legacy, exc)

        logger.debug("Persisted state %s", state)
        return state

    def _write_atomic(self, content: str) -> None:
        target = self.paths.state_file
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=".state.", suffix=".tmp", dir=target.parent)
        except OSError as exc:
            raise ProvisioningEnvironmentError(target, exc) from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
            os.replace(tmp_name, target)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise ProvisioningEnvironmentError(target, exc) from exc


__all__ = [
    "StateStore",
    "VersionState",
    "WindowGeometry",
    "parse_legacy_geometry",
]
