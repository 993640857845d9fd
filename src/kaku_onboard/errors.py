"""Exception types raised by the provisioning steps.

Installers raise ``InstallWarning`` for anything the user can retry by hand;
the orchestrator reports it and keeps going. ``ProvisioningEnvironmentError``
is the only fatal error and maps to exit code 1.
"""

from __future__ import annotations

from pathlib import Path


class InstallWarning(Exception):
    """A recoverable installer failure.

    Args:
        message: What went wrong.
        retry_hint: Command the user can run later to retry the step.
    """

    def __init__(self, message: str, retry_hint: str | None = None) -> None:
        super().__init__(message)
        self.retry_hint = retry_hint


class MissingResourceError(InstallWarning):
    """A vendored resource the installer reads from is absent."""

    def __init__(self, path: Path, retry_hint: str | None = None) -> None:
        super().__init__(f"Resource not found: {path}", retry_hint=retry_hint)
        self.path = path


class ProvisioningEnvironmentError(RuntimeError):
    """A required directory or file could not be created."""

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"Cannot prepare {path}: {cause}")
        self.path = path
        self.cause = cause


__all__ = ["InstallWarning", "MissingResourceError", "ProvisioningEnvironmentError"]
