"""Login shell resolution and the final hand-off to it.

``resolve_login_shell`` is shared by every entry point (first run, update,
up-to-date startup). It takes its inputs explicitly so tests can drive it
with a fake account source.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from typing import Callable, Mapping, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)

PREFERRED_DEFAULT_SHELL = "/bin/zsh"
FALLBACK_DEFAULT_SHELL = "/bin/sh"


class AccountSource(Protocol):
    """Where a user's registered login shell can be looked up."""

    def current_user(self) -> Optional[str]: ...

    def directory_shell(self, user: str) -> Optional[str]: ...

    def passwd_shell(self, user: str) -> Optional[str]: ...


class SystemAccountSource:
    """Reads the real directory service and account database."""

    def current_user(self) -> Optional[str]:
        import pwd

        try:
            return pwd.getpwuid(os.getuid()).pw_name
        except KeyError:
            return None

    def directory_shell(self, user: str) -> Optional[str]:
        """Ask the macOS directory service (``dscl``) for UserShell."""
        if shutil.which("dscl") is None:
            return None
        try:
            result = subprocess.run(
                ["dscl", ".", "-read", f"/Users/{user}", "UserShell"],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            logger.debug("dscl lookup failed: %s", exc)
            return None
        for line in result.stdout.splitlines():
            if line.startswith("UserShell:"):
                parts = line.split()
                return parts[1] if len(parts) > 1 else None
        return None

    def passwd_shell(self, user: str) -> Optional[str]:
        import pwd

        try:
            return pwd.getpwnam(user).pw_shell or None
        except KeyError:
            return None


def _is_executable_file(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def resolve_login_shell(
    environ: Mapping[str, str],
    accounts: AccountSource,
    is_executable: Callable[[str], bool] = _is_executable_file,
) -> str:
    """Return the interactive shell to hand control to.

    Resolution order:
    1. ``$SHELL`` if it names an executable file
    2. The user's shell from the directory service
    3. The user's shell from the account database
    4. ``/bin/zsh`` if present, else ``/bin/sh``
    """
    env_shell = environ.get("SHELL", "")
    if env_shell and is_executable(env_shell):
        return env_shell

    user = environ.get("USER") or accounts.current_user()
    if user:
        for lookup in (accounts.directory_shell, accounts.passwd_shell):
            candidate = lookup(user)
            if candidate and is_executable(candidate):
                return candidate

    if is_executable(PREFERRED_DEFAULT_SHELL):
        return PREFERRED_DEFAULT_SHELL
    return FALLBACK_DEFAULT_SHELL


def exec_login_shell(command: Sequence[str] = ()) -> None:
    """Replace the current process with *command* or the login shell.

    Output is flushed first: nothing in this process runs after ``execv``.
    """
    sys.stdout.flush()
    sys.stderr.flush()

    if command:
        logger.debug("Handing off to requested command: %s", command)
        os.execvp(command[0], list(command))
        return

    shell = resolve_login_shell(os.environ, SystemAccountSource())
    logger.debug("Handing off to login shell: %s", shell)
    os.execv(shell, [shell, "-l"])


__all__ = [
    "AccountSource",
    "SystemAccountSource",
    "exec_login_shell",
    "resolve_login_shell",
]
