"""Runtime environment for provisioning.

This subpackage locates the user's config home and the bundled resources,
and resolves the login shell provisioning hands off to.
"""

from kaku_onboard.runtime.home import (
    ProfilePaths,
    get_config_home,
    get_resources_dir,
    get_zshrc_path,
)
from kaku_onboard.runtime.shell import (
    AccountSource,
    SystemAccountSource,
    exec_login_shell,
    resolve_login_shell,
)

__all__ = [
    "AccountSource",
    "ProfilePaths",
    "SystemAccountSource",
    "exec_login_shell",
    "get_config_home",
    "get_resources_dir",
    "get_zshrc_path",
    "resolve_login_shell",
]
