"""
Privilege and identity checks.

Cleanup deletes system-owned files and talks to system services, so it must
run as root. When started through sudo the apparent home directory is root's;
user caches are resolved against the invoking user's home instead.
"""

import logging
import os
import pwd
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


class PrivilegeError(PermissionError):
    """Raised when the process lacks the privileges cleanup requires."""


@dataclass(frozen=True)
class InvokerIdentity:
    """The user who requested the run."""

    username: Optional[str]
    home: Path

    @property
    def cache_dir(self) -> Path:
        return self.home / ".cache"

    @property
    def config_dir(self) -> Path:
        return self.home / ".config"


def require_root() -> None:
    """Raise PrivilegeError unless the effective uid is 0."""
    if os.geteuid() != 0:
        raise PrivilegeError("vm-cleanup must run as root")


def resolve_invoker(environ: Optional[Mapping[str, str]] = None) -> InvokerIdentity:
    """Resolve the home directory of the user behind this run.

    Args:
        environ: Environment to read, defaults to os.environ

    Returns:
        InvokerIdentity for SUDO_USER when it names a non-root user, otherwise
        for the current process.
    """
    env = os.environ if environ is None else environ
    sudo_user = env.get("SUDO_USER", "")

    if sudo_user and sudo_user != "root":
        try:
            home = Path(pwd.getpwnam(sudo_user).pw_dir)
        except KeyError:
            home = Path("/home") / sudo_user
            logger.warning("No passwd entry for %s, assuming %s", sudo_user, home)
        return InvokerIdentity(username=sudo_user, home=home)

    home = env.get("HOME")
    return InvokerIdentity(
        username=env.get("USER") or None,
        home=Path(home) if home else Path.home(),
    )
