"""Presence checks for the optional external tools used by cleanup steps."""

import logging
import shutil
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)

DOCKER = "docker"
SNAP = "snap"
FLATPAK = "flatpak"
FSTRIM = "fstrim"
JOURNALCTL = "journalctl"

OPTIONAL_TOOLS = (DOCKER, SNAP, FLATPAK, FSTRIM, JOURNALCTL)


@dataclass(frozen=True)
class CapabilitySet:
    """Read-only map of tool name to availability, computed once per run."""

    tools: Mapping[str, bool] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "tools", MappingProxyType(dict(self.tools)))

    def has(self, tool: str) -> bool:
        return self.tools.get(tool, False)

    @property
    def missing(self) -> list[str]:
        return sorted(name for name, present in self.tools.items() if not present)


def probe_capabilities(
    tools: Iterable[str] = OPTIONAL_TOOLS,
    which: Optional[Callable[[str], Optional[str]]] = None,
) -> CapabilitySet:
    """Check each tool on PATH.

    Args:
        tools: Executable names to look up
        which: Lookup function, shutil.which by default

    Returns:
        CapabilitySet with one entry per tool.
    """
    lookup = which or shutil.which
    found = {}
    for tool in tools:
        found[tool] = lookup(tool) is not None
        logger.debug("capability %s: %s", tool, "present" if found[tool] else "absent")
    return CapabilitySet(found)
