"""
Run configuration for vm-cleanup.

Parses the command line into an immutable RunConfig. Every pipeline step
reads the same instance; nothing mutates it after construction.
"""

import argparse
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from vmclean import __version__

DEFAULT_LOG_RETENTION_DAYS = 7

_RETENTION_RE = re.compile(r"[0-9]+")


class ConfigError(ValueError):
    """Raised when a RunConfig would be invalid."""


@dataclass(frozen=True)
class RunConfig:
    """Options for a single cleanup run.

    Attributes:
        log_retention_days: Journal entries older than this many days are vacuumed
        prune_containers: Prune stopped containers, unused images and volumes
        prune_snap_packages: Remove disabled snap revisions
        prune_flatpak_packages: Uninstall unused flatpak runtimes
        reclaim_free_space: Run fstrim (or zero-fill) after cleanup
        verbose: Show debug logging
    """

    log_retention_days: int = DEFAULT_LOG_RETENTION_DAYS
    prune_containers: bool = False
    prune_snap_packages: bool = False
    prune_flatpak_packages: bool = False
    reclaim_free_space: bool = True
    verbose: bool = False

    def __post_init__(self):
        if isinstance(self.log_retention_days, bool) or not isinstance(self.log_retention_days, int):
            raise ConfigError("log_retention_days must be an integer")
        if self.log_retention_days < 0:
            raise ConfigError("log_retention_days must be non-negative")

    @property
    def journal_vacuum_window(self) -> str:
        """Retention window in journalctl's duration syntax."""
        return f"{self.log_retention_days}d"


def retention_days(value: str) -> int:
    """argparse type for --retention-days: digits only, no sign, no spaces."""
    if not _RETENTION_RE.fullmatch(value):
        raise argparse.ArgumentTypeError(f"expects a non-negative integer, got '{value}'")
    return int(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vm-cleanup",
        description="Reclaim disk space on a Debian/Ubuntu virtual machine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
        epilog="""
Examples:
  sudo vm-cleanup
  sudo vm-cleanup --retention-days 3 --include-containers
  sudo vm-cleanup --include-snap-packages --include-flatpak-packages
  sudo vm-cleanup --disable-space-reclaim

After the run, power off the VM and compact its virtual disk on the host.
        """,
    )

    parser.add_argument(
        "--retention-days",
        "--logs-days",
        dest="log_retention_days",
        type=retention_days,
        default=DEFAULT_LOG_RETENTION_DAYS,
        metavar="N",
        help=f"Keep only the last N days of systemd journal (default: {DEFAULT_LOG_RETENTION_DAYS})",
    )
    parser.add_argument(
        "--include-containers",
        "--include-docker",
        dest="prune_containers",
        action="store_true",
        help="Also prune Docker images, containers and volumes",
    )
    parser.add_argument(
        "--include-snap-packages",
        "--include-snap",
        dest="prune_snap_packages",
        action="store_true",
        help="Remove disabled Snap revisions (if snap is installed)",
    )
    parser.add_argument(
        "--include-flatpak-packages",
        "--include-flatpak",
        dest="prune_flatpak_packages",
        action="store_true",
        help="Remove unused Flatpak runtimes (if flatpak is installed)",
    )
    parser.add_argument(
        "--disable-space-reclaim",
        "--no-zero-fill",
        dest="reclaim_free_space",
        action="store_false",
        help="Skip fstrim/zero-fill of free space",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show detailed output")
    parser.add_argument("--version", "-V", action="version", version=f"vm-cleanup {__version__}")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> RunConfig:
    """Build a RunConfig from the command line.

    Exits through argparse (status 2, usage on stderr) on unknown options or
    an invalid retention value, and with status 0 for --help/--version.
    """
    args = build_parser().parse_args(argv)
    return RunConfig(
        log_retention_days=args.log_retention_days,
        prune_containers=args.prune_containers,
        prune_snap_packages=args.prune_snap_packages,
        prune_flatpak_packages=args.prune_flatpak_packages,
        reclaim_free_space=args.reclaim_free_space,
        verbose=args.verbose,
    )
