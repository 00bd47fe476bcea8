"""
Disk usage snapshots printed before and after cleanup.

Purely observational: a partition that cannot be read is left out of the
table rather than failing the run.
"""

import logging

import psutil
from rich.table import Table

from vmclean.ui import console

logger = logging.getLogger(__name__)


def format_size(size_bytes: float) -> str:
    """Format a byte count the way df -h does (1K = 1024)."""
    size = float(size_bytes)
    for unit in ["B", "K", "M", "G", "T"]:
        if size < 1024.0:
            return f"{size:.0f}{unit}" if unit == "B" else f"{size:.1f}{unit}"
        size /= 1024.0
    return f"{size:.1f}P"


class DiskUsageReporter:
    """Renders per-filesystem usage of mounted physical partitions."""

    def __init__(self):
        self.reports_printed = 0

    def collect(self) -> list[tuple[str, str, int, int, int, float]]:
        rows = []
        seen = set()
        for part in psutil.disk_partitions(all=False):
            if part.mountpoint in seen:
                continue
            seen.add(part.mountpoint)
            try:
                usage = psutil.disk_usage(part.mountpoint)
            except OSError as e:
                logger.debug("Skipping %s: %s", part.mountpoint, e)
                continue
            rows.append((part.device, part.mountpoint, usage.total, usage.used, usage.free, usage.percent))
        return rows

    def report(self, title: str) -> None:
        self.reports_printed += 1

        table = Table(title=title, show_header=True, header_style="bold magenta", title_justify="left")
        table.add_column("Filesystem")
        table.add_column("Mount")
        table.add_column("Size", justify="right")
        table.add_column("Used", justify="right")
        table.add_column("Avail", justify="right")
        table.add_column("Use%", justify="right")

        for device, mount, total, used, free, percent in self.collect():
            table.add_row(device, mount, format_size(total), format_size(used), format_size(free), f"{percent:.0f}%")

        console.print(table)
        console.blank()
