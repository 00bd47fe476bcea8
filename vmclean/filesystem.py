"""
Filesystem effects used by the cleanup steps.

Helpers here act on one entry at a time and log per-entry failures, so a
single unreadable file never stops a sweep.
"""

import errno
import logging
import os
import re
import shutil
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional

logger = logging.getLogger(__name__)

# Accounting logs read by last/lastb/lastlog; their binary format must survive
PROTECTED_LOGS = frozenset({"lastlog", "wtmp", "btmp"})

ROTATED_SUFFIX_RE = re.compile(r"\.[0-9]+$")

ZERO_FILL_CHUNK = 1024 * 1024

# Write errors that mean "the filesystem is full"; the goal of a zero-fill
DISK_FULL_ERRNOS = frozenset({errno.ENOSPC, errno.EDQUOT, errno.EFBIG})


@dataclass
class LogSweepResult:
    deleted: list[Path] = field(default_factory=list)
    truncated: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def _remove_entry(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def _is_within(directory: Path, root: Path) -> bool:
    """True when directory resolves to root or somewhere below it."""
    if root.is_symlink():
        return False
    try:
        directory.resolve().relative_to(root.resolve())
    except ValueError:
        return False
    return True


def purge_contents(directory: Path, within: Optional[Path] = None) -> int:
    """Delete everything inside directory, keeping the directory itself.

    A missing or empty directory is a no-op. Symlinks are removed, never
    followed; a directory that is itself a symlink, or that resolves outside
    ``within``, is left alone.

    Returns:
        Number of top-level entries removed.
    """
    if directory.is_symlink():
        logger.warning("Symlinked directory, leaving it alone: %s", directory)
        return 0
    if within is not None and directory.exists() and not _is_within(directory, within):
        logger.warning("%s resolves outside %s, leaving it alone", directory, within)
        return 0

    try:
        entries = list(directory.iterdir())
    except FileNotFoundError:
        return 0
    except NotADirectoryError:
        logger.warning("Not a directory, leaving it alone: %s", directory)
        return 0

    removed = 0
    for entry in entries:
        try:
            _remove_entry(entry)
            removed += 1
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.warning("Could not remove %s: %s", entry, e)
    return removed


def remove_paths(paths: Iterable[Path]) -> int:
    """Delete each path (file or whole tree) if it exists."""
    removed = 0
    for path in paths:
        if not path.exists() and not path.is_symlink():
            continue
        try:
            _remove_entry(path)
            removed += 1
        except FileNotFoundError:
            continue
        except OSError as e:
            logger.warning("Could not remove %s: %s", path, e)
    return removed


def iter_files_same_device(root: Path) -> Iterator[Path]:
    """Yield regular files under root without crossing into other filesystems."""
    try:
        root_dev = os.lstat(root).st_dev
    except FileNotFoundError:
        return

    for dirpath, dirnames, filenames in os.walk(root):
        kept = []
        for name in dirnames:
            try:
                if os.lstat(os.path.join(dirpath, name)).st_dev == root_dev:
                    kept.append(name)
            except OSError:
                continue
        dirnames[:] = kept

        for name in filenames:
            path = Path(dirpath, name)
            try:
                if stat.S_ISREG(os.lstat(path).st_mode):
                    yield path
            except OSError:
                continue


def is_protected_log(path: Path, protected: frozenset = PROTECTED_LOGS) -> bool:
    """True for the accounting logs and their rotated copies (wtmp.1, btmp.1.gz)."""
    name = path.name
    return any(name == p or name.startswith(p + ".") for p in protected)


def sweep_logs(log_dir: Path, protected: frozenset = PROTECTED_LOGS) -> LogSweepResult:
    """Drop rotated logs and empty active ones under log_dir.

    Deletes *.gz and numerically suffixed files (syslog.1), then truncates
    remaining *.log files to zero bytes. Protected accounting logs are
    neither deleted nor truncated.
    """
    result = LogSweepResult()

    for path in iter_files_same_device(log_dir):
        if is_protected_log(path, protected):
            continue
        if path.name.endswith(".gz") or ROTATED_SUFFIX_RE.search(path.name):
            try:
                path.unlink()
                result.deleted.append(path)
            except FileNotFoundError:
                continue
            except OSError as e:
                result.errors.append(f"{path}: {e}")

    for path in iter_files_same_device(log_dir):
        if is_protected_log(path, protected) or not path.name.endswith(".log"):
            continue
        try:
            os.truncate(path, 0)
            result.truncated.append(path)
        except OSError as e:
            result.errors.append(f"{path}: {e}")

    for error in result.errors:
        logger.warning("Log cleanup: %s", error)
    return result


def zero_fill(
    target: Path,
    chunk_size: int = ZERO_FILL_CHUNK,
    on_progress: Optional[Callable[[int], None]] = None,
) -> int:
    """Fill the filesystem holding target with zeros, then delete the file.

    Running out of space is the expected end of the write loop, not an
    error. Any other OSError propagates after the fill file is removed.

    Returns:
        Number of bytes written before the filesystem filled up.
    """
    zeros = bytes(chunk_size)
    written = 0
    os.sync()
    try:
        try:
            fh = open(target, "wb", buffering=0)
        except OSError as e:
            if e.errno not in DISK_FULL_ERRNOS:
                raise
            logger.info("Filesystem already full, nothing to fill")
            return written
        with fh:
            try:
                while True:
                    count = fh.write(zeros)
                    if not count:
                        break
                    written += count
                    if on_progress:
                        on_progress(written)
            except OSError as e:
                if e.errno not in DISK_FULL_ERRNOS:
                    raise
                logger.info("Filesystem full after %d bytes", written)
            try:
                os.fsync(fh.fileno())
            except OSError as e:
                if e.errno not in DISK_FULL_ERRNOS:
                    raise
    finally:
        os.sync()
        try:
            target.unlink()
        except FileNotFoundError:
            pass
        os.sync()
    return written
