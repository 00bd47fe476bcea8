import errno
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from vmclean.filesystem import (
    PROTECTED_LOGS,
    is_protected_log,
    iter_files_same_device,
    purge_contents,
    remove_paths,
    sweep_logs,
    zero_fill,
)


def write(path: Path, content: str = "data") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestPurgeContents:
    def test_removes_files_and_directories_but_keeps_root(self, tmp_path):
        write(tmp_path / "a.txt")
        write(tmp_path / "nested" / "deep" / "b.txt")
        write(tmp_path / ".hidden")

        assert purge_contents(tmp_path) == 3
        assert tmp_path.is_dir()
        assert list(tmp_path.iterdir()) == []

    def test_empty_directory(self, tmp_path):
        assert purge_contents(tmp_path) == 0

    def test_missing_directory(self, tmp_path):
        assert purge_contents(tmp_path / "missing") == 0

    def test_symlinks_are_not_followed(self, tmp_path):
        outside = write(tmp_path / "outside" / "keep.txt")
        target = tmp_path / "target"
        target.mkdir()
        (target / "link").symlink_to(outside.parent, target_is_directory=True)

        assert purge_contents(target) == 1
        assert outside.exists()

    def test_symlinked_directory_is_left_alone(self, tmp_path):
        keep = write(tmp_path / "profile" / "Bookmarks")
        link = tmp_path / "cache"
        link.symlink_to(keep.parent, target_is_directory=True)

        assert purge_contents(link) == 0
        assert keep.exists()

    def test_directory_resolving_outside_root_is_left_alone(self, tmp_path):
        keep = write(tmp_path / "etc" / "ssl" / "cert.pem")
        root = tmp_path / "cache"
        root.mkdir()
        (root / "vendor").symlink_to(tmp_path / "etc", target_is_directory=True)

        assert purge_contents(root / "vendor" / "ssl", within=root) == 0
        assert keep.exists()

    def test_symlinked_root_refuses_everything_below(self, tmp_path):
        keep = write(tmp_path / "elsewhere" / "Brave-Browser" / "Default" / "Bookmarks")
        root = tmp_path / "cache"
        root.symlink_to(tmp_path / "elsewhere", target_is_directory=True)

        assert purge_contents(root / "Brave-Browser", within=root) == 0
        assert keep.exists()

    def test_directory_within_root_is_purged(self, tmp_path):
        write(tmp_path / "cache" / "app" / "blob")

        assert purge_contents(tmp_path / "cache" / "app", within=tmp_path / "cache") == 1

    def test_unremovable_entry_does_not_stop_sweep(self, tmp_path):
        write(tmp_path / "a")
        write(tmp_path / "b")
        real_unlink = Path.unlink

        def flaky_unlink(self, *args, **kwargs):
            if self.name == "a":
                raise PermissionError("denied")
            return real_unlink(self, *args, **kwargs)

        with patch.object(Path, "unlink", flaky_unlink):
            assert purge_contents(tmp_path) == 1
        assert (tmp_path / "a").exists()
        assert not (tmp_path / "b").exists()


class TestRemovePaths:
    def test_removes_existing_and_ignores_missing(self, tmp_path):
        tree = write(tmp_path / "config" / "chromium" / "Default" / "Prefs").parents[1]
        single = write(tmp_path / "file")

        assert remove_paths([tree, single, tmp_path / "nope"]) == 2
        assert not tree.exists()
        assert not single.exists()


class TestSweepLogs:
    @pytest.fixture
    def log_dir(self, tmp_path):
        log_dir = tmp_path / "log"
        write(log_dir / "syslog", "current")
        write(log_dir / "syslog.1", "rotated")
        write(log_dir / "dpkg.log", "active")
        write(log_dir / "dpkg.log.1", "rotated")
        write(log_dir / "auth.log.2.gz", "compressed")
        write(log_dir / "apt" / "history.log", "active")
        write(log_dir / "apt" / "history.log.3.gz", "compressed")
        write(log_dir / "lastlog", "binary")
        write(log_dir / "wtmp", "binary")
        write(log_dir / "btmp", "binary")
        write(log_dir / "wtmp.1", "binary")
        return log_dir

    def test_deletes_rotated_and_compressed(self, log_dir):
        result = sweep_logs(log_dir)

        for name in ["syslog.1", "dpkg.log.1", "auth.log.2.gz", "apt/history.log.3.gz"]:
            assert not (log_dir / name).exists(), name
        assert len(result.deleted) == 4

    def test_truncates_active_logs(self, log_dir):
        result = sweep_logs(log_dir)

        assert (log_dir / "dpkg.log").read_text() == ""
        assert (log_dir / "apt" / "history.log").read_text() == ""
        assert sorted(p.name for p in result.truncated) == ["dpkg.log", "history.log"]

    def test_leaves_unrelated_logs_alone(self, log_dir):
        sweep_logs(log_dir)
        assert (log_dir / "syslog").read_text() == "current"

    @pytest.mark.parametrize("name", ["lastlog", "wtmp", "btmp", "wtmp.1"])
    def test_protected_accounting_logs_survive(self, log_dir, name):
        sweep_logs(log_dir)
        assert (log_dir / name).read_text() == "binary"

    def test_protected_names_ending_in_log_are_not_truncated(self, tmp_path):
        write(tmp_path / "custom.log", "keep")
        sweep_logs(tmp_path, protected=frozenset({"custom.log"}))
        assert (tmp_path / "custom.log").read_text() == "keep"

    def test_second_sweep_is_a_no_op(self, log_dir):
        sweep_logs(log_dir)
        result = sweep_logs(log_dir)
        assert result.deleted == []
        assert result.errors == []

    def test_missing_log_dir(self, tmp_path):
        result = sweep_logs(tmp_path / "missing")
        assert result.deleted == result.truncated == []

    def test_is_protected_log(self):
        assert PROTECTED_LOGS == {"lastlog", "wtmp", "btmp"}
        assert is_protected_log(Path("/var/log/btmp.1.gz"))
        assert not is_protected_log(Path("/var/log/wtmpx.log"))


def test_iter_files_skips_other_devices(tmp_path):
    write(tmp_path / "same" / "a.log")
    write(tmp_path / "mounted" / "b.log")
    root_dev = os.lstat(tmp_path).st_dev
    real_lstat = os.lstat

    def fake_lstat(path, *args, **kwargs):
        st = real_lstat(path, *args, **kwargs)
        if str(path) == str(tmp_path / "mounted"):
            return os.stat_result((st.st_mode, st.st_ino, root_dev + 1) + tuple(st)[3:])
        return st

    with patch("vmclean.filesystem.os.lstat", side_effect=fake_lstat):
        names = [p.name for p in iter_files_same_device(tmp_path)]
    assert names == ["a.log"]


class FakeFillFile:
    """Raw file whose writes succeed until the filesystem is 'full'."""

    def __init__(self, path, chunks_until_full, error=errno.ENOSPC):
        self.path = path
        self.remaining = chunks_until_full
        self.error = error
        path.touch()

    def write(self, data):
        if self.remaining == 0:
            raise OSError(self.error, os.strerror(self.error))
        self.remaining -= 1
        return len(data)

    def fileno(self):
        return 99

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class TestZeroFill:
    @pytest.mark.parametrize("error", [errno.ENOSPC, errno.EDQUOT, errno.EFBIG])
    def test_disk_full_is_success(self, tmp_path, error):
        target = tmp_path / "EMPTY"
        with (
            patch("vmclean.filesystem.open", create=True, side_effect=lambda *a, **k: FakeFillFile(target, 3, error)),
            patch("vmclean.filesystem.os.fsync") as mock_fsync,
            patch("vmclean.filesystem.os.sync") as mock_sync,
        ):
            written = zero_fill(target, chunk_size=1024)

        assert written == 3 * 1024
        mock_fsync.assert_called_once_with(99)
        assert mock_sync.call_count >= 2
        assert not target.exists()

    def test_reports_progress(self, tmp_path):
        target = tmp_path / "EMPTY"
        seen = []
        with (
            patch("vmclean.filesystem.open", create=True, side_effect=lambda *a, **k: FakeFillFile(target, 2)),
            patch("vmclean.filesystem.os.fsync"),
            patch("vmclean.filesystem.os.sync"),
        ):
            zero_fill(target, chunk_size=10, on_progress=seen.append)
        assert seen == [10, 20]

    def test_other_errors_propagate_and_file_is_removed(self, tmp_path):
        target = tmp_path / "EMPTY"
        with (
            patch("vmclean.filesystem.open", create=True, side_effect=lambda *a, **k: FakeFillFile(target, 1, errno.EIO)),
            patch("vmclean.filesystem.os.fsync"),
            patch("vmclean.filesystem.os.sync"),
        ):
            with pytest.raises(OSError) as exc:
                zero_fill(target, chunk_size=10)
        assert exc.value.errno == errno.EIO
        assert not target.exists()

    def test_fsync_disk_full_is_tolerated(self, tmp_path):
        target = tmp_path / "EMPTY"
        with (
            patch("vmclean.filesystem.open", create=True, side_effect=lambda *a, **k: FakeFillFile(target, 1)),
            patch("vmclean.filesystem.os.fsync", side_effect=OSError(errno.ENOSPC, "full")),
            patch("vmclean.filesystem.os.sync"),
        ):
            assert zero_fill(target, chunk_size=10) == 10
        assert not target.exists()

    def test_full_disk_at_open_is_success(self, tmp_path):
        target = tmp_path / "EMPTY"
        with (
            patch("vmclean.filesystem.open", create=True, side_effect=OSError(errno.ENOSPC, "full")),
            patch("vmclean.filesystem.os.sync"),
        ):
            assert zero_fill(target, chunk_size=10) == 0
        assert not target.exists()

    def test_open_failure_other_than_full_disk_propagates(self, tmp_path):
        target = tmp_path / "EMPTY"
        with (
            patch("vmclean.filesystem.open", create=True, side_effect=OSError(errno.EACCES, "denied")),
            patch("vmclean.filesystem.os.sync"),
        ):
            with pytest.raises(OSError) as exc:
                zero_fill(target, chunk_size=10)
        assert exc.value.errno == errno.EACCES
