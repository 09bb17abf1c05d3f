"""Tests for the proc tree readers."""

import psutil
import pytest

from iowaittop.errors import EnumerationError
from iowaittop.procfs import (
    enumerate_pids,
    get_proc_root,
    parse_iowait_count,
    read_iowait_count,
    resolve_name,
    set_proc_root,
)


class TestCounterReader:
    """Tests for read_iowait_count."""

    def test_reads_counter(self, fake_proc):
        """The value after se.iowait_count is returned."""
        fake_proc.add(1234, iowait_count=987)

        assert read_iowait_count(1234) == 987

    def test_missing_line_is_unavailable(self, fake_proc):
        """A sched file without the counter line reports None, not zero."""
        fake_proc.add(42, sched="se.exec_start : 1.0\nnr_switches : 5\n")

        assert read_iowait_count(42) is None

    def test_malformed_value_is_unavailable(self, fake_proc):
        """A non-numeric counter is treated as unavailable."""
        fake_proc.add(42, sched="se.iowait_count : lots\n")

        assert read_iowait_count(42) is None

    def test_missing_process_is_unavailable(self, fake_proc):
        """A pid with no directory reports None."""
        assert read_iowait_count(99999) is None

    def test_missing_sched_file_is_unavailable(self, fake_proc):
        """A pid directory without a sched file reports None."""
        fake_proc.add(7, name="kthreadd")

        assert read_iowait_count(7) is None

    def test_explicit_proc_root(self, tmp_path):
        """An explicit proc_root overrides psutil's."""
        (tmp_path / "5").mkdir()
        (tmp_path / "5" / "sched").write_text("se.iowait_count : 3\n")

        assert read_iowait_count(5, proc_root=str(tmp_path)) == 3

    def test_parse_ignores_similar_fields(self):
        """Only the exact se.iowait_count field is matched."""
        lines = [
            "se.iowait_sum                                :            12.345678",
            "se.statistics.iowait_count                   :                   99",
            "se.iowait_count                              :                   17",
        ]

        assert parse_iowait_count(lines) == 17

    def test_parse_tight_spacing(self):
        """Whitespace around the colon is optional."""
        assert parse_iowait_count(["se.iowait_count:5\n"]) == 5


class TestNameResolver:
    """Tests for resolve_name."""

    def test_cmdline_first(self, fake_proc):
        """The command line wins over the status name."""
        fake_proc.add(100, cmdline=b"/usr/bin/python3\0-m\0http.server\0", name="python3")

        assert resolve_name(100) == "/usr/bin/python3 -m http.server"

    def test_empty_cmdline_falls_back_to_status(self, fake_proc):
        """Kernel threads have an empty command line, so Name: is used."""
        fake_proc.add(2, cmdline=b"", name="foo")

        assert resolve_name(2) == "foo"

    def test_missing_cmdline_falls_back_to_status(self, fake_proc):
        """An unreadable command line falls back to the status name."""
        fake_proc.add(3, name="kworker/0:1")

        assert resolve_name(3) == "kworker/0:1"

    def test_status_label_and_newline_stripped(self, fake_proc):
        """Only the value after the tab is returned, without its newline."""
        pid_dir = fake_proc.add(4, cmdline=b"")
        (pid_dir / "status").write_text("Umask:\t0022\nName:\tfoo\n")

        assert resolve_name(4) == "foo"

    def test_total_failure_returns_none(self, fake_proc):
        """Neither file present gives no name."""
        assert resolve_name(31337) is None

    def test_status_without_name_returns_none(self, fake_proc):
        """A status file with no Name: line gives no name."""
        pid_dir = fake_proc.add(5, cmdline=b"")
        (pid_dir / "status").write_text("State:\tZ (zombie)\n")

        assert resolve_name(5) is None


class TestEnumerator:
    """Tests for enumerate_pids."""

    def test_lists_numeric_entries_only(self, fake_proc):
        """Non-numeric entries under the proc root are ignored."""
        fake_proc.add(1, iowait_count=0)
        fake_proc.add(250, iowait_count=0)
        fake_proc.add("self")
        (fake_proc.root / "meminfo").write_text("MemTotal: 1 kB\n")

        assert enumerate_pids() == [1, 250]

    def test_empty_root(self, fake_proc):
        """An empty proc root yields no pids."""
        assert enumerate_pids() == []

    def test_missing_root_raises(self, tmp_path, monkeypatch):
        """A proc root that cannot be opened is fatal."""
        monkeypatch.setattr(psutil, "PROCFS_PATH", str(tmp_path / "nope"))

        with pytest.raises(EnumerationError, match="couldn't open"):
            enumerate_pids()

    def test_set_proc_root(self, tmp_path, monkeypatch):
        """set_proc_root() changes psutil's PROCFS_PATH."""
        monkeypatch.setattr(psutil, "PROCFS_PATH", "/proc")

        set_proc_root(str(tmp_path))

        assert get_proc_root() == str(tmp_path)
        assert psutil.PROCFS_PATH == str(tmp_path)
