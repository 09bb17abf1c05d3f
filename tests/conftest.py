"""Shared test fixtures for iowaittop."""

import logging
from pathlib import Path

import psutil
import pytest

SCHED_TEMPLATE = """\
test (1234, #threads: 1)
-------------------------------------------------------------------
se.exec_start                                :      12345678.901234
se.vruntime                                  :         1234.567890
se.sum_exec_runtime                          :          987.654321
se.nr_migrations                             :                   42
se.iowait_count                              :                 {count}
se.iowait_sum                                :            12.345678
nr_switches                                  :                  100
"""


class FakeProc:
    """A throwaway proc tree under tmp_path."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def add(
        self,
        pid: int | str,
        iowait_count: int | None = None,
        cmdline: bytes | None = None,
        name: str | None = None,
        sched: str | None = None,
    ) -> Path:
        """Create a pid directory; omitted files are not created."""
        pid_dir = self.root / str(pid)
        pid_dir.mkdir(exist_ok=True)
        if sched is not None:
            (pid_dir / "sched").write_text(sched)
        elif iowait_count is not None:
            (pid_dir / "sched").write_text(SCHED_TEMPLATE.format(count=iowait_count))
        if cmdline is not None:
            (pid_dir / "cmdline").write_bytes(cmdline)
        if name is not None:
            (pid_dir / "status").write_text(f"Name:\t{name}\nUmask:\t0022\nState:\tS (sleeping)\n")
        return pid_dir

    def set_count(self, pid: int, iowait_count: int) -> None:
        (self.root / str(pid) / "sched").write_text(SCHED_TEMPLATE.format(count=iowait_count))

    def remove(self, pid: int) -> None:
        pid_dir = self.root / str(pid)
        for child in pid_dir.iterdir():
            child.unlink()
        pid_dir.rmdir()


@pytest.fixture
def fake_proc(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> FakeProc:
    """Point psutil and the readers at an empty fake proc tree."""
    root = tmp_path / "proc"
    monkeypatch.setattr(psutil, "PROCFS_PATH", str(root))
    return FakeProc(root)


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo handlers installed by iowaittop.logging.configure()."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
