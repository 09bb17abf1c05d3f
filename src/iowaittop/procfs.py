"""Readers for the per-process files under the proc root.

The proc root is psutil's PROCFS_PATH, so pid enumeration (done by psutil)
and the file readers below always look at the same tree.
"""

import os
import re

import psutil

from iowaittop.errors import EnumerationError
from iowaittop.logging import get_logger

log = get_logger(__name__)

_IOWAIT_RE = re.compile(r"^se\.iowait_count\s*:\s*(\d+)\s*$")
_NAME_LABEL = "Name:\t"


def get_proc_root() -> str:
    """Return the proc root currently in use."""
    return psutil.PROCFS_PATH


def set_proc_root(path: str) -> None:
    """Point psutil and the readers at a different proc tree."""
    psutil.PROCFS_PATH = path


def _pid_path(pid: int, filename: str, proc_root: str | None) -> str:
    return os.path.join(proc_root or get_proc_root(), str(pid), filename)


def enumerate_pids() -> list[int]:
    """
    List the pids currently present in the proc root.

    Raises:
        EnumerationError: If the proc root cannot be listed.
    """
    try:
        return psutil.pids()
    except IndexError:
        # psutil.pids() indexes its result to record the lowest pid
        return []
    except OSError as e:
        raise EnumerationError(f"couldn't open {get_proc_root()}: {e}") from e


def parse_iowait_count(lines) -> int | None:
    """Find the se.iowait_count value among the lines of a sched file."""
    for line in lines:
        match = _IOWAIT_RE.match(line)
        if match:
            return int(match.group(1))
    return None


def read_iowait_count(pid: int, proc_root: str | None = None) -> int | None:
    """
    Read the cumulative I/O-wait counter for pid.

    Returns None when the process is gone, the file is unreadable, or the
    counter line is absent or malformed. Callers cannot tell these apart.
    """
    path = _pid_path(pid, "sched", proc_root)
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            count = parse_iowait_count(f)
    except OSError as e:
        log.debug("sched unreadable", pid=pid, error=str(e))
        return None

    if count is None:
        log.debug("iowait_count missing", pid=pid)
    return count


def _name_from_cmdline(pid: int, proc_root: str | None) -> str | None:
    try:
        with open(_pid_path(pid, "cmdline", proc_root), "rb") as f:
            first_line = f.readline()
    except OSError:
        return None

    # Arguments are NUL separated, usually with a trailing NUL
    name = first_line.rstrip(b"\n").rstrip(b"\0").replace(b"\0", b" ")
    return name.decode("utf-8", errors="replace") or None


def _name_from_status(pid: int, proc_root: str | None) -> str | None:
    try:
        with open(_pid_path(pid, "status", proc_root), encoding="utf-8", errors="replace") as f:
            for line in f:
                if line.startswith(_NAME_LABEL):
                    return line[len(_NAME_LABEL) :].rstrip("\n") or None
    except OSError:
        return None
    return None


def resolve_name(pid: int, proc_root: str | None = None) -> str | None:
    """
    Best-effort display name for pid.

    Uses the first line of the command line with all arguments joined by
    spaces, rather than argv[0] alone. Falls back to the Name field of the
    status file for kernel threads and zombies. Returns None when neither
    is available.
    """
    return _name_from_cmdline(pid, proc_root) or _name_from_status(pid, proc_root)
