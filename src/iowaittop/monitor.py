"""Snapshot, diff and ranking engine for iowaittop."""

import math
import threading
from collections.abc import Callable, Iterable
from enum import Enum

from iowaittop.logging import get_logger
from iowaittop.models import Delta, Row, Snapshot, TaskSample
from iowaittop.procfs import enumerate_pids, read_iowait_count, resolve_name

log = get_logger(__name__)

DEFAULT_INTERVAL = 1.0
DEFAULT_COUNT = 5
MIN_INTERVAL = 0.1

CounterReader = Callable[[int], int | None]
NameResolver = Callable[[int], str | None]
Enumerator = Callable[[], Iterable[int | str]]


def _clamp_interval(interval: float) -> float:
    """Apply the interval floor, rejecting inf and nan."""
    if not math.isfinite(interval):
        raise ValueError(f"interval must be finite, got {interval}")
    return max(MIN_INTERVAL, interval)


def _parse_pid(entry: int | str) -> int | None:
    """Return entry as a positive pid, or None for anything else."""
    try:
        pid = int(entry)
    except (TypeError, ValueError):
        return None
    return pid if pid > 0 else None


def build_snapshot(
    pids: Iterable[int | str] | None = None,
    reader: CounterReader = read_iowait_count,
) -> Snapshot:
    """
    Read the I/O-wait counter of every process into a Snapshot.

    Args:
        pids: Process identifiers to sample. Enumerated from the proc root
            when omitted. Non-numeric and non-positive entries are skipped.
        reader: Returns a pid's counter, or None when it is unavailable.

    Processes whose counter is unavailable are left out of the snapshot.
    """
    if pids is None:
        pids = enumerate_pids()

    samples: dict[int, TaskSample] = {}
    for entry in pids:
        pid = _parse_pid(entry)
        if pid is None or pid in samples:
            continue
        count = reader(pid)
        if count is None:
            continue
        samples[pid] = TaskSample(pid=pid, iowait_count=count)

    return Snapshot.from_samples(samples.values())


def diff(previous: Snapshot, current: Snapshot) -> list[Delta]:
    """
    Match current against previous by pid and compute counter growth.

    Only pids present in both snapshots produce a Delta. A counter that went
    backwards (pid reuse or counter reset) has no meaningful rate, so that
    pid is dropped for this tick instead of reporting a negative value.
    """
    deltas: list[Delta] = []
    if not previous:
        return deltas

    for sample in current:
        old = previous.lookup(sample.pid)
        if old is None:
            continue
        growth = sample.iowait_count - old.iowait_count
        if growth < 0:
            log.debug(
                "iowait_count went backwards",
                pid=sample.pid,
                previous=old.iowait_count,
                current=sample.iowait_count,
            )
            continue
        deltas.append(Delta(pid=sample.pid, delta=growth))
    return deltas


def rank(deltas: Iterable[Delta], limit: int = DEFAULT_COUNT) -> list[Delta]:
    """Return the limit largest deltas, largest first. Tie order is unspecified."""
    if limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")
    return sorted(deltas, key=lambda d: d.delta, reverse=True)[:limit]


class MonitorState(Enum):
    """Whether a baseline snapshot exists yet."""

    BOOTSTRAP = "bootstrap"
    STEADY = "steady"


class IowaitMonitor:
    """
    Drives the enumerate, snapshot, diff, rank loop.

    Holds the previous snapshot between ticks. The first tick only records a
    baseline, so it yields no rows. run() waits on a threading.Event between
    ticks so the loop can be stopped from another thread or a signal handler.
    """

    def __init__(
        self,
        interval: float = DEFAULT_INTERVAL,
        limit: int = DEFAULT_COUNT,
        reader: CounterReader = read_iowait_count,
        enumerator: Enumerator = enumerate_pids,
        resolver: NameResolver = resolve_name,
    ) -> None:
        """
        Initialize the IowaitMonitor.

        Args:
            interval: Seconds to wait after each frame. Default 1.0s.
            limit: Number of rows per frame. Default 5.
            reader: Counter Reader, pid -> count or None.
            enumerator: Returns the live pids.
            resolver: Name Resolver, pid -> name or None.
        """
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")
        self._interval = _clamp_interval(interval)
        self._limit = limit
        self._reader = reader
        self._enumerator = enumerator
        self._resolver = resolver
        self._previous: Snapshot | None = None
        self._stop_event = threading.Event()

    @property
    def interval(self) -> float:
        """Get the delay between ticks."""
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        """Set the delay between ticks."""
        self._interval = _clamp_interval(value)

    @property
    def limit(self) -> int:
        """Get the number of rows per frame."""
        return self._limit

    @property
    def previous(self) -> Snapshot | None:
        """The snapshot the next tick will diff against."""
        return self._previous

    @property
    def state(self) -> MonitorState:
        """Current scheduler state."""
        if self._previous is None:
            return MonitorState.BOOTSTRAP
        return MonitorState.STEADY

    def sample(self) -> list[Delta]:
        """
        Take a new snapshot and return the ranked deltas against the last one.

        Raises:
            EnumerationError: If the process table cannot be listed.
        """
        current = build_snapshot(self._enumerator(), self._reader)
        previous = self._previous if self._previous is not None else Snapshot.empty()
        ranked = rank(diff(previous, current), self._limit)
        self._previous = current
        return ranked

    def resolve(self, deltas: Iterable[Delta]) -> list[Row]:
        """Attach display names to ranked deltas."""
        return [Row(pid=d.pid, delta=d.delta, name=self._resolver(d.pid)) for d in deltas]

    def tick(self) -> list[Row]:
        """Run one enumerate, snapshot, diff, rank cycle and name the results."""
        return self.resolve(self.sample())

    def run(
        self,
        render: Callable[[list[Row]], None],
        max_ticks: int | None = None,
    ) -> int:
        """
        Tick, render and wait until stop() is called.

        The wait is not shortened by the time a tick takes, so the real
        period is the interval plus the work time.

        Args:
            render: Called with each frame's rows.
            max_ticks: Stop after this many ticks. Runs forever when None.

        Returns:
            Number of ticks completed.
        """
        self._stop_event.clear()
        ticks = 0
        while not self._stop_event.is_set():
            render(self.tick())
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            self._stop_event.wait(timeout=self._interval)
        return ticks

    def stop(self) -> None:
        """Ask run() to return after the current tick."""
        self._stop_event.set()

    def reset(self) -> None:
        """Drop the baseline so the next tick starts from bootstrap."""
        self._previous = None
