"""Data models for iowaittop."""

from bisect import bisect_left
from collections.abc import Iterable, Iterator
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class TaskSample:
    """One process's I/O-wait counter at one instant."""

    pid: int
    iowait_count: int  # Times the task entered I/O wait, not a duration


@dataclass(slots=True, frozen=True)
class Delta:
    """Counter growth for one pid between two consecutive snapshots."""

    pid: int
    delta: int


@dataclass(slots=True, frozen=True)
class Row:
    """A ranked delta joined with its display name."""

    pid: int
    delta: int
    name: str | None


@dataclass(slots=True, frozen=True)
class Snapshot:
    """
    Immutable set of task samples captured at one tick.

    Samples are kept sorted ascending by pid so lookups can binary search.
    Build instances with from_samples() rather than the constructor.
    """

    samples: tuple[TaskSample, ...] = ()

    @classmethod
    def from_samples(cls, samples: Iterable[TaskSample]) -> "Snapshot":
        """Sort samples by pid and reject duplicates."""
        ordered = tuple(sorted(samples, key=lambda s: s.pid))
        for prev, cur in zip(ordered, ordered[1:]):
            if prev.pid == cur.pid:
                raise ValueError(f"Duplicate pid in snapshot: {cur.pid}")
        return cls(ordered)

    @classmethod
    def empty(cls) -> "Snapshot":
        """Snapshot with no samples, the baseline before the first tick."""
        return cls()

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[TaskSample]:
        return iter(self.samples)

    def pids(self) -> list[int]:
        """Pids in ascending order."""
        return [sample.pid for sample in self.samples]

    def lookup(self, pid: int) -> TaskSample | None:
        """Find the sample for pid in O(log n), or None."""
        index = bisect_left(self.samples, pid, key=lambda s: s.pid)
        if index < len(self.samples) and self.samples[index].pid == pid:
            return self.samples[index]
        return None
