# farm_simulator/samples.py

"""
================================================================================
SAMPLE STORE
================================================================================
An append-only log of saved probe results.

Data Contract:
---------------
- Public Methods:
    - append(coordinate, values): Records a timestamped sample at the end.
    - snapshot(): Returns every sample, in insertion order.
- Side Effects: append() mutates the log. Nothing can remove or edit entries;
  each sample holds a read-only copy of its values.
- Invariants: Appends are serialized by a lock, and snapshot() takes the same
  lock, so a reader sees the log either before or after an append.
================================================================================
"""
import threading
import time
from types import MappingProxyType
from dataclasses import dataclass

@dataclass(frozen=True)
class Sample:
    x: float
    y: float
    values: MappingProxyType
    ts: int

    @property
    def coordinate(self) -> tuple:
        return (self.x, self.y)

class SampleStore:
    """Thread-safe, append-only probe log."""

    def __init__(self, clock=None):
        # The clock returns epoch milliseconds; injectable for tests.
        self._clock = clock or (lambda: int(time.time() * 1000))
        self._lock = threading.Lock()
        self._samples = []

    def append(self, coordinate: tuple, values: dict) -> Sample:
        x, y = coordinate
        values = MappingProxyType(dict(values))
        with self._lock:
            # Stamped under the lock to keep timestamps in log order.
            sample = Sample(x=float(x), y=float(y), values=values, ts=self._clock())
            self._samples.append(sample)
        return sample

    def snapshot(self) -> tuple:
        with self._lock:
            return tuple(self._samples)

    def __len__(self):
        with self._lock:
            return len(self._samples)
