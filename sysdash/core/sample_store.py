"""Bounded in-memory store of metric samples."""
import threading
from collections import deque
from itertools import islice
from typing import List

from ..collectors.system_models import Sample

DEFAULT_CAPACITY = 10000
# Rough per-sample estimate, not a measurement
BYTES_PER_SAMPLE = 200


class SampleStore:
    """Thread-safe FIFO buffer holding the most recent samples."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        """Initialize an empty store with a fixed capacity."""
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ValueError(f"capacity must be a positive int, got {capacity!r}")
        self._lock = threading.Lock()
        self.capacity = capacity
        self._samples = deque(maxlen=capacity)

    def append(self, sample: Sample):
        """Add a sample at the tail, evicting the oldest beyond capacity."""
        if not isinstance(sample, Sample):
            raise TypeError(f"expected Sample, got {type(sample).__name__}")
        with self._lock:
            self._samples.append(sample)

    def range_query(self, start_ms: int, end_ms: int) -> List[Sample]:
        """Samples with start_ms <= timestamp <= end_ms, in insertion order."""
        if start_ms > end_ms:
            return []
        with self._lock:
            return [s for s in self._samples if start_ms <= s.timestamp <= end_ms]

    def tail(self, n: int) -> List[Sample]:
        """Last min(n, len) samples in order."""
        if n <= 0:
            return []
        with self._lock:
            start = max(0, len(self._samples) - n)
            return list(islice(self._samples, start, None))

    def samples(self) -> List[Sample]:
        """Ordered copy of every stored sample."""
        with self._lock:
            return list(self._samples)

    def clear(self):
        """Drop all samples."""
        with self._lock:
            self._samples.clear()

    def length(self) -> int:
        return len(self)

    def estimated_memory_footprint(self) -> int:
        """Approximate bytes held by the stored samples."""
        return len(self) * BYTES_PER_SAMPLE

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)
