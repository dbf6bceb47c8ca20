"""Windowed statistics over the sample store: averages, peaks, trends, summary."""
import time
from dataclasses import asdict, dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from ..collectors.system_models import METRIC_FIELDS, PERCENT_FIELDS, Sample
from .sample_store import SampleStore

DEFAULT_TREND_WINDOW_MS = 300000  # 5 minutes
DEFAULT_SUMMARY_WINDOW_MS = 3600000  # 1 hour
TREND_THRESHOLD_PERCENT = 5.0

TREND_STABLE = "stable"
TREND_INCREASING = "increasing"
TREND_DECREASING = "decreasing"


def now_ms() -> int:
    """Wall clock in milliseconds since epoch."""
    return int(time.time() * 1000)


@dataclass
class Averages:
    """Arithmetic means over a window, rounded to 2 decimals."""
    cpu: float = 0.0
    memory: float = 0.0
    disk: float = 0.0
    network_upload: float = 0.0
    network_download: float = 0.0
    temperature: float = 0.0
    sample_count: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class MetricPeak:
    """Extremes of one metric; has_data is False for an empty window."""
    has_data: bool = False
    max: float = 0.0
    max_timestamp: Optional[int] = None
    min: float = 0.0
    min_timestamp: Optional[int] = None


@dataclass
class Peaks:
    cpu: MetricPeak = field(default_factory=MetricPeak)
    memory: MetricPeak = field(default_factory=MetricPeak)
    disk: MetricPeak = field(default_factory=MetricPeak)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class TrendResult:
    """Coarse direction of a metric over a window.

    confidence is min(100, 2 * sample_count): it saturates at 50 samples and
    says nothing about variance.
    """
    trend: str = TREND_STABLE
    change_percent: float = 0.0
    confidence: int = 0
    sample_count: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Summary:
    window_start: int
    window_end: int
    averages: Averages
    peaks: Peaks
    trends: Dict[str, TrendResult]
    sample_count: int
    generated_at: int

    def to_dict(self) -> dict:
        return asdict(self)


def compute_averages(samples: Sequence[Sample]) -> Averages:
    """Mean of every metric field; all zeros for no samples."""
    if not samples:
        return Averages()
    count = len(samples)
    means = {
        name: round(sum(getattr(s, name) for s in samples) / count, 2)
        for name in METRIC_FIELDS
    }
    return Averages(sample_count=count, **means)


def compute_peak(samples: Sequence[Sample], metric: str) -> MetricPeak:
    """Max/min of one metric with the timestamp of its first occurrence."""
    if not samples:
        return MetricPeak()
    peak = MetricPeak(has_data=True, max=float("-inf"), min=float("inf"))
    for sample in samples:
        value = getattr(sample, metric)
        if value > peak.max:
            peak.max = value
            peak.max_timestamp = sample.timestamp
        if value < peak.min:
            peak.min = value
            peak.min_timestamp = sample.timestamp
    return peak


def compute_peaks(samples: Sequence[Sample]) -> Peaks:
    return Peaks(**{metric: compute_peak(samples, metric) for metric in PERCENT_FIELDS})


def compute_trend(values: Sequence[float]) -> TrendResult:
    """Compare the mean of the second half of values against the first half.

    The halves are split by index, not by time. A zero first-half mean is
    reported as 0% change.
    """
    count = len(values)
    if count < 2:
        return TrendResult(sample_count=count)

    middle = count // 2
    first_half, second_half = values[:middle], values[middle:]
    first_avg = sum(first_half) / len(first_half)
    second_avg = sum(second_half) / len(second_half)

    if first_avg == 0:
        change_percent = 0.0
    else:
        change_percent = (second_avg - first_avg) / first_avg * 100

    if change_percent > TREND_THRESHOLD_PERCENT:
        trend = TREND_INCREASING
    elif change_percent < -TREND_THRESHOLD_PERCENT:
        trend = TREND_DECREASING
    else:
        trend = TREND_STABLE

    return TrendResult(
        trend=trend,
        change_percent=round(change_percent, 2),
        confidence=min(100, count * 2),
        sample_count=count,
    )


class WindowQueries:
    """Read-only queries over a SampleStore, relative to an injectable clock."""

    def __init__(self, store: SampleStore, clock: Callable[[], int] = now_ms):
        self.store = store
        self.clock = clock

    def averages(self, start_ms: int, end_ms: int) -> Averages:
        return compute_averages(self.store.range_query(start_ms, end_ms))

    def peaks(self, start_ms: int, end_ms: int) -> Peaks:
        return compute_peaks(self.store.range_query(start_ms, end_ms))

    def trend(self, metric: str, window_ms: int = DEFAULT_TREND_WINDOW_MS,
              end_ms: Optional[int] = None) -> TrendResult:
        """Trend of metric over the trailing window ending at end_ms (default now)."""
        if metric not in METRIC_FIELDS:
            raise ValueError(f"Unknown metric for trend analysis: {metric}")
        end = self.clock() if end_ms is None else end_ms
        samples = self.store.range_query(end - window_ms, end)
        return compute_trend([getattr(s, metric) for s in samples])

    def summary(self, window_ms: int = DEFAULT_SUMMARY_WINDOW_MS) -> Summary:
        """Averages, peaks and cpu/memory/disk trends over the trailing window."""
        end = self.clock()
        start = end - window_ms
        samples: List[Sample] = self.store.range_query(start, end)

        return Summary(
            window_start=start,
            window_end=end,
            averages=compute_averages(samples),
            peaks=compute_peaks(samples),
            trends={
                metric: compute_trend([getattr(s, metric) for s in samples])
                for metric in PERCENT_FIELDS
            },
            sample_count=len(samples),
            generated_at=end,
        )
