"""
Test suite for windowed statistics.

Tests cover:
- Averages and the empty-window zero value
- Peaks with has_data normalisation
- Trend classification, zero first half and confidence
- Summary composition over the trailing window
"""

import pytest

from ..core.sample_store import SampleStore
from ..core.window_queries import (MetricPeak, WindowQueries, compute_peaks, compute_trend)
from .helpers import FixedClock, make_sample


@pytest.fixture
def clock():
    return FixedClock(4000)


@pytest.fixture
def store():
    store = SampleStore()
    for ts, cpu in zip((1000, 2000, 3000, 4000), (10, 20, 90, 95)):
        store.append(make_sample(ts, cpu=cpu, memory=cpu / 4, disk=50.0))
    return store


@pytest.fixture
def queries(store, clock):
    return WindowQueries(store, clock)


class TestAverages:
    """Tests for window averages."""

    def test_averages(self, queries):
        avg = queries.averages(1000, 4000)
        assert avg.cpu == 53.75
        assert avg.memory == 13.44
        assert avg.disk == 50.0
        assert avg.network_upload == 100.0
        assert avg.network_download == 200.0
        assert avg.temperature == 40.0
        assert avg.sample_count == 4

    def test_partial_window(self, queries):
        avg = queries.averages(3000, 4000)
        assert avg.cpu == 92.5
        assert avg.sample_count == 2

    def test_empty_range_is_zero(self, queries):
        avg = queries.averages(10000, 20000)
        assert avg.to_dict() == {
            "cpu": 0.0, "memory": 0.0, "disk": 0.0,
            "network_upload": 0.0, "network_download": 0.0,
            "temperature": 0.0, "sample_count": 0,
        }


class TestPeaks:
    """Tests for window peaks."""

    def test_cpu_peaks(self, queries):
        peaks = queries.peaks(1000, 4000)
        assert peaks.cpu == MetricPeak(has_data=True, max=95.0, max_timestamp=4000,
                                       min=10.0, min_timestamp=1000)

    def test_ties_keep_first_occurrence(self, queries):
        disk = queries.peaks(1000, 4000).disk
        assert disk.max == disk.min == 50.0
        assert disk.max_timestamp == 1000
        assert disk.min_timestamp == 1000

    def test_empty_range_has_same_shape(self, queries):
        peaks = queries.peaks(5000, 6000)
        for metric in ("cpu", "memory", "disk"):
            assert getattr(peaks, metric) == MetricPeak(
                has_data=False, max=0.0, max_timestamp=None, min=0.0, min_timestamp=None)

    def test_compute_peaks_of_nothing(self):
        assert compute_peaks([]).to_dict()["cpu"]["has_data"] is False


class TestTrend:
    """Tests for trend analysis."""

    def test_increasing(self, queries):
        trend = queries.trend("cpu", 3000)
        # halves [10, 20] and [90, 95]
        assert trend.trend == "increasing"
        assert trend.change_percent == 516.67
        assert trend.confidence == 8
        assert trend.sample_count == 4

    def test_decreasing(self):
        trend = compute_trend([50.0, 50.0, 40.0, 40.0])
        assert trend.trend == "decreasing"
        assert trend.change_percent == -20.0

    def test_small_change_is_stable(self):
        trend = compute_trend([50.0, 50.0, 52.0, 52.0])
        assert trend.trend == "stable"
        assert trend.change_percent == 4.0

    def test_odd_count_splits_by_index(self):
        # first half [10], second half [20, 30]
        trend = compute_trend([10.0, 20.0, 30.0])
        assert trend.change_percent == 150.0

    def test_zero_first_half_reports_no_change(self):
        trend = compute_trend([0.0, 0.0, 10.0, 10.0])
        assert trend.change_percent == 0.0
        assert trend.trend == "stable"
        assert trend.confidence == 8

    def test_zero_first_half_from_store(self, clock):
        store = SampleStore()
        for ts, cpu in ((1000, 0), (2000, 0), (3000, 40), (4000, 60)):
            store.append(make_sample(ts, cpu=cpu))
        trend = WindowQueries(store, clock).trend("cpu", 10000)
        assert trend.change_percent == 0.0

    def test_fewer_than_two_samples(self, queries):
        trend = queries.trend("cpu", 500)
        assert (trend.trend, trend.change_percent, trend.confidence) == ("stable", 0.0, 0)
        assert trend.sample_count == 1

    def test_confidence_saturates(self):
        assert compute_trend([1.0] * 80).confidence == 100

    def test_window_is_relative_to_clock(self, queries, clock):
        clock.now = 100000
        assert queries.trend("cpu", 5000).sample_count == 0

    def test_unknown_metric(self, queries):
        with pytest.raises(ValueError):
            queries.trend("gpu", 1000)


class TestSummary:
    """Tests for summary composition."""

    def test_summary(self, queries):
        summary = queries.summary(3000)
        assert summary.window_start == 1000
        assert summary.window_end == 4000
        assert summary.sample_count == 4
        assert summary.averages.cpu == 53.75
        assert summary.peaks.cpu.max == 95.0
        assert set(summary.trends) == {"cpu", "memory", "disk"}
        assert summary.trends["cpu"].trend == "increasing"
        assert summary.trends["disk"].trend == "stable"
        assert summary.generated_at == 4000

    def test_summary_reads_clock_once(self, store):
        calls = []

        def ticking_clock():
            calls.append(None)
            return 4000 + len(calls) - 1

        summary = WindowQueries(store, ticking_clock).summary(3000)
        assert len(calls) == 1
        assert summary.generated_at == summary.window_end == 4000

    def test_summary_excludes_older_samples(self, queries):
        summary = queries.summary(1500)
        assert summary.sample_count == 2
        assert summary.averages.cpu == 92.5

    def test_empty_summary(self, clock):
        summary = WindowQueries(SampleStore(), clock).summary()
        assert summary.sample_count == 0
        assert summary.averages.sample_count == 0
        assert summary.trends["cpu"].confidence == 0

    def test_to_dict_is_plain(self, queries):
        data = queries.summary(3000).to_dict()
        assert data["peaks"]["cpu"]["max_timestamp"] == 4000
        assert data["trends"]["memory"]["trend"] == "increasing"
