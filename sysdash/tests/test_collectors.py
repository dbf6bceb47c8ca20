"""
Test suite for collectors and the collection manager.

Tests cover:
- Host snapshot collection from psutil
- Sample ingestion and alert raising per tick
- Skipped ticks on psutil errors
- Service status change alerts
- Collector thread management
"""

import threading
import time
from unittest.mock import Mock, patch

import psutil
import pytest

from ..collectors import health_collector, system_collector
from ..collectors.health_collector import HealthCollector
from ..collectors.system_collector import SystemCollector
from ..config.collection_config import CollectionConfig
from ..config.config import Config
from ..core.aggregator import MetricsAggregator
from ..core.alerts import AlertTracker
from ..core.service_health import ServiceHealthResult
from ..core.shared_data import SharedDataStore
from ..data_manager import DataCollectionManager
from .helpers import FixedClock


def make_psutil(disk_percent=91.0):
    fake = Mock()
    fake.Error = psutil.Error
    fake.AccessDenied = psutil.AccessDenied
    fake.cpu_percent.return_value = 42.0
    fake.cpu_count.return_value = 8
    fake.sensors_temperatures.return_value = {"coretemp": [Mock(current=55.0)]}
    fake.virtual_memory.return_value = Mock(total=16000, used=8000, percent=50.0)
    fake.disk_usage.return_value = Mock(total=1000, used=910, percent=disk_percent)
    fake.net_io_counters.side_effect = [
        Mock(bytes_sent=1000, bytes_recv=2000),
        Mock(bytes_sent=3000, bytes_recv=6000),
        Mock(bytes_sent=3000, bytes_recv=6000),
    ]
    fake.net_connections.return_value = [object()] * 3
    return fake


def make_result(name, status):
    return ServiceHealthResult(
        name=name, status=status, status_code=200 if status == "online" else None,
        response_time_ms=5, last_checked_at=0, host="localhost", port=1,
        protocol="tcp", error=None if status == "online" else "refused",
    )


@pytest.fixture
def config():
    return Config(collection_intervals=CollectionConfig(system_metrics=0, service_health=0))


@pytest.fixture
def aggregator(config):
    return MetricsAggregator.from_config(config, clock=FixedClock(5000))


class TestSystemCollector:
    """Tests for the psutil collector."""

    def make_collector(self, config, aggregator, fake_psutil):
        fake_time = Mock()
        fake_time.monotonic.side_effect = [100.0, 102.0, 104.0]
        with patch.object(system_collector, "psutil", fake_psutil), \
                patch.object(system_collector, "time", fake_time):
            collector = SystemCollector(config, aggregator, AlertTracker())
        return collector, fake_time

    def test_collect_snapshot_shape(self, config, aggregator):
        fake = make_psutil()
        collector, fake_time = self.make_collector(config, aggregator, fake)
        with patch.object(system_collector, "psutil", fake), \
                patch.object(system_collector, "time", fake_time):
            snapshot = collector.collect_snapshot()

        assert snapshot["cpu"] == {"usage": 42.0, "cores": 8, "temperature": 55.0}
        assert snapshot["memory"]["percentage"] == 50.0
        assert snapshot["disk"]["percentage"] == 91.0
        # 2000 bytes sent / 4000 received over 2 seconds
        assert snapshot["network"] == {"upload": 1000.0, "download": 2000.0, "connections": 3}
        fake.disk_usage.assert_called_with("/")

    def test_collect_once_stores_sample_and_raises_alert(self, config, aggregator):
        fake = make_psutil()
        collector, fake_time = self.make_collector(config, aggregator, fake)
        shared = SharedDataStore()

        with patch.object(system_collector, "psutil", fake), \
                patch.object(system_collector, "time", fake_time):
            sample = collector.collect_once(shared)
            collector.collect_once(shared)

        assert sample.timestamp == 5000
        assert sample.disk == 91.0
        assert len(aggregator.store) == 2
        latest, snapshot, _, alerts = shared.get_system_data()
        assert latest.cpu == 42.0
        assert snapshot["cpu"]["cores"] == 8
        # disk above 90 raised once, not once per tick
        assert [(a.level, a.category) for a in alerts] == [("ERROR", "SYSTEM")]

    def test_missing_sensors(self, config, aggregator):
        fake = make_psutil(disk_percent=10.0)
        fake.sensors_temperatures.side_effect = AttributeError
        fake.net_connections.side_effect = psutil.AccessDenied()
        collector, fake_time = self.make_collector(config, aggregator, fake)

        with patch.object(system_collector, "psutil", fake), \
                patch.object(system_collector, "time", fake_time):
            sample = collector.collect_once(SharedDataStore())

        assert sample.temperature == 0.0

    def test_psutil_error_skips_tick(self, config, aggregator):
        fake = make_psutil()
        collector, fake_time = self.make_collector(config, aggregator, fake)
        fake.virtual_memory.side_effect = psutil.AccessDenied()

        with patch.object(system_collector, "psutil", fake), \
                patch.object(system_collector, "time", fake_time):
            collector.run_cycle(SharedDataStore())

        assert len(aggregator.store) == 0


class TestHealthCollector:
    """Tests for the service health collector."""

    def test_status_changes_raise_alerts(self, config):
        collector = HealthCollector(config)
        shared = SharedDataStore()
        rounds = [
            {"db": make_result("db", "offline")},
            {"db": make_result("db", "offline")},
            {"db": make_result("db", "online")},
        ]

        with patch.object(health_collector, "check_all_sync", side_effect=rounds) as check:
            for _ in rounds:
                collector.run_cycle(shared)

        check.assert_called_with(config.services)
        _, _, services, alerts = shared.get_system_data()
        assert services["db"].status == "online"
        assert [(a.level, a.category) for a in alerts] == [("WARN", "SERVICE"), ("INFO", "SERVICE")]

    def test_first_online_result_is_quiet(self, config):
        collector = HealthCollector(config)
        shared = SharedDataStore()
        with patch.object(health_collector, "check_all_sync",
                          return_value={"db": make_result("db", "online")}):
            collector.run_cycle(shared)
        assert shared.get_system_data()[3] == []

    def test_no_services(self, config):
        config.services = []
        with patch.object(health_collector, "check_all_sync") as check:
            HealthCollector(config).run_cycle(SharedDataStore())
        check.assert_not_called()


class FakeCollector:
    """Collector that counts cycles until the running flag clears."""

    def __init__(self):
        self.cycles = 0
        self.refreshed = False

    def collect_loop(self, shared_data, running):
        while running.is_set():
            self.cycles += 1
            time.sleep(0.01)

    def trigger_manual_refresh(self):
        self.refreshed = True


class TestDataCollectionManager:
    """Tests for collector thread management."""

    def test_start_and_stop(self, config):
        manager = DataCollectionManager(config)
        fake = FakeCollector()
        manager.collectors = [fake]

        manager.start_collection()
        time.sleep(0.1)
        manager.stop_collection()

        assert fake.cycles > 0
        assert not manager.running.is_set()
        assert manager.threads == []

    def test_manual_refresh_reaches_collectors(self, config):
        manager = DataCollectionManager(config)
        fakes = [FakeCollector(), FakeCollector()]
        manager.collectors = fakes
        manager.trigger_manual_refresh()
        assert all(f.refreshed for f in fakes)

    def test_add_collector_while_running(self, config):
        manager = DataCollectionManager(config)
        manager.collectors = []
        manager.start_collection()
        fake = FakeCollector()
        manager.add_collector(fake)
        time.sleep(0.1)
        manager.stop_collection()
        assert fake.cycles > 0

    def test_collect_loop_honours_manual_refresh(self, config):
        collector = HealthCollector(config)
        running = threading.Event()
        running.set()
        with patch.object(health_collector, "check_all_sync", return_value={}) as check:
            thread = threading.Thread(target=collector.collect_loop,
                                      args=(SharedDataStore(), running), daemon=True)
            thread.start()
            time.sleep(0.05)
            collector.trigger_manual_refresh()
            time.sleep(0.3)
            running.clear()
            thread.join(timeout=1)
        # initial collection plus the manual one; interval 0 never fires on its own
        assert check.call_count == 2
