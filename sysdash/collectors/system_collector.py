"""System metrics collector for CPU, memory, disk, network and temperature."""
import logging
import time
from typing import Any, Dict, Optional

import psutil

from ..config.config import Config
from ..core.aggregator import MetricsAggregator
from ..core.alerts import AlertTracker
from ..core.shared_data import SharedDataStore
from .base_collector import BaseCollector
from .system_models import Sample

logger = logging.getLogger(__name__)


class SystemCollector(BaseCollector):
    """Turns psutil readings into samples and feeds the aggregator."""

    def __init__(self, config: Config, aggregator: MetricsAggregator, tracker: AlertTracker):
        """Initialize the system collector."""
        super().__init__()
        self.config = config
        self.aggregator = aggregator
        self.tracker = tracker

        # Warmup: the first cpu_percent(None) call always reports 0.0
        psutil.cpu_percent(interval=None)
        self._last_net = psutil.net_io_counters()
        self._last_net_time = time.monotonic()

    @property
    def interval(self) -> float:
        return self.config.collection_intervals.system_metrics

    def _do_collection(self, shared_data: SharedDataStore):
        """Perform one collection cycle."""
        try:
            self.collect_once(shared_data)
        except (psutil.Error, OSError, ValueError) as e:
            logger.warning("Skipping system metrics tick: %s", e)

    def collect_once(self, shared_data: SharedDataStore) -> Sample:
        """Collect a snapshot, store it as a sample and record new alerts."""
        snapshot = self.collect_snapshot()
        sample = Sample.from_snapshot(snapshot, self.aggregator.clock())
        self.aggregator.add_sample(sample)
        shared_data.update_sample(sample, snapshot)

        triggered = self.aggregator.evaluate_alerts(sample)
        for alert in self.tracker.update(triggered, now=sample.timestamp):
            shared_data.add_alert(alert.to_system_alert())

        logger.debug("Collected sample cpu=%.1f mem=%.1f disk=%.1f",
                     sample.cpu, sample.memory, sample.disk)
        return sample

    def collect_snapshot(self) -> Dict[str, Any]:
        """Read current host metrics in the nested snapshot shape."""
        mem = psutil.virtual_memory()
        disk = psutil.disk_usage(self.config.disk_path)
        upload, download = self._network_rates()

        return {
            "cpu": {
                "usage": psutil.cpu_percent(interval=None),
                "cores": psutil.cpu_count(logical=True) or 1,
                "temperature": self._get_temperature(),
            },
            "memory": {
                "total": mem.total,
                "used": mem.used,
                "percentage": mem.percent,
            },
            "disk": {
                "total": disk.total,
                "used": disk.used,
                "percentage": disk.percent,
            },
            "network": {
                "upload": upload,
                "download": download,
                "connections": self._get_connection_count(),
            },
        }

    def _network_rates(self) -> tuple:
        """Bytes/sec sent and received since the previous call."""
        current = psutil.net_io_counters()
        now = time.monotonic()
        elapsed = max(0.001, now - self._last_net_time)
        # counters can wrap or reset; clamp to zero
        upload = max(0.0, (current.bytes_sent - self._last_net.bytes_sent) / elapsed)
        download = max(0.0, (current.bytes_recv - self._last_net.bytes_recv) / elapsed)
        self._last_net = current
        self._last_net_time = now
        return upload, download

    def _get_temperature(self) -> Optional[float]:
        """Get system temperature from available sensors."""
        try:
            temps = psutil.sensors_temperatures()
        except (AttributeError, OSError):
            # Not supported on this platform
            return None
        for sensor in ('coretemp', 'cpu_thermal', 'k10temp'):
            if temps.get(sensor):
                return temps[sensor][0].current
        return None

    def _get_connection_count(self) -> Optional[int]:
        """Number of open inet connections, None when not permitted."""
        try:
            return len(psutil.net_connections(kind='inet'))
        except (psutil.AccessDenied, PermissionError):
            return None
