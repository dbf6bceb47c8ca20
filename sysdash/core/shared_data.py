"""Shared data store for thread-safe data access."""
import threading
from collections import deque
from typing import Any, Dict, List, Optional

from ..collectors.system_models import Sample
from .alerts import SystemAlert
from .service_health import ServiceHealthResult


class SharedDataStore:
    """Thread-safe data store for collectors to share data with the display."""

    def __init__(self, max_alerts: int = 50):
        """Initialize the shared data store with thread safety."""
        self._lock = threading.Lock()
        self.latest_sample: Optional[Sample] = None
        self.latest_snapshot: Dict[str, Any] = {}
        self.service_health: Dict[str, ServiceHealthResult] = {}
        self.alerts = deque(maxlen=max_alerts)

    def update_sample(self, sample: Sample, snapshot: Dict[str, Any]):
        """Record the most recent sample and the raw snapshot it came from."""
        with self._lock:
            self.latest_sample = sample
            self.latest_snapshot = snapshot

    def update_service_health(self, results: Dict[str, ServiceHealthResult]):
        """Replace the service health results in a thread-safe manner."""
        with self._lock:
            self.service_health = dict(results)

    def add_alert(self, alert: SystemAlert):
        """Add an alert to the alert queue."""
        with self._lock:
            self.alerts.append(alert)

    def create_alert(self, level: str, message: str, category: str, timestamp):
        """Create and add an alert in one step."""
        self.add_alert(SystemAlert(level, message, timestamp, category))

    def get_system_data(self) -> tuple:
        """Get (latest_sample, snapshot, service_health, alerts) in a thread-safe manner."""
        with self._lock:
            return (
                self.latest_sample,
                dict(self.latest_snapshot),
                dict(self.service_health),
                list(self.alerts),
            )
