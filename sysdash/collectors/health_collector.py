"""Service health collector probing the configured services."""
import logging
from datetime import datetime
from typing import Dict

from ..config.config import Config
from ..core.service_health import ServiceHealthResult, check_all_sync
from ..core.shared_data import SharedDataStore
from .base_collector import BaseCollector

logger = logging.getLogger(__name__)


class HealthCollector(BaseCollector):
    """Periodically probes services and reports status changes as alerts."""

    def __init__(self, config: Config):
        """Initialize the health collector."""
        super().__init__()
        self.config = config
        self._last_status: Dict[str, str] = {}

    @property
    def interval(self) -> float:
        return self.config.collection_intervals.service_health

    def _do_collection(self, shared_data: SharedDataStore):
        """Perform one collection cycle."""
        if not self.config.services:
            return
        try:
            results = check_all_sync(self.config.services)
        except Exception:
            # Probes report their own failures; this is a broken event loop or session
            logger.exception("Skipping service health tick")
            return
        shared_data.update_service_health(results)
        self._report_changes(shared_data, results)

    def _report_changes(self, shared_data: SharedDataStore, results: Dict[str, ServiceHealthResult]):
        """Alert when a service goes down or comes back."""
        for name, result in results.items():
            previous = self._last_status.get(name)
            self._last_status[name] = result.status
            if previous == result.status:
                continue

            if not result.is_online:
                detail = f": {result.error}" if result.error else ""
                logger.info("Service %s is %s%s", name, result.status, detail)
                shared_data.create_alert("WARN", f"Service {name} {result.status}{detail}",
                                         "SERVICE", datetime.now())
            elif previous is not None:
                logger.info("Service %s is back online", name)
                shared_data.create_alert("INFO", f"Service {name} back online",
                                         "SERVICE", datetime.now())
