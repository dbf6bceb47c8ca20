"""Data collection management for coordinating multiple collectors."""
import logging
import threading

from .collectors.health_collector import HealthCollector
from .collectors.system_collector import SystemCollector
from .config.config import Config
from .core.aggregator import MetricsAggregator
from .core.alerts import AlertTracker
from .core.shared_data import SharedDataStore

logger = logging.getLogger(__name__)


class DataCollectionManager:
    """Manages multiple data collectors with coordinated threading."""

    def __init__(self, config: Config, aggregator: MetricsAggregator = None):
        """Initialize collection manager with collectors."""
        self.config = config
        self.threads = []
        self.running = threading.Event()
        self.shared_data = SharedDataStore(config.max_alerts)
        self.aggregator = aggregator or MetricsAggregator.from_config(config)
        self.tracker = AlertTracker()

        # Initialize collectors
        self.collectors = [
            SystemCollector(config, self.aggregator, self.tracker),
            HealthCollector(config),
        ]

    def start_collection(self):
        """Start all data collection threads."""
        self.running.set()

        for collector in self.collectors:
            self._start_thread(collector)
        logger.info("Started %d collectors", len(self.collectors))

    def stop_collection(self):
        """Stop all data collection threads."""
        self.running.clear()

        # Wait for threads to finish
        for thread in self.threads:
            if thread.is_alive():
                thread.join(timeout=1)
        self.threads = []

    def trigger_manual_refresh(self):
        """Ask every collector for an immediate cycle."""
        for collector in self.collectors:
            collector.trigger_manual_refresh()

    def get_shared_data(self) -> SharedDataStore:
        """Get the shared data store for reading."""
        return self.shared_data

    def add_collector(self, collector):
        """Add a new collector (for extensibility)."""
        self.collectors.append(collector)
        if self.running.is_set():
            # Start immediately if collection is already running
            self._start_thread(collector)

    def _start_thread(self, collector):
        thread = threading.Thread(
            target=collector.collect_loop,
            args=(self.shared_data, self.running),
            name=type(collector).__name__,
            daemon=True
        )
        thread.start()
        self.threads.append(thread)
