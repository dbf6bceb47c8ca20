"""Polling loop shared by the collectors."""
import threading
import time

from ..core.shared_data import SharedDataStore

POLL_STEP = 0.1  # seconds between checks for refresh requests and shutdown


class BaseCollector:
    """Runs _do_collection every interval seconds on a collector thread.

    An interval of 0 collects once and then only on manual refresh.
    """

    def __init__(self):
        self.manual_refresh_requested = False

    @property
    def interval(self) -> float:
        raise NotImplementedError

    def collect_loop(self, shared_data: SharedDataStore, running: threading.Event):
        """Main collection loop with zero-interval support."""
        # Initial collection
        self._do_collection(shared_data)
        last_run = time.monotonic()

        while running.is_set():
            due = self.interval > 0 and time.monotonic() - last_run >= self.interval
            if due or self.manual_refresh_requested:
                self.manual_refresh_requested = False
                self._do_collection(shared_data)
                last_run = time.monotonic()
            time.sleep(POLL_STEP)

    def trigger_manual_refresh(self):
        """Trigger an immediate collection cycle."""
        self.manual_refresh_requested = True

    def _do_collection(self, shared_data: SharedDataStore):
        raise NotImplementedError

    def run_cycle(self, shared_data: SharedDataStore):
        """Collect once on the calling thread."""
        self._do_collection(shared_data)
