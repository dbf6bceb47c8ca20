"""Metrics aggregator: one object owning the sample history and alert rules."""
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from ..collectors.system_models import Sample
from ..config.alert_config import DEFAULT_RULES, AlertRule
from ..config.config import Config
from ..config.service_config import DEFAULT_SERVICES, ServiceSpec
from . import exporter, service_health
from .alerts import TriggeredAlert, evaluate
from .sample_store import DEFAULT_CAPACITY, SampleStore
from .window_queries import (DEFAULT_SUMMARY_WINDOW_MS, DEFAULT_TREND_WINDOW_MS, Summary,
                             TrendResult, WindowQueries, now_ms)


class MetricsAggregator:
    """Read/write contract used by collectors and the display layer."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY, rules: Iterable[AlertRule] = DEFAULT_RULES,
                 services: Iterable[ServiceSpec] = DEFAULT_SERVICES,
                 clock: Callable[[], int] = now_ms):
        """Create an aggregator with an empty store."""
        self.store = SampleStore(capacity)
        self.queries = WindowQueries(self.store, clock)
        self.rules = list(rules)
        self.services = list(services)
        self.clock = clock

    @classmethod
    def from_config(cls, config: Config, clock: Callable[[], int] = now_ms) -> "MetricsAggregator":
        return cls(
            capacity=config.max_samples,
            rules=config.alerts.effective_rules(),
            services=config.services,
            clock=clock,
        )

    def add_sample(self, sample: Sample) -> Sample:
        self.store.append(sample)
        return sample

    def get_summary(self, window_ms: int = DEFAULT_SUMMARY_WINDOW_MS) -> Summary:
        return self.queries.summary(window_ms)

    def get_trend(self, metric: str, window_ms: int = DEFAULT_TREND_WINDOW_MS) -> TrendResult:
        return self.queries.trend(metric, window_ms)

    def get_range(self, start_ms: int, end_ms: int) -> List[Sample]:
        return self.store.range_query(start_ms, end_ms)

    def get_last(self, n: int) -> List[Sample]:
        return self.store.tail(n)

    def export(self, format: str = "json", start_ms: Optional[int] = None,
               end_ms: Optional[int] = None) -> Dict[str, Any]:
        return exporter.export(self.store, format, start_ms, end_ms, clock=self.clock)

    def evaluate_alerts(self, snapshot: Union[Sample, Mapping[str, Any]]) -> List[TriggeredAlert]:
        return evaluate(snapshot, self.rules, now=self.clock())

    async def check_all_services_health(
            self, specs: Optional[Iterable[ServiceSpec]] = None) -> Dict[str, service_health.ServiceHealthResult]:
        return await service_health.check_all(self.services if specs is None else specs)

    def memory_usage(self) -> Dict[str, Any]:
        """Rough footprint of the in-memory history."""
        return {
            "data_points": len(self.store),
            "estimated_memory_mb": self.store.estimated_memory_footprint() / (1024 * 1024),
            "max_data_points": self.store.capacity,
        }

    def clear(self):
        self.store.clear()
