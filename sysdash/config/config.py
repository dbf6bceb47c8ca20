"""Main configuration data structure."""
from dataclasses import dataclass, field
from typing import List

from .alert_config import AlertConfig
from .collection_config import CollectionConfig
from .display_config import DisplayConfig
from .service_config import DEFAULT_SERVICES, ServiceSpec


@dataclass
class Config:
    """Main configuration class."""
    refresh_rate: float = 1.0
    max_alerts: int = 50
    max_samples: int = 10000
    summary_window_ms: int = 3600000
    trend_window_ms: int = 300000
    disk_path: str = "/"
    export_dir: str = "."
    collection_intervals: CollectionConfig = field(default_factory=CollectionConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)
    services: List[ServiceSpec] = field(default_factory=lambda: list(DEFAULT_SERVICES))
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def __post_init__(self):
        """Fix invalid values."""
        if self.refresh_rate <= 0:
            self.refresh_rate = 1.0
        if self.max_alerts <= 0:
            self.max_alerts = 50
        if self.max_samples <= 0:
            self.max_samples = 10000
        if self.summary_window_ms <= 0:
            self.summary_window_ms = 3600000
        if self.trend_window_ms <= 0:
            self.trend_window_ms = 300000
