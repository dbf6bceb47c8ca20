"""Collection intervals configuration."""
from dataclasses import dataclass


@dataclass
class CollectionConfig:
    """Collection timing intervals configuration (seconds, 0 = manual refresh only)."""
    system_metrics: float = 5.0
    service_health: float = 30.0

    def __post_init__(self):
        """Fix invalid values."""
        if self.system_metrics < 0:
            self.system_metrics = 5.0
        if self.service_health < 0:
            self.service_health = 30.0
