"""Alert rule and threshold configuration."""
from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping

from ..collectors.system_models import METRIC_FIELDS

ALERT_LEVELS = ("info", "warning", "critical")


@dataclass(frozen=True)
class AlertRule:
    """Static metric/threshold/severity rule."""
    id: str
    metric: str
    threshold: float
    level: str
    message: str
    description: str = ""

    def __post_init__(self):
        """Validate rule fields."""
        if self.level not in ALERT_LEVELS:
            raise ValueError(f"Unknown alert level for rule {self.id}: {self.level}")
        if self.metric not in METRIC_FIELDS:
            raise ValueError(f"Unknown metric for rule {self.id}: {self.metric}")
        if isinstance(self.threshold, bool) or not isinstance(self.threshold, (int, float)):
            raise ValueError(f"Threshold for rule {self.id} must be a number")


DEFAULT_RULES = (
    AlertRule("cpu-high", "cpu", 80, "warning", "High CPU usage detected",
              "CPU usage is above the warning threshold"),
    AlertRule("memory-high", "memory", 85, "warning", "High memory usage detected",
              "Memory usage is above the warning threshold"),
    AlertRule("disk-high", "disk", 90, "critical", "High disk usage detected",
              "Disk usage is critically high"),
)


def apply_thresholds(rules, overrides: Mapping[str, float]) -> List[AlertRule]:
    """Return a copy of rules with per-metric threshold overrides applied."""
    if not overrides:
        return list(rules)
    return [
        replace(rule, threshold=overrides[rule.metric]) if rule.metric in overrides else rule
        for rule in rules
    ]


@dataclass
class AlertConfig:
    """Alert rules plus per-metric threshold overrides."""
    rules: List[AlertRule] = field(default_factory=lambda: list(DEFAULT_RULES))
    thresholds: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        """Fix invalid values."""
        if not self.rules:
            self.rules = list(DEFAULT_RULES)

    def effective_rules(self) -> List[AlertRule]:
        """Rules with threshold overrides applied, in declaration order."""
        return apply_thresholds(self.rules, self.thresholds)
