"""Threshold alert evaluation and active alert tracking."""
import logging
import threading
from collections import deque
from dataclasses import asdict, dataclass
from datetime import datetime
from numbers import Real
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..collectors.system_models import Sample
from ..config.alert_config import DEFAULT_RULES, AlertRule
from .window_queries import now_ms

logger = logging.getLogger(__name__)

MAX_HISTORY = 100

# Rule severity -> display level
DISPLAY_LEVELS = {"info": "INFO", "warning": "WARN", "critical": "ERROR"}


@dataclass
class SystemAlert:
    """Alert messages for system monitoring."""
    level: str  # "INFO", "WARN", "ERROR"
    message: str
    timestamp: datetime
    category: str  # "SYSTEM", "SERVICE"


@dataclass(frozen=True)
class TriggeredAlert:
    """A rule that fired, with the value that fired it."""
    id: str
    metric: str
    threshold: float
    level: str
    message: str
    description: str
    value: float
    timestamp: int

    @classmethod
    def from_rule(cls, rule: AlertRule, value: float, timestamp: int) -> "TriggeredAlert":
        return cls(
            id=rule.id,
            metric=rule.metric,
            threshold=rule.threshold,
            level=rule.level,
            message=rule.message,
            description=rule.description,
            value=value,
            timestamp=timestamp,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_system_alert(self) -> SystemAlert:
        return SystemAlert(
            DISPLAY_LEVELS[self.level],
            f"{self.message}: {self.metric} {self.value:.1f} > {self.threshold:g}",
            datetime.fromtimestamp(self.timestamp / 1000),
            "SYSTEM",
        )


def _metric_value(snapshot: Union[Sample, Mapping[str, Any]], metric: str) -> float:
    if isinstance(snapshot, Sample):
        value = getattr(snapshot, metric, None)
    elif isinstance(snapshot, Mapping):
        value = snapshot.get(metric)
    else:
        raise ValueError(f"snapshot must be a Sample or mapping, got {type(snapshot).__name__}")

    if value is None:
        raise ValueError(f"snapshot missing metric '{metric}'")
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValueError(f"metric '{metric}' must be a number, got {value!r}")
    return float(value)


def evaluate(snapshot: Union[Sample, Mapping[str, Any]], rules: Iterable[AlertRule] = DEFAULT_RULES,
             now: Optional[int] = None) -> List[TriggeredAlert]:
    """Return alerts for every rule whose metric is strictly above its threshold.

    Alerts come back in rule declaration order. A metric referenced by a rule
    but absent from the snapshot raises ValueError.
    """
    timestamp = now_ms() if now is None else now
    triggered = []
    for rule in rules:
        value = _metric_value(snapshot, rule.metric)
        if value > rule.threshold:
            triggered.append(TriggeredAlert.from_rule(rule, value, timestamp))
    return triggered


class AlertTracker:
    """Keeps the currently active alerts and a bounded resolution history."""

    def __init__(self, max_history: int = MAX_HISTORY):
        self._lock = threading.Lock()
        self._active: Dict[str, TriggeredAlert] = {}
        self._history = deque(maxlen=max_history)

    def update(self, triggered: Iterable[TriggeredAlert],
               now: Optional[int] = None) -> List[TriggeredAlert]:
        """Replace the active set with the latest evaluation.

        Returns the alerts that were not active before. Alerts that stopped
        firing move to the history.
        """
        resolved_at = now_ms() if now is None else now
        latest = {alert.id: alert for alert in triggered}
        with self._lock:
            raised = [alert for alert_id, alert in latest.items() if alert_id not in self._active]
            for alert_id, alert in self._active.items():
                if alert_id not in latest:
                    self._history.appendleft(dict(alert.to_dict(), resolved_at=resolved_at))
                    logger.info("Alert resolved: %s", alert_id)
            self._active = latest

        for alert in raised:
            logger.info("Alert raised: %s (%s=%.1f)", alert.id, alert.metric, alert.value)
        return raised

    def active(self) -> List[TriggeredAlert]:
        with self._lock:
            return list(self._active.values())

    def history(self) -> List[Dict[str, Any]]:
        """Resolved alerts, newest first."""
        with self._lock:
            return list(self._history)

    def clear(self, alert_id: str) -> bool:
        with self._lock:
            return self._active.pop(alert_id, None) is not None

    def clear_all(self):
        with self._lock:
            self._active.clear()
