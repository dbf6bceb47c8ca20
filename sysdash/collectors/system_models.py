"""System data models for system collector."""
import math
from dataclasses import asdict, dataclass
from numbers import Real
from typing import Any, Dict, Mapping

PERCENT_FIELDS = ("cpu", "memory", "disk")
RATE_FIELDS = ("network_upload", "network_download")
METRIC_FIELDS = PERCENT_FIELDS + RATE_FIELDS + ("temperature",)
CSV_COLUMNS = ("timestamp",) + METRIC_FIELDS


def _require_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return float(value)


@dataclass(frozen=True)
class Sample:
    """One timestamped observation of system state."""
    timestamp: int  # ms since epoch
    cpu: float
    memory: float
    disk: float
    network_upload: float  # bytes/sec
    network_download: float  # bytes/sec
    temperature: float = 0.0

    def __post_init__(self):
        """Reject malformed observations instead of coercing them."""
        if isinstance(self.timestamp, bool) or not isinstance(self.timestamp, int):
            raise ValueError(f"timestamp must be an int (ms), got {self.timestamp!r}")
        for name in METRIC_FIELDS:
            # frozen: normalise ints to floats through object.__setattr__
            object.__setattr__(self, name, _require_number(name, getattr(self, name)))
        for name in PERCENT_FIELDS:
            value = getattr(self, name)
            if not 0.0 <= value <= 100.0:
                raise ValueError(f"{name} must be within 0-100, got {value}")
        for name in RATE_FIELDS:
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")

    @classmethod
    def from_snapshot(cls, snapshot: Mapping[str, Any], timestamp: int) -> "Sample":
        """Build a sample from the nested collector snapshot.

        Expected shape::

            {"cpu": {"usage", "cores", "temperature"},
             "memory": {"total", "used", "percentage"},
             "disk": {"total", "used", "percentage"},
             "network": {"upload", "download", "connections"}}

        Only the temperature may be absent (it becomes 0).
        """
        if not isinstance(snapshot, Mapping):
            raise ValueError(f"snapshot must be a mapping, got {type(snapshot).__name__}")

        def pick(section: str, key: str) -> Any:
            try:
                value = snapshot[section][key]
            except (KeyError, TypeError):
                raise ValueError(f"snapshot missing {section}.{key}") from None
            if value is None:
                raise ValueError(f"snapshot field {section}.{key} is None")
            return value

        cpu_section = snapshot.get("cpu") or {}
        temperature = cpu_section.get("temperature") if isinstance(cpu_section, Mapping) else None

        return cls(
            timestamp=timestamp,
            cpu=pick("cpu", "usage"),
            memory=pick("memory", "percentage"),
            disk=pick("disk", "percentage"),
            network_upload=pick("network", "upload"),
            network_download=pick("network", "download"),
            temperature=temperature if temperature is not None else 0.0,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Flat field dict, in CSV column order."""
        return asdict(self)
