"""Display configuration data structure."""
from dataclasses import dataclass


@dataclass
class DisplayConfig:
    """Display preferences configuration."""
    show_progress_bars: bool = True
    time_format: str = "%H:%M:%S"
    max_alert_lines: int = 9

    def __post_init__(self):
        """Fix invalid values."""
        if self.max_alert_lines <= 0:
            self.max_alert_lines = 9
