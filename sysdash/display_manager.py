"""Display management using Textual for the live terminal dashboard."""

import logging
import os
import signal
from datetime import datetime
from typing import Dict, List, Optional

from textual.app import App
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import DataTable, Static

from .collectors.system_models import Sample
from .config.config import Config
from .core.alerts import SystemAlert
from .core.exporter import write_export
from .core.service_health import ServiceHealthResult
from .core.shared_data import SharedDataStore
from .core.window_queries import Summary

logger = logging.getLogger(__name__)

HELP_TEXT = "r=refresh e=export csv h=help x/q=exit"

TREND_ARROWS = {"increasing": "↑", "decreasing": "↓", "stable": "→"}


def make_progress_bar(value: float, width: int = 15) -> str:
    """Text progress bar for a 0-100 percentage."""
    filled = int(min(max(value, 0.0), 100.0) * width / 100)
    bar = "█" * filled + "░" * (width - filled)
    return f"[{bar}] {value:5.1f}%"


def format_rate(bytes_per_sec: float) -> str:
    """Human readable byte rate."""
    for unit in ("B/s", "KB/s", "MB/s"):
        if bytes_per_sec < 1024:
            return f"{bytes_per_sec:.1f} {unit}"
        bytes_per_sec /= 1024
    return f"{bytes_per_sec:.1f} GB/s"


class HelpScreen(ModalScreen):
    """Modal screen to display help text."""

    CSS = """
    HelpScreen {
        align: center middle;
    }

    HelpScreen > Vertical {
        background: $surface;
        border: thick $primary;
        width: 60;
        height: auto;
        padding: 1;
    }

    #help_title {
        text-align: center;
        text-style: bold;
        color: $primary;
    }

    #help_content {
        margin: 1 0;
        text-align: center;
    }
    """

    def compose(self):
        with Vertical():
            yield Static("Help", id="help_title")
            yield Static(HELP_TEXT, id="help_content")
            yield Static("Press any key to close")

    def on_key(self, event):
        """Close help screen on any key press."""
        self.dismiss()


class DisplayManager(App):
    """Manages Textual-based terminal display with live updates."""

    CSS = """
    #header {
        height: 7;
        border: solid $primary;
    }

    .body {
        height: 1fr;
    }

    #services_table {
        width: 1fr;
    }

    #summary {
        width: 1fr;
        border: solid $secondary;
    }

    #alerts {
        height: 11;
        border: solid $warning;
    }

    #help {
        height: 1;
        color: $text-muted;
    }
    """

    def __init__(self, config: Config):
        """Initialize the display manager."""
        super().__init__()
        self.config = config
        self.shared_data: Optional[SharedDataStore] = None
        self.data_manager = None
        self._is_refreshing = False

    def compose(self):
        """Create the layout structure."""
        with Vertical():
            yield Static("Loading system metrics...", id="header", markup=False)
            with Horizontal(classes="body"):
                services_table = DataTable(id="services_table")
                services_table.add_columns("Service", "Status", "Code", "Latency", "Checked")
                yield services_table
                yield Static("Collecting samples...", id="summary", markup=False)
            yield Static("No alerts", id="alerts", markup=False)
            yield Static(HELP_TEXT, id="help")

    def run_display(self, shared_data: SharedDataStore, data_manager=None):
        """Run the main display with data polling loop."""
        def exit_handler(signum, frame):
            self.exit()

        signal.signal(signal.SIGTERM, exit_handler)

        self.shared_data = shared_data
        self.data_manager = data_manager
        self.run()

    def on_mount(self):
        """Start the data update timer when app mounts."""
        self.set_interval(self.config.refresh_rate, self._update_display)

    def on_key(self, event):
        """Handle key press events."""
        if event.key in ("x", "q"):
            self.exit()
        elif event.key == "r":
            self._trigger_manual_refresh()
        elif event.key == "e":
            self._export_csv()
        elif event.key == "h":
            self.push_screen(HelpScreen())

    def _trigger_manual_refresh(self):
        """Trigger immediate refresh of all collectors."""
        if self.data_manager:
            self._is_refreshing = True
            self._update_display()
            self.data_manager.trigger_manual_refresh()
            self.set_timer(0.5, self._clear_refreshing)

    def _clear_refreshing(self):
        """Clear the refreshing indicator."""
        self._is_refreshing = False
        self._update_display()

    def _export_csv(self):
        """Write the full sample history as CSV into the export directory."""
        if not self.data_manager:
            return
        try:
            path = write_export(self.data_manager.aggregator.export("csv"), self.config.export_dir)
        except OSError as e:
            logger.error("Export failed: %s", e)
            self.notify(f"Export failed: {e}", severity="error")
            return
        self.notify(f"Exported to {os.path.abspath(path)}")

    def _update_display(self):
        """Update all display panels with current data."""
        if self.shared_data is None:
            return

        sample, snapshot, services, alerts = self.shared_data.get_system_data()
        summary = None
        if self.data_manager:
            summary = self.data_manager.aggregator.get_summary(self.config.summary_window_ms)

        self.query_one("#header").update(self._create_system_overview(sample, snapshot))
        self.query_one("#summary").update(self._create_summary_panel(summary))
        self._update_services_table(services)
        self.query_one("#alerts").update(self._create_alerts_panel(alerts))

    def _create_system_overview(self, sample: Optional[Sample], snapshot: dict) -> str:
        """Create the system overview content for header panel."""
        if not sample:
            return "Loading system metrics..."

        from . import __version__
        time_format = self.config.display.time_format
        refresh_indicator = " refreshing" if self._is_refreshing else ""
        taken_at = datetime.fromtimestamp(sample.timestamp / 1000)

        def metric_line(label: str, value: float) -> str:
            if self.config.display.show_progress_bars:
                return f"{label:<8}{make_progress_bar(value)}"
            return f"{label:<8}{value:5.1f}%"

        # Column 1 (left side)
        col1 = [
            f"Time: {taken_at.strftime(time_format)}{refresh_indicator}",
            metric_line("CPU:", sample.cpu),
            metric_line("Memory:", sample.memory),
            metric_line("Disk:", sample.disk),
        ]

        # Column 2 (right side)
        col2 = [f"sysdash v{__version__}"]
        cores = snapshot.get("cpu", {}).get("cores")
        if cores:
            col2.append(f"Cores: {cores}")
        col2.append(f"Net: ↑ {format_rate(sample.network_upload)}  ↓ {format_rate(sample.network_download)}")
        if sample.temperature:
            col2.append(f"Temp: {sample.temperature:.1f}°C")

        lines = []
        for i in range(max(len(col1), len(col2))):
            left = col1[i] if i < len(col1) else ""
            right = col2[i] if i < len(col2) else ""
            lines.append(f"{left:<45} {right}")
        return "\n".join(lines)

    def _create_summary_panel(self, summary: Optional[Summary]) -> str:
        """Window averages, peaks and trends."""
        if summary is None or summary.sample_count == 0:
            return "Collecting samples..."

        window_min = (summary.window_end - summary.window_start) // 60000
        lines = [f"Last {window_min} min ({summary.sample_count} samples)", ""]
        avg = summary.averages
        for metric in ("cpu", "memory", "disk"):
            peak = getattr(summary.peaks, metric)
            trend = summary.trends[metric]
            lines.append(
                f"{metric:<7} avg {getattr(avg, metric):5.1f}%  "
                f"max {peak.max:5.1f}%  min {peak.min:5.1f}%  "
                f"{TREND_ARROWS[trend.trend]} {trend.change_percent:+.1f}%"
            )
        lines.append("")
        lines.append(f"net avg  ↑ {format_rate(avg.network_upload)}  ↓ {format_rate(avg.network_download)}")
        if avg.temperature:
            lines.append(f"temp avg {avg.temperature:.1f}°C")
        return "\n".join(lines)

    def _update_services_table(self, services: Dict[str, ServiceHealthResult]):
        """Update the services DataTable with the latest probe results."""
        services_table = self.query_one("#services_table", expect_type=DataTable)
        services_table.clear()

        if not services:
            services_table.add_row("checking...", "", "", "", "")
            return

        time_format = self.config.display.time_format
        for name in sorted(services):
            result = services[name]
            checked = datetime.fromtimestamp(result.last_checked_at / 1000).strftime(time_format)
            services_table.add_row(
                name,
                result.status.upper(),
                str(result.status_code) if result.status_code is not None else "-",
                f"{result.response_time_ms}ms",
                checked
            )

    def _create_alerts_panel(self, alerts: List[SystemAlert]) -> str:
        """Create the alerts panel content."""
        if not alerts:
            return "No alerts"

        recent_alerts = list(alerts)[-self.config.display.max_alert_lines:]
        alert_lines = []

        for alert in recent_alerts:
            time_str = alert.timestamp.strftime(self.config.display.time_format)
            level_indicator = {
                "ERROR": "ERR",
                "WARN": "WRN",
                "INFO": "INF"
            }.get(alert.level, alert.level)

            alert_line = f"[{level_indicator}] {time_str} {alert.category} - {alert.message}"
            if len(alert_line) > 120:
                alert_line = alert_line[:117] + "..."
            alert_lines.append(alert_line)

        return "\n".join(alert_lines)
