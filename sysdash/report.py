"""One-shot terminal report rendered with Rich."""
from typing import Dict, Iterable, Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table

from .core.alerts import TriggeredAlert
from .core.service_health import ServiceHealthResult
from .core.window_queries import Summary

STATUS_STYLES = {"online": "green", "offline": "red", "error": "magenta"}
LEVEL_STYLES = {"critical": "red", "warning": "yellow", "info": "blue"}


def create_summary_panel(summary: Summary) -> Panel:
    """Averages, peaks and trends as a table panel."""
    table = Table(expand=True)
    table.add_column("Metric")
    table.add_column("Avg", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Min", justify="right")
    table.add_column("Trend")
    table.add_column("Change", justify="right")
    table.add_column("Confidence", justify="right")

    for metric in ("cpu", "memory", "disk"):
        peak = getattr(summary.peaks, metric)
        trend = summary.trends[metric]
        table.add_row(
            metric,
            f"{getattr(summary.averages, metric):.2f}%",
            f"{peak.max:.1f}%" if peak.has_data else "-",
            f"{peak.min:.1f}%" if peak.has_data else "-",
            trend.trend,
            f"{trend.change_percent:+.2f}%",
            f"{trend.confidence}%",
        )

    return Panel(table, title=f"Summary ({summary.sample_count} samples)", border_style="blue")


def create_services_table(services: Dict[str, ServiceHealthResult]) -> Table:
    table = Table(title="Services", expand=True)
    table.add_column("Service")
    table.add_column("Endpoint")
    table.add_column("Status")
    table.add_column("Code", justify="right")
    table.add_column("Latency", justify="right")
    table.add_column("Error")

    for name in sorted(services):
        result = services[name]
        style = STATUS_STYLES.get(result.status, "white")
        table.add_row(
            name,
            f"{result.protocol}://{result.host}:{result.port}",
            f"[{style}]{result.status}[/{style}]",
            str(result.status_code) if result.status_code is not None else "-",
            f"{result.response_time_ms}ms",
            result.error or "",
        )
    return table


def create_alerts_panel(alerts: Iterable[TriggeredAlert]) -> Panel:
    alerts = list(alerts)
    if not alerts:
        return Panel("No alerts", title="Alerts", border_style="green")

    lines = []
    for alert in alerts:
        style = LEVEL_STYLES.get(alert.level, "white")
        lines.append(
            f"[{style}]{alert.level.upper()}[/{style}] {alert.message} "
            f"({alert.metric} {alert.value:.1f} > {alert.threshold:g})"
        )
    border_style = "red" if any(a.level == "critical" for a in alerts) else "yellow"
    return Panel("\n".join(lines), title=f"Alerts ({len(alerts)})", border_style=border_style)


def print_report(summary: Summary, alerts: Iterable[TriggeredAlert],
                 services: Optional[Dict[str, ServiceHealthResult]] = None,
                 console: Optional[Console] = None):
    """Print summary, alerts and (optionally) service health."""
    console = console or Console()
    parts = [create_summary_panel(summary), create_alerts_panel(alerts)]
    if services:
        parts.append(create_services_table(services))
    console.print(Group(*parts))
