"""Main entry point for the sysdash monitor."""
import argparse
import logging
import sys
import time
from typing import List, Optional

from rich.console import Console

from .collectors.system_collector import SystemCollector
from .config.config_manager import ConfigManager
from .core.exporter import EXPORT_FORMATS, write_export
from .core.service_health import check_all_sync
from .data_manager import DataCollectionManager
from .report import create_services_table, print_report

logger = logging.getLogger("sysdash")


def setup_logging(level: str = "WARNING", log_file: Optional[str] = None, quiet: bool = False):
    """Configure the sysdash logger.

    quiet drops records that have no log file to go to, so they cannot
    draw over the full-screen dashboard.
    """
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    logger.handlers.clear()
    if log_file:
        handler = logging.FileHandler(log_file)
    elif quiet:
        handler = logging.NullHandler()
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Host metrics and service health monitor")
    parser.add_argument("--config", help="YAML configuration file (default: bundled config)")
    parser.add_argument("--refresh-rate", type=float, help="dashboard refresh period in seconds")
    parser.add_argument("--log-file")
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--once", action="store_true",
                        help="collect for --duration seconds, print a report and exit")
    parser.add_argument("--duration", type=float, default=10.0)
    parser.add_argument("--export", choices=EXPORT_FORMATS,
                        help="with --once, also export the collected samples")
    parser.add_argument("--output", help="export directory (default: export_dir from config)")
    parser.add_argument("--check-services", action="store_true",
                        help="probe the configured services, print their status and exit")
    return parser


def run_once(config, args, console: Console) -> int:
    """Collect samples for a fixed duration without the dashboard."""
    manager = DataCollectionManager(config)
    collector = next(c for c in manager.collectors if isinstance(c, SystemCollector))
    interval = config.collection_intervals.system_metrics or 1.0

    deadline = time.monotonic() + args.duration
    with console.status("Collecting metrics..."):
        while True:
            collector.run_cycle(manager.shared_data)
            if time.monotonic() + interval > deadline:
                break
            time.sleep(interval)

    summary = manager.aggregator.get_summary(config.summary_window_ms)
    print_report(summary, manager.tracker.active(), console=console)

    if args.export:
        path = write_export(manager.aggregator.export(args.export), args.output or config.export_dir)
        console.print(f"Exported {len(manager.aggregator.store)} samples to {path}")
    return 0


def run_service_check(config, console: Console) -> int:
    """Probe every configured service once; non-zero exit if any is not online."""
    with console.status("Checking services..."):
        results = check_all_sync(config.services)
    console.print(create_services_table(results))
    return 0 if all(r.is_online for r in results.values()) else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args = build_parser().parse_args(argv)
    interactive = not (args.once or args.check_services)
    setup_logging(args.log_level, args.log_file, quiet=interactive)

    # Load configuration - let it crash if bad
    if args.config:
        config = ConfigManager.load_config(args.config)
    else:
        config = ConfigManager.default_config()
    if args.refresh_rate:
        config.refresh_rate = args.refresh_rate

    console = Console()
    if args.check_services:
        return run_service_check(config, console)
    if args.once:
        return run_once(config, args, console)

    # Imported here so the one-shot modes do not load Textual
    from .display_manager import DisplayManager

    data_manager = DataCollectionManager(config)
    display_manager = DisplayManager(config)
    data_manager.start_collection()

    try:
        display_manager.run_display(data_manager.get_shared_data(), data_manager)
    except KeyboardInterrupt:
        pass
    finally:
        data_manager.stop_collection()
    return 0


if __name__ == "__main__":
    sys.exit(main())
