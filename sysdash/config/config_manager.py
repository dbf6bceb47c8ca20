"""Configuration loading and management."""
import logging
import os
from typing import Any, Dict, Mapping, Optional

import yaml

from .alert_config import AlertConfig, AlertRule
from .collection_config import CollectionConfig
from .config import Config
from .display_config import DisplayConfig
from .service_config import ServiceSpec

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), "default_config.yaml")

# Environment variable -> alert metric whose threshold it overrides
THRESHOLD_ENV_VARS = {
    "ALERT_CPU_THRESHOLD": "cpu",
    "ALERT_MEMORY_THRESHOLD": "memory",
    "ALERT_DISK_THRESHOLD": "disk",
}
INTERVAL_ENV_VAR = "MONITORING_REFRESH_INTERVAL"


class ConfigManager:
    """Configuration loading and management."""

    @staticmethod
    def load_config(config_path: str, environ: Optional[Mapping[str, str]] = None) -> Config:
        """Load configuration from YAML file - let it crash if bad."""
        with open(config_path, 'r') as f:
            config_data = yaml.safe_load(f) or {}

        config = ConfigManager.from_dict(config_data)
        ConfigManager.apply_env_overrides(config, os.environ if environ is None else environ)
        logger.debug("Loaded configuration from %s", config_path)
        return config

    @staticmethod
    def default_config(environ: Optional[Mapping[str, str]] = None) -> Config:
        """Load the configuration shipped with the package."""
        return ConfigManager.load_config(DEFAULT_CONFIG_PATH, environ)

    @staticmethod
    def from_dict(config_data: Dict[str, Any]) -> Config:
        """Build a Config from parsed YAML data; missing sections use defaults."""
        collection_intervals = CollectionConfig(**(config_data.get('collection_intervals') or {}))

        alerts_data = config_data.get('alerts') or {}
        rules = [AlertRule(**rule) for rule in alerts_data.get('rules') or []]
        alerts = AlertConfig(
            rules=rules,
            thresholds={k: float(v) for k, v in (alerts_data.get('thresholds') or {}).items()}
        )

        display = DisplayConfig(**(config_data.get('display') or {}))

        top_level = {
            key: config_data[key]
            for key in ('refresh_rate', 'max_alerts', 'max_samples', 'summary_window_ms',
                        'trend_window_ms', 'disk_path', 'export_dir')
            if key in config_data
        }

        config = Config(
            collection_intervals=collection_intervals,
            alerts=alerts,
            display=display,
            **top_level
        )

        # Parse services; absent section keeps the built-in defaults
        if 'services' in config_data:
            config.services = [
                ServiceSpec(name=name, **spec)
                for name, spec in (config_data['services'] or {}).items()
            ]

        return config

    @staticmethod
    def apply_env_overrides(config: Config, environ: Mapping[str, str]) -> Config:
        """Apply ALERT_*_THRESHOLD and MONITORING_REFRESH_INTERVAL overrides."""
        for env_var, metric in THRESHOLD_ENV_VARS.items():
            if environ.get(env_var):
                config.alerts.thresholds[metric] = float(environ[env_var])
                logger.info("Threshold for %s overridden by %s", metric, env_var)

        if environ.get(INTERVAL_ENV_VAR):
            interval_ms = int(environ[INTERVAL_ENV_VAR])
            if interval_ms > 0:
                config.collection_intervals.system_metrics = interval_ms / 1000.0

        return config
