"""Configuration dataclasses and YAML loading."""
from .alert_config import DEFAULT_RULES, AlertConfig, AlertRule, apply_thresholds
from .collection_config import CollectionConfig
from .config import Config
from .config_manager import ConfigManager
from .display_config import DisplayConfig
from .service_config import DEFAULT_SERVICES, ServiceSpec

__all__ = [
    "AlertConfig",
    "AlertRule",
    "CollectionConfig",
    "Config",
    "ConfigManager",
    "DEFAULT_RULES",
    "DEFAULT_SERVICES",
    "DisplayConfig",
    "ServiceSpec",
    "apply_thresholds",
]
