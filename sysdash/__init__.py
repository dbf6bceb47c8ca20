"""sysdash: host metrics aggregation, alerting and service health monitor."""

__version__ = "0.3.0"
