"""Aggregation, alerting and health-check core."""
