"""Prometheus Alerts Handler: route Alertmanager notifications to destinations."""

__version__ = "0.1.0"
