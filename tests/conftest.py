"""Shared fixtures for alerts handler tests."""

from typing import Any, Dict

import pytest

from alerts_handler.metrics import AlertMetrics
from alerts_handler.models import Alert
from alerts_handler.registry import ProcessorRegistry


@pytest.fixture
def metrics() -> AlertMetrics:
    return AlertMetrics()


@pytest.fixture
def registry(metrics: AlertMetrics) -> ProcessorRegistry:
    return ProcessorRegistry(metrics, timeout=1.0)


@pytest.fixture
def firing_alert_data() -> Dict[str, Any]:
    return {
        "status": "firing",
        "labels": {
            "alertname": "HighCPUUsage",
            "severity": "critical",
            "instance": "node-1:9100",
        },
        "annotations": {
            "summary": "CPU usage above 90%",
            "description": "node-1 has been above 90% CPU for 5 minutes",
        },
        "startsAt": "2024-01-01T00:00:00Z",
        "endsAt": "0001-01-01T00:00:00Z",
        "generatorURL": "http://prometheus:9090/graph?g0.expr=cpu",
        "fingerprint": "a1b2c3d4",
    }


@pytest.fixture
def resolved_alert_data() -> Dict[str, Any]:
    return {
        "status": "resolved",
        "labels": {"alertname": "DiskFull", "severity": "warning", "instance": "node-2:9100"},
        "annotations": {"summary": "Disk usage back to normal"},
    }


@pytest.fixture
def firing_alert(firing_alert_data: Dict[str, Any]) -> Alert:
    return Alert.model_validate(firing_alert_data)


@pytest.fixture
def resolved_alert(resolved_alert_data: Dict[str, Any]) -> Alert:
    return Alert.model_validate(resolved_alert_data)


@pytest.fixture
def alert_group_data(firing_alert_data: Dict[str, Any], resolved_alert_data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "version": "4",
        "groupKey": '{}:{alertname="HighCPUUsage"}',
        "truncatedAlerts": 0,
        "status": "firing",
        "receiver": "alerts-handler",
        "groupLabels": {"alertname": "HighCPUUsage"},
        "commonLabels": {"alertname": "HighCPUUsage"},
        "commonAnnotations": {},
        "externalURL": "http://alertmanager:9093",
        "alerts": [firing_alert_data, resolved_alert_data],
    }
