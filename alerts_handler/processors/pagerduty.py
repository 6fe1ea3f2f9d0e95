"""PagerDuty Events API v2 processor."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field, field_validator

from alerts_handler.metrics import AlertMetrics
from alerts_handler.models import Alert
from alerts_handler.processors.base import HTTPProcessor

DEFAULT_API_ENDPOINT = "https://events.pagerduty.com/v2/enqueue"

SEVERITIES = {"critical", "warning", "info"}


class PagerDutyConfig(BaseModel):
    """Configuration for the ``pagerduty`` processor type."""

    integration_key: str = Field(..., description="Events API v2 routing key")
    api_endpoint: str = Field(default=DEFAULT_API_ENDPOINT, description="Events API URL")
    timeout: float = Field(default=5.0, gt=0, description="HTTP timeout in seconds")

    @field_validator("integration_key")
    @classmethod
    def validate_integration_key(cls, v: str) -> str:
        if not v:
            raise ValueError("pagerduty integration_key is required")
        return v


def map_severity(severity: str) -> str:
    """Map a Prometheus severity label onto a PagerDuty severity."""
    return severity if severity in SEVERITIES else "error"


class PagerDutyProcessor(HTTPProcessor):
    """Triggers and resolves PagerDuty incidents."""

    kind = "pagerduty"
    config_model = PagerDutyConfig
    accepted_statuses = (202,)

    def __init__(
        self,
        name: str,
        metrics: AlertMetrics,
        config: PagerDutyConfig,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(name, metrics, timeout=config.timeout, client=client)
        self.config = config

    def build_event(self, alert: Alert) -> Dict[str, Any]:
        summary = (
            alert.annotations.get("summary")
            or alert.annotations.get("description")
            or f"Alert: {alert.alert_name}"
        )

        custom_details: Dict[str, Any] = dict(alert.labels)
        for key, value in alert.annotations.items():
            custom_details[f"annotation_{key}"] = value

        instance = alert.labels.get("instance", "")
        event: Dict[str, Any] = {
            "routing_key": self.config.integration_key,
            "event_action": "resolve" if alert.status == "resolved" else "trigger",
            "dedup_key": alert.fingerprint or f"{alert.alert_name}-{instance}",
            "payload": {
                "summary": summary,
                "source": instance,
                "severity": map_severity(alert.severity),
                "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
                "custom_details": custom_details,
            },
        }
        if alert.generator_url:
            event["links"] = [{"href": alert.generator_url, "text": "View in Prometheus"}]
        return event

    async def send(self, alert: Alert) -> None:
        await self.request(self.config.api_endpoint, self.build_event(alert))
