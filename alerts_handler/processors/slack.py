"""Slack incoming-webhook processor."""

import time
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field, field_validator

from alerts_handler.metrics import AlertMetrics
from alerts_handler.models import Alert
from alerts_handler.processors.base import HTTPProcessor

FOOTER_ICON = "https://prometheus.io/assets/favicons/android-chrome-192x192.png"


class SlackConfig(BaseModel):
    """Configuration for the ``slack`` processor type."""

    webhook_url: str = Field(..., description="Slack incoming webhook URL")
    channel: str = Field(default="", description="Channel override")
    username: str = Field(default="Prometheus Alerts", description="Bot display name")
    icon_emoji: str = Field(default=":fire:", description="Bot icon")
    timeout: float = Field(default=5.0, gt=0, description="HTTP timeout in seconds")

    @field_validator("webhook_url")
    @classmethod
    def validate_webhook_url(cls, v: str) -> str:
        if not v:
            raise ValueError("slack webhook_url is required")
        return v


def status_color(status: str, severity: str) -> str:
    """Attachment color for an alert."""
    if status == "resolved":
        return "good"
    if severity == "critical":
        return "danger"
    if severity == "warning":
        return "warning"
    return "#439FE0"


class SlackProcessor(HTTPProcessor):
    """Posts alerts to Slack as a single message attachment."""

    kind = "slack"
    config_model = SlackConfig
    accepted_statuses = (200,)

    def __init__(
        self,
        name: str,
        metrics: AlertMetrics,
        config: SlackConfig,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(name, metrics, timeout=config.timeout, client=client)
        self.config = config

    def build_message(self, alert: Alert) -> Dict[str, Any]:
        title = f"Alert: {alert.alert_name}" if alert.alert_name else "Prometheus Alert"

        fields: List[Dict[str, Any]] = [{"title": "Status", "value": alert.status, "short": True}]
        if "severity" in alert.labels:
            fields.append({"title": "Severity", "value": alert.labels["severity"], "short": True})
        if "instance" in alert.labels:
            fields.append({"title": "Instance", "value": alert.labels["instance"], "short": True})

        attachment = {
            "color": status_color(alert.status, alert.severity),
            "title": title,
            "text": alert.annotations.get("description") or alert.annotations.get("summary", ""),
            "fields": fields,
            "footer": "Prometheus Alerts Handler",
            "footer_icon": FOOTER_ICON,
            "ts": int(time.time()),
        }

        message: Dict[str, Any] = {
            "username": self.config.username,
            "icon_emoji": self.config.icon_emoji,
            "attachments": [attachment],
        }
        if self.config.channel:
            message["channel"] = self.config.channel
        return message

    async def send(self, alert: Alert) -> None:
        await self.request(self.config.webhook_url, self.build_message(alert))
