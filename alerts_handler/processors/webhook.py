"""Generic HTTP webhook processor."""

from typing import Dict, Optional

import httpx
from pydantic import BaseModel, Field, field_validator

from alerts_handler.metrics import AlertMetrics
from alerts_handler.models import Alert
from alerts_handler.processors.base import HTTPProcessor


class WebhookConfig(BaseModel):
    """Configuration for the ``webhook`` processor type."""

    url: str = Field(..., description="Destination URL")
    method: str = Field(default="POST", description="HTTP method")
    headers: Dict[str, str] = Field(default_factory=dict, description="Extra request headers")
    timeout: float = Field(default=5.0, gt=0, description="HTTP timeout in seconds")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("webhook url must start with http:// or https://")
        return v

    @field_validator("method")
    @classmethod
    def upper_method(cls, v: str) -> str:
        return v.upper()


class WebhookProcessor(HTTPProcessor):
    """Forwards the alert JSON unchanged to an arbitrary endpoint."""

    kind = "webhook"
    config_model = WebhookConfig

    def __init__(
        self,
        name: str,
        metrics: AlertMetrics,
        config: WebhookConfig,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(name, metrics, timeout=config.timeout, client=client)
        self.config = config

    async def send(self, alert: Alert) -> None:
        await self.request(
            self.config.url,
            alert.to_wire(),
            method=self.config.method,
            headers=self.config.headers,
        )
