"""Base classes for alert processors."""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Iterable, Optional, Type

import httpx
from loguru import logger
from pydantic import BaseModel

from alerts_handler.metrics import AlertMetrics
from alerts_handler.models import Alert


class TransmissionError(Exception):
    """Delivery to a destination failed (network, status code, encoding)."""


class AlertProcessor(ABC):
    """A single configured alert destination.

    ``process`` never raises for delivery failures: they are logged and
    counted here. Anything else that escapes is treated as a fault by the
    registry. Instances hold only construction-time configuration, so one
    instance may process many alerts concurrently.
    """

    kind: ClassVar[str] = "base"
    config_model: ClassVar[Optional[Type[BaseModel]]] = None

    def __init__(self, name: str, metrics: AlertMetrics):
        self.name = name or self.kind
        self.metrics = metrics

    @classmethod
    def from_config(cls, name: str, config: Dict[str, Any], metrics: AlertMetrics) -> "AlertProcessor":
        """Build a processor from the free-form ``config`` block of its entry.

        Raises:
            ValueError: If the block fails validation
        """
        if cls.config_model is None:
            return cls(name, metrics)
        return cls(name, metrics, cls.config_model(**(config or {})))

    async def process(self, alert: Alert) -> None:
        """Deliver one alert and record the outcome."""
        log = logger.bind(processor=self.kind, name=self.name, status=alert.status)
        log.info(f"Processing alert for {self.kind}")

        try:
            await self.send(alert)
        except TransmissionError as e:
            log.error(f"Failed to send alert to {self.kind} ({self.name}): {e}")
            self.metrics.failed(self.kind)
            return

        self.metrics.processed(self.kind)
        log.info(f"Alert sent to {self.kind} successfully")

    @abstractmethod
    async def send(self, alert: Alert) -> None:
        """Transmit the alert.

        Raises:
            TransmissionError: If the destination did not accept the alert
        """

    async def aclose(self) -> None:
        """Release network resources held by the processor."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class HTTPProcessor(AlertProcessor):
    """Processor that delivers alerts with an HTTP request."""

    accepted_statuses: ClassVar[Iterable[int]] = range(200, 300)

    def __init__(
        self,
        name: str,
        metrics: AlertMetrics,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(name, metrics)
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def request(
        self,
        url: str,
        payload: Any,
        method: str = "POST",
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Send ``payload`` as JSON and check the response status.

        Raises:
            TransmissionError: On encode errors, transport errors or an
                unaccepted status code
        """
        try:
            response = await self.client.request(method, url, json=payload, headers=headers)
        except (TypeError, ValueError) as e:
            raise TransmissionError(f"failed to encode payload: {e}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransmissionError(f"failed to send request to {self.kind}: {e}") from e

        if response.status_code not in self.accepted_statuses:
            raise TransmissionError(f"{self.kind} returned unexpected status: {response.status_code}")
        return response

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()
