"""Fake processors used across the test suite."""

import asyncio
from typing import List

from alerts_handler.metrics import AlertMetrics
from alerts_handler.models import Alert
from alerts_handler.processors import AlertProcessor, TransmissionError


class RecordingProcessor(AlertProcessor):
    """Processor that remembers every alert it was given."""

    kind = "recording"

    def __init__(self, name: str, metrics: AlertMetrics, delay: float = 0.0):
        super().__init__(name, metrics)
        self.delay = delay
        self.alerts: List[Alert] = []

    async def send(self, alert: Alert) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        self.alerts.append(alert)


class FailingProcessor(AlertProcessor):
    """Processor whose destination always rejects the alert."""

    kind = "failing"

    async def send(self, alert: Alert) -> None:
        raise TransmissionError("destination returned 500")


class ExplodingProcessor(AlertProcessor):
    """Processor with a bug: raises something other than TransmissionError."""

    kind = "exploding"

    async def send(self, alert: Alert) -> None:
        raise RuntimeError("boom")

