"""Registry that fans each alert out to every configured processor."""

import asyncio
import threading
from typing import List

from loguru import logger

from alerts_handler.config import HandlerConfig
from alerts_handler.metrics import AlertMetrics
from alerts_handler.models import Alert
from alerts_handler.processors import AlertProcessor, create_processor

DEFAULT_PROCESSOR_TIMEOUT = 5.0


class ProcessorRegistry:
    """Registry for the active alert processors.

    Registration may happen from any thread at any time. Each dispatch works
    on the set of processors registered when it starts.
    """

    def __init__(self, metrics: AlertMetrics, timeout: float = DEFAULT_PROCESSOR_TIMEOUT):
        """Initialize an empty registry.

        Args:
            metrics: Metrics used to count processor faults and timeouts
            timeout: Seconds one processor may spend on one alert
        """
        self.metrics = metrics
        self.timeout = timeout
        self._processors: List[AlertProcessor] = []
        self._lock = threading.Lock()

    def register(self, processor: AlertProcessor) -> None:
        """Add a processor to the registry."""
        with self._lock:
            self._processors.append(processor)

    def processors(self) -> List[AlertProcessor]:
        """Snapshot of the registered processors."""
        with self._lock:
            return list(self._processors)

    def processor_count(self) -> int:
        """Number of registered processors."""
        with self._lock:
            return len(self._processors)

    async def dispatch_alert(self, alert: Alert) -> None:
        """Send an alert to all registered processors concurrently.

        Returns once every processor has finished, failed or timed out.
        Failures never propagate to the caller.
        """
        processors = self.processors()
        if not processors:
            logger.warning("No processors registered, alert will not be processed")
            return

        await asyncio.gather(*(self._run(processor, alert) for processor in processors))

    async def _run(self, processor: AlertProcessor, alert: Alert) -> None:
        log = logger.bind(processor=processor.kind, name=processor.name, alertname=alert.alert_name)
        try:
            await asyncio.wait_for(processor.process(alert), timeout=self.timeout)
        except asyncio.TimeoutError:
            log.error(f"Processor {processor.name} timed out after {self.timeout}s")
            self.metrics.failed(processor.kind)
        except Exception:
            log.exception(f"Processor {processor.name} raised an unexpected error")
            self.metrics.failed(processor.kind)

    def load_from_config(self, config: HandlerConfig) -> None:
        """Create and register every enabled processor in ``config``.

        Entries that fail to build are logged and skipped.
        """
        for processor_cfg in config.processors:
            log = logger.bind(name=processor_cfg.name, type=processor_cfg.type)

            if not processor_cfg.enabled:
                log.info(f"Processor {processor_cfg.name} disabled, skipping")
                continue

            try:
                processor = create_processor(processor_cfg, self.metrics)
            except ValueError as e:
                log.error(f"Failed to create processor {processor_cfg.name}: {e}")
                continue

            self.register(processor)
            log.info(f"Registered processor {processor_cfg.name} ({processor_cfg.type})")

    async def aclose(self) -> None:
        """Close network resources held by the processors."""
        for processor in self.processors():
            try:
                await processor.aclose()
            except Exception as e:
                logger.warning(f"Failed to close processor {processor.name}: {e}")
