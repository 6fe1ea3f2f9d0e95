"""Prometheus metrics for the alerts handler."""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest


class AlertMetrics:
    """Counters and histogram shared by the ingress, the registry and processors.

    Each instance owns its own ``CollectorRegistry`` so that several instances
    (one per test, for example) never collide on metric names.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        self.alerts_received = Counter(
            "prometheus_alerts_handler_alerts_received_total",
            "Total number of alerts received by the handler",
            registry=self.registry,
        )
        self.alerts_processed = Counter(
            "prometheus_alerts_handler_alerts_processed_total",
            "Total number of alerts successfully delivered by a processor",
            ["processor"],
            registry=self.registry,
        )
        self.processing_errors = Counter(
            "prometheus_alerts_handler_alerts_processing_errors_total",
            "Total number of failed alert deliveries",
            ["processor"],
            registry=self.registry,
        )
        self.processing_duration = Histogram(
            "prometheus_alerts_handler_alert_processing_duration_seconds",
            "Time spent dispatching a batch of alerts to all processors",
            registry=self.registry,
        )

    def processed(self, processor: str) -> None:
        """Count one successful delivery.

        Args:
            processor: Processor type name used as the ``processor`` label
        """
        self.alerts_processed.labels(processor=processor).inc()

    def failed(self, processor: str) -> None:
        """Count one failed delivery, fault or timeout.

        Args:
            processor: Processor type name used as the ``processor`` label
        """
        self.processing_errors.labels(processor=processor).inc()

    def received_total(self) -> float:
        """Number of alerts accepted by the ingress so far."""
        return self._sum("prometheus_alerts_handler_alerts_received_total")

    def processed_total(self) -> float:
        """Successful deliveries summed over every processor label."""
        return self._sum("prometheus_alerts_handler_alerts_processed_total")

    def errors_total(self) -> float:
        """Failed deliveries summed over every processor label."""
        return self._sum("prometheus_alerts_handler_alerts_processing_errors_total")

    def _sum(self, sample_name: str) -> float:
        total = 0.0
        for metric in self.registry.collect():
            for sample in metric.samples:
                if sample.name == sample_name:
                    total += sample.value
        return total

    def exposition(self) -> bytes:
        """Render the registry in the Prometheus text format."""
        return generate_latest(self.registry)
