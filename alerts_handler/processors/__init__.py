"""Alert processors and the factory that builds them from configuration."""

from typing import Dict, Type

from alerts_handler.config import ProcessorConfig
from alerts_handler.metrics import AlertMetrics
from alerts_handler.processors.base import AlertProcessor, HTTPProcessor, TransmissionError
from alerts_handler.processors.basic import BasicProcessor
from alerts_handler.processors.email import EmailProcessor
from alerts_handler.processors.pagerduty import PagerDutyProcessor
from alerts_handler.processors.slack import SlackProcessor
from alerts_handler.processors.webhook import WebhookProcessor

PROCESSOR_TYPES: Dict[str, Type[AlertProcessor]] = {
    cls.kind: cls
    for cls in (BasicProcessor, SlackProcessor, EmailProcessor, WebhookProcessor, PagerDutyProcessor)
}


def create_processor(config: ProcessorConfig, metrics: AlertMetrics) -> AlertProcessor:
    """Create a processor from its configuration entry.

    Args:
        config: One entry of the ``processors`` list
        metrics: Metrics shared with the rest of the service

    Returns:
        A ready-to-register processor

    Raises:
        ValueError: If the type is unknown or its config block is invalid
    """
    processor_cls = PROCESSOR_TYPES.get(config.type)
    if processor_cls is None:
        raise ValueError(f"unknown processor type: {config.type}")
    return processor_cls.from_config(config.name, config.config, metrics)


__all__ = [
    "AlertProcessor",
    "BasicProcessor",
    "EmailProcessor",
    "HTTPProcessor",
    "PagerDutyProcessor",
    "PROCESSOR_TYPES",
    "SlackProcessor",
    "TransmissionError",
    "WebhookProcessor",
    "create_processor",
]
