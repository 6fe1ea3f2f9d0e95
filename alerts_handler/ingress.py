"""Parsing and dispatch of inbound alert notifications."""

import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from loguru import logger
from pydantic import ValidationError

from alerts_handler.metrics import AlertMetrics
from alerts_handler.models import Alert, AlertGroup, AlertList
from alerts_handler.registry import ProcessorRegistry


class IngestError(Exception):
    """Request rejected before any alert was dispatched."""

    status_code = 400
    message = "bad request"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class MethodNotAllowed(IngestError):
    status_code = 405
    message = "method not allowed"


class BodyReadError(IngestError):
    message = "could not read body"


class InvalidFormat(IngestError):
    message = "invalid JSON format"


class EmptyAlertList(IngestError):
    message = "no alerts in request"


@dataclass(frozen=True)
class AlertBatch:
    """Alerts extracted from one request, plus the envelope if there was one."""

    alerts: List[Alert]
    group: Optional[AlertGroup] = None


def parse_alerts(body: bytes) -> AlertBatch:
    """Extract alerts from a request body.

    The body is first decoded as an Alertmanager envelope; an envelope is
    only accepted when it carries at least one alert. Otherwise the body
    must be a bare JSON array of alerts.

    Raises:
        InvalidFormat: If the body matches neither shape
        EmptyAlertList: If the body decodes to zero alerts
    """
    try:
        group = AlertGroup.model_validate_json(body)
    except ValidationError:
        group = None

    if group is not None and group.alerts:
        return AlertBatch(alerts=list(group.alerts), group=group)

    try:
        alerts = AlertList.validate_json(body)
    except ValidationError as e:
        logger.debug(f"Request body matches neither envelope nor alert list: {e}")
        raise InvalidFormat() from e

    if not alerts:
        raise EmptyAlertList()
    return AlertBatch(alerts=alerts)


async def ingest(
    method: str,
    read_body: Callable[[], Awaitable[bytes]],
    registry: ProcessorRegistry,
    metrics: AlertMetrics,
) -> Dict[str, Any]:
    """Handle one ``/alerts`` request.

    Args:
        method: HTTP method of the request
        read_body: Coroutine function returning the raw request body
        registry: Registry the alerts are dispatched to
        metrics: Metrics updated for the accepted batch

    Returns:
        The success response body

    Raises:
        IngestError: If the request is rejected
    """
    if method.upper() != "POST":
        raise MethodNotAllowed()

    try:
        body = await read_body()
    except Exception as e:
        logger.error(f"Error reading request body: {e}")
        raise BodyReadError() from e

    batch = parse_alerts(body)
    count = len(batch.alerts)

    log = logger.bind(count=count)
    if batch.group is not None:
        log = log.bind(group_status=batch.group.status, receiver=batch.group.receiver)
        log.info(
            f"Received Alertmanager notification with {count} alert(s) "
            f"(status={batch.group.status}, receiver={batch.group.receiver})"
        )
    else:
        log.info(f"Received {count} alert(s)")

    metrics.alerts_received.inc(count)

    start = time.perf_counter()
    for alert in batch.alerts:
        await registry.dispatch_alert(alert)
    metrics.processing_duration.observe(time.perf_counter() - start)

    return {
        "status": "success",
        "message": "Alerts received and processed",
        "count": count,
    }
