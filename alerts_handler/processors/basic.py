"""Log-only alert processor."""

from loguru import logger

from alerts_handler.models import Alert
from alerts_handler.processors.base import AlertProcessor


class BasicProcessor(AlertProcessor):
    """Writes alerts to the log, choosing the level from the ``severity`` label."""

    kind = "basic"

    async def send(self, alert: Alert) -> None:
        log = logger.bind(processor=self.kind, name=self.name, alertname=alert.alert_name)

        severity = alert.labels.get("severity")
        if severity is None:
            log.warning(f"Alert has no severity label: {alert.to_wire()}")
        elif severity == "critical":
            log.error(f"Critical alert: {alert.to_wire()}")
        elif severity == "warning":
            log.warning(f"Warning alert: {alert.to_wire()}")
        else:
            log.warning(f"Unknown severity {severity!r}: {alert.to_wire()}")
