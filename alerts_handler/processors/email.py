"""SMTP email processor."""

import asyncio
import smtplib
from email.mime.text import MIMEText
from typing import List

from jinja2 import Environment, TemplateError
from pydantic import BaseModel, ConfigDict, Field, field_validator

from alerts_handler.metrics import AlertMetrics
from alerts_handler.models import Alert
from alerts_handler.processors.base import AlertProcessor, TransmissionError

EMAIL_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
    <style>
        body { font-family: Arial, sans-serif; }
        .alert { padding: 20px; border-radius: 5px; margin: 10px 0; }
        .alert.firing { background-color: #fee; border-left: 4px solid #d00; }
        .alert.resolved { background-color: #efe; border-left: 4px solid #0d0; }
        table { border-collapse: collapse; width: 100%; }
        th, td { padding: 8px; text-align: left; border-bottom: 1px solid #ddd; }
        th { background-color: #f2f2f2; }
    </style>
</head>
<body>
    <div class="alert {{ alert.status }}">
        <h2>Prometheus Alert: {{ alert.labels.get("alertname", "") }}</h2>
        <p><strong>Status:</strong> {{ alert.status }}</p>
        <p><strong>Severity:</strong> {{ alert.labels.get("severity", "") }}</p>
        {% if alert.annotations.get("description") %}
        <p><strong>Description:</strong> {{ alert.annotations["description"] }}</p>
        {% endif %}
        {% if alert.annotations.get("summary") %}
        <p><strong>Summary:</strong> {{ alert.annotations["summary"] }}</p>
        {% endif %}
        <h3>Labels</h3>
        <table>
            <tr><th>Label</th><th>Value</th></tr>
            {% for key, value in alert.labels | dictsort %}
            <tr><td>{{ key }}</td><td>{{ value }}</td></tr>
            {% endfor %}
        </table>
        {% if alert.annotations %}
        <h3>Annotations</h3>
        <table>
            <tr><th>Annotation</th><th>Value</th></tr>
            {% for key, value in alert.annotations | dictsort %}
            <tr><td>{{ key }}</td><td>{{ value }}</td></tr>
            {% endfor %}
        </table>
        {% endif %}
    </div>
</body>
</html>
"""

_template = Environment(autoescape=True).from_string(EMAIL_TEMPLATE)


class EmailConfig(BaseModel):
    """Configuration for the ``email`` processor type."""

    model_config = ConfigDict(populate_by_name=True)

    smtp_host: str = Field(..., min_length=1, description="SMTP server hostname")
    smtp_port: int = Field(default=587, description="SMTP server port")
    smtp_user: str = Field(..., min_length=1, description="SMTP username")
    smtp_password: str = Field(..., min_length=1, description="SMTP password")
    from_address: str = Field(..., alias="from", min_length=1, description="Sender address")
    to: List[str] = Field(..., description="Recipient addresses")
    timeout: float = Field(default=5.0, gt=0, description="SMTP timeout in seconds")

    @field_validator("to")
    @classmethod
    def validate_to(cls, v: List[str]) -> List[str]:
        recipients = [addr for addr in v if addr]
        if not recipients:
            raise ValueError("at least one recipient email is required")
        return recipients


def build_subject(alert: Alert) -> str:
    if alert.alert_name:
        return f"[{alert.severity}] {alert.status} - {alert.alert_name}"
    return f"[{alert.severity}] Prometheus Alert - {alert.status}"


class EmailProcessor(AlertProcessor):
    """Sends an HTML email per alert over SMTP."""

    kind = "email"
    config_model = EmailConfig

    def __init__(self, name: str, metrics: AlertMetrics, config: EmailConfig):
        super().__init__(name, metrics)
        self.config = config

    def build_message(self, alert: Alert) -> MIMEText:
        try:
            body = _template.render(alert=alert)
        except TemplateError as e:
            raise TransmissionError(f"failed to render email body: {e}") from e

        message = MIMEText(body, "html", "utf-8")
        message["From"] = self.config.from_address
        message["To"] = ", ".join(self.config.to)
        message["Subject"] = build_subject(alert)
        return message

    def _deliver(self, message: MIMEText) -> None:
        cfg = self.config
        with smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=cfg.timeout) as smtp:
            smtp.ehlo()
            if smtp.has_extn("starttls"):
                smtp.starttls()
                smtp.ehlo()
            smtp.login(cfg.smtp_user, cfg.smtp_password)
            smtp.send_message(message, from_addr=cfg.from_address, to_addrs=cfg.to)

    async def send(self, alert: Alert) -> None:
        message = self.build_message(alert)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            raise TransmissionError(f"failed to send email: {e}") from e
