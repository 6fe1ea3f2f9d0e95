"""Pydantic models for Prometheus Alertmanager webhook payloads."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class Alert(BaseModel):
    """Individual alert, either bare or inside an Alertmanager notification.

    Timestamps and the generator URL are kept as the strings the sender
    supplied; nothing downstream parses them.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    status: str
    labels: Dict[str, str] = Field(default_factory=dict)
    annotations: Dict[str, str] = Field(default_factory=dict)
    starts_at: Optional[str] = Field(default=None, alias="startsAt")
    ends_at: Optional[str] = Field(default=None, alias="endsAt")
    generator_url: Optional[str] = Field(default=None, alias="generatorURL")
    fingerprint: Optional[str] = None

    @field_validator("labels", "annotations", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        """Normalize an explicit null map to an empty one."""
        return {} if v is None else v

    @property
    def alert_name(self) -> str:
        """Value of the ``alertname`` label, empty when absent."""
        return self.labels.get("alertname", "")

    @property
    def severity(self) -> str:
        """Value of the ``severity`` label, empty when absent."""
        return self.labels.get("severity", "")

    def to_wire(self) -> Dict[str, Any]:
        """Serialize using the Alertmanager field names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class AlertGroup(BaseModel):
    """Alertmanager webhook envelope.

    Only ``alerts`` is required; the remaining fields are carried for
    logging context.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    version: str = Field(default="4")
    group_key: str = Field(default="", alias="groupKey")
    truncated_alerts: int = Field(default=0, alias="truncatedAlerts")
    status: str = ""
    receiver: str = ""
    group_labels: Dict[str, str] = Field(default_factory=dict, alias="groupLabels")
    common_labels: Dict[str, str] = Field(default_factory=dict, alias="commonLabels")
    common_annotations: Dict[str, str] = Field(default_factory=dict, alias="commonAnnotations")
    external_url: str = Field(default="", alias="externalURL")
    alerts: List[Alert]

    @field_validator("group_labels", "common_labels", "common_annotations", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return {} if v is None else v


AlertList = TypeAdapter(List[Alert])
