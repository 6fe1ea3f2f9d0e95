"""Configuration loading for the alerts handler."""

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator

PROCESSOR_KINDS = ("basic", "slack", "email", "webhook", "pagerduty")


class ConfigError(Exception):
    """The configuration file could not be read or is invalid."""


class ServerConfig(BaseModel):
    """HTTP server and runtime settings."""

    port: int = Field(default=8080, description="Port of the main HTTP server")
    metrics_port: int = Field(default=2112, description="Port of the metrics listener")
    log_level: str = Field(default="info", description="Log level name")
    json_logs: bool = Field(default=False, description="Emit logs as JSON lines")
    processor_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds a single processor may spend on one alert",
    )


class ProcessorConfig(BaseModel):
    """One configured alert destination."""

    type: str = Field(..., description=f"One of {', '.join(PROCESSOR_KINDS)}")
    enabled: bool = Field(default=False, description="Whether the processor is registered")
    name: str = Field(default="", description="Name used in logs")
    config: Dict[str, Any] = Field(default_factory=dict, description="Type-specific settings")

    @field_validator("config", mode="before")
    @classmethod
    def null_to_empty(cls, v: Any) -> Any:
        return {} if v is None else v


class HandlerConfig(BaseModel):
    """Top-level configuration document."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    processors: List[ProcessorConfig] = Field(default_factory=list)

    @field_validator("server", mode="before")
    @classmethod
    def null_server(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("processors", mode="before")
    @classmethod
    def null_processors(cls, v: Any) -> Any:
        return [] if v is None else v

    def with_overrides(
        self,
        port: Optional[int] = None,
        metrics_port: Optional[int] = None,
        log_level: Optional[str] = None,
    ) -> "HandlerConfig":
        """Return a copy with the given server settings replaced."""
        updates: Dict[str, Any] = {}
        if port is not None:
            updates["port"] = port
        if metrics_port is not None:
            updates["metrics_port"] = metrics_port
        if log_level:
            updates["log_level"] = log_level
        if not updates:
            return self
        return self.model_copy(update={"server": self.server.model_copy(update=updates)})


def load_config(path: str) -> HandlerConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file

    Returns:
        Validated configuration

    Raises:
        ConfigError: If the file is missing, is not YAML or fails validation
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    logger.info(f"Loading configuration from {path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read config file: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("Invalid config structure: expected a mapping at the top level")

    try:
        return HandlerConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Failed to parse config file: {e}") from e


def default_config() -> HandlerConfig:
    """Configuration used when no config file can be loaded."""
    return HandlerConfig(
        processors=[ProcessorConfig(type="basic", enabled=True, name="default-basic")],
    )
