"""Command line entrypoint."""

import threading
from typing import Optional

import typer
import uvicorn
from loguru import logger

from alerts_handler.app import create_app, create_metrics_app
from alerts_handler.config import ConfigError, default_config, load_config
from alerts_handler.logs import configure_logging
from alerts_handler.metrics import AlertMetrics

UVICORN_LEVELS = ("critical", "error", "warning", "info", "debug", "trace")

cli = typer.Typer(help="Prometheus Alerts Handler - route Alertmanager alerts to destinations")


def start_metrics_server(metrics: AlertMetrics, host: str, port: int) -> threading.Thread:
    """Serve ``/metrics`` and ``/health`` on a separate port from a daemon thread."""
    server = uvicorn.Server(uvicorn.Config(create_metrics_app(metrics), host=host, port=port, log_level="warning"))
    thread = threading.Thread(target=server.run, name="metrics-server", daemon=True)
    thread.start()
    logger.info(f"Metrics server listening on {host}:{port}")
    return thread


@cli.callback()
def main() -> None:
    """Prometheus Alerts Handler."""


@cli.command()
def serve(
    config_path: str = typer.Option(
        "config.yaml",
        "--config",
        "-c",
        envvar="CONFIG_PATH",
        help="Path to the YAML configuration file",
    ),
    port: Optional[int] = typer.Option(
        None,
        "--port",
        "-p",
        envvar="SERVER_PORT",
        help="Port of the main HTTP server",
    ),
    metrics_port: Optional[int] = typer.Option(
        None,
        "--metrics-port",
        envvar="METRICS_PORT",
        help="Port of the metrics listener",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        envvar="LOG_LEVEL",
        help="Log level (debug, info, warning, error)",
    ),
    host: str = typer.Option("0.0.0.0", "--host", help="Address to bind"),
):
    """Run the alerts handler."""
    load_error: Optional[ConfigError] = None
    try:
        config = load_config(config_path)
    except ConfigError as e:
        load_error = e
        config = default_config()

    config = config.with_overrides(port=port, metrics_port=metrics_port, log_level=log_level)
    log_level_name = configure_logging(config.server.log_level, json_logs=config.server.json_logs)

    if load_error is not None:
        logger.warning(f"Failed to load config file, using defaults: {load_error}")

    logger.bind(
        port=config.server.port,
        metrics_port=config.server.metrics_port,
        log_level=config.server.log_level,
    ).info("Starting Prometheus Alerts Handler")

    metrics = AlertMetrics()
    app = create_app(config, metrics=metrics)
    start_metrics_server(metrics, host, config.server.metrics_port)

    logger.info(f"Ready to receive alerts at http://{host}:{config.server.port}/alerts")
    uvicorn_level = log_level_name.lower()
    if uvicorn_level not in UVICORN_LEVELS:
        uvicorn_level = "info"
    uvicorn.run(app, host=host, port=config.server.port, log_level=uvicorn_level)


if __name__ == "__main__":
    cli()
