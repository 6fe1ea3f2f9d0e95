"""FastAPI application receiving Prometheus Alertmanager notifications."""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from loguru import logger
from prometheus_client import CONTENT_TYPE_LATEST
from starlette.exceptions import HTTPException as StarletteHTTPException

from alerts_handler.config import HandlerConfig, default_config
from alerts_handler.ingress import IngestError, MethodNotAllowed, ingest
from alerts_handler.metrics import AlertMetrics
from alerts_handler.processors import BasicProcessor
from alerts_handler.registry import ProcessorRegistry

# The ingress performs the method check itself.
ALERTS_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

INDEX_HTML = """\
<!DOCTYPE html>
<html>
<head>
    <title>Prometheus Alerts Handler</title>
    <style>
        body { font-family: Arial, sans-serif; margin: 40px; background-color: #f5f5f5; }
        .container { max-width: 800px; margin: 0 auto; background: white; padding: 30px; border-radius: 8px; }
        h1 { color: #e6522c; }
        .endpoint { background: #f8f8f8; padding: 15px; margin: 10px 0; border-left: 4px solid #e6522c; }
        code { background: #eee; padding: 2px 6px; border-radius: 3px; }
    </style>
</head>
<body>
    <div class="container">
        <h1>Prometheus Alerts Handler</h1>
        <p>Routes Prometheus Alertmanager notifications to your destinations.</p>
        <h2>Endpoints</h2>
        <div class="endpoint"><h3>POST /alerts</h3><p>Receive and process alerts</p></div>
        <div class="endpoint"><h3>GET /health</h3><p>Health check</p></div>
        <div class="endpoint"><h3>GET /metrics</h3><p>Prometheus metrics (metrics port)</p></div>
        <h2>Processors</h2>
        <ul>
            <li><strong>basic</strong> - log alerts</li>
            <li><strong>slack</strong> - Slack incoming webhooks</li>
            <li><strong>email</strong> - SMTP email</li>
            <li><strong>webhook</strong> - generic HTTP webhooks</li>
            <li><strong>pagerduty</strong> - PagerDuty Events API v2</li>
        </ul>
        <p>Processors are configured in <code>config.yaml</code>.</p>
    </div>
</body>
</html>
"""


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "error": message})


def build_registry(config: HandlerConfig, metrics: AlertMetrics) -> ProcessorRegistry:
    """Registry loaded from ``config``, with a log-only fallback when empty."""
    registry = ProcessorRegistry(metrics, timeout=config.server.processor_timeout)
    registry.load_from_config(config)

    if registry.processor_count() == 0:
        logger.warning("No processors configured - alerts will be logged but not sent anywhere")
        registry.register(BasicProcessor("fallback-basic", metrics))

    logger.info(f"Processors loaded: {registry.processor_count()}")
    return registry


def create_app(
    config: Optional[HandlerConfig] = None,
    registry: Optional[ProcessorRegistry] = None,
    metrics: Optional[AlertMetrics] = None,
) -> FastAPI:
    """Create the alerts handler application.

    Args:
        config: Service configuration, defaults to ``default_config()``
        registry: Pre-built registry; built from ``config`` when omitted
        metrics: Metrics collaborator; a fresh one is created when omitted

    Returns:
        Configured FastAPI application
    """
    config = config or default_config()
    metrics = metrics or (registry.metrics if registry else AlertMetrics())
    registry = registry or build_registry(config, metrics)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application startup")
        yield
        logger.info("Application shutdown")
        await app.state.registry.aclose()

    app = FastAPI(title="Prometheus Alerts Handler", version="0.1.0", lifespan=lifespan)
    app.state.config = config
    app.state.registry = registry
    app.state.metrics = metrics

    @app.exception_handler(IngestError)
    async def ingest_error_handler(request: Request, exc: IngestError) -> JSONResponse:
        logger.warning(f"Rejected {request.method} {request.url.path}: {exc.message}")
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == MethodNotAllowed.status_code:
            return error_response(exc.status_code, MethodNotAllowed.message)
        return error_response(exc.status_code, str(exc.detail))

    @app.get("/", response_class=HTMLResponse)
    async def root() -> str:
        """Landing page."""
        return INDEX_HTML

    @app.get("/health")
    async def health() -> Dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.api_route("/alerts", methods=ALERTS_METHODS)
    async def alerts(request: Request) -> Dict[str, Any]:
        """Receive alerts as an Alertmanager envelope or a bare alert array."""
        return await ingest(
            request.method,
            request.body,
            request.app.state.registry,
            request.app.state.metrics,
        )

    return app


def create_metrics_app(metrics: AlertMetrics) -> FastAPI:
    """Create the application served on the metrics port.

    Args:
        metrics: Metrics whose registry is exposed on ``/metrics``

    Returns:
        FastAPI application with ``/metrics`` and ``/health``
    """
    app = FastAPI(title="Prometheus Alerts Handler metrics", docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/metrics")
    async def prometheus_metrics() -> Response:
        """Prometheus scrape endpoint."""
        return Response(content=metrics.exposition(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/health")
    async def health() -> Dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
