"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from finance_engine.api.middleware import MetricsMiddleware, RequestIDMiddleware
from finance_engine.api.v1 import cycles, projections, scenarios, strategy
from finance_engine.config import settings
from finance_engine.infrastructure.observability.logging import setup_logging

API_VERSION = "0.1.0"
API_PREFIX = "/v1"

ROUTERS = (
    (cycles.router, "cycles"),
    (projections.router, "projections"),
    (strategy.router, "strategy"),
    (scenarios.router, "scenarios"),
)

setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Build the engine service: v1 routers plus health and Prometheus endpoints"""
    app = FastAPI(
        title="Finance Engine",
        description="Deterministic card/loan cycle simulation and projection service",
        version=API_VERSION,
    )

    # Starlette runs the last-added middleware first, so request IDs exist before metrics
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name, "version": API_VERSION}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    for router, tag in ROUTERS:
        app.include_router(router, prefix=API_PREFIX, tags=[tag])

    return app


app = create_app()
