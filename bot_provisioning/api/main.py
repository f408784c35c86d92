"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from bot_provisioning.api.middleware import RequestIDMiddleware, MetricsMiddleware
from bot_provisioning.api.v1 import classification, reports
from bot_provisioning.infrastructure.observability.logging import setup_logging
from bot_provisioning.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="BOT Loan Classification Service",
        description="Bank of Tanzania loan classification, provisioning and portfolio reporting",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(classification.router, prefix="/v1", tags=["classification"])
    app.include_router(reports.router, prefix="/v1", tags=["reports"])

    return app


app = create_app()
