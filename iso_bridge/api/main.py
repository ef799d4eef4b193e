"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from iso_bridge.api.middleware import RequestIDMiddleware, MetricsMiddleware
from iso_bridge.api.v1 import convert, validate, assumptions, fields
from iso_bridge.infrastructure.observability.logging import setup_logging
from iso_bridge.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="ISO Bridge",
        description="MT103 and NACHA to ISO 20022 conversion with mapping, validation and risk reports",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(convert.router, prefix="/v1", tags=["conversions"])
    app.include_router(validate.router, prefix="/v1", tags=["validation"])
    app.include_router(assumptions.router, prefix="/v1", tags=["analysis"])
    app.include_router(fields.router, prefix="/v1", tags=["analysis"])

    return app


app = create_app()
