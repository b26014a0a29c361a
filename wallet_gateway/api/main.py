"""FastAPI application factory"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from wallet_gateway.api.errors import register_exception_handlers
from wallet_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from wallet_gateway.api.routes import admins, auth, transactions, users
from wallet_gateway.infrastructure.database.session import init_models
from wallet_gateway.infrastructure.observability.logging import setup_logging
from wallet_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level, settings.service_name)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_schema:
        await init_models()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Wallet Gateway",
        description="Admin-operated user accounts: registration, deposits, withdrawals, and transfers",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(auth.router, tags=["auth"])
    app.include_router(admins.router, tags=["admins"])
    app.include_router(users.router, tags=["users"])
    app.include_router(transactions.router, tags=["transactions"])

    return app


app = create_app()
