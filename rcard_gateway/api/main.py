"""FastAPI application factory"""

from contextlib import asynccontextmanager
from decimal import Decimal

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from rcard_gateway.api.errors import domain_exception_handler, request_validation_handler
from rcard_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from rcard_gateway.api.v1 import auth, cards, fraud, loans, wallet
from rcard_gateway.domain.exceptions import DomainException
from rcard_gateway.domain.policies import PolicyCatalog, PolicyDefaults
from rcard_gateway.domain.rate_limit import RateLimiter
from rcard_gateway.infrastructure.database.session import init_db
from rcard_gateway.infrastructure.observability.logging import setup_logging
from rcard_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.create_tables_on_startup:
        init_db()
    yield


def load_catalog() -> PolicyCatalog:
    """Card catalog from the configured file, or the packaged one"""
    return PolicyCatalog.load(
        settings.policy_catalog_path,
        defaults=PolicyDefaults(
            min_interest_days=settings.default_min_interest_days,
            max_yearly_loans=Decimal(str(settings.default_max_yearly_loans)),
            interest_rate_monthly=Decimal(str(settings.default_interest_rate_monthly)),
        ),
    )


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="RCard Gateway",
        description="Card-backed loans with daily interest and wallet repayment",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Shared across requests
    app.state.policy_catalog = load_catalog()
    app.state.rate_limiter = RateLimiter()

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(auth.router, prefix="/v1", tags=["auth"])
    app.include_router(cards.router, prefix="/v1", tags=["cards"])
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(wallet.router, prefix="/v1", tags=["wallet"])
    app.include_router(fraud.router, prefix="/v1", tags=["fraud"])

    return app


app = create_app()
