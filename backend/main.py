"""Web Launch Academy API - payment webhook service."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from adapters.auth import create_identity_admin
from adapters.email import create_email_service
from adapters.payments import create_stripe_adapter
from api.middleware.rate_limit import limiter
from api.middleware.request_context import install_request_middleware
from api.routes import api_router
from infrastructure.cache import CacheService
from infrastructure.config import Settings, get_settings
from infrastructure.database import async_session_maker, close_db, init_db
from infrastructure.logging_config import setup_logging
from services.error_alerts import ErrorAlertService
from services.webhooks import WebhookDependencies, create_stripe_webhook_registry

logger = logging.getLogger(__name__)


def init_sentry(settings: Settings) -> None:
    """Start Sentry when SENTRY_DSN is set; called before the app exists so startup errors are captured."""
    if not settings.sentry_dsn:
        return

    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration
    from sentry_sdk.integrations.redis import RedisIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        integrations=[
            FastApiIntegration(transaction_style="url"),
            SqlalchemyIntegration(),
            RedisIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        send_default_pii=False,
    )
    logger.info("Sentry error tracking initialised (env=%s)", settings.environment)


def build_webhook_dependencies(settings: Settings, cache: CacheService) -> WebhookDependencies:
    email_service = create_email_service(settings)
    return WebhookDependencies(
        session_factory=async_session_maker,
        payments=create_stripe_adapter(settings),
        email=email_service,
        identity=create_identity_admin(settings),
        alerts=ErrorAlertService(email_service, settings),
        settings=settings,
        cache=cache,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    setup_logging(
        json_output=settings.is_production and not settings.debug,
        level="DEBUG" if settings.debug else "INFO",
    )
    logger.info("Starting %s v%s (%s)", settings.app_name, settings.app_version, settings.environment)

    if settings.is_development:
        logger.info("Development mode - creating missing tables")
        await init_db()

    cache = CacheService.from_settings(settings)
    deps = build_webhook_dependencies(settings, cache)
    registry = create_stripe_webhook_registry(deps)

    app.state.cache = cache
    app.state.payments = deps.payments
    app.state.webhook_registry = registry
    logger.info(
        "Webhook handlers registered for: %s",
        ", ".join(registry.get_registered_event_types()),
    )

    yield

    logger.info("Shutting down...")
    await cache.close()
    await close_db()


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    settings: Settings = request.app.state.settings
    if settings.is_production:
        # Type and truncated message only; exception text can carry connection strings
        logger.error("Unhandled exception: %s: %s", type(exc).__name__, str(exc)[:200])
    else:
        logger.error("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    init_sentry(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Stripe webhook processing and purchase fulfillment",
        version=settings.app_version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    install_request_middleware(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "Stripe-Signature"],
    )

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "app": settings.app_name,
            "version": settings.app_version,
            "health": "/api/v1/health",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(
        "main:app",
        host=_settings.host,
        port=_settings.port,
        reload=_settings.is_development,
        workers=1 if _settings.is_development else _settings.workers,
    )
