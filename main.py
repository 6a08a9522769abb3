from datetime import timedelta
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.config.database import Database
from shared.config.settings import INSECURE_JWT_SECRET, Settings, get_settings
from shared.errors import register_error_handlers
from shared.observability import setup_observability
from shared.security import CredentialIssuer, limiter
from shared.security.api_key import warn_if_admin_key_missing

# IMPORTANT: import models so they register with Base
from services.order_service import models as order_models  # noqa: F401

from services.admin_service.router import router as admin_router
from services.content_service.router import router as content_router
from services.content_service.storage import ContentStore
from services.order_service.router import router as order_router
from services.payment_service.router import router as payment_router
from services.session_service.router import router as session_router


logger = structlog.get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title="Paid Content Gate", version="1.0.0")

    # --- OBSERVABILITY BOOTSTRAP ---
    setup_observability(
        app,
        "paywall",
        log_level=settings.log_level,
        otlp_endpoint=settings.otlp_endpoint,
        metrics_enabled=settings.metrics_enabled,
    )

    if settings.jwt_secret == INSECURE_JWT_SECRET:
        logger.warning("jwt_secret_default", detail="JWT_SECRET is not set. Set this env var in production!")
    warn_if_admin_key_missing(settings.admin_api_key)

    # --- EXPLICIT DEPENDENCIES ---
    app.state.settings = settings
    app.state.db = Database(settings.sqlalchemy_url, echo=settings.database_echo)
    app.state.issuer = CredentialIssuer(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        ttl=timedelta(hours=settings.token_ttl_hours),
    )
    app.state.content_store = ContentStore(settings.content_dir)

    # --- SECURITY SETUP ---
    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_error_handlers(app)

    @app.get("/health", include_in_schema=False)
    async def health_check():
        return {"service": "paywall", "status": "running"}

    app.include_router(order_router)
    app.include_router(payment_router)
    app.include_router(session_router)
    app.include_router(content_router)
    app.include_router(admin_router)

    @app.on_event("startup")
    async def startup_event():
        await app.state.db.create_all()
        logger.info("backend_started", port=settings.port, site_url=settings.site_url)

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.db.dispose()

    return app


app = create_app()


if __name__ == "__main__":
    run_settings = get_settings()
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=run_settings.port,
        proxy_headers=True,
        forwarded_allow_ips=run_settings.forwarded_allow_ips,
    )
