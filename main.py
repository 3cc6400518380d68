import structlog
from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.config.database import build_engine, build_sessionmaker, create_tables
from shared.config.settings import Settings
from shared.errors import register_error_handlers
from shared.observability import setup_observability
from shared.security import limiter

# IMPORTANT: import models so they register with Base
from services.auth_service import models as auth_models  # noqa: F401
from services.catalog_service import models as catalog_models  # noqa: F401
from services.order_service import models as order_models  # noqa: F401
from services.review_service import models as review_models  # noqa: F401

from services.admin_service.router import router as admin_router
from services.auth_service.router import router as auth_router
from services.catalog_service.router import admin_router as catalog_admin_router
from services.catalog_service.router import router as catalog_router
from services.order_service.router import router as order_router
from services.payment_service.gateway import RazorpayGateway
from services.payment_service.router import router as payment_router
from services.review_service.router import router as review_router

logger = structlog.get_logger(__name__)


def create_app(settings: Settings | None = None, payment_gateway: RazorpayGateway | None = None) -> FastAPI:
    """
    Builds the API. Settings are read from the environment once, here, and
    handed to everything else through app.state.
    """
    settings = settings or Settings.from_env()

    app = FastAPI(title="Poster Shop API", version="1.0.0")
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.sessionmaker = build_sessionmaker(app.state.engine)
    app.state.payment_gateway = payment_gateway or RazorpayGateway.from_settings(settings)

    # --- OBSERVABILITY BOOTSTRAP ---
    setup_observability(app, settings)

    # --- SECURITY SETUP ---
    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_error_handlers(app)

    @app.get("/health")
    async def health_check():
        return {"service": settings.service_name, "status": "running"}

    app.include_router(auth_router)
    app.include_router(catalog_router)
    app.include_router(catalog_admin_router)
    app.include_router(payment_router)
    app.include_router(order_router)
    app.include_router(review_router)
    app.include_router(admin_router)

    @app.on_event("startup")
    async def startup_event():
        await create_tables(app.state.engine)
        logger.info("startup_complete", service=settings.service_name)

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.engine.dispose()

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:create_app", factory=True, host="0.0.0.0", port=8000)
