import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.alerts import router as alerts_router
from app.api.auth import router as auth_router
from app.api.employees import router as employees_router
from app.api.health import router as health_router
from app.api.root import router as root_router
from app.core.config import Settings, settings as default_settings
from app.core.errors import StoreUnavailableError, register_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import BodySizeLimitMiddleware, SecurityHeadersMiddleware
from app.core.rate_limit import FixedWindowRateLimiter
from app.store import RecordStore, build_store

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, store: RecordStore | None = None) -> FastAPI:
    """
    Build the API. Pass `store` to use an already-open record store (tests, scripts);
    otherwise the one named by settings is opened at startup.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.store is None:
            try:
                app.state.store = build_store(settings)
            except StoreUnavailableError as exc:
                # keep serving; store-backed endpoints answer 503 until restart
                logger.error("Record store unavailable, continuing without it: %s", exc)
        yield
        if app.state.store is not None:
            app.state.store.close()

    app = FastAPI(title="Gas Safety Alert API", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.auth_limiter = FixedWindowRateLimiter(settings.RATE_LIMIT_MAX, settings.RATE_LIMIT_WINDOW_SECONDS)

    # Starlette runs the last-added middleware first: security headers wrap everything
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.MAX_BODY_BYTES)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    register_exception_handlers(app)

    app.include_router(root_router)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(employees_router)
    app.include_router(alerts_router)
    return app


configure_logging(default_settings.LOG_LEVEL)
app = create_app()


def run() -> None:
    logger.info("Server starting on http://%s:%s", default_settings.HOST, default_settings.PORT)
    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT, log_level=default_settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
