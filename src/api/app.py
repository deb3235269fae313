"""FastAPI application factory for the token launcher API."""

from __future__ import annotations

from fastapi import FastAPI
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.middleware.cors import CORSMiddleware

from config.settings import settings
from src.api.middleware import SecurityHeadersMiddleware
from src.launcher.service import TokenLauncher

# Rate limiter (shared instance)
limiter = Limiter(key_func=get_remote_address)

VERSION = "0.1.0"


def create_app(
    launcher: TokenLauncher | None = None,
    engine: AsyncEngine | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application."""
    app = FastAPI(
        title="Token Launcher API",
        version=VERSION,
        docs_url="/api/docs" if settings.api_debug else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if settings.api_debug else None,
    )
    app.state.launcher = launcher
    app.state.engine = engine

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Security headers
    app.add_middleware(SecurityHeadersMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Import and include routers
    from src.api.routers.health import router as health_router
    from src.api.routers.launchlab import router as launchlab_router
    from src.api.routers.pumpfun import router as pumpfun_router

    app.include_router(health_router)
    app.include_router(pumpfun_router)
    app.include_router(launchlab_router)

    return app
