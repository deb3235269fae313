"""uvicorn runner for the launcher API, sharing the caller's event loop."""

from __future__ import annotations

import uvicorn
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine

from config.settings import settings
from src.launcher.service import TokenLauncher


def build_api_server(launcher: TokenLauncher, engine: AsyncEngine | None = None) -> uvicorn.Server:
    from src.api.app import create_app

    config = uvicorn.Config(
        app=create_app(launcher=launcher, engine=engine),
        host=settings.host,
        port=settings.port,
        log_level="warning",
        loop="none",
        proxy_headers=True,
        forwarded_allow_ips=settings.forwarded_allow_ips,
    )
    return uvicorn.Server(config)


async def run_api_server(server: uvicorn.Server) -> None:
    """Serve until uvicorn receives SIGINT/SIGTERM."""
    logger.info(f"[API] Token launcher listening on http://{settings.host}:{settings.port}")
    await server.serve()
    logger.info("[API] Server stopped")
