"""FastAPI dependency injection — launcher and DB engine from app state."""

from __future__ import annotations

from fastapi import HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncEngine

from src.launcher.service import TokenLauncher


def get_launcher(request: Request) -> TokenLauncher:
    """Return the launcher constructed at startup."""
    launcher = getattr(request.app.state, "launcher", None)
    if launcher is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Launcher not initialised",
        )
    return launcher


def get_engine(request: Request) -> AsyncEngine | None:
    return getattr(request.app.state, "engine", None)
