"""Health check — no auth required."""

from __future__ import annotations

import time

from fastapi import APIRouter, Depends
from loguru import logger
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from src.api.dependencies import get_engine

router = APIRouter(prefix="/api/v1", tags=["health"])

_STARTED = time.monotonic()


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_sec: int
    db_ok: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(engine: AsyncEngine | None = Depends(get_engine)) -> HealthResponse:
    """Check DB connectivity."""
    from src.api.app import VERSION

    db_ok = False
    if engine is not None:
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            db_ok = True
        except (SQLAlchemyError, OSError) as e:
            logger.warning(f"[DB] Health probe failed: {e}")

    return HealthResponse(
        status="ok" if db_ok else "degraded",
        version=VERSION,
        uptime_sec=int(time.monotonic() - _STARTED),
        db_ok=db_ok,
    )
