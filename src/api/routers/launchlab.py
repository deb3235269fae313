"""Raydium LaunchLab (bonk.fun) token creation endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from loguru import logger

from config.settings import settings
from src.api.app import limiter
from src.api.dependencies import get_launcher
from src.api.schemas import CreateTokenResponse, ErrorResponse, launch_response, launcher_error_response
from src.chain.errors import ValidationError
from src.launcher.service import TokenLauncher
from src.launcher.validation import LaunchlabCreateRequest, parse_amount, parse_int

router = APIRouter(prefix="/api/launchlab", tags=["launchlab"])


@router.post(
    "/create-token",
    response_model=CreateTokenResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@limiter.limit(settings.create_rate_limit)
async def create_token(
    request: Request,
    name: str = Form(""),
    symbol: str = Form(""),
    creatorKeypair: str = Form(""),
    description: str | None = Form(None),
    website: str | None = Form(None),
    twitter: str | None = Form(None),
    telegram: str | None = Form(None),
    createdOn: str | None = Form(None),
    buyAmount: str | None = Form(None),
    decimals: str | None = Form(None),
    migrateType: str | None = Form(None),
    slippage: str | None = Form(None),
    platformId: str | None = Form(None),
    image: UploadFile | None = File(None),
    launcher: TokenLauncher = Depends(get_launcher),
):
    """Create a LaunchLab token with a constant-product bonding curve."""
    logger.info(f"[API] LaunchLab create-token name={name!r} symbol={symbol!r} image={bool(image)}")
    try:
        req = LaunchlabCreateRequest(
            name=name,
            symbol=symbol,
            creator_keypair=creatorKeypair,
            image=await image.read() if image is not None else None,
            image_filename=image.filename if image is not None else None,
            description=description or None,
            website=website or None,
            twitter=twitter or None,
            telegram=telegram or None,
            created_on=createdOn or None,
            buy_amount=parse_amount(buyAmount),
            decimals=parse_int(decimals, 6, "Decimals must be a number between 0 and 9"),
            migrate_type=migrateType or "amm",
            slippage_bps=parse_int(slippage, 100, "slippage must be an integer number of bps"),
            platform_id=platformId or None,
        )
    except ValidationError as e:
        return launcher_error_response(e)

    result = await launcher.create_launchlab_token(req)
    return launch_response(result)
