"""pump.fun token creation endpoint (multipart form, optional ``image`` file)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from loguru import logger

from config.settings import settings
from src.api.app import limiter
from src.api.dependencies import get_launcher
from src.api.schemas import CreateTokenResponse, ErrorResponse, launch_response, launcher_error_response
from src.chain.errors import ValidationError
from src.launcher.service import TokenLauncher
from src.launcher.validation import PumpfunCreateRequest, parse_amount, parse_flag

router = APIRouter(prefix="/api/pumpfun", tags=["pumpfun"])


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
    uri: str | None = Form(None),
    description: str | None = Form(None),
    external_url: str | None = Form(None),
    buyAmount: str | None = Form(None),
    mayhemMode: str | None = Form(None),
    twitter: str | None = Form(None),
    telegram: str | None = Form(None),
    website: str | None = Form(None),
    image: UploadFile | None = File(None),
    launcher: TokenLauncher = Depends(get_launcher),
):
    """Create a pump.fun token. The creator key is used for signing only."""
    logger.info(f"[API] pump.fun create-token name={name!r} symbol={symbol!r} image={bool(image)}")
    try:
        buy_amount = parse_amount(buyAmount)
    except ValidationError as e:
        return launcher_error_response(e)

    socials = {k: v for k, v in (("twitter", twitter), ("telegram", telegram), ("website", website)) if v}
    req = PumpfunCreateRequest(
        name=name,
        symbol=symbol,
        creator_keypair=creatorKeypair,
        uri=uri or None,
        image=await image.read() if image is not None else None,
        image_filename=image.filename if image is not None else None,
        description=description or None,
        external_url=external_url or None,
        buy_amount=buy_amount,
        mayhem_mode=parse_flag(mayhemMode),
        socials=socials or None,
    )
    result = await launcher.create_pumpfun_token(req)
    return launch_response(result)
