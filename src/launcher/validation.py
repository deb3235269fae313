"""Launch request types and validation.

Everything here is pure: a request that fails validation never reaches the
network. Messages are returned to API callers verbatim.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.chain.errors import ValidationError

MAX_NAME_LENGTH = 32
MAX_SYMBOL_LENGTH = 8
MAX_URI_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 200
MAX_IMAGE_BYTES = 100_000_000
MAX_SAFE_INTEGER = 2**53 - 1
MIN_LAUNCHLAB_BUY_SOL = 0.01
MAX_SLIPPAGE_BPS = 10_000
MIGRATE_TYPES = ("amm",)

_URL_PATTERN = re.compile(r"^https?://")


@dataclass
class PumpfunCreateRequest:
    name: str
    symbol: str
    creator_keypair: str
    uri: str | None = None
    image: bytes | None = None
    image_filename: str | None = None
    description: str | None = None
    external_url: str | None = None
    buy_amount: float | None = None
    mayhem_mode: bool = False
    socials: dict[str, str] | None = None

    def __repr__(self) -> str:
        return f"PumpfunCreateRequest(name={self.name!r}, symbol={self.symbol!r})"


@dataclass
class LaunchlabCreateRequest:
    name: str
    symbol: str
    creator_keypair: str
    image: bytes | None = None
    image_filename: str | None = None
    description: str | None = None
    website: str | None = None
    twitter: str | None = None
    telegram: str | None = None
    created_on: str | None = None
    buy_amount: float | None = None
    decimals: int = 6
    migrate_type: str = "amm"
    slippage_bps: int = 100
    platform_id: str | None = None
    attributes: list[dict[str, str]] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"LaunchlabCreateRequest(name={self.name!r}, symbol={self.symbol!r})"


# ── Form value parsing ──────────────────────────────────────────────────


def parse_amount(value: str | float | None, field_name: str = "buyAmount") -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a positive number") from None


def parse_int(value: str | int | None, default: int, message: str) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(message) from None


def parse_flag(value: str | bool | None) -> bool:
    if isinstance(value, bool):
        return value
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


# ── Shared checks ───────────────────────────────────────────────────────


def _check_name_symbol(name: str, symbol: str) -> None:
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"Name must be {MAX_NAME_LENGTH} characters or less")
    if len(symbol) > MAX_SYMBOL_LENGTH:
        raise ValidationError(f"Symbol must be {MAX_SYMBOL_LENGTH} characters or less")


def _check_url(value: str | None, field_name: str) -> None:
    if value and not _URL_PATTERN.match(value):
        raise ValidationError(f"{field_name} must be a valid URL")


def _check_buy_amount(amount: float | None, *, minimum: float | None = None) -> None:
    if amount is None:
        return
    if not math.isfinite(amount) or amount <= 0:
        raise ValidationError("buyAmount must be a positive number")
    if amount > MAX_SAFE_INTEGER:
        raise ValidationError("buyAmount is too large")
    if minimum is not None and amount < minimum:
        raise ValidationError(f"Buy amount too small: minimum is {minimum} SOL")


def check_uri_length(uri: str) -> None:
    if len(uri) > MAX_URI_LENGTH:
        raise ValidationError(f"URI must be {MAX_URI_LENGTH} characters or less")


# ── Platform validators ─────────────────────────────────────────────────


def validate_pumpfun_request(req: PumpfunCreateRequest) -> None:
    if not req.name or not req.symbol or not req.creator_keypair or (not req.uri and not req.image):
        raise ValidationError(
            "Missing required fields: name, symbol, creatorKeypair, and either uri or image file"
        )
    _check_name_symbol(req.name, req.symbol)
    if req.uri:
        check_uri_length(req.uri)
    if req.image and len(req.image) > MAX_IMAGE_BYTES:
        raise ValidationError("Image file must be less than 100MB")
    _check_url(req.external_url, "external_url")
    for key, value in (req.socials or {}).items():
        _check_url(value, key)
    _check_buy_amount(req.buy_amount)


def validate_launchlab_request(req: LaunchlabCreateRequest) -> None:
    if not req.name or not req.symbol or not req.creator_keypair or not req.image:
        raise ValidationError(
            "Missing required fields: name, symbol, creatorKeypair, and image are required"
        )
    _check_name_symbol(req.name, req.symbol)
    if req.description and len(req.description) > MAX_DESCRIPTION_LENGTH:
        raise ValidationError(f"Description must be {MAX_DESCRIPTION_LENGTH} characters or less")
    if len(req.image) > MAX_IMAGE_BYTES:
        raise ValidationError("Image file must be less than 100MB")

    _check_url(req.created_on, "createdOn")
    _check_url(req.website, "website")
    _check_url(req.twitter, "twitter")
    _check_url(req.telegram, "telegram")

    if not 0 <= req.decimals <= 9:
        raise ValidationError("Decimals must be a number between 0 and 9")
    if req.migrate_type not in MIGRATE_TYPES:
        raise ValidationError("Invalid migrateType")
    if not 0 <= req.slippage_bps <= MAX_SLIPPAGE_BPS:
        raise ValidationError("slippage must be between 0 and 10000 bps")

    if req.platform_id:
        try:
            Pubkey.from_string(req.platform_id)
        except ValueError:
            raise ValidationError("platformId must be a valid Solana public key") from None

    _check_buy_amount(req.buy_amount, minimum=MIN_LAUNCHLAB_BUY_SOL)
