from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Index, Integer, JSON, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base

STANDARD_INITIAL_SUPPLY = 1_000_000_000


class _LaunchedTokenColumns:
    """Columns shared by both launch platforms' token tables."""

    id: Mapped[int] = mapped_column(primary_key=True)
    token_mint: Mapped[str] = mapped_column(String(64), unique=True)
    token_name: Mapped[str] = mapped_column(String(32))
    token_symbol: Mapped[str] = mapped_column(String(8))
    creator_address: Mapped[str] = mapped_column(String(64))
    metadata_uri: Mapped[str] = mapped_column(String(200))
    image_uri: Mapped[str | None] = mapped_column(String(500))
    description: Mapped[str | None] = mapped_column(Text)
    social_media: Mapped[dict | None] = mapped_column(JSON)

    initial_market_cap: Mapped[int | None] = mapped_column(BigInteger)
    current_market_cap: Mapped[int | None] = mapped_column(BigInteger)
    initial_supply: Mapped[int] = mapped_column(BigInteger, default=STANDARD_INITIAL_SUPPLY)
    current_supply: Mapped[int] = mapped_column(BigInteger, default=STANDARD_INITIAL_SUPPLY)
    decimals: Mapped[int] = mapped_column(Integer, default=6)

    signature: Mapped[str] = mapped_column(String(128), default="")
    status: Mapped[str] = mapped_column(String(20))
    initial_buy_amount: Mapped[int | None] = mapped_column(BigInteger)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


class PumpfunToken(_LaunchedTokenColumns, Base):
    __tablename__ = "pumpfun_tokens"

    bonding_curve_address: Mapped[str] = mapped_column(String(64))
    associated_bonding_curve_address: Mapped[str] = mapped_column(String(64))
    mayhem_mode: Mapped[bool] = mapped_column(Boolean, default=False)

    __table_args__ = (
        Index("idx_pumpfun_tokens_creator", "creator_address"),
    )


class LaunchlabToken(_LaunchedTokenColumns, Base):
    __tablename__ = "launchlab_tokens"

    platform_id: Mapped[str] = mapped_column(String(64))
    config_id: Mapped[str] = mapped_column(String(64))
    pool_id: Mapped[str] = mapped_column(String(64))
    vault_a: Mapped[str] = mapped_column(String(64))
    vault_b: Mapped[str] = mapped_column(String(64))

    __table_args__ = (
        Index("idx_launchlab_tokens_creator", "creator_address"),
    )
