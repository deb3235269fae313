"""Token record persistence — keyed by mint, one repository per platform table."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from loguru import logger
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.chain.errors import PersistenceError
from src.models.token import STANDARD_INITIAL_SUPPLY, LaunchlabToken, PumpfunToken

TokenModel = type[PumpfunToken] | type[LaunchlabToken]


@dataclass
class TokenRecord:
    """Row to be written for a launched token.

    ``platform_fields`` holds the table-specific columns (curve / pool addresses).
    """

    token_mint: str
    token_name: str
    token_symbol: str
    creator_address: str
    metadata_uri: str
    status: str
    image_uri: str | None = None
    description: str | None = None
    social_media: dict[str, str] | None = None
    signature: str = ""
    decimals: int = 6
    initial_buy_amount: int | None = None
    initial_supply: int = STANDARD_INITIAL_SUPPLY
    current_supply: int = STANDARD_INITIAL_SUPPLY
    platform_fields: dict[str, Any] = field(default_factory=dict)

    def columns(self) -> dict[str, Any]:
        values = asdict(self)
        extra = values.pop("platform_fields")
        return {**values, **extra}


class TokenRepository:
    """Insert and keyed updates for one token table. Rows are never deleted."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], model: TokenModel) -> None:
        self._session_factory = session_factory
        self._model = model

    @property
    def table(self) -> str:
        return self._model.__tablename__

    async def create(self, record: TokenRecord) -> None:
        try:
            async with self._session_factory() as session:
                session.add(self._model(**record.columns()))
                await session.commit()
        except IntegrityError as e:
            raise PersistenceError(f"Token {record.token_mint} already recorded in {self.table}") from e
        except (SQLAlchemyError, OSError) as e:
            raise PersistenceError(f"Failed to store token data: {e}") from e
        logger.info(f"[DB] Stored {self.table} row for mint {record.token_mint}")

    async def update_signature(self, token_mint: str, signature: str) -> None:
        await self._update(token_mint, signature=signature)
        logger.info(f"[DB] Creation signature for {token_mint}: {signature}")

    async def update_status(self, token_mint: str, status: str) -> None:
        await self._update(token_mint, status=status)
        logger.info(f"[DB] Status for {token_mint}: {status}")

    async def _update(self, token_mint: str, **values: Any) -> None:
        stmt = update(self._model).where(self._model.token_mint == token_mint).values(**values)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            raise PersistenceError(f"Failed to update token {token_mint}: {e}") from e
        if result.rowcount == 0:
            raise PersistenceError(f"No {self.table} row for mint {token_mint}")

