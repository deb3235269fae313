"""Shared test fixtures."""

import base64
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import base58
import pytest
import pytest_asyncio
from solders.hash import Hash  # type: ignore[import-untyped]
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.transaction import VersionedTransaction  # type: ignore[import-untyped]
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from config.settings import settings
from src.chain.relay import HeliusSenderClient
from src.chain.rpc import Confirmation, LatestBlockhash, SimulationResult, SolanaRpcClient
from src.models.base import Base


@pytest_asyncio.fixture(scope="function")
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Fresh engine per test with NullPool to avoid loop mismatch.

    Skips when DATABASE_URL is unreachable. Tests clean up their own rows.
    """
    engine = create_async_engine(
        settings.database_url,
        echo=False,
        poolclass=NullPool,
    )
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except (OSError, SQLAlchemyError) as e:
        await engine.dispose()
        pytest.skip(f"database unavailable: {e}")

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def creator() -> Keypair:
    return Keypair()


@pytest.fixture
def creator_secret(creator: Keypair) -> str:
    return base58.b58encode(bytes(creator)).decode()


def make_blockhash(height: int = 1_000) -> LatestBlockhash:
    return LatestBlockhash(blockhash=Hash.new_unique(), last_valid_block_height=height)


@pytest.fixture
def rpc() -> MagicMock:
    """SolanaRpcClient double: all accounts free, simulation ok, confirms at slot 4242."""
    mock = MagicMock(spec=SolanaRpcClient)
    mock.account_exists = AsyncMock(return_value=False)
    mock.get_latest_blockhash = AsyncMock(side_effect=lambda: make_blockhash())
    mock.simulate_transaction = AsyncMock(
        return_value=SimulationResult(err=None, logs=["Program log: ok"], units_consumed=90_000)
    )
    mock.send_transaction = AsyncMock(side_effect=lambda wire, **kw: signature_of(wire))
    mock.confirm_transaction = AsyncMock(
        side_effect=lambda sig, **kw: Confirmation(signature=sig, slot=4242, err=None)
    )
    return mock


@pytest.fixture
def relay() -> MagicMock:
    mock = MagicMock(spec=HeliusSenderClient)
    mock.send_transaction = AsyncMock(side_effect=lambda wire: signature_of(wire))
    return mock


def signature_of(wire: str) -> str:
    """Signature a node would return for a base64 wire transaction."""
    return str(VersionedTransaction.from_bytes(base64.b64decode(wire)).signatures[0])
