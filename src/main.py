"""Entry point for the token launcher API."""

import asyncio
import sys

from loguru import logger
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from config.settings import Settings, settings
from src.api.server import build_api_server, run_api_server
from src.chain.relay import HeliusSenderClient
from src.chain.rpc import SolanaRpcClient
from src.chain.submitter import TransactionSubmitter
from src.db.database import create_engine, create_session_factory
from src.launcher.persistence import TokenRepository
from src.launcher.service import TokenLauncher
from src.models.token import LaunchlabToken, PumpfunToken
from src.storage.filebase import FilebaseBackend
from src.storage.ipfs import IpfsBackend
from src.storage.metadata import MetadataUploader
from src.storage.pinata import PinataBackend
from src.utils.logger import setup_logger


def build_storage_backend(cfg: Settings) -> IpfsBackend:
    if cfg.storage_backend == "pinata":
        return PinataBackend(jwt=cfg.pinata_jwt, gateway=cfg.pinata_gateway, timeout=cfg.storage_timeout_sec)
    return FilebaseBackend(
        api_key=cfg.filebase_api_key,
        rpc_url=cfg.filebase_rpc_url,
        gateway=cfg.filebase_gateway,
        timeout=cfg.storage_timeout_sec,
    )


async def main() -> None:
    setup_logger(
        level=settings.log_level,
        json_logs=settings.log_json,
        log_dir=settings.log_dir,
        redact=(settings.helius_api_key, settings.filebase_api_key, settings.pinata_jwt),
    )

    missing = settings.missing_secrets()
    if missing:
        logger.error(f"Missing required configuration: {', '.join(missing)}")
        sys.exit(1)

    logger.info("Starting token launcher...")

    rpc = SolanaRpcClient(
        settings.solana_rpc_url,
        commitment=settings.rpc_commitment,
        timeout=settings.rpc_timeout_sec,
        poll_interval=settings.confirm_poll_interval_sec,
        confirm_timeout=settings.confirm_timeout_sec,
    )
    relay = None
    if settings.helius_api_key:
        relay = HeliusSenderClient(
            endpoint=settings.helius_sender_url,
            api_key=settings.helius_api_key,
            timeout=settings.relay_timeout_sec,
        )
    else:
        logger.warning("HELIUS_API_KEY not set, submitting via direct RPC only")

    engine = create_engine()
    session_factory = create_session_factory(engine)
    uploader = MetadataUploader(build_storage_backend(settings))

    launcher = TokenLauncher(
        rpc=rpc,
        submitter=TransactionSubmitter(
            rpc=rpc, relay=relay, max_direct_attempts=settings.direct_max_attempts
        ),
        uploader=uploader,
        pumpfun_tokens=TokenRepository(session_factory, PumpfunToken),
        launchlab_tokens=TokenRepository(session_factory, LaunchlabToken),
        allocation_attempts=settings.account_probe_attempts,
        pumpfun_priority_fee=settings.pumpfun_priority_fee_micro_lamports,
        launchlab_platform_id=Pubkey.from_string(settings.launchlab_platform_id),
        launchlab_compute_unit_limit=settings.launchlab_compute_unit_limit,
        launchlab_compute_unit_price=settings.launchlab_compute_unit_price,
    )

    server = build_api_server(launcher, engine)
    try:
        await run_api_server(server)
    finally:
        await rpc.close()
        if relay is not None:
            await relay.close()
        await uploader.close()
        await engine.dispose()
        logger.info("Shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
