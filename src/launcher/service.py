"""Token launch orchestration.

validate → decode creator key → allocate mint → upload metadata → build →
simulate / submit → persist. Every LauncherError is turned into a failed
LaunchResult; nothing is reported as a partial success.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from loguru import logger
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.chain.accounts import MAX_ALLOCATION_ATTEMPTS, AllocatedAccounts, find_available_accounts
from src.chain.errors import ErrorKind, LauncherError, PersistenceError
from src.chain.rpc import LatestBlockhash, SolanaRpcClient
from src.chain.submitter import SignedAttempt, SubmissionResult, TransactionSubmitter
from src.chain.wallet import LAMPORTS_PER_SOL, CreatorWallet
from src.launcher.persistence import TokenRecord, TokenRepository
from src.launcher.validation import (
    LaunchlabCreateRequest,
    PumpfunCreateRequest,
    check_uri_length,
    validate_launchlab_request,
    validate_pumpfun_request,
)
from src.platforms import launchlab, pumpfun
from src.storage.metadata import MetadataUploader

PUMPFUN_STATUS = "bonding"
LAUNCHLAB_STATUS = "active"
FAILED_STATUS = "failed"

BONK_DEFAULT_SOCIALS = {
    "website": "https://bonk.fun",
    "twitter": "https://x.com/bonkfun",
    "telegram": "https://t.me/bonkfun",
}


@dataclass
class LaunchResult:
    ok: bool
    record: TokenRecord | None = None
    error_kind: ErrorKind | None = None
    detail: str | None = None
    slot: int | None = None

    @property
    def signature(self) -> str | None:
        return self.record.signature if self.record else None

    @property
    def mint_address(self) -> str | None:
        return self.record.token_mint if self.record else None

    @classmethod
    def failure(cls, kind: ErrorKind, detail: str, record: TokenRecord | None = None) -> LaunchResult:
        return cls(ok=False, record=record, error_kind=kind, detail=detail)


def to_lamports(sol: float | None) -> int | None:
    return math.floor(sol * LAMPORTS_PER_SOL) if sol is not None else None


class TokenLauncher:
    """Creates tokens on pump.fun and Raydium LaunchLab."""

    def __init__(
        self,
        *,
        rpc: SolanaRpcClient,
        submitter: TransactionSubmitter,
        uploader: MetadataUploader,
        pumpfun_tokens: TokenRepository,
        launchlab_tokens: TokenRepository,
        allocation_attempts: int = MAX_ALLOCATION_ATTEMPTS,
        pumpfun_priority_fee: int = 0,
        launchlab_platform_id: Pubkey = launchlab.BONK_PLATFORM_ID,
        launchlab_compute_unit_limit: int = 1_200_000,
        launchlab_compute_unit_price: int = 100_000,
    ) -> None:
        self._rpc = rpc
        self._submitter = submitter
        self._uploader = uploader
        self._pumpfun_tokens = pumpfun_tokens
        self._launchlab_tokens = launchlab_tokens
        self._allocation_attempts = allocation_attempts
        self._pumpfun_priority_fee = pumpfun_priority_fee
        self._launchlab_platform_id = launchlab_platform_id
        self._cu_limit = launchlab_compute_unit_limit
        self._cu_price = launchlab_compute_unit_price

    # ─── pump.fun ────────────────────────────────────────────────────

    async def create_pumpfun_token(self, req: PumpfunCreateRequest) -> LaunchResult:
        try:
            validate_pumpfun_request(req)
            wallet = CreatorWallet(req.creator_keypair)
            logger.info(f"[LAUNCH] pump.fun {req.symbol} for creator {wallet.pubkey_str}")

            accounts = await self._allocate(pumpfun.derive_accounts)

            if req.uri:
                uri, image_url = req.uri, None
            else:
                uploaded = await self._uploader.upload(
                    name=req.name,
                    symbol=req.symbol,
                    image=req.image or b"",
                    image_filename=req.image_filename or "token.png",
                    creator=wallet.pubkey_str,
                    description=req.description or f"{req.name} token",
                    external_url=req.external_url or "",
                    attributes=[{"trait_type": "symbol", "value": req.symbol}],
                    socials=req.socials,
                )
                uri, image_url = uploaded.uri, uploaded.image_url
            check_uri_length(uri)

            record = TokenRecord(
                token_mint=accounts.mint_address,
                token_name=req.name,
                token_symbol=req.symbol,
                creator_address=wallet.pubkey_str,
                metadata_uri=uri,
                image_uri=image_url,
                description=req.description,
                social_media=req.socials,
                status=PUMPFUN_STATUS,
                decimals=pumpfun.TOKEN_DECIMALS,
                initial_buy_amount=to_lamports(req.buy_amount),
                platform_fields={
                    "bonding_curve_address": str(accounts["bonding_curve"]),
                    "associated_bonding_curve_address": str(accounts["associated_bonding_curve"]),
                    "mayhem_mode": req.mayhem_mode,
                },
            )

            def build(latest: LatestBlockhash):
                return pumpfun.build_create_transaction(
                    creator=wallet.keypair,
                    mint=accounts.mint,
                    name=req.name,
                    symbol=req.symbol,
                    uri=uri,
                    blockhash=latest.blockhash,
                    mayhem_mode=req.mayhem_mode,
                    priority_fee_micro_lamports=self._pumpfun_priority_fee,
                )

            return await self._submit_and_persist(build, record, self._pumpfun_tokens)

        except LauncherError as e:
            logger.warning(f"[LAUNCH] pump.fun {req.symbol!r} failed ({e.kind.value}): {e}")
            return LaunchResult.failure(e.kind, e.message)

    # ─── Raydium LaunchLab ───────────────────────────────────────────

    async def create_launchlab_token(self, req: LaunchlabCreateRequest) -> LaunchResult:
        try:
            validate_launchlab_request(req)
            wallet = CreatorWallet(req.creator_keypair)
            platform_id = (
                Pubkey.from_string(req.platform_id) if req.platform_id else self._launchlab_platform_id
            )
            logger.info(f"[LAUNCH] LaunchLab {req.symbol} for creator {wallet.pubkey_str}")

            accounts = await self._allocate(launchlab.derive_accounts)

            socials = {
                key: value
                for key, value in (("website", req.website), ("twitter", req.twitter), ("telegram", req.telegram))
                if value
            }
            uploaded = await self._uploader.upload(
                name=req.name,
                symbol=req.symbol,
                image=req.image or b"",
                image_filename=req.image_filename or "token.png",
                creator=wallet.pubkey_str,
                description=req.description or "",
                external_url=req.website or BONK_DEFAULT_SOCIALS["website"],
                attributes=[
                    {"trait_type": "Platform", "value": "Bonk Launchpad"},
                    {"trait_type": "Created On", "value": req.created_on or "Bonk Launchpad"},
                    *req.attributes,
                ],
                socials=socials,
            )
            check_uri_length(uploaded.uri)

            pool = launchlab.pool_addresses(accounts.mint.pubkey())
            record = TokenRecord(
                token_mint=accounts.mint_address,
                token_name=req.name,
                token_symbol=req.symbol,
                creator_address=wallet.pubkey_str,
                metadata_uri=uploaded.uri,
                image_uri=uploaded.image_url,
                description=req.description,
                social_media={**BONK_DEFAULT_SOCIALS, **socials},
                status=LAUNCHLAB_STATUS,
                decimals=req.decimals,
                initial_buy_amount=to_lamports(req.buy_amount),
                platform_fields={
                    "platform_id": str(platform_id),
                    "config_id": str(pool.config),
                    "pool_id": str(pool.pool),
                    "vault_a": str(pool.vault_a),
                    "vault_b": str(pool.vault_b),
                },
            )

            def build(latest: LatestBlockhash):
                return launchlab.build_initialize_transaction(
                    creator=wallet.keypair,
                    mint=accounts.mint,
                    name=req.name,
                    symbol=req.symbol,
                    uri=uploaded.uri,
                    blockhash=latest.blockhash,
                    decimals=req.decimals,
                    migrate_type=req.migrate_type,
                    platform_id=platform_id,
                    compute_unit_limit=self._cu_limit,
                    compute_unit_price=self._cu_price,
                )

            return await self._submit_and_persist(build, record, self._launchlab_tokens)

        except LauncherError as e:
            logger.warning(f"[LAUNCH] LaunchLab {req.symbol!r} failed ({e.kind.value}): {e}")
            return LaunchResult.failure(e.kind, e.message)

    # ─── Shared steps ────────────────────────────────────────────────

    async def _allocate(self, derive) -> AllocatedAccounts:
        return await find_available_accounts(
            self._rpc, derive, max_attempts=self._allocation_attempts
        )

    async def _submit_and_persist(
        self, build, record: TokenRecord, repository: TokenRepository
    ) -> LaunchResult:
        created = False

        async def persist(attempt: SignedAttempt) -> None:
            nonlocal created
            record.signature = attempt.signature
            await repository.create(record)
            created = True

        result: SubmissionResult = await self._submitter.submit(build, on_simulated=persist)

        if not result.success:
            if created:
                await self._mark_failed(record, repository)
            return LaunchResult.failure(
                result.error_kind or ErrorKind.BROADCAST_FAILED,
                result.error or "Token creation failed",
                record=record if created else None,
            )

        record.signature = result.signature or record.signature
        try:
            await repository.update_signature(record.token_mint, record.signature)
        except PersistenceError as e:
            logger.error(
                f"[LAUNCH] {record.token_mint} confirmed on-chain ({record.signature}) "
                f"but signature update failed: {e}"
            )
            return LaunchResult.failure(ErrorKind.PERSISTENCE_FAILED, e.message, record=record)

        logger.info(
            f"[LAUNCH] {record.token_symbol} live: mint={record.token_mint} "
            f"sig={record.signature} via {result.path.value if result.path else '?'}"
        )
        return LaunchResult(ok=True, record=record, slot=result.slot)

    async def _mark_failed(self, record: TokenRecord, repository: TokenRepository) -> None:
        try:
            await repository.update_status(record.token_mint, FAILED_STATUS)
        except PersistenceError as e:
            logger.error(f"[LAUNCH] Could not mark {record.token_mint} as failed: {e}")
        record.status = FAILED_STATUS
