"""Raydium LaunchLab (bonk.fun) — PDAs and `initialize` encoding.

Layout follows the launchpad IDL: MintParams, CurveParams::Constant and
VestingParams, borsh-encoded after the Anchor discriminator.
"""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass
from typing import Final

from solders.compute_budget import (  # type: ignore[import-untyped]
    set_compute_unit_limit,
    set_compute_unit_price,
)
from solders.hash import Hash  # type: ignore[import-untyped]
from solders.instruction import AccountMeta, Instruction  # type: ignore[import-untyped]
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.message import MessageV0  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.transaction import VersionedTransaction  # type: ignore[import-untyped]

from src.chain.wallet import (
    LAMPORTS_PER_SOL,
    METADATA_PROGRAM_ID,
    RENT_SYSVAR_ID,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    WSOL_MINT,
    get_metadata_address,
)

LAUNCHPAD_PROGRAM: Final[Pubkey] = Pubkey.from_string("LanMV9sAd7wArD4vJFi2qDdfnVhFxYSUg6eADduJ3uj")
BONK_PLATFORM_ID: Final[Pubkey] = Pubkey.from_string("FfYek5vEz23cMkWsdJwG2oa6EphsvXSHrGpdALN4g6W1")

INITIALIZE_DISCRIMINATOR: Final[bytes] = hashlib.sha256(b"global:initialize").digest()[:8]

DEFAULT_DECIMALS = 6
DEFAULT_SLIPPAGE_BPS = 100
INITIAL_SUPPLY = 1_000_000_000
TOTAL_BASE_SELL = 793_100_000
TOTAL_QUOTE_FUND_RAISING = 85 * LAMPORTS_PER_SOL

CURVE_CONSTANT = 0
MIGRATE_TYPES: Final[dict[str, int]] = {"amm": 0}


def _pda(seeds: list[bytes], program: Pubkey = LAUNCHPAD_PROGRAM) -> Pubkey:
    address, _bump = Pubkey.find_program_address(seeds, program)
    return address


def find_global_config(quote_mint: Pubkey = WSOL_MINT, curve_type: int = 0, index: int = 0) -> Pubkey:
    return _pda([b"global_config", bytes(quote_mint), struct.pack("<B", curve_type), struct.pack("<H", index)])


AUTHORITY: Final[Pubkey] = _pda([b"vault_auth_seed"])
EVENT_AUTHORITY: Final[Pubkey] = _pda([b"__event_authority"])
GLOBAL_CONFIG: Final[Pubkey] = find_global_config()


def find_pool_state(mint: Pubkey, quote_mint: Pubkey = WSOL_MINT) -> Pubkey:
    return _pda([b"pool", bytes(mint), bytes(quote_mint)])


def find_pool_vault(pool: Pubkey, mint: Pubkey) -> Pubkey:
    return _pda([b"pool_vault", bytes(pool), bytes(mint)])


@dataclass(frozen=True)
class PoolAddresses:
    """Addresses recorded for a LaunchLab launch."""

    config: Pubkey
    pool: Pubkey
    vault_a: Pubkey
    vault_b: Pubkey


def pool_addresses(mint: Pubkey) -> PoolAddresses:
    pool = find_pool_state(mint)
    return PoolAddresses(
        config=GLOBAL_CONFIG,
        pool=pool,
        vault_a=find_pool_vault(pool, mint),
        vault_b=find_pool_vault(pool, WSOL_MINT),
    )


def derive_accounts(mint: Pubkey) -> dict[str, Pubkey]:
    """Addresses that must be unoccupied before initialize can land."""
    pool = find_pool_state(mint)
    return {
        "pool_state": pool,
        "base_vault": find_pool_vault(pool, mint),
        "metadata": get_metadata_address(mint),
    }


def _encode_string(s: str) -> bytes:
    encoded = s.encode("utf-8")
    return struct.pack("<I", len(encoded)) + encoded


def encode_initialize_data(
    *, decimals: int, name: str, symbol: str, uri: str, migrate_type: str = "amm"
) -> bytes:
    scale = 10**decimals
    mint_params = struct.pack("<B", decimals) + _encode_string(name) + _encode_string(symbol) + _encode_string(uri)
    curve_params = struct.pack(
        "<BQQQB",
        CURVE_CONSTANT,
        INITIAL_SUPPLY * scale,
        TOTAL_BASE_SELL * scale,
        TOTAL_QUOTE_FUND_RAISING,
        MIGRATE_TYPES[migrate_type],
    )
    # total_locked_amount, cliff_period, unlock_period
    vesting_params = struct.pack("<QQQ", 0, 0, 0)
    return INITIALIZE_DISCRIMINATOR + mint_params + curve_params + vesting_params


def build_initialize_instruction(
    *,
    mint: Pubkey,
    creator: Pubkey,
    name: str,
    symbol: str,
    uri: str,
    decimals: int = DEFAULT_DECIMALS,
    migrate_type: str = "amm",
    platform_id: Pubkey = BONK_PLATFORM_ID,
) -> Instruction:
    """Build the launchpad initialize instruction (18 accounts, fixed order)."""
    pool = find_pool_state(mint)
    accounts = [
        AccountMeta(pubkey=creator, is_signer=True, is_writable=True),
        AccountMeta(pubkey=creator, is_signer=True, is_writable=False),
        AccountMeta(pubkey=GLOBAL_CONFIG, is_signer=False, is_writable=False),
        AccountMeta(pubkey=platform_id, is_signer=False, is_writable=False),
        AccountMeta(pubkey=AUTHORITY, is_signer=False, is_writable=False),
        AccountMeta(pubkey=pool, is_signer=False, is_writable=True),
        AccountMeta(pubkey=mint, is_signer=True, is_writable=True),
        AccountMeta(pubkey=WSOL_MINT, is_signer=False, is_writable=False),
        AccountMeta(pubkey=find_pool_vault(pool, mint), is_signer=False, is_writable=True),
        AccountMeta(pubkey=find_pool_vault(pool, WSOL_MINT), is_signer=False, is_writable=True),
        AccountMeta(pubkey=get_metadata_address(mint), is_signer=False, is_writable=True),
        AccountMeta(pubkey=TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=METADATA_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=RENT_SYSVAR_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=EVENT_AUTHORITY, is_signer=False, is_writable=False),
        AccountMeta(pubkey=LAUNCHPAD_PROGRAM, is_signer=False, is_writable=False),
    ]
    data = encode_initialize_data(
        decimals=decimals, name=name, symbol=symbol, uri=uri, migrate_type=migrate_type
    )
    return Instruction(LAUNCHPAD_PROGRAM, data, accounts)


def build_initialize_transaction(
    *,
    creator: Keypair,
    mint: Keypair,
    name: str,
    symbol: str,
    uri: str,
    blockhash: Hash,
    decimals: int = DEFAULT_DECIMALS,
    migrate_type: str = "amm",
    platform_id: Pubkey = BONK_PLATFORM_ID,
    compute_unit_limit: int = 1_200_000,
    compute_unit_price: int = 100_000,
) -> VersionedTransaction:
    """Compute budget + initialize, signed by creator (payer) and mint."""
    instructions = [
        set_compute_unit_limit(compute_unit_limit),
        set_compute_unit_price(compute_unit_price),
        build_initialize_instruction(
            mint=mint.pubkey(),
            creator=creator.pubkey(),
            name=name,
            symbol=symbol,
            uri=uri,
            decimals=decimals,
            migrate_type=migrate_type,
            platform_id=platform_id,
        ),
    ]
    msg = MessageV0.try_compile(
        payer=creator.pubkey(),
        instructions=instructions,
        address_lookup_table_accounts=[],
        recent_blockhash=blockhash,
    )
    return VersionedTransaction(msg, [creator, mint])
