"""pump.fun create_v2 — PDAs and instruction encoding.

Token-2022 mint on a bonding curve, with the optional mayhem-mode accounts
always passed (the program ignores them when the flag is off).
"""

from __future__ import annotations

import struct
from typing import Final

from solders.compute_budget import set_compute_unit_price  # type: ignore[import-untyped]
from solders.hash import Hash  # type: ignore[import-untyped]
from solders.instruction import AccountMeta, Instruction  # type: ignore[import-untyped]
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.message import MessageV0  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.transaction import VersionedTransaction  # type: ignore[import-untyped]

from src.chain.wallet import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    get_associated_token_address,
    get_metadata_address,
)

PUMP_PROGRAM: Final[Pubkey] = Pubkey.from_string("6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P")
MAYHEM_PROGRAM: Final[Pubkey] = Pubkey.from_string("MAyhSmzXzV1pTf7LsNkrNwkWKTo4ougAJ1PPg47MD4e")

CREATE_V2_DISCRIMINATOR: Final[bytes] = bytes([214, 144, 76, 236, 95, 139, 49, 180])

TOKEN_DECIMALS = 6
INITIAL_SUPPLY = 1_000_000_000


def _pda(seeds: list[bytes], program: Pubkey) -> Pubkey:
    address, _bump = Pubkey.find_program_address(seeds, program)
    return address


MINT_AUTHORITY: Final[Pubkey] = _pda([b"mint-authority"], PUMP_PROGRAM)
GLOBAL: Final[Pubkey] = _pda([b"global"], PUMP_PROGRAM)
EVENT_AUTHORITY: Final[Pubkey] = _pda([b"__event_authority"], PUMP_PROGRAM)
MAYHEM_GLOBAL_PARAMS: Final[Pubkey] = _pda([b"global-params"], MAYHEM_PROGRAM)
MAYHEM_SOL_VAULT: Final[Pubkey] = _pda([b"sol-vault"], MAYHEM_PROGRAM)


def find_bonding_curve(mint: Pubkey) -> Pubkey:
    return _pda([b"bonding-curve", bytes(mint)], PUMP_PROGRAM)


def find_associated_bonding_curve(bonding_curve: Pubkey, mint: Pubkey) -> Pubkey:
    return get_associated_token_address(bonding_curve, mint, TOKEN_2022_PROGRAM_ID)


def find_mayhem_state(mint: Pubkey) -> Pubkey:
    return _pda([b"mayhem-state", bytes(mint)], MAYHEM_PROGRAM)


def find_mayhem_token_vault(mint: Pubkey) -> Pubkey:
    return get_associated_token_address(MAYHEM_SOL_VAULT, mint, TOKEN_2022_PROGRAM_ID)


def derive_accounts(mint: Pubkey) -> dict[str, Pubkey]:
    """Addresses that must be unoccupied before a create can land."""
    bonding_curve = find_bonding_curve(mint)
    return {
        "bonding_curve": bonding_curve,
        "associated_bonding_curve": find_associated_bonding_curve(bonding_curve, mint),
        "metadata": get_metadata_address(mint),
    }


def _encode_string(s: str) -> bytes:
    encoded = s.encode("utf-8")
    return struct.pack("<I", len(encoded)) + encoded


def encode_create_v2_data(
    name: str, symbol: str, uri: str, creator: Pubkey, mayhem_mode: bool = False
) -> bytes:
    return (
        CREATE_V2_DISCRIMINATOR
        + _encode_string(name)
        + _encode_string(symbol)
        + _encode_string(uri)
        + bytes(creator)
        + struct.pack("<?", mayhem_mode)
    )


def build_create_instruction(
    *,
    mint: Pubkey,
    creator: Pubkey,
    name: str,
    symbol: str,
    uri: str,
    mayhem_mode: bool = False,
) -> Instruction:
    """Build the create_v2 instruction (16 accounts, fixed order)."""
    bonding_curve = find_bonding_curve(mint)
    accounts = [
        AccountMeta(pubkey=mint, is_signer=True, is_writable=True),
        AccountMeta(pubkey=MINT_AUTHORITY, is_signer=False, is_writable=False),
        AccountMeta(pubkey=bonding_curve, is_signer=False, is_writable=True),
        AccountMeta(
            pubkey=find_associated_bonding_curve(bonding_curve, mint),
            is_signer=False,
            is_writable=True,
        ),
        AccountMeta(pubkey=GLOBAL, is_signer=False, is_writable=False),
        AccountMeta(pubkey=creator, is_signer=True, is_writable=True),
        AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=TOKEN_2022_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=ASSOCIATED_TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=MAYHEM_PROGRAM, is_signer=False, is_writable=True),
        AccountMeta(pubkey=MAYHEM_GLOBAL_PARAMS, is_signer=False, is_writable=False),
        AccountMeta(pubkey=MAYHEM_SOL_VAULT, is_signer=False, is_writable=True),
        AccountMeta(pubkey=find_mayhem_state(mint), is_signer=False, is_writable=True),
        AccountMeta(pubkey=find_mayhem_token_vault(mint), is_signer=False, is_writable=True),
        AccountMeta(pubkey=EVENT_AUTHORITY, is_signer=False, is_writable=False),
        AccountMeta(pubkey=PUMP_PROGRAM, is_signer=False, is_writable=False),
    ]
    data = encode_create_v2_data(name, symbol, uri, creator, mayhem_mode)
    return Instruction(PUMP_PROGRAM, data, accounts)


def build_create_transaction(
    *,
    creator: Keypair,
    mint: Keypair,
    name: str,
    symbol: str,
    uri: str,
    blockhash: Hash,
    mayhem_mode: bool = False,
    priority_fee_micro_lamports: int = 0,
) -> VersionedTransaction:
    """Compile and sign a create transaction. Creator pays; mint co-signs."""
    instructions: list[Instruction] = []
    if priority_fee_micro_lamports > 0:
        instructions.append(set_compute_unit_price(priority_fee_micro_lamports))
    instructions.append(
        build_create_instruction(
            mint=mint.pubkey(),
            creator=creator.pubkey(),
            name=name,
            symbol=symbol,
            uri=uri,
            mayhem_mode=mayhem_mode,
        )
    )
    msg = MessageV0.try_compile(
        payer=creator.pubkey(),
        instructions=instructions,
        address_lookup_table_accounts=[],
        recent_blockhash=blockhash,
    )
    return VersionedTransaction(msg, [creator, mint])
