"""Mint allocation — fresh mint keypair whose derived accounts are all unused.

Each attempt generates a mint, derives the platform's dependent addresses and
probes all of them concurrently. A collision discards the key and retries.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.chain.errors import AllocationError, RpcError
from src.chain.rpc import SolanaRpcClient

MAX_ALLOCATION_ATTEMPTS = 20

AddressDeriver = Callable[[Pubkey], dict[str, Pubkey]]


@dataclass(frozen=True)
class AllocatedAccounts:
    mint: Keypair
    addresses: dict[str, Pubkey]

    @property
    def mint_address(self) -> str:
        return str(self.mint.pubkey())

    def __getitem__(self, name: str) -> Pubkey:
        return self.addresses[name]


async def find_available_accounts(
    rpc: SolanaRpcClient,
    derive: AddressDeriver,
    *,
    max_attempts: int = MAX_ALLOCATION_ATTEMPTS,
    keypair_factory: Callable[[], Keypair] = Keypair,
) -> AllocatedAccounts:
    """Return a mint keypair + derived addresses that are all unoccupied on-chain.

    ``derive`` maps the mint pubkey to the dependent addresses; the mint itself
    is always probed as well. Raises AllocationError after ``max_attempts``
    or on RPC failure.
    """
    for attempt in range(1, max_attempts + 1):
        mint = keypair_factory()
        addresses = derive(mint.pubkey())
        probes = [mint.pubkey(), *addresses.values()]

        try:
            occupied = await asyncio.gather(*(rpc.account_exists(a) for a in probes))
        except RpcError as e:
            raise AllocationError(f"Could not allocate accounts: RPC unavailable ({e})") from e

        if not any(occupied):
            logger.debug(f"[ALLOC] Mint {mint.pubkey()} free after {attempt} attempt(s)")
            return AllocatedAccounts(mint=mint, addresses=addresses)

        taken = [str(a) for a, used in zip(probes, occupied) if used]
        logger.warning(f"[ALLOC] Attempt {attempt}/{max_attempts}: occupied {taken}")

    raise AllocationError(
        f"Could not allocate unused mint and derived accounts after {max_attempts} attempts"
    )
