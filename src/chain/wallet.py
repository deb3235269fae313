"""Creator keypair loading and associated-token-account derivation.

The secret key arrives with every request, is decoded ONCE and never logged.
Only the public key is shown in logs and __repr__.
"""

from __future__ import annotations

import base58
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.chain.errors import ValidationError

# SPL Token constants
TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
TOKEN_2022_PROGRAM_ID = Pubkey.from_string("TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string(
    "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
)
METADATA_PROGRAM_ID = Pubkey.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")
SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")
RENT_SYSVAR_ID = Pubkey.from_string("SysvarRent111111111111111111111111111111111")
WSOL_MINT = Pubkey.from_string("So11111111111111111111111111111111111111112")

LAMPORTS_PER_SOL = 1_000_000_000
SECRET_KEY_LENGTH = 64


class CreatorWallet:
    """Signing key of the token creator for a single request.

    Security: the keypair is only reachable via .keypair; repr shows the pubkey.
    """

    def __init__(self, secret_key_base58: str) -> None:
        self._keypair = load_keypair(secret_key_base58)

    def __repr__(self) -> str:
        return f"CreatorWallet(pubkey={self.pubkey_str})"

    @property
    def pubkey(self) -> Pubkey:
        return self._keypair.pubkey()

    @property
    def pubkey_str(self) -> str:
        return str(self._keypair.pubkey())

    @property
    def keypair(self) -> Keypair:
        return self._keypair


def load_keypair(secret_key_base58: str) -> Keypair:
    """Decode a base58 64-byte secret key into a Keypair."""
    if not secret_key_base58:
        raise ValidationError("creatorKeypair is required")
    try:
        raw = base58.b58decode(secret_key_base58.strip())
    except ValueError:
        raise ValidationError("Invalid creatorKeypair: not valid base58") from None
    if len(raw) != SECRET_KEY_LENGTH:
        raise ValidationError("Invalid creatorKeypair: must be 64 bytes")
    try:
        return Keypair.from_bytes(raw)
    except ValueError:
        raise ValidationError("Invalid creatorKeypair: public key does not match secret") from None


def get_associated_token_address(
    owner: Pubkey, mint: Pubkey, token_program: Pubkey = TOKEN_PROGRAM_ID
) -> Pubkey:
    """Derive Associated Token Account address for (owner, mint)."""
    ata, _bump = Pubkey.find_program_address(
        [bytes(owner), bytes(token_program), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return ata


def get_metadata_address(mint: Pubkey) -> Pubkey:
    """Derive the Metaplex metadata PDA for a mint."""
    metadata, _bump = Pubkey.find_program_address(
        [b"metadata", bytes(METADATA_PROGRAM_ID), bytes(mint)],
        METADATA_PROGRAM_ID,
    )
    return metadata
