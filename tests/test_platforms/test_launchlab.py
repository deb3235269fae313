"""Tests for Raydium LaunchLab initialize encoding."""

import hashlib
import struct

from solders.hash import Hash  # type: ignore[import-untyped]
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.chain.wallet import LAMPORTS_PER_SOL, WSOL_MINT, get_metadata_address
from src.platforms import launchlab

URI = "https://ipfs.filebase.io/ipfs/QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"


class TestInitializeData:
    def test_layout(self) -> None:
        data = launchlab.encode_initialize_data(decimals=6, name="Bonk Jr", symbol="BJR", uri=URI)

        assert data[:8] == hashlib.sha256(b"global:initialize").digest()[:8]
        assert data[8] == 6
        offset = 9
        for expected in ("Bonk Jr", "BJR", URI):
            (length,) = struct.unpack_from("<I", data, offset)
            assert data[offset + 4:offset + 4 + length].decode() == expected
            offset += 4 + length

        variant, supply, base_sell, quote_raise, migrate = struct.unpack_from("<BQQQB", data, offset)
        assert variant == 0
        assert supply == 1_000_000_000 * 10**6
        assert base_sell == 793_100_000 * 10**6
        assert quote_raise == 85 * LAMPORTS_PER_SOL
        assert migrate == 0
        offset += struct.calcsize("<BQQQB")
        assert data[offset:] == b"\x00" * 24

    def test_supply_scales_with_decimals(self) -> None:
        data = launchlab.encode_initialize_data(decimals=9, name="X", symbol="X", uri="u")
        offset = 9 + (4 + 1) * 2 + (4 + 1)
        _, supply, _, _, _ = struct.unpack_from("<BQQQB", data, offset)
        assert supply == 1_000_000_000 * 10**9


class TestInitializeInstruction:
    def test_accounts(self) -> None:
        mint, creator = Keypair().pubkey(), Keypair().pubkey()
        platform = Keypair().pubkey()
        ix = launchlab.build_initialize_instruction(
            mint=mint, creator=creator, name="A", symbol="A", uri=URI, platform_id=platform
        )
        metas = ix.accounts
        pool = launchlab.find_pool_state(mint)

        assert len(metas) == 18
        assert metas[0].pubkey == creator and metas[0].is_signer and metas[0].is_writable
        assert metas[3].pubkey == platform
        assert metas[5].pubkey == pool and metas[5].is_writable
        assert metas[6].pubkey == mint and metas[6].is_signer
        assert metas[7].pubkey == WSOL_MINT
        assert metas[8].pubkey == launchlab.find_pool_vault(pool, mint)
        assert metas[9].pubkey == launchlab.find_pool_vault(pool, WSOL_MINT)
        assert metas[10].pubkey == get_metadata_address(mint)
        assert metas[17].pubkey == launchlab.LAUNCHPAD_PROGRAM

    def test_pool_addresses_match_instruction(self) -> None:
        mint = Keypair().pubkey()
        pool = launchlab.pool_addresses(mint)

        assert pool.config == launchlab.find_global_config()
        assert pool.vault_a == launchlab.derive_accounts(mint)["base_vault"]
        assert pool.pool == launchlab.derive_accounts(mint)["pool_state"]

    def test_global_config_seed(self) -> None:
        expected, _ = Pubkey.find_program_address(
            [b"global_config", bytes(WSOL_MINT), b"\x00", b"\x00\x00"], launchlab.LAUNCHPAD_PROGRAM
        )
        assert launchlab.GLOBAL_CONFIG == expected


def test_transaction_has_compute_budget_and_two_signers() -> None:
    creator, mint = Keypair(), Keypair()

    tx = launchlab.build_initialize_transaction(
        creator=creator, mint=mint, name="A", symbol="A", uri=URI, blockhash=Hash.new_unique()
    )

    assert len(tx.message.instructions) == 3
    assert tx.message.header.num_required_signatures == 2
    assert tx.message.account_keys[0] == creator.pubkey()
