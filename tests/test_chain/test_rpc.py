"""Tests for the Solana JSON-RPC client."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from solders.keypair import Keypair  # type: ignore[import-untyped]

from src.chain.errors import ConfirmationTimeoutError, RpcError
from src.chain.rpc import SolanaRpcClient


def _response(payload: dict, status_code: int = 200) -> MagicMock:
    resp = MagicMock(spec=httpx.Response)
    resp.status_code = status_code
    resp.json.return_value = payload
    return resp


@pytest.fixture
def client() -> SolanaRpcClient:
    c = SolanaRpcClient("https://rpc.test", poll_interval=0.01, confirm_timeout=0.05)
    c._http = AsyncMock(spec=httpx.AsyncClient)
    return c


# ── Plain calls ─────────────────────────────────────────────────────────


class TestCalls:
    @pytest.mark.asyncio
    async def test_latest_blockhash_parsed(self, client: SolanaRpcClient) -> None:
        client._http.post.return_value = _response({
            "jsonrpc": "2.0",
            "id": 1,
            "result": {
                "context": {"slot": 1},
                "value": {
                    "blockhash": "EkSnNWid2cvwEVnVx9aBqawnmiCNiDgp3gUdkDPTKN1N",
                    "lastValidBlockHeight": 3090,
                },
            },
        })

        latest = await client.get_latest_blockhash()

        assert str(latest.blockhash) == "EkSnNWid2cvwEVnVx9aBqawnmiCNiDgp3gUdkDPTKN1N"
        assert latest.last_valid_block_height == 3090
        payload = client._http.post.call_args.kwargs["json"]
        assert payload["method"] == "getLatestBlockhash"
        assert payload["params"] == [{"commitment": "confirmed"}]

    @pytest.mark.asyncio
    async def test_rpc_error_object_raises(self, client: SolanaRpcClient) -> None:
        client._http.post.return_value = _response({
            "jsonrpc": "2.0",
            "id": 1,
            "error": {"code": -32002, "message": "Transaction simulation failed", "data": {"logs": []}},
        })

        with pytest.raises(RpcError) as exc:
            await client.send_transaction("AAAA")

        assert exc.value.code == -32002
        assert "simulation failed" in str(exc.value)

    @pytest.mark.asyncio
    async def test_http_error_raises(self, client: SolanaRpcClient) -> None:
        client._http.post.return_value = _response({}, status_code=503)

        with pytest.raises(RpcError, match="HTTP 503"):
            await client.get_block_height()

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, client: SolanaRpcClient) -> None:
        client._http.post.side_effect = httpx.ConnectError("refused")

        with pytest.raises(RpcError, match="ConnectError"):
            await client.get_block_height()

    @pytest.mark.asyncio
    async def test_account_exists(self, client: SolanaRpcClient) -> None:
        address = Keypair().pubkey()
        client._http.post.side_effect = [
            _response({"result": {"context": {"slot": 1}, "value": None}}),
            _response({"result": {"context": {"slot": 1}, "value": {"lamports": 1, "data": ["", "base64"]}}}),
        ]

        assert await client.account_exists(address) is False
        assert await client.account_exists(address) is True
        payload = client._http.post.call_args.kwargs["json"]
        assert payload["params"][0] == str(address)

    @pytest.mark.asyncio
    async def test_simulate_verifies_signatures(self, client: SolanaRpcClient) -> None:
        client._http.post.return_value = _response({
            "result": {
                "context": {"slot": 1},
                "value": {
                    "err": {"InstructionError": [0, {"Custom": 6000}]},
                    "logs": ["Program 6EF8 invoke [1]", "Program log: Error"],
                    "unitsConsumed": 1234,
                },
            }
        })

        sim = await client.simulate_transaction("AAAA")

        assert sim.err == {"InstructionError": [0, {"Custom": 6000}]}
        assert sim.logs[-1] == "Program log: Error"
        assert sim.units_consumed == 1234
        opts = client._http.post.call_args.kwargs["json"]["params"][1]
        assert opts["sigVerify"] is True

    @pytest.mark.asyncio
    async def test_send_uses_preflight(self, client: SolanaRpcClient) -> None:
        client._http.post.return_value = _response({"result": "5sig"})

        sig = await client.send_transaction("AAAA", skip_preflight=False)

        assert sig == "5sig"
        opts = client._http.post.call_args.kwargs["json"]["params"][1]
        assert opts == {
            "encoding": "base64",
            "skipPreflight": False,
            "preflightCommitment": "confirmed",
        }


# ── Confirmation polling ────────────────────────────────────────────────


class TestConfirm:
    @pytest.mark.asyncio
    async def test_confirmed_returns_slot(self, client: SolanaRpcClient) -> None:
        client.get_signature_status = AsyncMock(side_effect=[
            None,
            {"slot": 77, "confirmationStatus": "processed", "err": None},
            {"slot": 78, "confirmationStatus": "confirmed", "err": None},
        ])

        with patch("src.chain.rpc.asyncio.sleep", new_callable=AsyncMock):
            confirmation = await client.confirm_transaction("sig")

        assert confirmation.succeeded
        assert confirmation.slot == 78

    @pytest.mark.asyncio
    async def test_execution_error_returned_not_raised(self, client: SolanaRpcClient) -> None:
        client.get_signature_status = AsyncMock(return_value={
            "slot": 90,
            "confirmationStatus": "processed",
            "err": {"InstructionError": [1, "Custom"]},
        })

        confirmation = await client.confirm_transaction("sig")

        assert not confirmation.succeeded
        assert confirmation.err == {"InstructionError": [1, "Custom"]}

    @pytest.mark.asyncio
    async def test_blockhash_expiry_raises(self, client: SolanaRpcClient) -> None:
        client.get_signature_status = AsyncMock(return_value=None)
        client.get_block_height = AsyncMock(return_value=2_001)

        with pytest.raises(ConfirmationTimeoutError, match="blockhash expired"):
            await client.confirm_transaction("sig", last_valid_block_height=2_000)

    @pytest.mark.asyncio
    async def test_client_ceiling_raises(self, client: SolanaRpcClient) -> None:
        client.get_signature_status = AsyncMock(return_value=None)

        with patch("src.chain.rpc.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(ConfirmationTimeoutError, match="not confirmed after"):
                await client.confirm_transaction("sig")


# ── Malformed node responses ────────────────────────────────────────────


def _raw(body: bytes | str, status_code: int = 200) -> MagicMock:
    resp = MagicMock(spec=httpx.Response)
    resp.status_code = status_code
    resp.json.side_effect = lambda: httpx.Response(status_code, content=body).json()
    return resp


class TestMalformedResponses:
    @pytest.mark.asyncio
    async def test_html_body_raises_rpc_error(self, client: SolanaRpcClient) -> None:
        client._http.post.return_value = _raw("<html>bad gateway</html>")

        with pytest.raises(RpcError, match="invalid JSON"):
            await client.simulate_transaction("AAAA")

    @pytest.mark.asyncio
    async def test_array_body_raises_rpc_error(self, client: SolanaRpcClient) -> None:
        client._http.post.return_value = _raw("[1, 2, 3]")

        with pytest.raises(RpcError, match="non-object body"):
            await client.get_block_height()

    @pytest.mark.asyncio
    async def test_blockhash_without_value(self, client: SolanaRpcClient) -> None:
        client._http.post.return_value = _response({"result": {"context": {"slot": 1}}})

        with pytest.raises(RpcError, match="malformed result"):
            await client.get_latest_blockhash()

    @pytest.mark.asyncio
    async def test_blockhash_with_partial_value(self, client: SolanaRpcClient) -> None:
        client._http.post.return_value = _response({"result": {"value": {"blockhash": "nope"}}})

        with pytest.raises(RpcError, match="malformed value"):
            await client.get_latest_blockhash()

    @pytest.mark.asyncio
    async def test_string_error_field(self, client: SolanaRpcClient) -> None:
        client._http.post.return_value = _response({"error": "rate limited"})

        with pytest.raises(RpcError, match="rate limited"):
            await client.send_transaction("AAAA")

    @pytest.mark.asyncio
    async def test_garbage_status_polls_end_in_timeout(self, client: SolanaRpcClient) -> None:
        client._http.post.return_value = _raw("<html>bad gateway</html>")

        with patch("src.chain.rpc.asyncio.sleep", new_callable=AsyncMock):
            with pytest.raises(ConfirmationTimeoutError):
                await client.confirm_transaction("sig", last_valid_block_height=2_000)
