"""Solana JSON-RPC client — blockhash, account probes, simulate, send, confirm.

Thin wrapper over raw JSON-RPC via httpx. Every method raises RpcError on
transport failure, non-200 HTTP status or an RPC-level ``error`` object, so
callers decide what is retryable.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import httpx
from loguru import logger
from solders.hash import Hash  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.chain.errors import ConfirmationTimeoutError, RpcError

_COMMITMENT_RANK = {"processed": 0, "confirmed": 1, "finalized": 2}


@dataclass(frozen=True)
class LatestBlockhash:
    blockhash: Hash
    last_valid_block_height: int


@dataclass
class SimulationResult:
    err: Any = None
    logs: list[str] = field(default_factory=list)
    units_consumed: int | None = None


@dataclass
class Confirmation:
    """Observed outcome of a signature at the requested commitment."""

    signature: str
    slot: int
    err: Any = None

    @property
    def succeeded(self) -> bool:
        return self.err is None


class SolanaRpcClient:
    """Async JSON-RPC client for a standard Solana node."""

    def __init__(
        self,
        rpc_url: str,
        *,
        commitment: str = "confirmed",
        timeout: float = 30.0,
        poll_interval: float = 2.0,
        confirm_timeout: float = 90.0,
    ) -> None:
        if not rpc_url:
            raise ValueError("RPC URL is empty")
        self._rpc_url = rpc_url
        self._commitment = commitment
        self._poll_interval = poll_interval
        self._confirm_timeout = confirm_timeout
        self._http = httpx.AsyncClient(timeout=timeout)

    @property
    def commitment(self) -> str:
        return self._commitment

    async def _call(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params}
        try:
            resp = await self._http.post(self._rpc_url, json=payload)
        except httpx.TransportError as e:
            raise RpcError(f"{method} failed: {type(e).__name__}: {e}") from e

        if resp.status_code != 200:
            raise RpcError(f"{method} HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise RpcError(f"{method} returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise RpcError(f"{method} returned a non-object body")

        error = data.get("error")
        if error:
            if not isinstance(error, dict):
                raise RpcError(f"{method} RPC error: {error}")
            code = error.get("code")
            msg = error.get("message", str(error))
            raise RpcError(f"{method} RPC error {code}: {msg}", code=code, data=error.get("data"))
        if "result" not in data:
            raise RpcError(f"{method} returned no result")
        return data["result"]

    async def _call_value(self, method: str, params: list[Any]) -> Any:
        """``result.value`` of a context-wrapped response."""
        result = await self._call(method, params)
        if not isinstance(result, dict) or "value" not in result:
            raise RpcError(f"{method} returned a malformed result")
        return result["value"]

    async def get_latest_blockhash(self) -> LatestBlockhash:
        value = await self._call_value("getLatestBlockhash", [{"commitment": self._commitment}])
        try:
            return LatestBlockhash(
                blockhash=Hash.from_string(value["blockhash"]),
                last_valid_block_height=int(value["lastValidBlockHeight"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise RpcError(f"getLatestBlockhash returned a malformed value: {e!r}") from e

    async def get_block_height(self) -> int:
        result = await self._call("getBlockHeight", [{"commitment": self._commitment}])
        if not isinstance(result, int):
            raise RpcError(f"getBlockHeight returned {result!r}")
        return result

    async def get_account_info(self, address: Pubkey) -> dict | None:
        """Return the raw account object or None when the account does not exist."""
        return await self._call_value(
            "getAccountInfo",
            [str(address), {"encoding": "base64", "commitment": self._commitment}],
        )

    async def account_exists(self, address: Pubkey) -> bool:
        return await self.get_account_info(address) is not None

    async def simulate_transaction(self, tx_b64: str) -> SimulationResult:
        value = await self._call_value(
            "simulateTransaction",
            [
                tx_b64,
                {
                    "encoding": "base64",
                    "commitment": self._commitment,
                    "sigVerify": True,
                },
            ],
        )
        if not isinstance(value, dict):
            raise RpcError("simulateTransaction returned no simulation value")
        return SimulationResult(
            err=value.get("err"),
            logs=list(value.get("logs") or []),
            units_consumed=value.get("unitsConsumed"),
        )

    async def send_transaction(
        self,
        tx_b64: str,
        *,
        skip_preflight: bool = False,
        max_retries: int | None = None,
    ) -> str:
        """Broadcast a base64 wire transaction, returning its signature."""
        opts: dict[str, Any] = {
            "encoding": "base64",
            "skipPreflight": skip_preflight,
            "preflightCommitment": self._commitment,
        }
        if max_retries is not None:
            opts["maxRetries"] = max_retries
        result = await self._call("sendTransaction", [tx_b64, opts])
        if not result:
            raise RpcError("sendTransaction returned empty signature")
        return str(result)

    async def get_signature_status(self, signature: str) -> dict | None:
        statuses = await self._call_value(
            "getSignatureStatuses",
            [[signature], {"searchTransactionHistory": False}],
        )
        if not statuses:
            return None
        if not isinstance(statuses, list) or not isinstance(statuses[0], (dict, type(None))):
            raise RpcError(f"getSignatureStatuses returned {statuses!r}")
        return statuses[0]

    async def confirm_transaction(
        self,
        signature: str,
        *,
        last_valid_block_height: int | None = None,
    ) -> Confirmation:
        """Poll getSignatureStatuses until the commitment is reached.

        Returns a Confirmation whose ``err`` is the on-chain execution error
        (None on success). Raises ConfirmationTimeoutError once the blockhash
        has expired or the client-side ceiling is hit.

        ``confirm_timeout`` is a ceiling of our own on top of blockhash
        expiry, so a stalled node cannot hold a launch open indefinitely when
        no block height is supplied or the height probe keeps failing.
        """
        wanted = _COMMITMENT_RANK.get(self._commitment, 1)
        elapsed = 0.0

        while True:
            try:
                status = await self.get_signature_status(signature)
            except RpcError as e:
                logger.debug(f"[RPC] Status poll failed for {signature[:16]}: {e}")
                status = None

            if status is not None:
                err = status.get("err")
                level = _COMMITMENT_RANK.get(status.get("confirmationStatus") or "", -1)
                if err is not None or level >= wanted:
                    slot = int(status.get("slot") or 0)
                    logger.debug(
                        f"[RPC] {signature[:16]} reached {status.get('confirmationStatus')} "
                        f"slot={slot} err={err} in {elapsed:.1f}s"
                    )
                    return Confirmation(signature=signature, slot=slot, err=err)

            if last_valid_block_height is not None:
                try:
                    height = await self.get_block_height()
                except RpcError:
                    height = None
                if height is not None and height > last_valid_block_height:
                    raise ConfirmationTimeoutError(
                        f"Signature {signature} not confirmed: blockhash expired "
                        f"(height {height} > {last_valid_block_height})"
                    )

            if elapsed >= self._confirm_timeout:
                raise ConfirmationTimeoutError(
                    f"Signature {signature} not confirmed after {self._confirm_timeout:.0f}s"
                )

            await asyncio.sleep(self._poll_interval)
            elapsed += self._poll_interval

    async def close(self) -> None:
        """Close HTTP client."""
        await self._http.aclose()
