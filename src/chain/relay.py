"""Helius Sender relay — prioritized transaction forwarding.

Single-shot: skipPreflight, maxRetries=0 and one HTTP call bounded
by the relay timeout. The caller owns retry policy and falls back to direct
broadcast on any RelayError.
"""

from __future__ import annotations

import asyncio
import time

import httpx
from loguru import logger

from src.chain.errors import RelayError


class HeliusSenderClient:
    """Submits signed transactions to the Helius Sender endpoint."""

    def __init__(self, *, endpoint: str, api_key: str = "", timeout: float = 30.0) -> None:
        if not endpoint:
            raise ValueError("Relay endpoint is empty")
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._endpoint = endpoint
        self._timeout = timeout
        self._http = httpx.AsyncClient(timeout=timeout, headers=headers)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def send_transaction(self, tx_b64: str) -> str:
        """Forward a base64 wire transaction. Returns the signature or raises RelayError."""
        payload = {
            "jsonrpc": "2.0",
            "id": str(int(time.time() * 1000)),
            "method": "sendTransaction",
            "params": [
                tx_b64,
                {
                    "encoding": "base64",
                    "skipPreflight": True,
                    "maxRetries": 0,
                },
            ],
        }

        started = time.monotonic()
        try:
            # httpx limits each phase separately; the whole call gets one deadline
            resp = await asyncio.wait_for(
                self._http.post(self._endpoint, json=payload), timeout=self._timeout
            )
        except asyncio.TimeoutError as e:
            raise RelayError(f"Relay timed out after {self._timeout:g}s") from e
        except httpx.TimeoutException as e:
            raise RelayError(f"Relay timed out: {e}") from e
        except httpx.TransportError as e:
            raise RelayError(f"Relay transport error: {type(e).__name__}: {e}") from e

        logger.debug(f"[RELAY] Response HTTP {resp.status_code} in {time.monotonic() - started:.2f}s")

        if resp.status_code != 200:
            raise RelayError(f"Relay HTTP {resp.status_code}")

        try:
            data = resp.json()
        except ValueError as e:
            raise RelayError(f"Relay returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise RelayError("Relay returned a non-object body")

        error = data.get("error")
        if error:
            msg = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise RelayError(f"Helius Sender error: {msg}")

        result = data.get("result")
        if not result:
            raise RelayError("No result returned from Helius Sender")

        return str(result)

    async def close(self) -> None:
        """Close HTTP client."""
        await self._http.aclose()
