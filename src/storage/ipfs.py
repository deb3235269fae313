"""Shared IPFS backend plumbing — CID validation, gateway URLs, fetch-back."""

from __future__ import annotations

import re
from typing import Any

import httpx
from loguru import logger

from src.chain.errors import StorageError

_CID_V0 = re.compile(r"^Qm[1-9A-HJ-NP-Za-km-z]{44}$")
_CID_V1_BASE32 = re.compile(r"^b[a-z2-7]{50,}$")


def is_content_address(value: str) -> bool:
    """True for a CIDv0 (``Qm…``) or base32 CIDv1 (``b…``)."""
    return bool(_CID_V0.match(value) or _CID_V1_BASE32.match(value))


class IpfsBackend:
    """Base class for pinning services. Subclasses implement the two add calls."""

    name = "ipfs"

    def __init__(self, *, gateway: str, timeout: float = 60.0, headers: dict[str, str] | None = None) -> None:
        self._gateway = gateway.rstrip("/")
        self._http = httpx.AsyncClient(timeout=timeout, headers=headers or {})

    async def add_file(self, content: bytes, filename: str, content_type: str) -> str:
        raise NotImplementedError

    async def add_json(self, document: dict[str, Any], name: str) -> str:
        raise NotImplementedError

    def gateway_url(self, cid: str) -> str:
        return f"{self._gateway}/{cid}"

    def _checked_cid(self, value: Any) -> str:
        cid = str(value or "")
        if not is_content_address(cid):
            raise StorageError(f"{self.name} returned a non-CID identifier: {cid!r}")
        return cid

    async def fetch_json(self, uri: str) -> dict[str, Any]:
        """Read a JSON document back through its gateway URL."""
        try:
            resp = await self._http.get(uri)
        except httpx.HTTPError as e:
            raise StorageError(f"Metadata fetch failed: {type(e).__name__}: {e}") from e
        if resp.status_code != 200:
            raise StorageError(f"Metadata fetch HTTP {resp.status_code} for {uri}")
        try:
            data = resp.json()
        except ValueError as e:
            raise StorageError(f"Metadata at {uri} is not JSON") from e
        if not isinstance(data, dict):
            raise StorageError(f"Metadata at {uri} is not a JSON object")
        logger.debug(f"[STORAGE] Fetched {uri}")
        return data

    async def close(self) -> None:
        await self._http.aclose()
