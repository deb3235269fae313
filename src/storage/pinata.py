"""Pinata pinning backend — pinFileToIPFS / pinJSONToIPFS with a JWT."""

from __future__ import annotations

import json
from typing import Any

import httpx
from loguru import logger

from src.chain.errors import StorageError
from src.storage.ipfs import IpfsBackend

PINATA_API = "https://api.pinata.cloud"


class PinataBackend(IpfsBackend):
    name = "pinata"

    def __init__(
        self,
        *,
        jwt: str,
        gateway: str = "https://gateway.pinata.cloud/ipfs",
        timeout: float = 60.0,
        api_url: str = PINATA_API,
    ) -> None:
        if not jwt:
            raise ValueError("PINATA_JWT is empty")
        super().__init__(gateway=gateway, timeout=timeout, headers={"Authorization": f"Bearer {jwt}"})
        self._api_url = api_url.rstrip("/")

    async def _pin(self, path: str, **kwargs: Any) -> str:
        try:
            resp = await self._http.post(f"{self._api_url}{path}", **kwargs)
        except httpx.HTTPError as e:
            raise StorageError(f"Pinata upload failed: {type(e).__name__}: {e}") from e

        if resp.status_code != 200:
            detail = ""
            try:
                error = resp.json().get("error")
                detail = error.get("details", "") if isinstance(error, dict) else str(error or "")
            except ValueError:
                pass
            raise StorageError(f"Pinata HTTP {resp.status_code}: {detail or 'Failed to upload to Pinata'}")

        try:
            data = resp.json()
        except ValueError as e:
            raise StorageError("Pinata returned invalid JSON") from e
        return self._checked_cid(data.get("IpfsHash"))

    async def add_file(self, content: bytes, filename: str, content_type: str) -> str:
        cid = await self._pin(
            "/pinning/pinFileToIPFS",
            files={"file": (filename, content, content_type)},
            data={"pinataMetadata": json.dumps({"name": filename, "keyvalues": {"type": "token-image"}})},
        )
        logger.info(f"[STORAGE] Pinata pinned {filename} ({len(content)} bytes) → {cid}")
        return cid

    async def add_json(self, document: dict[str, Any], name: str) -> str:
        cid = await self._pin(
            "/pinning/pinJSONToIPFS",
            json={
                "pinataMetadata": {"name": name, "keyvalues": {"type": "token-metadata"}},
                "pinataContent": document,
            },
        )
        logger.info(f"[STORAGE] Pinata pinned {name} → {cid}")
        return cid
