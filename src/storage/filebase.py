"""Filebase IPFS RPC backend — ``POST /api/v0/add`` with a bearer access token."""

from __future__ import annotations

import json
from typing import Any

import httpx
from loguru import logger

from src.chain.errors import StorageError
from src.storage.ipfs import IpfsBackend


class FilebaseBackend(IpfsBackend):
    name = "filebase"

    def __init__(
        self,
        *,
        api_key: str,
        rpc_url: str = "https://rpc.filebase.io",
        gateway: str = "https://ipfs.filebase.io/ipfs",
        timeout: float = 60.0,
    ) -> None:
        if not api_key:
            raise ValueError("Filebase API key is empty")
        super().__init__(
            gateway=gateway,
            timeout=timeout,
            headers={"Authorization": f"Bearer {api_key}"},
        )
        self._add_url = f"{rpc_url.rstrip('/')}/api/v0/add"

    async def add_file(self, content: bytes, filename: str, content_type: str) -> str:
        files = {"file": (filename, content, content_type)}
        try:
            resp = await self._http.post(self._add_url, files=files)
        except httpx.HTTPError as e:
            raise StorageError(f"Filebase upload failed: {type(e).__name__}: {e}") from e

        if resp.status_code != 200:
            raise StorageError(f"Filebase upload HTTP {resp.status_code}: {resp.text[:200]}")

        try:
            data = resp.json()
        except ValueError as e:
            raise StorageError("Filebase returned invalid JSON") from e

        cid = self._checked_cid(data.get("Hash"))
        logger.info(f"[STORAGE] Filebase pinned {filename} ({len(content)} bytes) → {cid}")
        return cid

    async def add_json(self, document: dict[str, Any], name: str) -> str:
        body = json.dumps(document, indent=2).encode("utf-8")
        return await self.add_file(body, name, "application/json")
