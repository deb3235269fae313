"""Token metadata document + upload (image first, then the JSON document)."""

from __future__ import annotations

import mimetypes
import time
from dataclasses import dataclass
from typing import Any

from loguru import logger

from src.storage.ipfs import IpfsBackend

DEFAULT_IMAGE_TYPE = "image/png"


def guess_content_type(filename: str) -> str:
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or DEFAULT_IMAGE_TYPE


def build_metadata_document(
    *,
    name: str,
    symbol: str,
    image_url: str,
    image_type: str = DEFAULT_IMAGE_TYPE,
    creator: str | None = None,
    description: str = "",
    external_url: str = "",
    attributes: list[dict[str, str]] | None = None,
    socials: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Off-chain metadata JSON in the Metaplex fungible-token shape."""
    doc: dict[str, Any] = {
        "name": name,
        "symbol": symbol,
        "description": description,
        "image": image_url,
        "external_url": external_url,
        "attributes": list(attributes or []),
        "properties": {
            "files": [{"uri": image_url, "type": image_type}],
            "category": "image",
            "creators": [{"address": creator, "share": 100}] if creator else [],
        },
        "seller_fee_basis_points": 0,
    }
    for key in ("twitter", "telegram", "website"):
        value = (socials or {}).get(key)
        if value:
            doc[key] = value
    return doc


@dataclass(frozen=True)
class UploadedMetadata:
    uri: str
    image_url: str
    document: dict[str, Any]


class MetadataUploader:
    """Pins the token image and metadata JSON through one IPFS backend."""

    def __init__(self, backend: IpfsBackend) -> None:
        self._backend = backend

    @property
    def backend(self) -> IpfsBackend:
        return self._backend

    async def upload(
        self,
        *,
        name: str,
        symbol: str,
        image: bytes,
        image_filename: str,
        creator: str | None = None,
        description: str = "",
        external_url: str = "",
        attributes: list[dict[str, str]] | None = None,
        socials: dict[str, str] | None = None,
    ) -> UploadedMetadata:
        """Upload image then document. Raises StorageError on any failure."""
        image_type = guess_content_type(image_filename)
        stamp = int(time.time() * 1000)

        image_cid = await self._backend.add_file(image, f"{stamp}-{image_filename}", image_type)
        image_url = self._backend.gateway_url(image_cid)

        document = build_metadata_document(
            name=name,
            symbol=symbol,
            image_url=image_url,
            image_type=image_type,
            creator=creator,
            description=description,
            external_url=external_url,
            attributes=attributes,
            socials=socials,
        )
        doc_cid = await self._backend.add_json(document, f"{stamp}-{symbol.lower()}-metadata.json")
        uri = self._backend.gateway_url(doc_cid)

        logger.info(f"[STORAGE] Metadata for {symbol} uploaded via {self._backend.name}: {uri}")
        return UploadedMetadata(uri=uri, image_url=image_url, document=document)

    async def fetch(self, uri: str) -> dict[str, Any]:
        return await self._backend.fetch_json(uri)

    async def close(self) -> None:
        await self._backend.close()
