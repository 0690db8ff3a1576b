"""
Client for the metadata/asset storage service.

POST /metadata {"metadata": {...}} -> {"uri": ...}
POST /assets   {"filename": ..., "data": <base64>, "contentType": ...} -> {"url": ...}
GET  /metadata/{name}.json and GET /assets/{name} return the stored document/bytes.

Filenames are validated locally before any request: empty names and names
with "..", "/" or "\\" are rejected; metadata names get ".json" appended.
"""

from __future__ import annotations

import base64
from typing import Any

import httpx

from identity_prism.core.exceptions import InvalidFilename, StorageError
from identity_prism.prism_logging import get_logger

logger = get_logger(__name__)

METADATA_SUFFIX = ".json"
_FORBIDDEN = ("..", "/", "\\")

CONTENT_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}


def _safe_name(raw: str | None) -> str | None:
    trimmed = (raw or "").strip()
    if not trimmed or any(token in trimmed for token in _FORBIDDEN):
        return None
    return trimmed


def resolve_metadata_filename(raw: str | None) -> str | None:
    """Validated metadata filename with ".json" ensured, or None if rejected."""
    name = _safe_name(raw)
    if name is None:
        return None
    return name if name.endswith(METADATA_SUFFIX) else name + METADATA_SUFFIX


def resolve_asset_filename(raw: str | None) -> str | None:
    """Validated asset filename, or None if rejected."""
    return _safe_name(raw)


def content_type_for(filename: str) -> str:
    lowered = filename.lower()
    for suffix, content_type in CONTENT_TYPES.items():
        if lowered.endswith(suffix):
            return content_type
    return "application/octet-stream"


class MetadataStorageClient:
    """Async client; pass http_client to share a pool or inject a mock transport."""

    def __init__(
        self,
        base_url: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout_sec: float = 30.0,
    ) -> None:
        if not base_url.strip():
            raise ValueError("base_url must be non-empty")
        self._base_url = base_url.strip().rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_sec))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "MetadataStorageClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self._base_url}{path}"
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise StorageError(f"{method} {path} transport error: {e}") from e
        if not resp.is_success:
            raise StorageError(f"{method} {path} HTTP {resp.status_code}", status_code=resp.status_code)
        return resp

    @staticmethod
    def _field(resp: httpx.Response, key: str) -> str:
        try:
            payload = resp.json()
        except ValueError as e:
            raise StorageError(f"storage returned non-JSON body for {key}") from e
        value = payload.get(key) if isinstance(payload, dict) else None
        if not isinstance(value, str) or not value:
            raise StorageError(f"storage response missing {key!r}")
        return value

    async def upload_metadata(self, document: dict[str, Any]) -> str:
        """Store a metadata document; return its public URI."""
        resp = await self._request("POST", "/metadata", json={"metadata": document})
        uri = self._field(resp, "uri")
        logger.info("storage_metadata_uploaded", uri=uri)
        return uri

    async def upload_image(self, data: bytes, filename: str) -> str:
        """Store an image (sent base64-encoded); return its public URL."""
        name = resolve_asset_filename(filename)
        if name is None:
            raise InvalidFilename(f"rejected asset filename {filename!r}")
        payload = {
            "filename": name,
            "contentType": content_type_for(name),
            "data": base64.b64encode(data).decode("ascii"),
        }
        resp = await self._request("POST", "/assets", json=payload)
        url = self._field(resp, "url")
        logger.info("storage_image_uploaded", url=url, size=len(data))
        return url

    async def fetch_metadata(self, name: str) -> dict[str, Any]:
        filename = resolve_metadata_filename(name)
        if filename is None:
            raise InvalidFilename(f"rejected metadata filename {name!r}")
        resp = await self._request("GET", f"/metadata/{filename}")
        try:
            document = resp.json()
        except ValueError as e:
            raise StorageError(f"metadata {filename} is not JSON") from e
        if not isinstance(document, dict):
            raise StorageError(f"metadata {filename} is not a JSON object")
        return document

    async def fetch_asset(self, name: str) -> bytes:
        filename = resolve_asset_filename(name)
        if filename is None:
            raise InvalidFilename(f"rejected asset filename {name!r}")
        resp = await self._request("GET", f"/assets/{filename}")
        return resp.content
