"""Firestore document store over the REST API."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx

from agent_router.core.errors import StoreError
from agent_router.core.logging import get_logger

logger = get_logger(__name__)

FIRESTORE_API_BASE = "https://firestore.googleapis.com/v1"
# Firestore rejects these ids; they would also collapse as path segments
INVALID_DOCUMENT_IDS = frozenset({"", ".", ".."})


# ----------------------------------------------------------------------
# typed value codec
# ----------------------------------------------------------------------
def encode_value(value: Any) -> dict[str, Any]:
    if value is None:
        return {"nullValue": None}
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, Mapping):
        return {"mapValue": {"fields": encode_fields(value)}}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(item) for item in value]}}
    raise StoreError(f"Unsupported Firestore value type: {type(value).__name__}")


def encode_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    return {str(key): encode_value(item) for key, item in data.items()}


def decode_value(value: Mapping[str, Any]) -> Any:
    if "nullValue" in value:
        return None
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "integerValue" in value:
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields") or {})
    if "arrayValue" in value:
        return [decode_value(item) for item in value["arrayValue"].get("values") or []]
    for key in ("stringValue", "timestampValue", "referenceValue", "bytesValue"):
        if key in value:
            return value[key]
    if "geoPointValue" in value:
        return dict(value["geoPointValue"])
    raise StoreError(f"Unsupported Firestore value: {sorted(value)}")


def decode_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    return {key: decode_value(item) for key, item in fields.items()}


class FirestoreDocumentStore:
    """:class:`~agent_router.infrastructure.documents.DocumentStore` backed by Firestore."""

    def __init__(
        self,
        project_id: str,
        *,
        database: str = "(default)",
        auth: httpx.Auth | None = None,
        emulator_host: str | None = None,
        timeout: float = 10.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if not project_id:
            raise ValueError("project_id is required for Firestore")

        api_base = f"http://{emulator_host}/v1" if emulator_host else FIRESTORE_API_BASE
        self._documents_url = f"{api_base}/projects/{project_id}/databases/{database}/documents"
        self._auth = auth
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    def _document_url(self, collection: str, doc_id: str) -> str:
        if doc_id in INVALID_DOCUMENT_IDS:
            raise StoreError(f"Invalid document id: {doc_id!r}")
        return f"{self._documents_url}/{quote(collection, safe='')}/{quote(doc_id, safe='')}"

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            if self._auth is not None:
                kwargs["auth"] = self._auth
            return await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise StoreError(f"Firestore {method} {url} failed: {exc}") from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response, path: str) -> None:
        if response.is_success:
            return
        message = response.text[:200]
        try:
            message = response.json()["error"]["message"]
        except (ValueError, KeyError, TypeError):
            pass
        raise StoreError(f"Firestore returned HTTP {response.status_code} for {path}: {message}")

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    async def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        # PATCH without an update mask replaces the whole document, creating it if needed
        response = await self._request(
            "PATCH",
            self._document_url(collection, doc_id),
            json={"fields": encode_fields(data)},
        )
        self._raise_for_status(response, f"{collection}/{doc_id}")

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        params = [("updateMask.fieldPaths", key) for key in fields]
        params.append(("currentDocument.exists", "true"))
        response = await self._request(
            "PATCH",
            self._document_url(collection, doc_id),
            params=params,
            json={"fields": encode_fields(fields)},
        )
        self._raise_for_status(response, f"{collection}/{doc_id}")

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        if doc_id in INVALID_DOCUMENT_IDS:
            return None
        response = await self._request("GET", self._document_url(collection, doc_id))
        if response.status_code == 404:
            return None
        self._raise_for_status(response, f"{collection}/{doc_id}")
        return decode_fields(response.json().get("fields") or {})

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["FirestoreDocumentStore", "decode_fields", "encode_fields"]
