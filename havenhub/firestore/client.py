"""Async client for the document store REST interface.

One instance per request (see havenhub.api.deps.get_store); the underlying
httpx.AsyncClient is closed when the response is done. No retries: a failed
call surfaces as UpstreamError and the route decides what the caller sees.
"""

import logging
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
from urllib.parse import quote

import httpx

from havenhub.core.config import Settings
from havenhub.core.errors import DocumentNotFound, InvalidDocumentPath, UpstreamError
from havenhub.firestore.codec import encode_fields

logger = logging.getLogger("haven.store")


def new_document_id() -> str:
    """20-char id in the same shape the store assigns itself."""
    return uuid.uuid4().hex[:20]


def _check_segment(segment: Any) -> str:
    segment = str(segment)
    if segment in ("", ".", "..") or "/" in segment:
        raise InvalidDocumentPath(segment)
    return segment


def document_path(*segments: Any) -> str:
    """Join collection/document ids into a store path.

    Ids coming from clients go through here: an empty id, `.`, `..` or an id
    containing `/` raises InvalidDocumentPath instead of addressing some
    other document.
    """
    return "/".join(_check_segment(s) for s in segments)


class DocumentStore:
    """Thin wrapper over collection/document GET, PATCH, POST, DELETE and commit."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        if not settings.FIREBASE_PROJECT_ID:
            raise RuntimeError("FIREBASE_PROJECT_ID is not set in the environment.")
        self.settings = settings
        self.database = f"projects/{settings.FIREBASE_PROJECT_ID}/databases/(default)"
        self.root = f"{self.database}/documents"
        params = {"key": settings.FIREBASE_API_KEY} if settings.FIREBASE_API_KEY else None
        self.client = httpx.AsyncClient(
            base_url=f"{settings.FIRESTORE_BASE_URL.rstrip('/')}/{self.root}/",
            timeout=settings.HTTP_TIMEOUT,
            params=params,
            transport=transport,
        )

    def full_name(self, path: str) -> str:
        return f"{self.root}/{document_path(*path.strip('/').split('/'))}"

    def _url(self, path: str) -> str:
        """Relative request URL for a store path, each segment percent-encoded."""
        return "/".join(quote(_check_segment(s), safe="") for s in path.strip("/").split("/"))

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            r = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("store_transport_error method=%s path=%s err=%s", method, url, exc)
            raise UpstreamError("firestore", None, str(exc)) from exc
        if r.status_code == 404:
            raise DocumentNotFound(url)
        if r.status_code >= 400:
            logger.warning("store_error method=%s path=%s status=%s", method, url, r.status_code)
            if self.settings.DEBUG_UPSTREAM:
                logger.debug("store_error_body body=%s", r.text[:400])
            raise UpstreamError("firestore", r.status_code, r.text[:300])
        return r

    async def list_documents(self, collection: str) -> List[Dict[str, Any]]:
        """All documents of a collection, following page tokens; [] when the collection is missing."""
        documents: List[Dict[str, Any]] = []
        page_token: Optional[str] = None
        while True:
            params: Dict[str, Any] = {"pageSize": self.settings.PAGE_SIZE}
            if page_token:
                params["pageToken"] = page_token
            try:
                r = await self._send("GET", self._url(collection), params=params)
            except DocumentNotFound:
                logger.debug("store_collection_missing collection=%s", collection)
                return documents
            body = r.json() or {}
            documents.extend(body.get("documents") or [])
            page_token = body.get("nextPageToken")
            if not page_token:
                return documents

    async def get_document(self, path: str) -> Dict[str, Any]:
        r = await self._send("GET", self._url(path))
        return r.json()

    async def create_document(self, collection: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """POST a new document (`fields` already in wire form); the store assigns the id, see the returned `name`."""
        r = await self._send("POST", self._url(collection), json={"fields": dict(fields)})
        return r.json()

    async def set_document(self, path: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """Full overwrite (or create) of one document. `fields` is already in wire form."""
        r = await self._send("PATCH", self._url(path), json={"fields": dict(fields)})
        return r.json()

    async def update_document(self, path: str, data: Mapping[str, Any], must_exist: bool = False) -> Optional[Dict[str, Any]]:
        """Field-level merge-patch.

        Only the keys in `data` are written; every other stored field is kept.
        The document is created if it does not exist unless `must_exist` is
        set, in which case a missing document raises DocumentNotFound. Empty
        `data` writes nothing (an unmasked PATCH would wipe the document).
        """
        if not data:
            return None
        mask: List[Tuple[str, str]] = [("updateMask.fieldPaths", k) for k in data]
        if must_exist:
            mask.append(("currentDocument.exists", "true"))
        r = await self._send("PATCH", self._url(path), params=mask, json={"fields": encode_fields(data)})
        return r.json()

    async def delete_document(self, path: str) -> None:
        await self._send("DELETE", self._url(path))

    async def batch_set(self, documents: Iterable[Tuple[str, Mapping[str, Any]]]) -> List[str]:
        """Write several documents in one commit (full overwrite each); returns their paths."""
        writes = []
        paths: List[str] = []
        for path, data in documents:
            paths.append(path.strip("/"))
            writes.append({"update": {"name": self.full_name(path), "fields": encode_fields(data)}})
        if not writes:
            return paths
        url = f"{self.settings.FIRESTORE_BASE_URL.rstrip('/')}/{self.root}:commit"
        await self._send("POST", url, json={"writes": writes})
        return paths

    async def close(self):
        await self.client.aclose()
