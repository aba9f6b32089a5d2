"""Per-user favorites (/api/favorites). Every route requires a bearer token."""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from havenhub.api.deps import get_store
from havenhub.api.schemas import FavoriteRequest, MessageResponse
from havenhub.auth.dependencies import AuthUser, require_user
from havenhub.core.errors import DocumentNotFound, UpstreamError
from havenhub.firestore.client import DocumentStore, document_path
from havenhub.firestore.codec import ValueKind, encode_fields, timestamp_now
from havenhub.firestore.normalize import FAVORITE_DEFAULTS, normalize_document

logger = logging.getLogger("haven.api")
router_favorites = APIRouter(prefix="/api/favorites", tags=["favorites"])


def _collection(uid: str, *rest) -> str:
    return document_path("users", uid, "favorites", *rest)


@router_favorites.get("", response_model=List[Dict[str, Any]])
async def list_favorites(user: AuthUser = Depends(require_user), store: DocumentStore = Depends(get_store)):
    try:
        documents = await store.list_documents(_collection(user.uid))
    except UpstreamError as exc:
        logger.error("favorites_fetch_failed user=%s err=%s", user.uid, exc)
        raise HTTPException(500, "favorites_fetch_failed")
    return [normalize_document(d, FAVORITE_DEFAULTS) for d in documents]


@router_favorites.post("", response_model=MessageResponse)
async def add_favorite(
    body: FavoriteRequest,
    user: AuthUser = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    """Store a listing snapshot under the listing's own id.

    Using the listing id as the document id makes repeat calls overwrite the
    same favorite instead of adding another.
    """
    prop = body.property
    if prop is None or prop.id is None or prop.id == "":
        raise HTTPException(400, "property_data_required")
    pid = str(prop.id)
    path = _collection(user.uid, pid)
    snapshot = {
        "propertyId": pid,
        "title": prop.title,
        "location": prop.location,
        "price": prop.price,
        "rating": prop.rating,
    }
    if prop.images:
        snapshot["image"] = prop.images[0]
    fields = encode_fields({k: v for k, v in snapshot.items() if v is not None})
    fields["createdAt"] = {ValueKind.TIMESTAMP.value: timestamp_now()}
    try:
        await store.set_document(path, fields)
    except UpstreamError as exc:
        logger.error("favorite_add_failed user=%s property=%s err=%s", user.uid, pid, exc)
        raise HTTPException(500, "favorite_add_failed")
    return MessageResponse(message="Added to favorites")


@router_favorites.delete("/{property_id}", response_model=MessageResponse)
async def remove_favorite(
    property_id: str,
    user: AuthUser = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    try:
        await store.delete_document(_collection(user.uid, property_id))
    except DocumentNotFound:
        pass  # already gone
    except UpstreamError as exc:
        logger.error("favorite_remove_failed user=%s property=%s err=%s", user.uid, property_id, exc)
        raise HTTPException(500, "favorite_remove_failed")
    return MessageResponse(message="Removed from favorites")
