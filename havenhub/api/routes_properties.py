"""Listing and review endpoints (/api/properties...)."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from havenhub.api.deps import get_store
from havenhub.api.schemas import CreatedResponse, Listing, ListingFilters
from havenhub.auth.dependencies import AuthUser, require_user
from havenhub.core.errors import DocumentNotFound, InvalidDocumentPath, UpstreamError
from havenhub.firestore.client import DocumentStore, document_path, new_document_id
from havenhub.firestore.codec import ValueKind, encode_fields, timestamp_now
from havenhub.firestore.normalize import LISTING_DEFAULTS, REVIEW_DEFAULTS, document_id, normalize_document

logger = logging.getLogger("haven.api")
router = APIRouter(prefix="/api/properties", tags=["properties"])

MAX_BATCH = 500  # commit write limit on the store side


def _req_id() -> str:
    return uuid.uuid4().hex[:12]


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def matches(listing: Dict[str, Any], f: ListingFilters) -> bool:
    """True when the listing passes every active filter.

    A listing missing the field a numeric filter looks at does not match.
    """
    if f.min_price is not None or f.max_price is not None:
        price = _number(listing.get("price"))
        if price is None:
            return False
        if f.min_price is not None and price < f.min_price:
            return False
        if f.max_price is not None and price > f.max_price:
            return False
    if f.min_rating:
        rating = _number(listing.get("rating"))
        if rating is None or rating < f.min_rating:
            return False
    if f.room_types and listing.get("roomType") not in f.room_types:
        return False
    if f.has_mess is not None and bool(listing.get("hasMess")) != f.has_mess:
        return False
    if f.verified_only and not listing.get("isVerified"):
        return False
    if f.college:
        if f.college.lower() not in str(listing.get("college") or "").lower():
            return False
    return True


def filter_listings(listings: List[Dict[str, Any]], f: ListingFilters) -> List[Dict[str, Any]]:
    return [x for x in listings if matches(x, f)]


@router.get("", response_model=List[Listing], summary="List all properties (optionally filtered)")
async def list_properties(
    min_price: Optional[float] = Query(None, alias="minPrice"),
    max_price: Optional[float] = Query(None, alias="maxPrice"),
    min_rating: Optional[float] = Query(None, alias="minRating"),
    room_type: List[str] = Query([], alias="roomType"),
    has_mess: Optional[bool] = Query(None, alias="hasMess"),
    verified_only: bool = Query(False, alias="verifiedOnly"),
    college: Optional[str] = Query(None),
    store: DocumentStore = Depends(get_store),
):
    try:
        documents = await store.list_documents("properties")
    except UpstreamError as exc:
        logger.error("properties_fetch_failed err=%s", exc)
        raise HTTPException(500, "properties_fetch_failed")
    listings = [normalize_document(d, LISTING_DEFAULTS) for d in documents]
    filters = ListingFilters(
        min_price=min_price,
        max_price=max_price,
        min_rating=min_rating,
        room_types=room_type,
        has_mess=has_mess,
        verified_only=verified_only,
        college=college,
    )
    return filter_listings(listings, filters)


@router.post("", response_model=CreatedResponse, response_model_exclude_none=True, status_code=201, summary="Create one listing or a batch of listings")
async def create_properties(
    payload: Union[List[Dict[str, Any]], Dict[str, Any]] = Body(...),
    user: AuthUser = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    items = payload if isinstance(payload, list) else [payload]
    if not items:
        raise HTTPException(400, "no_properties_supplied")
    if len(items) > MAX_BATCH:
        raise HTTPException(400, f"batch_too_large max={MAX_BATCH}")
    rid = _req_id()
    writes = []
    for item in items:
        data = dict(item)
        pid = str(data.pop("id", None) or new_document_id())
        data.setdefault("createdBy", user.uid)
        data["createdAt"] = datetime.now(timezone.utc)
        writes.append((document_path("properties", pid), data))
    try:
        paths = await store.batch_set(writes)
    except UpstreamError as exc:
        logger.error("properties_create_failed request_id=%s err=%s", rid, exc)
        raise HTTPException(500, "properties_create_failed")
    ids = [p.rsplit("/", 1)[-1] for p in paths]
    logger.info("properties_created request_id=%s count=%d user=%s", rid, len(ids), user.uid)
    return CreatedResponse(message="Properties created", ids=ids)


@router.get("/{property_id}", response_model=Listing, summary="Fetch one property")
async def get_property(property_id: str, store: DocumentStore = Depends(get_store)):
    try:
        doc = await store.get_document(document_path("properties", property_id))
    except (DocumentNotFound, InvalidDocumentPath):
        raise HTTPException(404, "property_not_found")
    except UpstreamError as exc:
        logger.error("property_fetch_failed id=%s err=%s", property_id, exc)
        raise HTTPException(500, "property_fetch_failed")
    return normalize_document(doc, LISTING_DEFAULTS)


@router.get("/{property_id}/reviews", response_model=List[Dict[str, Any]], summary="Reviews for a property")
async def list_reviews(property_id: str, store: DocumentStore = Depends(get_store)):
    try:
        documents = await store.list_documents(document_path("properties", property_id, "reviews"))
    except UpstreamError as exc:
        logger.error("reviews_fetch_failed id=%s err=%s", property_id, exc)
        raise HTTPException(500, "reviews_fetch_failed")
    return [normalize_document(d, REVIEW_DEFAULTS) for d in documents]


@router.post("/{property_id}/reviews", response_model=CreatedResponse, response_model_exclude_none=True, status_code=201, summary="Add a review")
async def add_review(
    property_id: str,
    review: Dict[str, Any] = Body(...),
    store: DocumentStore = Depends(get_store),
):
    fields = encode_fields(review)
    fields["createdAt"] = {ValueKind.TIMESTAMP.value: timestamp_now()}
    try:
        created = await store.create_document(document_path("properties", property_id, "reviews"), fields)
    except UpstreamError as exc:
        logger.error("review_add_failed id=%s err=%s", property_id, exc)
        raise HTTPException(500, "review_add_failed")
    return CreatedResponse(message="Review added", id=document_id(created.get("name")))
