"""User profile endpoints (/api/user...).

Profile updates are merge-patches: each key present in the request body
overwrites that one stored field (an explicit null included); keys left out
keep their stored value. Concurrent updates to the same field resolve as
last-write-wins on the store side.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from havenhub.api.deps import get_store
from havenhub.api.schemas import MessageResponse, ProfileUpdate, PublicProfile
from havenhub.auth.dependencies import AuthUser, require_user
from havenhub.core.errors import DocumentNotFound, InvalidDocumentPath, UpstreamError
from havenhub.firestore.client import DocumentStore, document_path
from havenhub.firestore.normalize import PROFILE_DEFAULTS, PUBLIC_PROFILE_DEFAULTS, apply_defaults, normalize_document

logger = logging.getLogger("haven.api")
router_user = APIRouter(prefix="/api/user", tags=["user"])


@router_user.get("/profile", response_model=Dict[str, Any])
async def get_profile(user: AuthUser = Depends(require_user), store: DocumentStore = Depends(get_store)):
    try:
        doc = await store.get_document(document_path("users", user.uid))
        data = normalize_document(doc, PROFILE_DEFAULTS)
    except DocumentNotFound:
        data = apply_defaults({}, PROFILE_DEFAULTS)
    except UpstreamError as exc:
        logger.error("profile_fetch_failed user=%s err=%s", user.uid, exc)
        raise HTTPException(500, "profile_fetch_failed")
    data.pop("id", None)
    return {"uid": user.uid, "email": user.email, **data}


@router_user.put("/profile", response_model=MessageResponse)
async def update_profile(
    body: ProfileUpdate,
    user: AuthUser = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    patch = body.model_dump(exclude_unset=True)
    try:
        await store.update_document(document_path("users", user.uid), patch)
    except UpstreamError as exc:
        logger.error("profile_update_failed user=%s err=%s", user.uid, exc)
        raise HTTPException(500, "profile_update_failed")
    logger.info("profile_updated user=%s fields=%s", user.uid, sorted(patch))
    return MessageResponse(message="Profile updated successfully")


@router_user.get("/{user_id}", response_model=PublicProfile)
async def get_public_profile(user_id: str, store: DocumentStore = Depends(get_store)):
    try:
        doc = await store.get_document(document_path("users", user_id))
    except (DocumentNotFound, InvalidDocumentPath):
        raise HTTPException(404, "user_not_found")
    except UpstreamError as exc:
        logger.error("public_profile_fetch_failed user=%s err=%s", user_id, exc)
        raise HTTPException(500, "profile_fetch_failed")
    data = normalize_document(doc, PUBLIC_PROFILE_DEFAULTS)
    public = {k: data[k] for k in PUBLIC_PROFILE_DEFAULTS}
    return PublicProfile(uid=user_id, **public)
