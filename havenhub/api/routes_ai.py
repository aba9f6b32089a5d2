"""Listing insight endpoint (/api/ai/insights)."""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException

from havenhub.api.deps import get_insight_generator, get_store
from havenhub.api.schemas import InsightRequest, InsightResponse
from havenhub.auth.dependencies import AuthUser, require_user
from havenhub.core.errors import InsightRateLimited, UpstreamError
from havenhub.firestore.client import DocumentStore, document_path
from havenhub.insights.model_client import InsightGenerator, extract_insights

logger = logging.getLogger("haven.insights")
router_ai = APIRouter(prefix="/api/ai", tags=["ai"])


@router_ai.post(
    "/insights",
    response_model=InsightResponse,
    responses={429: {"description": "Model rate limited; body carries retryDelay when known"}},
)
async def generate_insights(
    body: InsightRequest,
    user: AuthUser = Depends(require_user),
    generator: InsightGenerator = Depends(get_insight_generator),
    store: DocumentStore = Depends(get_store),
):
    """Ask the model for three insights, keep them on the listing, return them.

    Unparsable model output degrades to an empty list. Rate limits propagate
    as InsightRateLimited and are rendered by the app-level handler.
    """
    if not body.property:
        raise HTTPException(400, "property_data_required")
    listing = body.property
    listing_id = listing.get("id")
    path = document_path("properties", listing_id) if listing_id else None
    rid = uuid.uuid4().hex[:12]
    try:
        text = await generator.generate(listing)
    except InsightRateLimited:
        raise
    except Exception as exc:
        logger.error("insights_generation_failed request_id=%s user=%s err=%s", rid, user.uid, exc)
        raise HTTPException(500, "insights_generation_failed")
    insights = extract_insights(text)

    if path:
        try:
            await store.update_document(path, {"aiInsights": insights}, must_exist=True)
        except UpstreamError as exc:
            logger.error("insights_persist_failed request_id=%s listing=%s err=%s", rid, listing_id, exc)
            raise HTTPException(500, "insights_generation_failed")
    logger.info("insights_ready request_id=%s listing=%s count=%d", rid, listing_id, len(insights))
    return InsightResponse(insights=insights)
