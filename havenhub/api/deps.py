"""Per-request upstream clients, injected with Depends so tests can override them."""

import logging
from typing import AsyncIterator

from fastapi import Depends, HTTPException

from havenhub.core.config import Settings, get_settings
from havenhub.core.errors import InsightsNotConfigured
from havenhub.firestore.client import DocumentStore
from havenhub.insights.model_client import InsightGenerator

logger = logging.getLogger("haven.api")


async def get_store(settings: Settings = Depends(get_settings)) -> AsyncIterator[DocumentStore]:
    try:
        store = DocumentStore(settings)
    except RuntimeError as exc:
        logger.error("store_not_configured err=%s", exc)
        raise HTTPException(500, "store_not_configured")
    try:
        yield store
    finally:
        await store.close()


def get_insight_generator(settings: Settings = Depends(get_settings)) -> InsightGenerator:
    try:
        return InsightGenerator(settings)
    except InsightsNotConfigured:
        raise HTTPException(500, "gemini_api_key_not_configured")
