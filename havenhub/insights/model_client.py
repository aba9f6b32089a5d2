"""Model client for listing insights.

Extended description:
        * Encapsulates provider/model setup (currently Gemini through pydantic-ai)
            so swapping vendors only touches this file.
        * Exposes a single async API (InsightGenerator.generate) returning the
            model's free text; extract_insights pulls the JSON array out of it.
        * Rate limiting is reported separately (InsightRateLimited) so the route
            can forward the provider's retry hint.
"""

import json
import logging
import re
import time
from typing import Any, List, Mapping, Optional

from pydantic_ai import Agent
from pydantic_ai.exceptions import ModelHTTPError
from pydantic_ai.models import Model
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.providers.google import GoogleProvider

from havenhub.core.config import Settings
from havenhub.core.errors import InsightRateLimited, InsightsNotConfigured
from havenhub.insights.prompts import SYSTEM_PROMPT_BASE, build_insight_prompt

logger = logging.getLogger("haven.insights")

ARRAY_RX = re.compile(r"\[.*\]", re.DOTALL)  # first '[' through last ']'


def extract_insights(text: Optional[str]) -> List[str]:
    """Pull the bracketed JSON array out of free model text.

    Anything that does not parse to a list yields []; the request never fails
    because of the model's formatting.
    """
    if not text:
        return []
    m = ARRAY_RX.search(text)
    if not m:
        return []
    try:
        parsed = json.loads(m.group(0))
    except ValueError:
        logger.info("insights_unparsable snippet=%s", m.group(0)[:200].replace("\n", " "))
        return []
    if not isinstance(parsed, list):
        return []
    return [x if isinstance(x, str) else json.dumps(x) for x in parsed]


def find_retry_delay(body: Any) -> Optional[str]:
    """Locate a `retryDelay` hint (e.g. "31s") anywhere inside a provider error body."""
    if isinstance(body, Mapping):
        if body.get("retryDelay"):
            return str(body["retryDelay"])
        for v in body.values():
            found = find_retry_delay(v)
            if found:
                return found
    elif isinstance(body, (list, tuple)):
        for v in body:
            found = find_retry_delay(v)
            if found:
                return found
    elif isinstance(body, str) and "retryDelay" in body:
        try:
            return find_retry_delay(json.loads(body))
        except ValueError:
            return None
    return None


class InsightGenerator:
    """Single-turn text generation for one listing.

    Key points:
        - Model is built from settings unless one is injected (tests pass a
          pydantic-ai FunctionModel).
        - Output is plain text; parsing is left to extract_insights.
    """

    def __init__(self, settings: Settings, model: Optional[Model] = None):
        self.settings = settings
        if model is None:
            if not settings.GEMINI_API_KEY:
                raise InsightsNotConfigured("GEMINI_API_KEY is not set in the environment.")
            model = GoogleModel(settings.GEMINI_MODEL, provider=GoogleProvider(api_key=settings.GEMINI_API_KEY))
        self.agent = Agent(model, instructions=SYSTEM_PROMPT_BASE)

    async def generate(self, listing: Mapping[str, Any]) -> str:
        prompt = build_insight_prompt(listing)
        t0 = time.time()
        try:
            result = await self.agent.run(prompt)
        except ModelHTTPError as exc:
            if exc.status_code == 429:
                delay = find_retry_delay(exc.body)
                logger.warning("insights_rate_limited model=%s retry_delay=%s", exc.model_name, delay)
                raise InsightRateLimited(delay) from exc
            logger.error("insights_model_http_error status=%s model=%s", exc.status_code, exc.model_name)
            raise
        latency_ms = int((time.time() - t0) * 1000)
        logger.info("insights_generated listing=%s latency_ms=%d", listing.get("id"), latency_ms)
        return result.output
