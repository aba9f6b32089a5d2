"""Async client for the identity REST interface (sign-in, sign-up, profile, token lookup).

Token checks are delegated entirely to the provider: nothing is verified or
cached locally.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from havenhub.core.config import Settings
from havenhub.core.errors import IdentityError, UpstreamError

logger = logging.getLogger("haven.auth")


class IdentityClient:
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        params = {"key": settings.FIREBASE_API_KEY} if settings.FIREBASE_API_KEY else None
        self.base_url = settings.IDENTITY_BASE_URL.rstrip("/")
        self.client = httpx.AsyncClient(
            timeout=settings.HTTP_TIMEOUT,
            params=params,
            transport=transport,
        )

    async def _post(self, action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            r = await self.client.post(f"{self.base_url}/accounts:{action}", json=payload)
        except httpx.HTTPError as exc:
            logger.warning("identity_transport_error action=%s err=%s", action, exc)
            raise UpstreamError("identity", None, str(exc)) from exc
        if r.status_code >= 400:
            code = _error_code(r)
            logger.info("identity_rejected action=%s status=%s code=%s", action, r.status_code, code)
            raise IdentityError(r.status_code, code)
        return r.json() or {}

    async def lookup(self, id_token: str) -> Optional[Dict[str, Any]]:
        """Return the first account matching the token, or None."""
        data = await self._post("lookup", {"idToken": id_token})
        users = data.get("users") or []
        return users[0] if users else None

    async def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        return await self._post("signInWithPassword", {"email": email, "password": password, "returnSecureToken": True})

    async def sign_up(self, email: str, password: str) -> Dict[str, Any]:
        return await self._post("signUp", {"email": email, "password": password, "returnSecureToken": True})

    async def update_profile(self, id_token: str, display_name: str) -> Dict[str, Any]:
        return await self._post("update", {"idToken": id_token, "displayName": display_name, "returnSecureToken": False})

    async def close(self):
        await self.client.aclose()


def _error_code(r: httpx.Response) -> str:
    """Provider error code from {"error": {"message": "INVALID_PASSWORD"}} bodies."""
    try:
        body = r.json()
    except ValueError:
        return f"http_{r.status_code}"
    err = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, dict) and err.get("message"):
        return str(err["message"])
    return f"http_{r.status_code}"
