"""FastAPI dependencies for authenticated routes.

require_user reads `Authorization: Bearer <token>`, asks the identity
provider who the token belongs to and hands an AuthUser to the route. Any
failure raises 401 before the route body runs.
"""

import logging
from typing import AsyncIterator, Optional

from fastapi import Depends, Header, HTTPException
from pydantic import BaseModel

from havenhub.auth.identity_client import IdentityClient
from havenhub.core.config import Settings, get_settings
from havenhub.core.errors import UpstreamError

logger = logging.getLogger("haven.auth")


class AuthUser(BaseModel):
    uid: str
    email: Optional[str] = None


async def get_identity(settings: Settings = Depends(get_settings)) -> AsyncIterator[IdentityClient]:
    identity = IdentityClient(settings)
    try:
        yield identity
    finally:
        await identity.close()


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization.split("Bearer ", 1)[1].strip()
    return token or None


async def require_user(
    authorization: Optional[str] = Header(None),
    identity: IdentityClient = Depends(get_identity),
) -> AuthUser:
    token = bearer_token(authorization)
    if token is None:
        raise HTTPException(401, "unauthorized_no_token")
    try:
        account = await identity.lookup(token)
    except UpstreamError as exc:
        logger.info("auth_lookup_failed err=%s", exc)
        raise HTTPException(401, "unauthorized_invalid_token")
    if not account or not account.get("localId"):
        raise HTTPException(401, "unauthorized_invalid_token")
    return AuthUser(uid=account["localId"], email=account.get("email"))
