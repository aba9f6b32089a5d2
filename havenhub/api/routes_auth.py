"""Login / registration passthrough to the identity provider (/api/auth...)."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from havenhub.api.schemas import AuthResponse, AuthTokens, AuthUserOut, LoginRequest, RegisterRequest
from havenhub.auth.dependencies import get_identity
from havenhub.auth.identity_client import IdentityClient
from havenhub.core.errors import IdentityError, UpstreamError

logger = logging.getLogger("haven.auth")
router_auth = APIRouter(prefix="/api/auth", tags=["auth"])


def _tokens(data: dict) -> AuthTokens:
    return AuthTokens(
        idToken=data.get("idToken"),
        refreshToken=data.get("refreshToken"),
        expiresIn=data.get("expiresIn"),
    )


@router_auth.post("/login", response_model=AuthResponse, response_model_exclude_none=True)
async def login(body: LoginRequest, identity: IdentityClient = Depends(get_identity)):
    if not body.email or not body.password:
        raise HTTPException(400, "email_and_password_required")
    try:
        data = await identity.sign_in(body.email, body.password)
    except IdentityError as exc:
        raise HTTPException(401, exc.code)
    except UpstreamError as exc:
        logger.error("login_failed err=%s", exc)
        raise HTTPException(401, "login_failed")
    return AuthResponse(
        message="Login successful",
        user=AuthUserOut(uid=data.get("localId"), email=body.email),
        tokens=_tokens(data),
    )


@router_auth.post("/register", response_model=AuthResponse, response_model_exclude_none=True, status_code=201)
async def register(body: RegisterRequest, identity: IdentityClient = Depends(get_identity)):
    if not body.email or not body.password or not body.name:
        raise HTTPException(400, "email_password_and_name_required")
    try:
        data = await identity.sign_up(body.email, body.password)
    except IdentityError as exc:
        raise HTTPException(500, exc.code)
    except UpstreamError as exc:
        logger.error("registration_failed err=%s", exc)
        raise HTTPException(500, "registration_failed")

    # signUp cannot set the display name; a failure here does not undo the account.
    try:
        await identity.update_profile(data.get("idToken", ""), body.name)
    except UpstreamError as exc:
        logger.warning("display_name_update_failed uid=%s err=%s", data.get("localId"), exc)

    return AuthResponse(
        message="User registered successfully",
        user=AuthUserOut(uid=data.get("localId"), email=data.get("email") or body.email, displayName=body.name),
        tokens=_tokens(data),
    )
