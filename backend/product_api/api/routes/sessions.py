import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from product_api.api.deps import get_app_settings, get_session_lifecycle, require_user
from product_api.api.middleware import Identity
from product_api.core.config import Settings
from product_api.core.errors import InvalidCredentials
from product_api.schemas.session import (
    CreateSessionInput,
    CreateSessionResponse,
    DeleteSessionResponse,
    SessionOut,
)
from product_api.services.sessions import SessionLifecycle

router = APIRouter(prefix="/api/sessions", tags=["sessions"])
logger = logging.getLogger("papi.auth")


@router.post("", response_model=CreateSessionResponse)
def create_session(
    body: CreateSessionInput,
    request: Request,
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
) -> CreateSessionResponse:
    """Log in: open a session and return an access/refresh token pair."""
    try:
        pair = lifecycle.login(body.email, body.password, request.headers.get("user-agent"))
    except InvalidCredentials as e:
        raise HTTPException(status_code=401, detail=str(e))
    return CreateSessionResponse(accessToken=pair.access_token, refreshToken=pair.refresh_token)


@router.get("", response_model=List[SessionOut])
def list_sessions(
    identity: Identity = Depends(require_user),
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
) -> List[SessionOut]:
    """Active sessions of the current user."""
    rows = lifecycle.sessions.find_active_by_user(identity.user_id)
    return [SessionOut.model_validate(s) for s in rows]


@router.delete("", response_model=DeleteSessionResponse)
def delete_session(
    request: Request,
    identity: Identity = Depends(require_user),
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
    settings: Settings = Depends(get_app_settings),
) -> DeleteSessionResponse:
    """
    Log out. Revokes the session behind the caller's refresh token header.

    Always succeeds: a missing, foreign or already revoked session leaves nothing
    usable either way.
    """
    refresh_token = request.headers.get(settings.refresh_token_header) or ""
    if not refresh_token:
        logger.info("logout_without_refresh_header user_id=%s", identity.user_id)
    session_id = lifecycle.session_id_from_refresh_token(refresh_token) if refresh_token else None
    if session_id:
        session = lifecycle.sessions.find_by_id(session_id)
        if session is not None and int(session.user_id) == identity.user_id:
            lifecycle.logout(session_id)
    return DeleteSessionResponse(accessToken=None, refreshToken=None)
