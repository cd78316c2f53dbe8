from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Union

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from product_api.core.errors import StorageFailure
from product_api.core.metrics import TOKEN_REFRESHES
from product_api.core.tokens import ACCESS, TokenCodec
from product_api.services.session_store import SessionStore
from product_api.services.sessions import SessionLifecycle
from product_api.services.users import UserStore

logger = logging.getLogger("papi.auth")

_BEARER = re.compile(r"^Bearer\s+", re.IGNORECASE)


@dataclass(frozen=True)
class Identity:
    user_id: int
    email: str
    name: str
    claims: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> Optional["Identity"]:
        if claims.get("typ") != ACCESS:
            return None
        try:
            user_id = int(claims.get("sub"))
        except (TypeError, ValueError):
            return None
        return cls(
            user_id=user_id,
            email=str(claims.get("email") or ""),
            name=str(claims.get("name") or ""),
            claims=dict(claims),
        )


@dataclass(frozen=True)
class Authenticated:
    identity: Identity
    # Set only when the access token was reissued during this request.
    new_access_token: Optional[str] = None


@dataclass(frozen=True)
class Unauthenticated:
    pass


AuthResult = Union[Authenticated, Unauthenticated]


def storage_failure_response(request: Request, exc: StorageFailure) -> JSONResponse:
    logger.error("storage_failure operation=%s path=%s", exc.operation, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def bearer_token(header_value: Optional[str]) -> str:
    return _BEARER.sub("", (header_value or "").strip(), count=1).strip()


def authenticate(
    access_token: str,
    refresh_token: Optional[str],
    codec: TokenCodec,
    reissue: Callable[[str], Optional[str]],
) -> AuthResult:
    """
    Resolve the caller's identity. Never raises for token problems: anything short
    of a verified access token (or a successful reissue) is Unauthenticated.
    Storage errors from `reissue` propagate.
    """
    if not access_token:
        return Unauthenticated()

    result = codec.verify(access_token)
    if result.valid and result.payload is not None:
        identity = Identity.from_claims(result.payload)
        return Authenticated(identity) if identity else Unauthenticated()

    if not result.expired or not refresh_token:
        return Unauthenticated()

    new_access_token = reissue(refresh_token)
    if not new_access_token:
        TOKEN_REFRESHES.labels("rejected").inc()
        return Unauthenticated()

    fresh = codec.verify(new_access_token)
    identity = Identity.from_claims(fresh.payload) if fresh.payload else None
    if identity is None:
        TOKEN_REFRESHES.labels("rejected").inc()
        return Unauthenticated()
    TOKEN_REFRESHES.labels("reissued").inc()
    logger.info("access_token_reissued user_id=%s", identity.user_id)
    return Authenticated(identity, new_access_token=new_access_token)


class DeserializeUserMiddleware(BaseHTTPMiddleware):
    """
    Attaches `request.state.user` (Identity or None) to every request.

    Expired access tokens are transparently replaced using the refresh token header;
    the replacement goes back to the client in the configured response header.
    """

    async def dispatch(self, request: Request, call_next):
        state = request.app.state
        settings = state.settings
        codec: TokenCodec = state.token_codec

        access_token = bearer_token(request.headers.get("authorization"))
        refresh_token = request.headers.get(settings.refresh_token_header)

        def reissue(token: str) -> Optional[str]:
            db = state.session_factory()
            try:
                lifecycle = SessionLifecycle(
                    codec=codec,
                    sessions=SessionStore(db),
                    users=UserStore(db, bcrypt_rounds=settings.bcrypt_rounds),
                    access_ttl=state.access_ttl,
                    refresh_ttl=state.refresh_ttl,
                )
                return lifecycle.reissue_access_token(token)
            finally:
                db.close()

        try:
            result = await run_in_threadpool(authenticate, access_token, refresh_token, codec, reissue)
        except StorageFailure as exc:
            # Raised outside the app exception handlers; answer the same way they do.
            return storage_failure_response(request, exc)

        request.state.user = result.identity if isinstance(result, Authenticated) else None
        response = await call_next(request)
        if isinstance(result, Authenticated) and result.new_access_token:
            response.headers[settings.access_token_response_header] = result.new_access_token
        return response
