from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional

from product_api.core.errors import InvalidCredentials
from product_api.core.tokens import ACCESS, REFRESH, TokenCodec
from product_api.models.user import User
from product_api.services.session_store import SessionStore
from product_api.services.users import UserStore

logger = logging.getLogger("papi.auth")


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    session_id: str


def access_claims(user: User) -> Dict[str, Any]:
    """Identity snapshot embedded in access tokens, read fresh from the user row."""
    return {"sub": str(user.id), "email": user.email, "name": user.name, "typ": ACCESS}


class SessionLifecycle:
    """
    Login, logout and access-token reissue.

    A session moves ACTIVE -> REVOKED exactly once. Access tokens do not reference
    the session and are never revoked; they just expire. Refresh tokens carry only
    the session id and are honoured while that session is still valid.
    """

    def __init__(
        self,
        codec: TokenCodec,
        sessions: SessionStore,
        users: UserStore,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
    ) -> None:
        self.codec = codec
        self.sessions = sessions
        self.users = users
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    def login(self, email: str, password: str, user_agent: Optional[str]) -> TokenPair:
        user = self.users.find_by_email(email)
        if user is None or not self.users.verify_password(user, password):
            logger.info("login_failed reason=invalid_credentials")
            raise InvalidCredentials()

        session = self.sessions.create(user.id, user_agent)
        access_token = self.codec.issue(access_claims(user), ttl=self.access_ttl)
        refresh_token = self.codec.issue({"sid": session.id, "typ": REFRESH}, ttl=self.refresh_ttl)
        logger.info("login_succeeded user_id=%s session_id=%s", user.id, session.id)
        return TokenPair(access_token=access_token, refresh_token=refresh_token, session_id=session.id)

    def logout(self, session_id: str) -> None:
        self.sessions.invalidate(session_id)
        logger.info("session_revoked session_id=%s", session_id)

    def reissue_access_token(self, refresh_token: str) -> Optional[str]:
        """
        Fresh access token for a refresh token whose session is still valid, else None.

        The refresh token itself is never rotated.
        """
        result = self.codec.verify(refresh_token)
        if not result.valid or result.payload is None:
            return None
        if result.payload.get("typ") != REFRESH:
            logger.info("refresh_rejected reason=wrong_token_type")
            return None

        session_id = str(result.payload.get("sid") or "")
        session = self.sessions.find_by_id(session_id)
        if session is None or not session.valid:
            logger.info("refresh_rejected reason=session_revoked session_id=%s", session_id or None)
            return None

        user = self.users.get(session.user_id)
        if user is None:
            logger.info("refresh_rejected reason=user_missing session_id=%s", session_id)
            return None

        return self.codec.issue(access_claims(user), ttl=self.access_ttl)

    def session_id_from_refresh_token(self, refresh_token: str) -> Optional[str]:
        """Session behind a correctly signed refresh token, even an expired one."""
        claims = self.codec.peek_claims(refresh_token)
        if not claims or claims.get("typ") != REFRESH:
            return None
        return str(claims.get("sid") or "") or None
