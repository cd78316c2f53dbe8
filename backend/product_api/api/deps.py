from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from product_api.api.middleware import Identity
from product_api.core.config import Settings
from product_api.core.tokens import TokenCodec
from product_api.db.session import get_db_session  # re-exported for convenience
from product_api.services.session_store import SessionStore
from product_api.services.sessions import SessionLifecycle
from product_api.services.users import UserStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


def get_user_store(
    db: Session = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> UserStore:
    return UserStore(db, bcrypt_rounds=settings.bcrypt_rounds)


def get_session_lifecycle(
    request: Request,
    db: Session = Depends(get_db_session),
    users: UserStore = Depends(get_user_store),
    codec: TokenCodec = Depends(get_token_codec),
) -> SessionLifecycle:
    state = request.app.state
    return SessionLifecycle(
        codec=codec,
        sessions=SessionStore(db),
        users=users,
        access_ttl=state.access_ttl,
        refresh_ttl=state.refresh_ttl,
    )


def require_user(request: Request) -> Identity:
    """Reject callers the authentication middleware could not identify."""
    identity = getattr(request.state, "user", None)
    if identity is None:
        raise HTTPException(status_code=403, detail="Forbidden")
    return identity
