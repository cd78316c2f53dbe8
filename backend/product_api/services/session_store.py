from __future__ import annotations

import uuid
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from product_api.core.errors import StorageFailure
from product_api.core.metrics import observe_db
from product_api.models.session import UserSession


class SessionStore:
    """
    Persisted login sessions.

    The only mutation after creation is `valid: true -> false`, done as a single
    conditional UPDATE, so concurrent invalidate/lookup calls need no locking.
    Every SQLAlchemy error leaves here as StorageFailure.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def create(self, user_id: int, user_agent: Optional[str]) -> UserSession:
        sess = UserSession(id=str(uuid.uuid4()), user_id=int(user_id), valid=True, user_agent=user_agent or "")
        try:
            with observe_db("createSession"):
                self.db.add(sess)
                self.db.commit()
                self.db.refresh(sess)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageFailure("createSession", e) from e
        return sess

    def find_by_id(self, session_id: str) -> Optional[UserSession]:
        if not session_id:
            return None
        try:
            with observe_db("findSession"):
                return self.db.get(UserSession, str(session_id))
        except SQLAlchemyError as e:
            raise StorageFailure("findSession", e) from e

    def find_active_by_user(self, user_id: int) -> List[UserSession]:
        try:
            with observe_db("findSessions"):
                return (
                    self.db.query(UserSession)
                    .filter(UserSession.user_id == int(user_id), UserSession.valid.is_(True))
                    .order_by(UserSession.created_at.desc())
                    .all()
                )
        except SQLAlchemyError as e:
            raise StorageFailure("findSessions", e) from e

    def invalidate(self, session_id: str) -> None:
        """Idempotent: revoked or unknown ids are a no-op."""
        if not session_id:
            return
        try:
            with observe_db("updateSession"):
                self.db.query(UserSession).filter(
                    UserSession.id == str(session_id),
                    UserSession.valid.is_(True),
                ).update({"valid": False, "updated_at": func.now()}, synchronize_session=False)
                self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageFailure("updateSession", e) from e
