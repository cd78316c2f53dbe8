from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, true
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func

from product_api.db.base import Base


class UserSession(Base):
    """
    One login. Refresh tokens carry its id; once `valid` is false every refresh
    token pointing here stops working, even if still cryptographically valid.

    Rows are never deleted.
    """

    __tablename__ = "sessions"

    # UUID string
    id = Column(String(36), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    valid = Column(Boolean, nullable=False, default=True, server_default=true(), index=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="sessions")

    @validates("valid")
    def _revocation_is_terminal(self, key, value):
        if self.valid is False and value:
            raise ValueError(f"session {self.id} is revoked and cannot be reactivated")
        return value
