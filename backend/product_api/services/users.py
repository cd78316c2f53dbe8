from __future__ import annotations

import logging
from typing import Optional

import bcrypt
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from product_api.core.errors import StorageFailure, UserAlreadyExists
from product_api.core.metrics import observe_db
from product_api.models.user import User

logger = logging.getLogger("papi.auth")

# bcrypt only looks at the first 72 bytes; bcrypt>=5 refuses longer input.
BCRYPT_MAX_PASSWORD_BYTES = 72


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


class UserStore:
    """Credential store backed by the `users` table."""

    def __init__(self, db: Session, bcrypt_rounds: int = 10) -> None:
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    def get(self, user_id: int) -> Optional[User]:
        try:
            with observe_db("findUser"):
                return self.db.get(User, user_id)
        except SQLAlchemyError as e:
            raise StorageFailure("findUser", e) from e

    def find_by_email(self, email: str) -> Optional[User]:
        email = normalize_email(email)
        if not email:
            return None
        try:
            with observe_db("findUserByEmail"):
                return self.db.query(User).filter(func.lower(User.email) == email).first()
        except SQLAlchemyError as e:
            raise StorageFailure("findUserByEmail", e) from e

    @staticmethod
    def verify_password(user: User, plaintext: str) -> bool:
        if not user.hashed_password:
            return False
        if len(plaintext.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            logger.info("login_rejected reason=password_too_long user_id=%s", user.id)
            return False
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), user.hashed_password.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash
            logger.warning("password_hash_unreadable user_id=%s", user.id)
            return False

    def create(self, email: str, name: str, password: str) -> User:
        email = normalize_email(email)
        if self.find_by_email(email) is not None:
            raise UserAlreadyExists(email)

        user = User(email=email, name=name.strip(), hashed_password=hash_password(password, self.bcrypt_rounds))
        try:
            with observe_db("createUser"):
                self.db.add(user)
                self.db.commit()
                self.db.refresh(user)
        except IntegrityError as e:
            self.db.rollback()
            # Lost a race against a concurrent registration
            raise UserAlreadyExists(email) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageFailure("createUser", e) from e
        logger.info("user_created user_id=%s", user.id)
        return user
