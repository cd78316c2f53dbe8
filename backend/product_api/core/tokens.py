from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError

from product_api.core.keys import KeyPair

logger = logging.getLogger("papi.tokens")

ACCESS = "access"
REFRESH = "refresh"


class TokenFailure(str, enum.Enum):
    malformed = "malformed"
    signature_invalid = "signature_invalid"
    expired = "expired"
    invalid_claims = "invalid_claims"


@dataclass(frozen=True)
class VerifyResult:
    valid: bool
    expired: bool
    payload: Optional[dict[str, Any]]
    failure: Optional[TokenFailure] = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenCodec:
    """
    Signs and verifies compact JWTs with the process key pair.

    Verification never raises: every outcome is reported through VerifyResult and
    failures are logged at info level.
    """

    def __init__(
        self,
        key_pair: KeyPair,
        algorithm: str = "RS256",
        default_ttl: timedelta = timedelta(minutes=15),
        leeway_seconds: int = 0,
    ) -> None:
        self._keys = key_pair
        self._algorithm = algorithm
        self._default_ttl = default_ttl
        self._leeway = int(leeway_seconds)

    def issue(self, payload: Mapping[str, Any], ttl: Optional[timedelta] = None) -> str:
        now = _utcnow()
        claims = {
            **payload,
            "iat": int(now.timestamp()),
            "exp": now + (ttl if ttl is not None else self._default_ttl),
        }
        return jwt.encode(claims, self._keys.private_pem, algorithm=self._algorithm)

    def _decode(self, token: str, verify_exp: bool = True) -> dict[str, Any]:
        return jwt.decode(
            token,
            self._keys.public_pem,
            algorithms=[self._algorithm],
            options={"verify_exp": verify_exp, "leeway": self._leeway},
        )

    def verify(self, token: str) -> VerifyResult:
        try:
            jwt.get_unverified_header(token)
        except JWTError as e:
            return self._failed(TokenFailure.malformed, e)

        try:
            payload = self._decode(token)
        except ExpiredSignatureError as e:
            return self._failed(TokenFailure.expired, e)
        except JWTClaimsError as e:
            return self._failed(TokenFailure.invalid_claims, e)
        except JWTError as e:
            return self._failed(TokenFailure.signature_invalid, e)
        return VerifyResult(valid=True, expired=False, payload=payload)

    def peek_claims(self, token: str) -> Optional[dict[str, Any]]:
        """Claims of a correctly signed token, whether or not it has expired."""
        try:
            return self._decode(token, verify_exp=False)
        except JWTError as e:
            logger.info("token_peek_failed error=%s", e)
            return None

    @staticmethod
    def _failed(failure: TokenFailure, error: Exception) -> VerifyResult:
        logger.info("token_verify_failed reason=%s error=%s", failure.value, error)
        return VerifyResult(
            valid=False,
            expired=failure is TokenFailure.expired,
            payload=None,
            failure=failure,
        )
