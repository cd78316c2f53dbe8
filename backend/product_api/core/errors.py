from __future__ import annotations


class KeyMaterialError(Exception):
    """Signing keys are missing, unreadable, or do not belong together."""


class AuthError(Exception):
    """Base class for authentication failures surfaced to the client."""


class InvalidCredentials(AuthError):
    """Unknown email or wrong password. The two cases are deliberately indistinguishable."""

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class UserAlreadyExists(Exception):
    def __init__(self, email: str) -> None:
        super().__init__(f"User with email {email} already exists")
        self.email = email


class StorageFailure(Exception):
    """A persistence-layer error. Not retried here; the HTTP layer answers 500."""

    def __init__(self, operation: str, cause: Exception | None = None) -> None:
        super().__init__(f"storage failure during {operation}")
        self.operation = operation
        if cause is not None:
            self.__cause__ = cause
