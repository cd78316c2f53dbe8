import base64
import os

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


def _pem_pair():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("ascii")
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")
    return private_pem, public_pem


def _b64(pem: str) -> str:
    return base64.b64encode(pem.encode("ascii")).decode("ascii")


# Use in-memory SQLite for tests by default, can be overridden via TEST_DATABASE_URL
TEST_DB_URL = os.getenv("TEST_DATABASE_URL", "sqlite+pysqlite:///:memory:")
TEST_PRIVATE_PEM, TEST_PUBLIC_PEM = _pem_pair()

# The app is imported below and builds its settings/engine at import time.
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DATABASE_URL", TEST_DB_URL)
os.environ["PRIVATE_KEY"] = _b64(TEST_PRIVATE_PEM)
os.environ["PUBLIC_KEY"] = _b64(TEST_PUBLIC_PEM)
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from product_api.core.config import Settings  # noqa: E402
from product_api.core.keys import KeyPair  # noqa: E402
from product_api.core.tokens import TokenCodec  # noqa: E402
from product_api.db.base import Base  # noqa: E402
from product_api.main import create_app  # noqa: E402
from product_api.services.users import UserStore  # noqa: E402


@pytest.fixture(scope="session")
def key_pair() -> KeyPair:
    return KeyPair(private_pem=TEST_PRIVATE_PEM, public_pem=TEST_PUBLIC_PEM)


@pytest.fixture(scope="session")
def other_key_pair() -> KeyPair:
    private_pem, public_pem = _pem_pair()
    return KeyPair(private_pem=private_pem, public_pem=public_pem)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def codec(key_pair) -> TokenCodec:
    return TokenCodec(key_pair)


@pytest.fixture(scope="function")
def engine():
    # Important: in-memory SQLite needs StaticPool to keep the same DB across connections.
    kwargs = {"connect_args": {"check_same_thread": False}}
    if TEST_DB_URL.endswith(":memory:"):
        kwargs["poolclass"] = StaticPool
    eng = create_engine(TEST_DB_URL, **kwargs)
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(bind=eng)


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def app(settings, session_factory):
    return create_app(settings=settings, session_factory=session_factory)


@pytest.fixture(scope="function")
def client(app):
    return TestClient(app)


@pytest.fixture
def user_store(db_session) -> UserStore:
    return UserStore(db_session, bcrypt_rounds=4)


@pytest.fixture
def jane(user_store):
    return user_store.create(email="jane.doe@example.com", name="Jane Doe", password="Password123")
