from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import Session, sessionmaker

from product_api.core.config import get_settings


def build_engine(db_url: str) -> Engine:
    try:
        is_sqlite = make_url(db_url).get_backend_name() == "sqlite"
    except Exception:
        # Fallback: handle values like "sqlite+pysqlite:///:memory:"
        is_sqlite = db_url.startswith("sqlite")

    if is_sqlite:
        # SQLite: limited concurrency; avoid unsupported pool args
        return create_engine(
            db_url,
            connect_args={"check_same_thread": False},
            pool_pre_ping=True,
            echo=False,
        )
    # Postgres/MySQL: enable pooling
    return create_engine(
        db_url,
        pool_pre_ping=True,
        pool_size=20,
        max_overflow=10,
        pool_recycle=3600,
        echo=False,
    )


engine = build_engine(get_settings().database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db_session(request: Request) -> Iterator[Session]:
    """Yield a DB session from the factory the app was created with."""
    factory = getattr(request.app.state, "session_factory", None) or SessionLocal
    db = factory()
    try:
        yield db
    except Exception:
        # Ensure failed requests don't leave transactions open
        db.rollback()
        raise
    finally:
        db.close()
