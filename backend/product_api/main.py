from datetime import timedelta
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker

from product_api import models  # noqa: F401  (registers tables on Base.metadata)
from product_api.api.middleware import DeserializeUserMiddleware, storage_failure_response
from product_api.api.routes import health as health_routes
from product_api.api.routes import metrics as metrics_routes
from product_api.api.routes import products as products_routes
from product_api.api.routes import sessions as sessions_routes
from product_api.api.routes import users as users_routes
from product_api.core.config import Settings, get_settings
from product_api.core.errors import StorageFailure
from product_api.core.keys import load_key_pair
from product_api.core.tokens import TokenCodec
from product_api.core.tracing import init_tracing
from product_api.db.base import Base
from product_api.db.migrations import run_migrations_on_startup
from product_api.db.session import SessionLocal, engine


def create_app(settings: Optional[Settings] = None, session_factory: Optional[sessionmaker] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title=settings.app_name)

    # Fails fast: a process without usable signing keys must not serve requests.
    key_pair = load_key_pair(settings)
    app.state.settings = settings
    app.state.access_ttl = timedelta(minutes=settings.access_token_ttl_minutes)
    app.state.refresh_ttl = timedelta(minutes=settings.refresh_token_ttl_minutes)
    app.state.token_codec = TokenCodec(
        key_pair,
        algorithm=settings.jwt_algorithm,
        default_ttl=app.state.access_ttl,
        leeway_seconds=settings.token_leeway_seconds,
    )
    app.state.session_factory = session_factory or SessionLocal

    @app.on_event("startup")
    def _startup_migrations() -> None:
        run_migrations_on_startup()

    @app.exception_handler(StorageFailure)
    async def _storage_failure(request: Request, exc: StorageFailure) -> JSONResponse:
        return storage_failure_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def _validation_failed(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    # Resolves request.state.user; runs inside the request logger below.
    app.add_middleware(DeserializeUserMiddleware)

    # CORS: the refreshed access token travels in a response header browsers must be allowed to read
    origins = [o.strip() for o in settings.backend_cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[settings.access_token_response_header],
    )

    # Observability: configure logging + optional error tracing
    init_tracing(app, settings)

    # Routers
    app.include_router(health_routes.router)
    app.include_router(metrics_routes.router)
    app.include_router(users_routes.router)
    app.include_router(sessions_routes.router)
    app.include_router(products_routes.router)

    # Auto-create tables only in non-production for local/dev convenience.
    # In production all schema changes must go through Alembic migrations.
    if session_factory is None and settings.environment != "production":
        Base.metadata.create_all(bind=engine)

    return app


app = create_app()
