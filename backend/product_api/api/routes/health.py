import os
from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

router = APIRouter(tags=["health"])


def _release() -> str | None:
    return os.getenv("GIT_SHA") or None


@router.get("/healthcheck")
def healthcheck() -> Response:
    """Responds if the app is up and running."""
    return Response(status_code=200)


@router.get("/health")
def health(request: Request) -> dict:
    return {
        "status": "ok",
        "service": "product-api",
        "environment": request.app.state.settings.environment,
        "release": _release(),
        "time": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/readyz")
def readyz(request: Request, response: Response) -> dict:
    """
    Readiness check: verifies DB connectivity.
    Returns 503 when not ready.
    """
    checks: dict[str, object] = {}
    ok = True
    db = request.app.state.session_factory()
    try:
        db.execute(text("select 1"))
        checks["db"] = "ok"
    except SQLAlchemyError as e:
        ok = False
        checks["db"] = "error"
        checks["db_error"] = str(e)[:250]
    finally:
        db.close()

    if not ok:
        response.status_code = 503
    return {
        "status": "ok" if ok else "not_ready",
        "service": "product-api",
        "release": _release(),
        "checks": checks,
        "time": datetime.now(timezone.utc).isoformat(),
    }
