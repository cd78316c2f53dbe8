from fastapi import APIRouter, HTTPException, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest


router = APIRouter(tags=["metrics"])


@router.get("/metrics")
def metrics(request: Request) -> Response:
    """
    Prometheus metrics endpoint.

    - In production, it is disabled unless METRICS_TOKEN is set, and then requires
      Authorization: Bearer <token>
    """
    settings = request.app.state.settings
    token = settings.metrics_token

    if settings.environment == "production":
        # Do not expose metrics publicly unless explicitly enabled
        if not token:
            raise HTTPException(status_code=404, detail="Not found")
        auth = request.headers.get("authorization") or ""
        if auth != f"Bearer {token}":
            raise HTTPException(status_code=403, detail="Forbidden")

    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
