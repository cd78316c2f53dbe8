import json
import logging
import os
import time
import uuid
from typing import Optional

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from product_api.core.config import Settings
from product_api.core.metrics import HTTP_LATENCY, HTTP_REQUESTS


_SKIP_METRICS_ROUTES = ("/metrics", "/healthcheck", "/health", "/readyz")


def _release() -> Optional[str]:
    return os.getenv("GIT_SHA") or None


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Adds a request ID and logs one JSON line per request.
    Level follows the status family; Prometheus counters are fed from here too.
    """

    async def dispatch(self, request: Request, call_next):
        # Propagate a request id if provided by upstream (e.g. proxy), else generate.
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        start = time.time()
        logger = logging.getLogger("papi.http")
        try:
            response = await call_next(request)
        except Exception:
            route_obj = request.scope.get("route")
            payload = {
                "event": "http_exception",
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "route": getattr(route_obj, "path", None) or request.url.path,
                "status_code": 500,
                "duration_ms": int((time.time() - start) * 1000),
                "release": _release(),
            }
            logger.exception(json.dumps(payload, ensure_ascii=False))
            raise

        duration = time.time() - start
        route_obj = request.scope.get("route")
        route = getattr(route_obj, "path", None) or request.url.path
        payload = {
            "event": "http_request",
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "route": route,
            "status_code": response.status_code,
            "duration_ms": int(duration * 1000),
            "authenticated": getattr(request.state, "user", None) is not None,
            "client_ip": request.client.host if request.client else None,
            "user_agent": request.headers.get("user-agent"),
            "release": _release(),
        }
        if response.status_code >= 500:
            logger.error(json.dumps(payload, ensure_ascii=False))
        elif response.status_code >= 400:
            logger.warning(json.dumps(payload, ensure_ascii=False))
        else:
            logger.info(json.dumps(payload, ensure_ascii=False))

        if route not in _SKIP_METRICS_ROUTES:
            HTTP_REQUESTS.labels(request.method, route, str(response.status_code)).inc()
            HTTP_LATENCY.labels(request.method, route).observe(duration)

        response.headers["X-Request-ID"] = request_id
        return response


def configure_logging(level: str = "INFO") -> None:
    """Configure a sane default logging setup for the backend."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    # Ensure our loggers are visible even if uvicorn already configured logging
    logging.getLogger("papi").setLevel(level.upper())


def init_tracing(app: FastAPI, settings: Settings) -> None:
    """
    Attach request logging and, if configured, error tracing (Sentry).
    """
    configure_logging(settings.log_level)
    app.add_middleware(RequestLoggingMiddleware)

    if not settings.sentry_dsn:
        return

    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.sentry_env or settings.environment,
        release=_release(),
        integrations=[FastApiIntegration()],
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.05")),
        send_default_pii=False,
    )
    logging.getLogger("papi.tracing").info("Sentry tracing initialized")
