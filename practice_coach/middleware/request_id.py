import json
import logging
import time
import uuid
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..telemetry import HTTP_REQUEST_DURATION_SECONDS, HTTP_REQUESTS_TOTAL

logger = logging.getLogger("practice_coach.http")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Accepts or generates X-Request-Id, keeps it on request.state, and echoes it on the response.

    Records HTTP metrics and logs one JSON line per request.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable):
        t0 = time.perf_counter()
        req_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        request.state.request_id = req_id
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-Id"] = req_id
            return response
        finally:
            elapsed = time.perf_counter() - t0
            route = request.scope.get("route")
            # Route template keeps per-session ids out of the label set
            path = getattr(route, "path", None) or "unmatched"
            HTTP_REQUESTS_TOTAL.labels(
                method=request.method, path=path, status_class=f"{status_code // 100}xx"
            ).inc()
            HTTP_REQUEST_DURATION_SECONDS.labels(method=request.method, path=path).observe(elapsed)
            logger.info(json.dumps({
                "event": "http_request",
                "requestId": req_id,
                "method": request.method,
                "path": request.url.path,
                "route": path,
                "status": status_code,
                "latency_ms": int(elapsed * 1000),
            }))
