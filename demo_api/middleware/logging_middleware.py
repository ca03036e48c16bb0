"""
Access logging middleware
=========================
One structured `request` record per call on logger `demo_api.access`,
tagged with the selected scenario, plus an `X-Request-ID` correlation
header (echoed when the caller sent one, minted otherwise).

Slow calls raise a `slow_request` warning unless the caller asked for the
wait: `/api/delay` and the `timeout` scenario of the FSC endpoints are
logged as `requested_delay` at INFO instead.

The correlation id is transport-level; it is independent of the
`requestId` carried inside response envelopes.
"""
import time
import uuid
import logging
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from demo_api.config import settings

logger = logging.getLogger("demo_api.access")

_SKIP_PATHS = frozenset(["/health", "/metrics", "/favicon.ico"])


def requested_delay(path: str, scenario: Optional[str]) -> bool:
    """True when the caller asked this request to be slow."""
    return path == f"{settings.API_PREFIX}/delay" or scenario == "timeout"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Scenario-tagged access log + correlation id."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        correlation_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = correlation_id

        path = request.url.path
        scenario = (request.query_params.get("scenario") or "").lower() or None

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)

        response.headers["X-Request-ID"] = correlation_id

        if path in _SKIP_PATHS:
            return response

        logger.info(
            "request",
            extra={
                "request_id": correlation_id,
                "method": request.method,
                "path": path,
                "scenario": scenario,
                "status": response.status_code,
                "duration_ms": elapsed_ms,
                "client": request.client.host if request.client else "-",
            },
        )

        if elapsed_ms > settings.SLOW_REQUEST_MS:
            record = {"request_id": correlation_id, "path": path, "scenario": scenario, "duration_ms": elapsed_ms}
            if requested_delay(path, scenario):
                logger.info("requested_delay", extra=record)
            else:
                logger.warning("slow_request", extra=record)

        return response
