"""
Delay API
=========
Answers after `?ms=` milliseconds (default 1000, clamped to 0~30000).
For exercising client timeout handling.
"""
import time

from fastapi import APIRouter, Request

from demo_api.config import settings
from demo_api.routers._common import (
    CamelModel,
    envelope_response,
    is_preflight,
    new_request_id,
    parse_int,
    preflight_response,
    sleep,
    success,
)

router = APIRouter()


class DelayResult(CamelModel):
    requested_delay: int
    actual_delay: int
    message: str


def clamp_delay(ms: int | None) -> int:
    if ms is None:
        ms = settings.DEFAULT_DELAY_MS
    return max(0, min(ms, settings.MAX_DELAY_MS))


@router.api_route("/delay", methods=["GET", "OPTIONS"])
async def delay(request: Request):
    """Delayed response (?ms=1000)"""
    if is_preflight(request):
        return preflight_response()

    request_id = new_request_id("delay")
    start = time.perf_counter()

    delay_ms = clamp_delay(parse_int(request.query_params.get("ms")))
    await sleep(delay_ms)

    actual_ms = round((time.perf_counter() - start) * 1000)
    return envelope_response(success(
        DelayResult(
            requested_delay=delay_ms,
            actual_delay=actual_ms,
            message=f"Response delayed by {actual_ms}ms",
        ),
        request_id,
    ))
