"""
Random Fail API
===============
Fails with probability `?rate=` (default 0.5, clamped to 0.0~1.0) using a
random entry of a fixed error catalog. For exercising client retry logic.
"""
import math
import random
from dataclasses import dataclass

from fastapi import APIRouter, Depends, Request

from demo_api.config import settings
from demo_api.routers._common import (
    envelope_response,
    failure,
    get_rng,
    is_preflight,
    new_request_id,
    parse_float,
    preflight_response,
    random_item,
    round_half_up,
    success,
)

router = APIRouter()


@dataclass(frozen=True)
class SimulatedError:
    status_code: int
    code: str
    message: str


ERROR_SCENARIOS = (
    SimulatedError(500, "INTERNAL_ERROR", "An unexpected error occurred"),
    SimulatedError(502, "BAD_GATEWAY", "Upstream server returned invalid response"),
    SimulatedError(503, "SERVICE_UNAVAILABLE", "Service temporarily unavailable"),
    SimulatedError(504, "GATEWAY_TIMEOUT", "Upstream server timed out"),
    SimulatedError(429, "RATE_LIMITED", "Too many requests, please slow down"),
)


def clamp_rate(rate: float | None) -> float:
    if rate is None or math.isnan(rate):
        rate = settings.DEFAULT_FAILURE_RATE
    return min(max(rate, 0.0), 1.0)


def draw_failure(rate: float, rng: random.Random) -> SimulatedError | None:
    """One uniform [0, 1) draw; a catalog error when it falls below `rate`."""
    if rng.random() < rate:
        return random_item(rng, ERROR_SCENARIOS)
    return None


def _format_rate(rate: float) -> str:
    return str(int(rate)) if rate.is_integer() else str(rate)


@router.api_route("/random-fail", methods=["GET", "OPTIONS"])
async def random_fail(request: Request, rng: random.Random = Depends(get_rng)):
    """Random failures (?rate=0.3)"""
    if is_preflight(request):
        return preflight_response()

    request_id = new_request_id("rf")
    rate = clamp_rate(parse_float(request.query_params.get("rate")))

    error = draw_failure(rate, rng)
    if error is not None:
        return envelope_response(
            failure(error.code, error.message, request_id),
            status_code=error.status_code,
        )

    return envelope_response(success(
        {
            "failureRate": rate,
            "message": "Request succeeded",
            "tip": f"With rate={_format_rate(rate)}, approximately "
                   f"{round_half_up(rate * 100)}% of requests will fail",
        },
        request_id,
    ))