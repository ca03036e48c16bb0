"""
Response envelope & shared helpers
===================================
Every endpoint (except /api/echo) answers with one of two envelopes:

    SUCCESS: {status, requestId, timestamp, data}
    ERROR:   {status, requestId, timestamp, error: {code, message}}

Also holds the small helpers all routers share: request ids, CORS preflight
short-circuit, scenario extraction, bounded random numbers, lenient query
parsing and the artificial delay.

Usage:
    from demo_api.routers._common import success, failure, new_request_id

    request_id = new_request_id("cb")
    return envelope_response(success(data, request_id))
"""
import asyncio
import json
import math
import random
import re
import string
import time
from datetime import datetime, timezone
from typing import Any, Literal, Optional, Sequence, TypeVar

from fastapi import Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")

_BASE36 = string.digits + string.ascii_lowercase
_TOKEN_LENGTH = 9

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorDetail(CamelModel):
    code: str
    message: str


class SuccessEnvelope(CamelModel):
    status: Literal["SUCCESS"] = "SUCCESS"
    request_id: str
    timestamp: str
    data: Any


class ErrorEnvelope(CamelModel):
    status: Literal["ERROR"] = "ERROR"
    request_id: str
    timestamp: str
    error: ErrorDetail


# ─── Request ids / timestamps ────────────────────────────────────────────────

def _base36_token(rng: random.Random, length: int = _TOKEN_LENGTH) -> str:
    return "".join(rng.choice(_BASE36) for _ in range(length))


def new_request_id(prefix: str = "req", rng: Optional[random.Random] = None) -> str:
    """`<prefix>-<epoch millis>-<9 base-36 chars>`. Unique in practice, not guaranteed."""
    rng = rng or random
    return f"{prefix}-{int(time.time() * 1000)}-{_base36_token(rng)}"


def utc_timestamp() -> str:
    """ISO-8601 UTC with millisecond precision, `Z` suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ─── Envelopes ───────────────────────────────────────────────────────────────

def success(data: Any, request_id: Optional[str] = None) -> SuccessEnvelope:
    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json", by_alias=True)
    return SuccessEnvelope(
        request_id=request_id or new_request_id(),
        timestamp=utc_timestamp(),
        data=data,
    )


def failure(code: str, message: str, request_id: Optional[str] = None) -> ErrorEnvelope:
    return ErrorEnvelope(
        request_id=request_id or new_request_id(),
        timestamp=utc_timestamp(),
        error=ErrorDetail(code=code, message=message),
    )


def envelope_response(envelope: BaseModel, status_code: int = 200) -> JSONResponse:
    """Serialize an envelope with camelCase keys."""
    return JSONResponse(
        status_code=status_code,
        content=envelope.model_dump(mode="json", by_alias=True),
    )


def internal_error(request_id: str) -> JSONResponse:
    """Catch-all fault answer shared by the FSC endpoints."""
    return envelope_response(
        failure("INTERNAL_ERROR", "An unexpected error occurred.", request_id),
        status_code=500,
    )


# ─── Request inspection ──────────────────────────────────────────────────────

def is_preflight(request: Request) -> bool:
    """True for OPTIONS; the caller must answer with `preflight_response()`."""
    return request.method == "OPTIONS"


def preflight_response() -> Response:
    return Response(status_code=200)


def scenario_of(request: Request, default: str = "success") -> str:
    scenario = request.query_params.get("scenario")
    return scenario.lower() if scenario else default


async def json_body(request: Request) -> dict:
    """Parsed JSON object body; {} when empty or not an object. Malformed JSON raises."""
    raw = await request.body()
    if not raw.strip():
        return {}
    parsed = json.loads(raw)
    return parsed if isinstance(parsed, dict) else {}


def number_or(value: Any, default: float) -> float:
    """Numeric body field with fallback; 0, missing and non-numeric use `default`."""
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = parse_float(value)
    if not isinstance(value, (int, float)) or not value:
        return default
    return value


def parse_int(value: Optional[str]) -> Optional[int]:
    """Leading-integer parse (`"12abc"` -> 12). None when nothing parses."""
    if value is None:
        return None
    match = _INT_PREFIX.match(value)
    return int(match.group(1)) if match else None


def parse_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    match = _FLOAT_PREFIX.match(value)
    return float(match.group(1)) if match else None


# ─── Random / numeric helpers ────────────────────────────────────────────────

def random_in_range(rng: random.Random, lo: int, hi: int) -> int:
    """Inclusive uniform integer in [lo, hi]."""
    return rng.randint(lo, hi)


def random_item(rng: random.Random, items: Sequence[T]) -> T:
    return rng.choice(items)


def round_half_up(value: float) -> int:
    """Half-up rounding (2.5 -> 3, -2.5 -> -2), as the wire format expects."""
    return math.floor(value + 0.5)


def get_rng() -> random.Random:
    """FastAPI dependency: fresh generator per request (overridden in tests)."""
    return random.Random()


async def sleep(ms: float) -> None:
    """Suspend the current request for `ms` milliseconds; runs to completion."""
    await asyncio.sleep(ms / 1000)
