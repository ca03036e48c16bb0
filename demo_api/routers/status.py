"""
Status API
==========
Answers with the HTTP status given in `?code=` (default 200, 100~599).
2xx -> SUCCESS envelope, anything else -> ERROR envelope `HTTP_<code>`.

1xx, 204, 205 and 304 come back as the bare status line with no body.
A 1xx is sent as a final response, which many HTTP clients do not expect;
use it only to check that a client copes with an informational status.
"""
from fastapi import APIRouter, Request
from fastapi.responses import Response

from demo_api.routers._common import (
    envelope_response,
    failure,
    is_preflight,
    new_request_id,
    parse_int,
    preflight_response,
    success,
)

router = APIRouter()

STATUS_MESSAGES = {
    200: "OK",
    201: "Created",
    202: "Accepted",
    204: "No Content",
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    408: "Request Timeout",
    409: "Conflict",
    422: "Unprocessable Entity",
    429: "Too Many Requests",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout",
}

# HTTP forbids a body on these
_BODYLESS = frozenset([204, 205, 304])


def resolve_status(code: int | None) -> int:
    if code is None or not 100 <= code <= 599:
        return 200
    return code


def status_message(code: int, override: str | None = None) -> str:
    return override or STATUS_MESSAGES.get(code, "Unknown Status")


@router.api_route("/status", methods=["GET", "OPTIONS"])
async def status(request: Request):
    """Return specific HTTP status (?code=404)"""
    if is_preflight(request):
        return preflight_response()

    request_id = new_request_id("status")
    code = resolve_status(parse_int(request.query_params.get("code")))
    message = status_message(code, request.query_params.get("message"))

    if code < 200 or code in _BODYLESS:
        return Response(status_code=code)

    if 200 <= code < 300:
        return envelope_response(
            success({"statusCode": code, "message": message}, request_id),
            status_code=code,
        )

    return envelope_response(failure(f"HTTP_{code}", message, request_id), status_code=code)
