"""
Echo API
========
Mirrors the request back to the caller (no envelope). Any method.
"""
import json

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from demo_api.routers._common import (
    is_preflight,
    new_request_id,
    preflight_response,
    utc_timestamp,
)

router = APIRouter()

ECHO_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def _parse_body(raw: bytes):
    """JSON when it parses, raw text otherwise, None when empty."""
    if not raw:
        return None
    text = raw.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except ValueError:
        return text


def client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded
    return request.client.host if request.client else None


@router.api_route("/echo", methods=ECHO_METHODS)
async def echo(request: Request):
    """Echo request details"""
    if is_preflight(request):
        return preflight_response()

    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"

    return JSONResponse({
        "requestId": new_request_id("echo"),
        "timestamp": utc_timestamp(),
        "method": request.method,
        "url": url,
        "headers": dict(request.headers),
        "query": dict(request.query_params),
        "body": _parse_body(await request.body()),
        "ip": client_ip(request),
    })
