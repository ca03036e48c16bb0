"""
CORS middleware
===============
Starlette's CORSMiddleware answers browser preflights itself: `OK` on
success and 400 for an origin or method outside the allow list. Every
endpoint here answers OPTIONS with an empty 200, so the preflight answer
is reduced to the CORS headers alone. A rejected origin still gets no
`Access-Control-Allow-Origin` header, which is what the browser enforces.
"""
from fastapi import FastAPI
from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import Response

from demo_api.config import Settings

# recomputed by Response for the empty body
_BODY_HEADERS = frozenset(["content-length", "content-type"])


class PreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware whose preflight answer is always an empty 200."""

    def preflight_response(self, request_headers: Headers) -> Response:
        answered = super().preflight_response(request_headers=request_headers)
        headers = {k: v for k, v in answered.headers.items() if k not in _BODY_HEADERS}
        return Response(status_code=200, headers=headers)


def install_cors(app: FastAPI, app_settings: Settings) -> None:
    """Development allows any origin; elsewhere only CORS_ALLOWED_ORIGINS."""
    if app_settings.ENVIRONMENT == "development":
        app.add_middleware(
            PreflightCORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )
    elif app_settings.cors_origins:
        app.add_middleware(
            PreflightCORSMiddleware,
            allow_origins=app_settings.cors_origins,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type", "X-Request-ID"],
        )
