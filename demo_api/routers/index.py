"""
Index API
=========
Static discovery document for every endpoint this server exposes.
"""
from fastapi import APIRouter, Request

from demo_api.config import settings
from demo_api.routers._common import (
    envelope_response,
    is_preflight,
    new_request_id,
    preflight_response,
    success,
)

router = APIRouter()

FSC_ENDPOINTS = (
    ("/api/fsc/credit-bureau", "POST", "Credit score lookup"),
    ("/api/fsc/fraud-detection", "POST", "Fraud screening"),
    ("/api/fsc/property-valuation", "GET", "AVM property valuation"),
    ("/api/fsc/income-verification", "POST", "Payroll verification"),
    ("/api/fsc/ofac-check", "POST", "Sanctions screening"),
)

UTILITY_ENDPOINTS = (
    ("/api/echo", "ANY", "Echo request details"),
    ("/api/delay", "GET", "Delayed response (?ms=1000)"),
    ("/api/status", "GET", "Return specific HTTP status (?code=404)"),
    ("/api/random-fail", "GET", "Random failures (?rate=0.3)"),
)


def _listing(entries) -> list[dict]:
    return [
        {"path": path, "method": method, "description": description}
        for path, method, description in entries
    ]


def discovery_document() -> dict:
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "description": "Free hosted API endpoints for Salesforce UoW framework demos",
        "health": "OK",
        "endpoints": {
            "fsc": {
                "description": "Financial Services Cloud demo endpoints",
                "endpoints": _listing(FSC_ENDPOINTS),
            },
            "utility": {
                "description": "Generic testing utilities",
                "endpoints": _listing(UTILITY_ENDPOINTS),
            },
        },
        "documentation": "See README.md for full documentation",
        "scenarioParam": (
            "All FSC endpoints support ?scenario= parameter: success, fail, timeout, "
            "and endpoint-specific scenarios"
        ),
    }


@router.api_route("", methods=["GET", "OPTIONS"])
async def index(request: Request):
    """Health check and endpoint listing"""
    if is_preflight(request):
        return preflight_response()

    return envelope_response(success(discovery_document(), new_request_id("index")))
