"""
Credit Bureau Mock API
=======================
Simulates a consumer credit score lookup (300~850 scale).

Scenarios (?scenario=):
  success (default) / good : 700~779
  excellent                : 780~850
  fair                     : 640~699
  low                      : 580~639
  poor                     : 300~579
  fail                     : 500 BUREAU_UNAVAILABLE
  timeout                  : 10s delay, then the default report
"""
import logging
import random

from fastapi import APIRouter, Depends, Request

from demo_api.config import settings
from demo_api.routers._common import (
    CamelModel,
    envelope_response,
    failure,
    get_rng,
    internal_error,
    is_preflight,
    new_request_id,
    preflight_response,
    random_in_range,
    scenario_of,
    sleep,
    success,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class CreditFactor(CamelModel):
    code: str
    description: str
    impact: str             # POSITIVE | NEUTRAL | NEGATIVE


class ScoreRange(CamelModel):
    min: int = 300
    max: int = 850


class CreditReport(CamelModel):
    credit_score: int
    score_range: ScoreRange = ScoreRange()
    risk_category: str
    factors: list[CreditFactor]
    inquiries: int
    delinquencies: int
    oldest_account_age: str
    total_accounts: int


# Score band per scenario (inclusive)
SCORE_BANDS = {
    "excellent": (780, 850),
    "good":      (700, 779),
    "fair":      (640, 699),
    "low":       (580, 639),
    "poor":      (300, 579),
}

FACTORS_BY_BAND = {
    "excellent": (
        ("F01", "Excellent payment history", "POSITIVE"),
        ("F02", "Low credit utilization", "POSITIVE"),
        ("F03", "Long credit history", "POSITIVE"),
        ("F04", "Diverse credit mix", "POSITIVE"),
    ),
    "good": (
        ("F01", "Good payment history", "POSITIVE"),
        ("F02", "Moderate credit utilization", "NEUTRAL"),
        ("F03", "Adequate credit history length", "POSITIVE"),
    ),
    "fair": (
        ("F01", "Some late payments", "NEGATIVE"),
        ("F02", "High credit utilization", "NEGATIVE"),
        ("F03", "Limited credit history", "NEUTRAL"),
    ),
    "low": (
        ("F01", "Multiple late payments", "NEGATIVE"),
        ("F02", "Very high credit utilization", "NEGATIVE"),
        ("F03", "Recent delinquency", "NEGATIVE"),
        ("F04", "Too many recent inquiries", "NEGATIVE"),
    ),
    "poor": (
        ("F01", "Serious delinquency", "NEGATIVE"),
        ("F02", "Collections account", "NEGATIVE"),
        ("F03", "Maxed out credit cards", "NEGATIVE"),
        ("F04", "Recent bankruptcy or foreclosure", "NEGATIVE"),
    ),
}


def band_for(scenario: str) -> str:
    """Scenario -> score band key. `success` and anything unrecognized -> good."""
    return scenario if scenario in SCORE_BANDS else "good"


def risk_category(score: int) -> str:
    if score >= 780: return "SUPER_PRIME"
    if score >= 720: return "PRIME"
    if score >= 660: return "NEAR_PRIME"
    if score >= 620: return "SUBPRIME"
    return "DEEP_SUBPRIME"


def _delinquencies(band: str, rng: random.Random) -> int:
    if band == "poor":
        return random_in_range(rng, 1, 3)
    if band == "low":
        return random_in_range(rng, 0, 1)
    return 0


def build_credit_report(scenario: str, rng: random.Random) -> CreditReport:
    band = band_for(scenario)
    lo, hi = SCORE_BANDS[band]
    score = random_in_range(rng, lo, hi)

    return CreditReport(
        credit_score=score,
        risk_category=risk_category(score),
        factors=[
            CreditFactor(code=code, description=desc, impact=impact)
            for code, desc, impact in FACTORS_BY_BAND[band]
        ],
        inquiries=random_in_range(rng, 0, 5),
        delinquencies=_delinquencies(band, rng),
        oldest_account_age=f"{random_in_range(rng, 2, 15)} years",
        total_accounts=random_in_range(rng, 5, 20),
    )


@router.api_route("/credit-bureau", methods=["POST", "OPTIONS"])
async def credit_bureau(request: Request, rng: random.Random = Depends(get_rng)):
    """Credit score lookup"""
    if is_preflight(request):
        return preflight_response()

    request_id = new_request_id("cb")
    scenario = scenario_of(request)

    try:
        if scenario == "timeout":
            await sleep(settings.TIMEOUT_SCENARIO_DELAY_MS)

        if scenario == "fail":
            return envelope_response(
                failure(
                    "BUREAU_UNAVAILABLE",
                    "Credit bureau service is temporarily unavailable. Please try again later.",
                    request_id,
                ),
                status_code=500,
            )

        logger.debug("credit_bureau scenario=%s band=%s", scenario, band_for(scenario))
        return envelope_response(success(build_credit_report(scenario, rng), request_id))

    except Exception:
        logger.exception("credit_bureau_internal_error", extra={"request_id": request_id})
        return internal_error(request_id)
