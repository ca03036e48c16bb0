"""
Fraud Detection Mock API
=========================
Identity / application fraud screening.

Scenarios (?scenario=):
  success (default) : LOW risk, 0~25, no alerts, APPROVE
  medium            : MEDIUM, 40~60, address unverified, REVIEW
  high              : HIGH, 70~90, identity+address unverified, DENY
  flagged           : CRITICAL, 90~100, MANUAL_REVIEW_REQUIRED
  fail / timeout    : service error / 10s delay
"""
import logging
import random
from dataclasses import dataclass

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


class FraudAlert(CamelModel):
    code: str
    type: str
    severity: str
    description: str


class RiskScoreRange(CamelModel):
    min: int = 0
    max: int = 100


class VerificationDetails(CamelModel):
    name_match: bool
    dob_match: bool
    ssn_match: bool


class FraudScreening(CamelModel):
    fraud_risk: str
    risk_score: int
    risk_score_range: RiskScoreRange = RiskScoreRange()
    alerts: list[FraudAlert]
    identity_verified: bool
    address_verified: bool
    phone_verified: bool
    email_verified: bool
    recommendation: str
    verification_details: VerificationDetails


# (code, type, severity, description)
ALERTS_BY_SCENARIO = {
    "medium": (
        ("ALT001", "ADDRESS_MISMATCH", "MEDIUM", "Address does not match recent records"),
        ("ALT002", "VELOCITY_CHECK", "LOW", "Multiple applications in short period"),
    ),
    "high": (
        ("ALT003", "IDENTITY_THEFT_INDICATOR", "HIGH", "SSN associated with known fraud"),
        ("ALT004", "SYNTHETIC_IDENTITY", "HIGH", "Identity elements inconsistent"),
        ("ALT005", "DEVICE_REPUTATION", "MEDIUM", "Device associated with suspicious activity"),
    ),
    "flagged": (
        ("ALT006", "OFAC_POTENTIAL_MATCH", "CRITICAL", "Potential match to sanctions list"),
        ("ALT007", "PEP_INDICATOR", "HIGH", "Politically exposed person indicator"),
    ),
}


@dataclass(frozen=True)
class RiskProfile:
    fraud_risk: str
    score_range: tuple[int, int]
    identity_verified: bool
    address_verified: bool
    recommendation: str


RISK_PROFILES = {
    "success": RiskProfile("LOW", (0, 25), True, True, "APPROVE"),
    "medium":  RiskProfile("MEDIUM", (40, 60), True, False, "REVIEW"),
    "high":    RiskProfile("HIGH", (70, 90), False, False, "DENY"),
    "flagged": RiskProfile("CRITICAL", (90, 100), False, False, "MANUAL_REVIEW_REQUIRED"),
}


def profile_for(scenario: str) -> RiskProfile:
    return RISK_PROFILES.get(scenario, RISK_PROFILES["success"])


def alerts_for(scenario: str) -> list[FraudAlert]:
    return [
        FraudAlert(code=code, type=kind, severity=severity, description=desc)
        for code, kind, severity, desc in ALERTS_BY_SCENARIO.get(scenario, ())
    ]


def build_fraud_screening(scenario: str, rng: random.Random) -> FraudScreening:
    profile = profile_for(scenario)
    risk = profile.fraud_risk

    return FraudScreening(
        fraud_risk=risk,
        risk_score=random_in_range(rng, *profile.score_range),
        alerts=alerts_for(scenario),
        identity_verified=profile.identity_verified,
        address_verified=profile.address_verified,
        phone_verified=risk == "LOW",
        email_verified=risk != "CRITICAL",
        recommendation=profile.recommendation,
        verification_details=VerificationDetails(
            name_match=risk not in ("HIGH", "CRITICAL"),
            dob_match=risk != "CRITICAL",
            ssn_match=risk in ("LOW", "MEDIUM"),
        ),
    )


@router.api_route("/fraud-detection", methods=["POST", "OPTIONS"])
async def fraud_detection(request: Request, rng: random.Random = Depends(get_rng)):
    """Fraud screening"""
    if is_preflight(request):
        return preflight_response()

    request_id = new_request_id("fd")
    scenario = scenario_of(request)

    try:
        if scenario == "timeout":
            await sleep(settings.TIMEOUT_SCENARIO_DELAY_MS)

        if scenario == "fail":
            return envelope_response(
                failure(
                    "FRAUD_SERVICE_UNAVAILABLE",
                    "Fraud detection service is temporarily unavailable.",
                    request_id,
                ),
                status_code=500,
            )

        logger.debug("fraud_detection scenario=%s profile=%s", scenario, profile_for(scenario))
        return envelope_response(success(build_fraud_screening(scenario, rng), request_id))

    except Exception:
        logger.exception("fraud_detection_internal_error", extra={"request_id": request_id})
        return internal_error(request_id)
