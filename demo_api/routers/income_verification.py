"""
Income Verification Mock API
=============================
Payroll-network employment and income verification.

Body (optional JSON):
  statedIncome  : applicant's stated annual income (default 120000)
  employerName  : employer name (default "Acme Corporation")

Scenarios (?scenario=):
  success (default) : verified within ±5% of stated
  higher            : 10~25% above stated
  lower             : 10~20% below stated
  mismatch          : 30~50% below stated
  unverifiable      : employer not in network (verified=false)
  fail / timeout    : service error / 10s delay
"""
import logging
import random
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from fastapi import APIRouter, Depends, Request

from demo_api.config import settings
from demo_api.routers._common import (
    CamelModel,
    envelope_response,
    failure,
    get_rng,
    internal_error,
    is_preflight,
    json_body,
    new_request_id,
    number_or,
    preflight_response,
    random_in_range,
    round_half_up,
    scenario_of,
    sleep,
    success,
)

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_STATED_INCOME = 120_000
DEFAULT_EMPLOYER_NAME = "Acme Corporation"


class EmploymentDetails(CamelModel):
    employer_name: str
    employer_verified: bool = True
    position: str = "Senior Analyst"
    employment_status: str = "ACTIVE"
    employment_type: str = "FULL_TIME"
    start_date: str
    pay_frequency: str = "BI_WEEKLY"


class IncomeBreakdown(CamelModel):
    base_salary: int
    bonus: int
    other_income: int


class IncomeVerification(CamelModel):
    verified: bool = True
    verification_status: str = "VERIFIED"
    employment_verified: bool = True
    income_verified: bool = True
    stated_income: Union[int, float]
    verified_income: int
    income_match: str
    variance_percent: int
    employment_details: EmploymentDetails
    income_breakdown: IncomeBreakdown
    last_pay_date: str
    ytd_earnings: int


class UnverifiableIncome(CamelModel):
    """Negative result: no verifiedIncome is reported at all."""
    verified: bool = False
    verification_status: str = "UNABLE_TO_VERIFY"
    reason: str = "Employer not in verification network"
    recommendation: str = "REQUEST_MANUAL_DOCUMENTATION"
    alternative_verification: list[str] = ["W2", "Tax Returns", "Bank Statements"]


@dataclass(frozen=True)
class IncomeBand:
    income_match: str
    variance_pct: tuple[int, int]   # applied as stated * (1 + sign * pct/100)
    sign: int


INCOME_BANDS = {
    "success":  IncomeBand("MATCHES", (-5, 5), 1),
    "higher":   IncomeBand("HIGHER_THAN_STATED", (10, 25), 1),
    "lower":    IncomeBand("LOWER_THAN_STATED", (10, 20), -1),
    "mismatch": IncomeBand("SIGNIFICANT_DISCREPANCY", (30, 50), -1),
}


def band_for(scenario: str) -> IncomeBand:
    return INCOME_BANDS.get(scenario, INCOME_BANDS["success"])


def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # 29 Feb -> 28 Feb
        return day.replace(year=day.year - years, day=28)


def build_income_verification(
    scenario: str,
    stated_income: Union[int, float],
    employer_name: str,
    rng: random.Random,
    today: Optional[date] = None,
) -> IncomeVerification:
    today = today or datetime.now(timezone.utc).date()
    band = band_for(scenario)

    variance = random_in_range(rng, *band.variance_pct) / 100
    verified_income = round_half_up(stated_income * (1 + band.sign * variance))

    start_date = _years_before(today, random_in_range(rng, 1, 10))
    last_pay_date = today - timedelta(days=random_in_range(rng, 1, 14))

    return IncomeVerification(
        stated_income=stated_income,
        verified_income=verified_income,
        income_match=band.income_match,
        variance_percent=round_half_up((verified_income - stated_income) / stated_income * 100),
        employment_details=EmploymentDetails(
            employer_name=employer_name,
            start_date=start_date.isoformat(),
        ),
        income_breakdown=IncomeBreakdown(
            base_salary=round_half_up(verified_income * 0.85),
            bonus=round_half_up(verified_income * 0.10),
            other_income=round_half_up(verified_income * 0.05),
        ),
        last_pay_date=last_pay_date.isoformat(),
        ytd_earnings=round_half_up(verified_income / 12 * today.month),
    )


@router.api_route("/income-verification", methods=["POST", "OPTIONS"])
async def income_verification(request: Request, rng: random.Random = Depends(get_rng)):
    """Payroll verification"""
    if is_preflight(request):
        return preflight_response()

    request_id = new_request_id("iv")
    scenario = scenario_of(request)

    try:
        body = await json_body(request)
        stated_income = number_or(body.get("statedIncome"), DEFAULT_STATED_INCOME)
        employer_name = body.get("employerName") or DEFAULT_EMPLOYER_NAME

        if scenario == "timeout":
            await sleep(settings.TIMEOUT_SCENARIO_DELAY_MS)

        if scenario == "fail":
            return envelope_response(
                failure(
                    "VERIFICATION_SERVICE_UNAVAILABLE",
                    "Income verification service is temporarily unavailable.",
                    request_id,
                ),
                status_code=500,
            )

        logger.debug("income_verification scenario=%s band=%s", scenario, band_for(scenario))
        if scenario == "unverifiable":
            return envelope_response(success(UnverifiableIncome(), request_id))

        report = build_income_verification(scenario, stated_income, str(employer_name), rng)
        return envelope_response(success(report, request_id))

    except Exception:
        logger.exception("income_verification_internal_error", extra={"request_id": request_id})
        return internal_error(request_id)
