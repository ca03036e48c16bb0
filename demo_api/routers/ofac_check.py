"""
OFAC / Sanctions Screening Mock API
====================================
Screens a name against a fixed catalog of sanctions lists (simulated; no
real list is consulted).

Body (optional JSON):
  firstName, lastName : screened name (default "John Smith")
  dateOfBirth, country: accepted, not used

Scenarios (?scenario=):
  success (default) : NO_MATCH, score 0, CLEAR
  potential         : NAME_SIMILARITY 60~80, MANUAL_REVIEW
  match             : EXACT_MATCH 95~100, BLOCK
  fail / timeout    : service error / 10s delay
"""
import logging
import random
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
    preflight_response,
    random_in_range,
    scenario_of,
    sleep,
    success,
    utc_timestamp,
)

logger = logging.getLogger(__name__)

router = APIRouter()

LISTS_CHECKED = (
    "OFAC SDN List",
    "OFAC Consolidated List",
    "UN Security Council",
    "EU Sanctions List",
    "UK HM Treasury",
)

RISK_INDICATORS = {
    "match": ["SANCTIONS_MATCH", "HIGH_RISK_JURISDICTION"],
    "potential": ["NAME_SIMILARITY"],
}


class WatchlistMatch(CamelModel):
    list_name: str = "OFAC SDN List"
    matched_name: str
    match_score: int
    match_type: str
    listing_date: str
    program: str
    notes: str


class ConfirmedWatchlistMatch(WatchlistMatch):
    id_number: str


class SanctionsScreening(CamelModel):
    on_watchlist: bool
    match_type: str
    match_score: int
    screening_result: str
    matches: list[Union[ConfirmedWatchlistMatch, WatchlistMatch]]
    searched_name: str
    lists_checked: list[str] = list(LISTS_CHECKED)
    screening_date: str
    pep_status: str
    adverse_media: list[str]
    risk_indicators: list[str]


def build_sanctions_screening(
    scenario: str,
    first_name: str,
    last_name: str,
    rng: random.Random,
    screening_date: Optional[str] = None,
) -> SanctionsScreening:
    searched_name = f"{first_name} {last_name}"
    matches: list[WatchlistMatch] = []

    if scenario == "potential":
        on_watchlist, match_type, result = False, "POTENTIAL_MATCH", "MANUAL_REVIEW"
        score = random_in_range(rng, 60, 80)
        matches.append(WatchlistMatch(
            matched_name=searched_name.upper(),
            match_score=score,
            match_type="NAME_SIMILARITY",
            listing_date="2020-03-15",
            program="SDGT",
            notes="Name similarity detected - manual review recommended",
        ))
    elif scenario == "match":
        on_watchlist, match_type, result = True, "CONFIRMED_MATCH", "BLOCK"
        score = random_in_range(rng, 95, 100)
        matches.append(ConfirmedWatchlistMatch(
            matched_name=searched_name.upper(),
            match_score=score,
            match_type="EXACT_MATCH",
            listing_date="2019-07-22",
            program="IRAN",
            id_number=f"OFAC-{random_in_range(rng, 10000, 99999)}",
            notes="Exact name and DOB match to sanctioned individual",
        ))
    else:
        on_watchlist, match_type, result = False, "NO_MATCH", "CLEAR"
        score = 0

    return SanctionsScreening(
        on_watchlist=on_watchlist,
        match_type=match_type,
        match_score=score,
        screening_result=result,
        matches=matches,
        searched_name=searched_name,
        screening_date=screening_date or utc_timestamp(),
        pep_status="POTENTIAL_PEP" if scenario == "potential" else "NOT_PEP",
        adverse_media=["Associated with sanctioned entities"] if scenario == "match" else [],
        risk_indicators=list(RISK_INDICATORS.get(scenario, [])),
    )


@router.api_route("/ofac-check", methods=["POST", "OPTIONS"])
async def ofac_check(request: Request, rng: random.Random = Depends(get_rng)):
    """Sanctions screening"""
    if is_preflight(request):
        return preflight_response()

    request_id = new_request_id("ofac")
    scenario = scenario_of(request)

    try:
        body = await json_body(request)
        first_name = body.get("firstName") or "John"
        last_name = body.get("lastName") or "Smith"

        if scenario == "timeout":
            await sleep(settings.TIMEOUT_SCENARIO_DELAY_MS)

        if scenario == "fail":
            return envelope_response(
                failure(
                    "OFAC_SERVICE_UNAVAILABLE",
                    "OFAC screening service is temporarily unavailable.",
                    request_id,
                ),
                status_code=500,
            )

        logger.debug("ofac_check scenario=%s", scenario)
        screening = build_sanctions_screening(scenario, str(first_name), str(last_name), rng)
        return envelope_response(success(screening, request_id))

    except Exception:
        logger.exception("ofac_check_internal_error", extra={"request_id": request_id})
        return internal_error(request_id)
