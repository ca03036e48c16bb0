"""
Property Valuation (AVM) Mock API
==================================
Automated Valuation Model estimate relative to a requested property value.

Query:
  requestedValue : requested loan property value (default 450000)
  address        : property address (echoed back)

Scenarios (?scenario=):
  success (default) : 0~10% above requested, confidence 80~95%
  low               : 10~25% below requested (LTV issue), confidence 70~85%
  high              : 15~35% above requested, confidence 85~95%
  unavailable       : no comparable data (estimatedValue=null)
  fail / timeout    : service error / 10s delay
"""
import logging
import random
from dataclasses import dataclass
from typing import Optional

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
    parse_int,
    preflight_response,
    random_in_range,
    round_half_up,
    scenario_of,
    sleep,
    success,
)

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_REQUESTED_VALUE = 450_000
DEFAULT_ADDRESS = "123 Main Street, Anytown, USA"


class ValueRange(CamelModel):
    low: int
    high: int


class PropertyDetails(CamelModel):
    address: str
    property_type: str = "SINGLE_FAMILY"
    year_built: int
    sqft: int
    bedrooms: int
    bathrooms: int
    lot_size: str


class ComparableSale(CamelModel):
    address: str
    sale_price: int
    sale_date: str
    sqft: int
    distance_miles: float


class PropertyValuation(CamelModel):
    estimated_value: int
    confidence_score: float
    value_range: ValueRange
    data_available: bool = True
    property_details: PropertyDetails
    last_sale_price: int
    last_sale_date: str = "2019-04-20"
    comparable_sales: list[ComparableSale]
    market_trend: str


class UnavailableValuation(CamelModel):
    estimated_value: Optional[int] = None
    confidence_score: float = 0
    data_available: bool = False
    reason: str = "Insufficient comparable sales data for this property"
    recommendation: str = "ORDER_FULL_APPRAISAL"


@dataclass(frozen=True)
class ValuationBand:
    variance_pct: tuple[int, int]
    sign: int
    confidence_pct: tuple[int, int]


VALUATION_BANDS = {
    "success": ValuationBand((0, 10), 1, (80, 95)),
    "low":     ValuationBand((10, 25), -1, (70, 85)),
    "high":    ValuationBand((15, 35), 1, (85, 95)),
}

# (address, sale date, distance in miles, price band %)
COMPARABLES = (
    ("125 Main Street", "2024-08-15", 0.2, (95, 105)),
    ("142 Oak Avenue", "2024-07-22", 0.5, (92, 108)),
    ("98 Elm Street", "2024-06-10", 0.8, (90, 110)),
)


def band_for(scenario: str) -> ValuationBand:
    return VALUATION_BANDS.get(scenario, VALUATION_BANDS["success"])


def build_property_valuation(
    scenario: str,
    requested_value: int,
    address: str,
    rng: random.Random,
) -> PropertyValuation:
    band = band_for(scenario)

    variance = random_in_range(rng, *band.variance_pct) / 100
    estimated = round_half_up(requested_value * (1 + band.sign * variance))
    confidence = random_in_range(rng, *band.confidence_pct) / 100

    # lower confidence -> wider range
    spread = (1 - confidence) * 0.5

    comparables = [
        ComparableSale(
            address=comp_address,
            sale_price=round_half_up(estimated * random_in_range(rng, *price_pct) / 100),
            sale_date=sale_date,
            sqft=random_in_range(rng, 1800, 2400),
            distance_miles=distance,
        )
        for comp_address, sale_date, distance, price_pct in COMPARABLES
    ]

    return PropertyValuation(
        estimated_value=estimated,
        confidence_score=confidence,
        value_range=ValueRange(
            low=round_half_up(estimated * (1 - spread)),
            high=round_half_up(estimated * (1 + spread)),
        ),
        property_details=PropertyDetails(
            address=address,
            year_built=random_in_range(rng, 1980, 2020),
            sqft=random_in_range(rng, 1800, 2800),
            bedrooms=random_in_range(rng, 3, 5),
            bathrooms=random_in_range(rng, 2, 4),
            lot_size=f"{random_in_range(rng, 5000, 15000)} sqft",
        ),
        last_sale_price=round_half_up(estimated * 0.75),
        comparable_sales=comparables,
        market_trend=f"{random_in_range(rng, -2, 5)}% YoY",
    )


@router.api_route("/property-valuation", methods=["GET", "OPTIONS"])
async def property_valuation(request: Request, rng: random.Random = Depends(get_rng)):
    """AVM property valuation"""
    if is_preflight(request):
        return preflight_response()

    request_id = new_request_id("pv")
    scenario = scenario_of(request)
    requested_value = parse_int(request.query_params.get("requestedValue")) or DEFAULT_REQUESTED_VALUE
    address = request.query_params.get("address") or DEFAULT_ADDRESS

    try:
        if scenario == "timeout":
            await sleep(settings.TIMEOUT_SCENARIO_DELAY_MS)

        if scenario == "fail":
            return envelope_response(
                failure(
                    "AVM_SERVICE_UNAVAILABLE",
                    "Property valuation service is temporarily unavailable.",
                    request_id,
                ),
                status_code=500,
            )

        logger.debug("property_valuation scenario=%s band=%s", scenario, band_for(scenario))
        if scenario == "unavailable":
            return envelope_response(success(UnavailableValuation(), request_id))

        valuation = build_property_valuation(scenario, requested_value, address, rng)
        return envelope_response(success(valuation, request_id))

    except Exception:
        logger.exception("property_valuation_internal_error", extra={"request_id": request_id})
        return internal_error(request_id)
