"""
Demo API Endpoints - Mock Server
=================================
Stateless mock HTTP endpoints that simulate third-party financial-services
APIs plus generic HTTP test utilities. Every response is synthesized per
request; nothing is stored.

Endpoints:
  /api                          - discovery document
  /api/echo                     - mirrors the request
  /api/delay                    - delayed response (?ms=)
  /api/status                   - arbitrary HTTP status (?code=)
  /api/random-fail              - probabilistic failure (?rate=)
  /api/fsc/credit-bureau        - credit score lookup
  /api/fsc/fraud-detection      - fraud screening
  /api/fsc/income-verification  - payroll verification
  /api/fsc/ofac-check           - sanctions screening
  /api/fsc/property-valuation   - AVM property valuation

Run: uvicorn demo_api.main:app --port 8001
"""
import logging

from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from demo_api.config import settings
from demo_api.middleware import LoggingMiddleware, install_cors
from demo_api.routers import (
    credit_bureau,
    delay,
    echo,
    fraud_detection,
    income_verification,
    index,
    ofac_check,
    property_valuation,
    random_fail,
    status,
)

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Mock financial-services APIs (credit bureau, fraud, income, OFAC, AVM) and HTTP test utilities",
    version=settings.VERSION,
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
)

# ── Middleware: the last one added runs outermost ──────────────────────────

app.add_middleware(LoggingMiddleware)
install_cors(app, settings)

# ── Routers ─────────────────────────────────────────────────────────────────

app.include_router(index.router, prefix=settings.API_PREFIX, tags=["Index"])
app.include_router(echo.router, prefix=settings.API_PREFIX, tags=["Utility"])
app.include_router(delay.router, prefix=settings.API_PREFIX, tags=["Utility"])
app.include_router(status.router, prefix=settings.API_PREFIX, tags=["Utility"])
app.include_router(random_fail.router, prefix=settings.API_PREFIX, tags=["Utility"])
app.include_router(credit_bureau.router, prefix=settings.FSC_PREFIX, tags=["Credit Bureau"])
app.include_router(fraud_detection.router, prefix=settings.FSC_PREFIX, tags=["Fraud Detection"])
app.include_router(income_verification.router, prefix=settings.FSC_PREFIX, tags=["Income Verification"])
app.include_router(ofac_check.router, prefix=settings.FSC_PREFIX, tags=["OFAC"])
app.include_router(property_valuation.router, prefix=settings.FSC_PREFIX, tags=["Property Valuation (AVM)"])

logger.info(f"{settings.PROJECT_NAME} ready (environment: {settings.ENVIRONMENT})")


@app.get("/health", tags=["System"])
async def health():
    return {"status": "ok", "service": settings.SERVICE_NAME, "version": settings.VERSION}


# ── Prometheus metrics (/metrics), enabled with ENABLE_METRICS=true ─────────
Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    should_respect_env_var=True,
    env_var_name="ENABLE_METRICS",
    excluded_handlers=["/health", "/metrics"],
).instrument(app).expose(app, include_in_schema=False, tags=["System"])
