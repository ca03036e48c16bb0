"""
Integration fixtures: TestClient over the full app, a seedable random
source, and suspension patched out of every router.
"""
import random
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from demo_api.main import app
from demo_api.routers._common import get_rng

SLEEPING_ROUTERS = (
    "credit_bureau",
    "fraud_detection",
    "income_verification",
    "ofac_check",
    "property_valuation",
    "delay",
)


@pytest.fixture
def sleeps():
    """AsyncMock per router, keyed by module name."""
    mocks = {}
    patchers = []
    for name in SLEEPING_ROUTERS:
        patcher = patch(f"demo_api.routers.{name}.sleep", new_callable=AsyncMock)
        mocks[name] = patcher.start()
        patchers.append(patcher)
    yield mocks
    for patcher in patchers:
        patcher.stop()


@pytest.fixture
def client(sleeps):
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def seeded():
    """Install a fixed-seed generator for the duration of a test."""
    def _install(seed: int):
        app.dependency_overrides[get_rng] = lambda: random.Random(seed)

    yield _install
    app.dependency_overrides.pop(get_rng, None)
