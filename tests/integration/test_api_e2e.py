"""
[Integration] Demo API end-to-end
==================================
Full app through fastapi.testclient.TestClient. Artificial delays are
patched out (see conftest.py), so timeout/delay scenarios return at once.

Covers:
  1. CORS preflight on every endpoint
  2. Envelope invariants
  3. FSC endpoints (scenario dispatch, fail/timeout, special branches)
  4. Utility endpoints (echo, delay, status, random-fail, index)

pytest tests/integration/test_api_e2e.py -v
"""
from datetime import datetime
from unittest.mock import patch

import pytest

ALL_ENDPOINTS = [
    "/api",
    "/api/echo",
    "/api/delay",
    "/api/status",
    "/api/random-fail",
    "/api/fsc/credit-bureau",
    "/api/fsc/fraud-detection",
    "/api/fsc/income-verification",
    "/api/fsc/ofac-check",
    "/api/fsc/property-valuation",
]

BROWSER_PREFLIGHT = {
    "Origin": "https://example.com",
    "Access-Control-Request-Method": "POST",
    "Access-Control-Request-Headers": "Content-Type",
}

FSC_ENDPOINTS = [
    ("POST", "/api/fsc/credit-bureau", "BUREAU_UNAVAILABLE", "credit_bureau"),
    ("POST", "/api/fsc/fraud-detection", "FRAUD_SERVICE_UNAVAILABLE", "fraud_detection"),
    ("POST", "/api/fsc/income-verification", "VERIFICATION_SERVICE_UNAVAILABLE", "income_verification"),
    ("POST", "/api/fsc/ofac-check", "OFAC_SERVICE_UNAVAILABLE", "ofac_check"),
    ("GET", "/api/fsc/property-valuation", "AVM_SERVICE_UNAVAILABLE", "property_valuation"),
]


def assert_envelope(body: dict, status: str):
    assert body["status"] == status
    assert body["requestId"]
    datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00"))
    if status == "SUCCESS":
        assert "data" in body and "error" not in body
    else:
        assert "error" in body and "data" not in body
        assert set(body["error"]) == {"code", "message"}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 1. CORS preflight
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
class TestPreflight:

    @pytest.mark.parametrize("path", ALL_ENDPOINTS)
    def test_options_is_empty_200(self, client, path):
        resp = client.options(path)
        assert resp.status_code == 200
        assert resp.content == b""

    @pytest.mark.parametrize("path", ALL_ENDPOINTS)
    def test_browser_preflight_is_empty_200(self, client, path):
        resp = client.options(path, headers=BROWSER_PREFLIGHT)
        assert resp.status_code == 200
        assert resp.content == b""
        assert resp.headers["access-control-allow-origin"] in ("*", "https://example.com")

    def test_options_skips_timeout(self, client, sleeps):
        resp = client.options("/api/fsc/credit-bureau?scenario=timeout")
        assert resp.status_code == 200
        sleeps["credit_bureau"].assert_not_awaited()


class TestHealth:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert "x-request-id" in resp.headers


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 2. Shared FSC behaviour
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
class TestFscCommon:

    @pytest.mark.parametrize("method, path, code, _module", FSC_ENDPOINTS)
    def test_fail_scenario(self, client, method, path, code, _module):
        resp = client.request(method, f"{path}?scenario=fail")
        assert resp.status_code == 500
        body = resp.json()
        assert_envelope(body, "ERROR")
        assert body["error"]["code"] == code

    @pytest.mark.parametrize("method, path, _code, module", FSC_ENDPOINTS)
    def test_timeout_waits_then_answers_default(self, client, sleeps, method, path, _code, module):
        resp = client.request(method, f"{path}?scenario=timeout")
        assert resp.status_code == 200
        assert_envelope(resp.json(), "SUCCESS")
        sleeps[module].assert_awaited_once_with(10_000)

    @pytest.mark.parametrize("method, path, _code, module", FSC_ENDPOINTS)
    def test_success_does_not_wait(self, client, sleeps, method, path, _code, module):
        resp = client.request(method, path)
        assert resp.status_code == 200
        assert_envelope(resp.json(), "SUCCESS")
        sleeps[module].assert_not_awaited()

    @pytest.mark.parametrize("method, path, _code, module", FSC_ENDPOINTS)
    def test_scenario_is_logged_at_debug(self, client, method, path, _code, module):
        with patch(f"demo_api.routers.{module}.logger") as mock_logger:
            client.request(method, f"{path}?scenario=Timeout")
        mock_logger.debug.assert_called_once()
        assert mock_logger.debug.call_args[0][1] == "timeout"

    @pytest.mark.parametrize("method, path, _code, _module", FSC_ENDPOINTS)
    def test_request_id_prefix(self, client, method, path, _code, _module):
        prefix = {
            "credit-bureau": "cb-", "fraud-detection": "fd-", "income-verification": "iv-",
            "ofac-check": "ofac-", "property-valuation": "pv-",
        }[path.rsplit("/", 1)[1]]
        assert client.request(method, path).json()["requestId"].startswith(prefix)

    def test_unexpected_fault_becomes_internal_error(self, client):
        with patch("demo_api.routers.credit_bureau.build_credit_report", side_effect=RuntimeError("boom")):
            resp = client.post("/api/fsc/credit-bureau?scenario=good")
        assert resp.status_code == 500
        body = resp.json()
        assert_envelope(body, "ERROR")
        assert body["error"] == {"code": "INTERNAL_ERROR", "message": "An unexpected error occurred."}
        assert body["requestId"].startswith("cb-")

    def test_malformed_json_body_is_internal_error(self, client):
        resp = client.post(
            "/api/fsc/income-verification",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 500
        assert resp.json()["error"]["code"] == "INTERNAL_ERROR"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 3. FSC endpoints
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
class TestCreditBureau:

    @pytest.mark.parametrize("scenario, lo, hi", [
        ("excellent", 780, 850), ("GOOD", 700, 779), ("fair", 640, 699),
        ("low", 580, 639), ("poor", 300, 579), ("mystery", 700, 779),
    ])
    def test_score_band(self, client, scenario, lo, hi):
        for _ in range(20):
            data = client.post(f"/api/fsc/credit-bureau?scenario={scenario}").json()["data"]
            assert lo <= data["creditScore"] <= hi

    def test_seeded_response_is_reproducible(self, client, seeded):
        seeded(11)
        first = client.post("/api/fsc/credit-bureau").json()["data"]
        second = client.post("/api/fsc/credit-bureau").json()["data"]
        assert first == second

    def test_get_is_not_allowed(self, client):
        assert client.get("/api/fsc/credit-bureau").status_code == 405


class TestFraudDetection:

    @pytest.mark.parametrize("scenario, recommendation, alerts", [
        ("success", "APPROVE", 0), ("medium", "REVIEW", 2),
        ("high", "DENY", 3), ("flagged", "MANUAL_REVIEW_REQUIRED", 2),
    ])
    def test_recommendation_and_alerts(self, client, scenario, recommendation, alerts):
        data = client.post(f"/api/fsc/fraud-detection?scenario={scenario}").json()["data"]
        assert data["recommendation"] == recommendation
        assert len(data["alerts"]) == alerts


class TestIncomeVerification:

    def test_higher_with_stated_income(self, client):
        for _ in range(20):
            data = client.post(
                "/api/fsc/income-verification?scenario=higher",
                json={"statedIncome": 100000, "employerName": "Globex"},
            ).json()["data"]
            assert 110_000 <= data["verifiedIncome"] <= 125_000
            assert data["incomeMatch"] == "HIGHER_THAN_STATED"
            assert data["statedIncome"] == 100000
            assert data["employmentDetails"]["employerName"] == "Globex"

    def test_defaults_without_body(self, client):
        data = client.post("/api/fsc/income-verification").json()["data"]
        assert data["statedIncome"] == 120000
        assert data["employmentDetails"]["employerName"] == "Acme Corporation"

    def test_zero_income_uses_default(self, client):
        data = client.post("/api/fsc/income-verification", json={"statedIncome": 0}).json()["data"]
        assert data["statedIncome"] == 120000

    def test_non_object_body_uses_defaults(self, client):
        data = client.post("/api/fsc/income-verification", json=[1, 2]).json()["data"]
        assert data["statedIncome"] == 120000

    def test_unverifiable(self, client):
        resp = client.post("/api/fsc/income-verification?scenario=unverifiable", json={"statedIncome": 90000})
        assert resp.status_code == 200
        body = resp.json()
        assert_envelope(body, "SUCCESS")
        assert body["data"]["verified"] is False
        assert "verifiedIncome" not in body["data"]


class TestOfacCheck:

    def test_match(self, client):
        data = client.post(
            "/api/fsc/ofac-check?scenario=match",
            json={"firstName": "Ivan", "lastName": "Petrov", "dateOfBirth": "1970-01-01", "country": "RU"},
        ).json()["data"]
        assert data["onWatchlist"] is True
        assert 95 <= data["matchScore"] <= 100
        assert len(data["matches"]) == 1
        assert data["matches"][0]["matchType"] == "EXACT_MATCH"
        assert data["matches"][0]["matchedName"] == "IVAN PETROV"
        assert data["searchedName"] == "Ivan Petrov"

    def test_default_name(self, client):
        data = client.post("/api/fsc/ofac-check").json()["data"]
        assert data["searchedName"] == "John Smith"
        assert data["matchType"] == "NO_MATCH"
        assert len(data["listsChecked"]) == 5


class TestPropertyValuation:

    def test_low(self, client):
        for _ in range(20):
            data = client.get(
                "/api/fsc/property-valuation?scenario=low&requestedValue=400000"
            ).json()["data"]
            assert 300_000 <= data["estimatedValue"] <= 360_000

    def test_unavailable(self, client):
        body = client.get("/api/fsc/property-valuation?scenario=unavailable").json()
        assert_envelope(body, "SUCCESS")
        assert body["data"]["dataAvailable"] is False
        assert body["data"]["estimatedValue"] is None

    def test_defaults(self, client):
        data = client.get("/api/fsc/property-valuation?requestedValue=abc").json()["data"]
        assert 450_000 <= data["estimatedValue"] <= 495_000
        assert data["propertyDetails"]["address"] == "123 Main Street, Anytown, USA"
        assert len(data["comparableSales"]) == 3


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# 4. Utility endpoints
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
class TestEcho:

    def test_mirrors_request(self, client):
        resp = client.post(
            "/api/echo?x=1",
            json={"hello": "world"},
            headers={"X-Forwarded-For": "203.0.113.7"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert "status" not in body
        assert body["method"] == "POST"
        assert body["url"] == "/api/echo?x=1"
        assert body["query"] == {"x": "1"}
        assert body["body"] == {"hello": "world"}
        assert body["ip"] == "203.0.113.7"
        assert body["requestId"].startswith("echo-")

    def test_raw_body_and_peer_ip(self, client):
        body = client.put("/api/echo", content=b"plain text").json()
        assert body["body"] == "plain text"
        assert body["ip"] == "testclient"

    def test_empty_body_is_null(self, client):
        assert client.delete("/api/echo").json()["body"] is None

    def test_idempotent_modulo_id_and_time(self, client):
        strip = lambda b: {k: v for k, v in b.items() if k not in ("requestId", "timestamp")}
        headers = {"X-Request-ID": "fixed"}
        first = client.get("/api/echo?a=b", headers=headers).json()
        second = client.get("/api/echo?a=b", headers=headers).json()
        assert strip(first) == strip(second)


class TestDelay:

    def test_default_delay(self, client, sleeps):
        body = client.get("/api/delay").json()
        assert_envelope(body, "SUCCESS")
        assert body["data"]["requestedDelay"] == 1000
        sleeps["delay"].assert_awaited_once_with(1000)

    def test_clamped_to_max(self, client, sleeps):
        body = client.get("/api/delay?ms=50000").json()
        assert body["data"]["requestedDelay"] == 30000
        sleeps["delay"].assert_awaited_once_with(30000)

    def test_negative_clamped_to_zero(self, client, sleeps):
        body = client.get("/api/delay?ms=-5").json()
        assert body["data"]["requestedDelay"] == 0
        sleeps["delay"].assert_awaited_once_with(0)

    def test_reports_actual_delay(self, client):
        data = client.get("/api/delay?ms=5").json()["data"]
        assert data["actualDelay"] >= 0
        assert data["message"] == f"Response delayed by {data['actualDelay']}ms"


class TestStatus:

    def test_not_found(self, client):
        resp = client.get("/api/status?code=404")
        assert resp.status_code == 404
        body = resp.json()
        assert_envelope(body, "ERROR")
        assert body["error"] == {"code": "HTTP_404", "message": "Not Found"}

    def test_out_of_range_falls_back_to_200(self, client):
        resp = client.get("/api/status?code=999")
        assert resp.status_code == 200
        assert resp.json()["data"] == {"statusCode": 200, "message": "OK"}

    def test_success_code(self, client):
        resp = client.get("/api/status?code=201")
        assert resp.status_code == 201
        assert_envelope(resp.json(), "SUCCESS")

    def test_custom_message(self, client):
        resp = client.get("/api/status?code=503&message=Down%20for%20maintenance")
        assert resp.status_code == 503
        assert resp.json()["error"]["message"] == "Down for maintenance"

    def test_unknown_status_text(self, client):
        resp = client.get("/api/status?code=418")
        assert resp.status_code == 418
        assert resp.json()["error"]["message"] == "Unknown Status"

    @pytest.mark.parametrize("code", [204, 205, 304])
    def test_bodyless_status(self, client, code):
        resp = client.get(f"/api/status?code={code}")
        assert resp.status_code == code
        assert resp.content == b""


class TestRandomFail:

    def test_rate_zero_never_fails(self, client):
        for _ in range(1000):
            assert client.get("/api/random-fail?rate=0").status_code == 200

    def test_rate_one_always_fails(self, client):
        statuses = {client.get("/api/random-fail?rate=1").status_code for _ in range(1000)}
        assert statuses <= {500, 502, 503, 504, 429}

    def test_rate_is_clamped(self, client):
        body = client.get("/api/random-fail?rate=-3").json()
        assert body["data"]["failureRate"] == 0

    def test_success_payload(self, client):
        body = client.get("/api/random-fail?rate=0").json()
        assert_envelope(body, "SUCCESS")
        assert body["data"]["message"] == "Request succeeded"
        assert body["requestId"].startswith("rf-")

    def test_error_envelope(self, client):
        body = client.get("/api/random-fail?rate=1").json()
        assert_envelope(body, "ERROR")
        assert body["error"]["code"] in {
            "INTERNAL_ERROR", "BAD_GATEWAY", "SERVICE_UNAVAILABLE", "GATEWAY_TIMEOUT", "RATE_LIMITED",
        }


class TestIndex:

    def test_discovery_document(self, client):
        resp = client.get("/api")
        assert resp.status_code == 200
        body = resp.json()
        assert_envelope(body, "SUCCESS")
        paths = [e["path"] for group in body["data"]["endpoints"].values() for e in group["endpoints"]]
        assert set(paths) == set(ALL_ENDPOINTS) - {"/api"}
        assert body["requestId"].startswith("index-")

    def test_idempotent_modulo_id_and_time(self, client):
        assert client.get("/api").json()["data"] == client.get("/api").json()["data"]
