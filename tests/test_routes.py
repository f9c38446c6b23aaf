import json

import pytest
from fastapi.testclient import TestClient

import main
from agents import data_ingestion, recommendation, scenario_generation
from core.config import DEFAULT_CITY_ID

client = TestClient(main.app)


@pytest.fixture
def no_llm(fake_llm, monkeypatch):
    for module in (scenario_generation, recommendation, data_ingestion):
        monkeypatch.setattr(module, "Anthropic", lambda: fake_llm(error=RuntimeError("no key")))


def _city_payload(city):
    return city.model_dump(by_alias=True, exclude_none=True)


def test_root():
    body = client.get("/").json()
    assert body["status"] == "operational"
    assert body["policies"] == 34


# =============================================================================
# Reference data
# =============================================================================

def test_list_and_search_cities():
    assert len(client.get("/api/cities").json()) >= 8
    found = client.get("/api/cities", params={"q": "nether"}).json()
    assert [c["id"] for c in found] == ["amsterdam"]
    assert "annualBudget" in found[0]


def test_city_detail_with_scores():
    body = client.get("/api/cities/tokyo").json()
    assert body["city"]["name"] == "Tokyo"
    assert set(body["scores"]) == {"sustainability", "governance", "fiscalStability", "publicApproval"}


def test_unknown_city_is_404():
    assert client.get("/api/cities/atlantis").status_code == 404


def test_policies_and_categories():
    assert len(client.get("/api/policies").json()) == 34
    energy = client.get("/api/policies", params={"category": "energy"}).json()
    assert {p["category"] for p in energy} == {"energy"}
    assert "budgetRange" in energy[0]
    assert client.get("/api/policies", params={"category": "space"}).status_code == 400

    categories = client.get("/api/policies/categories").json()
    assert {"id": "transportation", "label": "Transport"} in categories


def test_policy_detail():
    assert client.get("/api/policies/carbon-tax").json()["budgetRange"]["refPerYear"] == 80
    assert client.get("/api/policies/nope").status_code == 404


def test_scores(city):
    resp = client.post("/api/scores", json=_city_payload(city))
    assert resp.json() == {
        "sustainability": 46,
        "governance": 54,
        "fiscalStability": 41,
        "publicApproval": 60,
    }
    assert "sustainability" in client.get("/api/scores/formulas").json()


# =============================================================================
# Simulation
# =============================================================================

def test_simulate_reference_city():
    resp = client.post("/api/simulate", json={
        "cityId": "amsterdam",
        "policies": [{"id": "renewable-expansion", "startYear": 1, "endYear": 5, "budgetPerYear": 400}],
        "years": 5,
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["baseline"]["year"] == 0
    assert [y["year"] for y in body["projections"]] == [1, 2, 3, 4, 5]
    assert body["projections"][-1]["metrics"]["renewableEnergy"] == 43
    assert body["totalCostPerYear"] == 400


def test_simulate_custom_city(city):
    resp = client.post("/api/simulate", json={"city": _city_payload(city), "years": 2, "label": "ai"})
    body = resp.json()
    assert body["label"] == "ai"
    assert body["projections"][0]["scores"]["fiscalStability"] == 41


def test_simulate_without_city_uses_default():
    body = client.post("/api/simulate", json={"years": 2}).json()
    assert body["baseline"]["metrics"]["id"] == DEFAULT_CITY_ID
    assert len(body["projections"]) == 2


@pytest.mark.parametrize("payload,status", [
    ({"cityId": "atlantis"}, 404),
    ({"cityId": "amsterdam", "years": 0}, 422),
    ({"cityId": "amsterdam", "years": 500}, 422),
])
def test_simulate_rejects_bad_requests(payload, status):
    assert client.post("/api/simulate", json=payload).status_code == status


# =============================================================================
# AI endpoints
# =============================================================================

def test_ai_scenario(fake_llm, monkeypatch):
    reply = '{"reasoning": "Go green.", "policies": [{"id": "carbon-tax", "startYear": 1, "endYear": 4, "budgetPerYear": 999}]}'
    monkeypatch.setattr(scenario_generation, "Anthropic", lambda: fake_llm(text=reply))

    resp = client.post("/api/ai-scenario", json={"cityId": "amsterdam", "goal": "net zero", "simulationYears": 4})
    assert resp.status_code == 200
    assert resp.json() == {
        "reasoning": "Go green.",
        "policies": [{"id": "carbon-tax", "startYear": 1, "endYear": 4, "budgetPerYear": 300.0}],
    }


def test_ai_scenario_errors(no_llm):
    assert client.post("/api/ai-scenario", json={"cityId": "amsterdam", "goal": "  "}).status_code == 400
    assert client.post("/api/ai-scenario", json={"cityId": "amsterdam", "goal": "x"}).status_code == 502


def test_advisor_falls_back(no_llm):
    result = client.post("/api/simulate", json={"cityId": "delhi", "years": 3}).json()
    resp = client.post("/api/advisor", json={"result": result, "cityName": "Delhi"})
    assert resp.status_code == 200
    body = resp.json()
    assert "Delhi" in body["summary"]
    assert body["risks"] == ["Health Emergency: Air quality hazardous"]


def test_city_refresh(fake_llm, monkeypatch):
    monkeypatch.setattr(data_ingestion, "Anthropic", lambda: fake_llm(text='{"publicTrust": 71}'))
    body = client.post("/api/city-data/refresh", json={"cityId": "copenhagen"}).json()
    assert body["updatedFields"] == ["public_trust"]
    assert body["city"]["publicTrust"] == 71


def test_city_refresh_failure(no_llm):
    assert client.post("/api/city-data/refresh", json={"cityId": "copenhagen"}).status_code == 502


# =============================================================================
# Scenario jobs
# =============================================================================

def _stream_events(job_id):
    with client.stream("GET", f"/api/scenarios/{job_id}/stream") as resp:
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/event-stream")
        body = "".join(resp.iter_text())
    return [json.loads(line[len("data: "):]) for line in body.split("\n\n") if line.startswith("data: ")]


def test_scenario_job_lifecycle(no_llm):
    resp = client.post("/api/scenarios", json={
        "cityId": "singapore",
        "goal": "cut debt",
        "simulationYears": 3,
        "policies": [{"id": "anti-corruption", "startYear": 1, "endYear": 3, "budgetPerYear": 50}],
    })
    job_id = resp.json()["job_id"]
    assert resp.json()["status"] == "queued"

    events = _stream_events(job_id)
    assert events[0]["type"] == "start"
    assert events[-1]["type"] == "complete"

    job = client.get(f"/api/scenarios/{job_id}/result").json()
    assert job["status"] == "completed"
    assert job["result"]["user_result"]["selected_policies"][0]["id"] == "anti-corruption"
    assert job["result"]["ai_policies"] == []
    assert job["result"]["advisory"]["summary"]


def test_scenario_job_not_finished_yet(no_llm):
    job_id = client.post("/api/scenarios", json={"cityId": "tokyo", "goal": "x"}).json()["job_id"]
    assert client.get(f"/api/scenarios/{job_id}/result").status_code == 202


@pytest.mark.parametrize("payload,status", [
    ({"cityId": "tokyo", "goal": ""}, 400),
    ({"cityId": "atlantis", "goal": "x"}, 404),
])
def test_scenario_job_rejected(payload, status):
    assert client.post("/api/scenarios", json=payload).status_code == status


def test_unknown_job():
    assert client.get("/api/scenarios/missing/stream").status_code == 404
    assert client.get("/api/scenarios/missing/result").status_code == 404
