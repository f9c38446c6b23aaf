import json

import pytest

from agents import scenario_generation
from agents.scenario_generation import (
    ScenarioGenerationError,
    extract_json_object,
    generate_ai_scenario,
    sanitize_policies,
    scenario_generation_agent,
)
from core.config import LLM_MODEL
from core.policies import POLICY_CATALOG
from workflow.graph import initial_state


def _one(entry, years=10):
    policies = sanitize_policies([entry], POLICY_CATALOG, years)
    assert len(policies) == 1
    return policies[0]


# =============================================================================
# JSON extraction
# =============================================================================

def test_extract_plain_and_fenced_json():
    assert extract_json_object('{"a": 1}') == {"a": 1}
    assert extract_json_object('```json\n{"a": 1}\n```') == {"a": 1}
    assert extract_json_object('Sure! Here it is: {"a": {"b": 2}} hope that helps') == {"a": {"b": 2}}


def test_extract_without_object_raises():
    with pytest.raises(ValueError):
        extract_json_object("I cannot help with that.")


# =============================================================================
# Sanitization
# =============================================================================

def test_unknown_and_malformed_entries_dropped():
    raw = [
        {"id": "teleporters", "startYear": 1, "endYear": 5, "budgetPerYear": 100},
        "carbon-tax",
        {"startYear": 1},
        {"id": 42},
        {"id": "carbon-tax", "startYear": 1, "endYear": 5, "budgetPerYear": 100},
    ]
    policies = sanitize_policies(raw, POLICY_CATALOG, 10)
    assert [p.id for p in policies] == ["carbon-tax"]


def test_non_list_yields_nothing():
    assert sanitize_policies(None, POLICY_CATALOG, 10) == []
    assert sanitize_policies({"id": "carbon-tax"}, POLICY_CATALOG, 10) == []


def test_budget_clamped_into_range():
    # carbon-tax range is 10-300, ref 80
    assert _one({"id": "carbon-tax", "budgetPerYear": 5000}).budget_per_year == 300
    assert _one({"id": "carbon-tax", "budgetPerYear": 1}).budget_per_year == 10
    assert _one({"id": "carbon-tax"}).budget_per_year == 80
    assert _one({"id": "carbon-tax", "budgetPerYear": "lots"}).budget_per_year == 80


def test_years_defaulted_rounded_and_bounded():
    policy = _one({"id": "carbon-tax"})
    assert (policy.start_year, policy.end_year) == (1, 10)

    policy = _one({"id": "carbon-tax", "startYear": 2.6, "endYear": 7.5})
    assert (policy.start_year, policy.end_year) == (3, 8)

    policy = _one({"id": "carbon-tax", "startYear": -4, "endYear": 99})
    assert (policy.start_year, policy.end_year) == (1, 10)


def test_start_always_before_end():
    policy = _one({"id": "carbon-tax", "startYear": 6, "endYear": 3})
    assert (policy.start_year, policy.end_year) == (6, 7)

    policy = _one({"id": "carbon-tax", "startYear": 10, "endYear": 10})
    assert (policy.start_year, policy.end_year) == (9, 10)

    policy = _one({"id": "carbon-tax", "startYear": 40, "endYear": 50})
    assert (policy.start_year, policy.end_year) == (9, 10)


def test_single_year_horizon():
    policy = _one({"id": "carbon-tax", "startYear": 3, "endYear": 8}, years=1)
    assert (policy.start_year, policy.end_year) == (1, 1)


def test_snake_case_keys_accepted():
    policy = _one({"id": "carbon-tax", "start_year": 2, "end_year": 4, "budget_per_year": 120})
    assert (policy.start_year, policy.end_year, policy.budget_per_year) == (2, 4, 120)


def test_sanitized_output_always_valid():
    raw = [
        {"id": pid, "startYear": s, "endYear": e, "budgetPerYear": b}
        for pid in ("renewable-expansion", "expand-transit", "anti-corruption")
        for s, e, b in [(0, 0, 0), (12, 3, -5), (None, "x", 1e12), (float("nan"), True, float("inf"))]
    ]
    for years in (1, 2, 5, 10):
        for p in sanitize_policies(raw, POLICY_CATALOG, years):
            r = POLICY_CATALOG[p.id].budget_range
            assert 1 <= p.start_year <= p.end_year <= years
            if years > 1:
                assert p.start_year < p.end_year
            assert r.min_per_year <= p.budget_per_year <= r.max_per_year


# =============================================================================
# LLM call
# =============================================================================

def test_generate_ai_scenario(city, fake_llm):
    reply = json.dumps({
        "reasoning": "Cut emissions fast.",
        "policies": [
            {"id": "renewable-expansion", "startYear": 1, "endYear": 10, "budgetPerYear": 600},
            {"id": "made-up", "startYear": 1, "endYear": 10, "budgetPerYear": 600},
        ],
    })
    client = fake_llm(text=f"```json\n{reply}\n```")

    scenario = generate_ai_scenario("Testville", city, "net zero", 10, client=client)

    assert scenario.reasoning == "Cut emissions fast."
    assert [p.id for p in scenario.policies] == ["renewable-expansion"]
    call = client.messages.calls[0]
    assert call["model"] == LLM_MODEL
    assert "net zero" in call["messages"][0]["content"]
    assert 'id="carbon-tax"' in call["messages"][0]["content"]


def test_generate_ai_scenario_wraps_failures(city, fake_llm):
    with pytest.raises(ScenarioGenerationError):
        generate_ai_scenario("Testville", city, "x", 10, client=fake_llm(error=RuntimeError("down")))
    with pytest.raises(ScenarioGenerationError):
        generate_ai_scenario("Testville", city, "x", 10, client=fake_llm(text="no json here"))


def test_missing_reasoning_becomes_empty(city, fake_llm):
    client = fake_llm(text='{"policies": []}')
    scenario = generate_ai_scenario("Testville", city, "x", 10, client=client)
    assert scenario.reasoning == ""
    assert scenario.policies == []


# =============================================================================
# Agent
# =============================================================================

def _state(city):
    state = initial_state("testville", "cleaner air", 5, [], city.model_dump())
    state["city_name"] = "Testville"
    return state


def test_agent_falls_back_to_empty_bundle(city, fake_llm, monkeypatch):
    monkeypatch.setattr(scenario_generation, "Anthropic", lambda: fake_llm(error=RuntimeError("no key")))
    out = scenario_generation_agent(_state(city))
    assert out["status"] == "running"
    assert out["ai_policies"] == []
    assert "unavailable" in out["agent_logs"][-1]


def test_agent_returns_policy_dumps(city, fake_llm, monkeypatch):
    reply = '{"reasoning": "r", "policies": [{"id": "congestion-pricing", "startYear": 2, "endYear": 5}]}'
    monkeypatch.setattr(scenario_generation, "Anthropic", lambda: fake_llm(text=reply))
    out = scenario_generation_agent(_state(city))
    assert out["status"] == "running"
    assert out["ai_reasoning"] == "r"
    assert out["ai_policies"][0]["id"] == "congestion-pricing"
    assert out["ai_policies"][0]["end_year"] == 5


def test_agent_reports_bad_state(city):
    state = _state(city)
    state["baseline_city"] = {"name": "incomplete"}
    out = scenario_generation_agent(state)
    assert out["status"] == "error"
    assert out["error"].startswith("Scenario Generation Agent error")
