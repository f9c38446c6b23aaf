import json

from agents import recommendation
from agents.recommendation import (
    build_advisor_prompt,
    fallback_advisory,
    generate_advisory,
    recommendation_agent,
)
from core.config import LLM_MODEL
from core.models import PolicyConfig
from core.policies import POLICY_CATALOG
from core.simulation import WARNING_ELEVATED_DEBT, run_simulation


def _result(city, policy_id="renewable-expansion", budget=400, years=5):
    configs = [PolicyConfig(id=policy_id, start_year=1, end_year=years, budget_per_year=budget)]
    return run_simulation(city, configs, POLICY_CATALOG, years=years)


def test_prompt_mentions_policies_scores_and_warnings(city):
    indebted = city.model_copy(update={"debt_ratio": 90})
    prompt = build_advisor_prompt(_result(indebted), "Testville")

    assert "Testville" in prompt
    assert "Renewable Energy Expansion ($400M/yr, years 1-5)" in prompt
    assert "Projection horizon: 5 years" in prompt
    assert "Sustainability: 46 →" in prompt
    # each warning listed once even though it fires every year
    assert prompt.count(WARNING_ELEVATED_DEBT) == 1


def test_prompt_falls_back_to_id_for_unknown_policy(city):
    result = run_simulation(
        city, [PolicyConfig(id="mystery", start_year=1, end_year=2, budget_per_year=10)], POLICY_CATALOG, years=2
    )
    assert "mystery ($10M/yr, years 1-2)" in build_advisor_prompt(result, "Testville")


def test_generate_advisory_parses_llm_reply(city, fake_llm):
    reply = {
        "summary": "Solid plan.",
        "tradeoffs": ["Debt rises slightly."],
        "risks": ["Grid stability."],
        "suggestions": ["Add storage."],
    }
    client = fake_llm(text=json.dumps(reply))

    advisory = generate_advisory(_result(city), "Testville", client=client)

    assert advisory.summary == "Solid plan."
    assert advisory.suggestions == ["Add storage."]
    assert client.messages.calls[0]["model"] == LLM_MODEL


def test_generate_advisory_falls_back(city, fake_llm):
    result = _result(city.model_copy(update={"debt_ratio": 90}))
    for client in (fake_llm(error=RuntimeError("boom")), fake_llm(text="not json"), fake_llm(text='{"tradeoffs": []}')):
        advisory = generate_advisory(result, "Testville", client=client)
        assert advisory == fallback_advisory(result, "Testville")
        assert advisory.risks == [WARNING_ELEVATED_DEBT]


def test_fallback_summary_and_tradeoffs(city):
    advisory = fallback_advisory(_result(city), "Testville")
    assert "Testville" in advisory.summary
    assert "1 policies" in advisory.summary
    assert "$400M/yr" in advisory.summary


def test_agent_adds_ai_lead_suggestion(city, fake_llm, monkeypatch):
    monkeypatch.setattr(recommendation, "Anthropic", lambda: fake_llm(error=RuntimeError("no key")))
    state = {
        "city_name": "Testville",
        "ai_result": _result(city).model_dump(),
        "comparison": {"winners": {"sustainability": "ai", "governance": "user"}},
        "agent_logs": [],
    }
    out = recommendation_agent(state)

    assert out["status"] == "completed"
    assert out["advisory"]["suggestions"][-1] == "The AI bundle outperforms your bundle on Sustainability."


def test_agent_without_ai_result_errors():
    out = recommendation_agent({"city_name": "x", "ai_result": None, "agent_logs": []})
    assert out["status"] == "error"
