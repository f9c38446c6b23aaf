"""
Agent 5: Recommendation Agent
Turns a projection into an advisory: executive summary, tradeoffs, risks
and suggestions.
"""
import logging
from typing import Any, Dict, Mapping, Optional

from anthropic import Anthropic

from agents.impact_analysis import PILLAR_LABELS, score_deltas, unique_warnings
from agents.scenario_generation import extract_json_object
from core.config import ADVISOR_MAX_TOKENS, LLM_MODEL
from core.models import Advisory, PolicyDefinition, SimulationResult
from core.policies import POLICY_CATALOG
from core.state import ScenarioState

logger = logging.getLogger(__name__)


def build_advisor_prompt(
    result: SimulationResult,
    city_name: str,
    catalog: Mapping[str, PolicyDefinition] = POLICY_CATALOG,
) -> str:
    baseline = result.baseline
    final = result.final
    horizon = len(result.projections)

    policy_details = []
    for config in result.selected_policies:
        definition = catalog.get(config.id)
        name = definition.name if definition else config.id
        policy_details.append(
            f"{name} (${config.budget_per_year:,.0f}M/yr, years {config.start_year}-{config.end_year})"
        )

    deltas = score_deltas(result)
    score_lines = "\n".join(
        f"- {d['label']}: {d['before']} → {d['after']} ({d['delta']:+d})"
        for d in deltas.values()
    )
    warnings = unique_warnings(result)
    warning_lines = "\n".join(w["warning"] for w in warnings) if warnings else "None"

    b, f = baseline.metrics, final.metrics
    return f"""You are a senior urban policy advisor analysing a simulation for {city_name}.

## Simulation Context
- Projection horizon: {horizon} years
- Selected policies: {', '.join(policy_details) if policy_details else 'None'}
- Annual policy cost (year 1): ${result.total_cost_per_year:,.0f}M

## Pillar Score Changes (Baseline → Final)
{score_lines}

## Key Metric Changes
- CO₂/capita: {b.co2_per_capita:.1f} → {f.co2_per_capita:.1f} t/yr
- Renewable energy: {b.renewable_energy:.0f}% → {f.renewable_energy:.0f}%
- Public transit: {b.public_transit:.0f}% → {f.public_transit:.0f}%
- Public trust: {b.public_trust:.0f} → {f.public_trust:.0f}/100
- Debt ratio: {b.debt_ratio:.0f}% → {f.debt_ratio:.0f}% of GDP
- Air quality (AQI): {b.air_quality:.0f} → {f.air_quality:.0f}

## Warnings Triggered
{warning_lines}

Provide your analysis as a JSON object with this exact structure:
{{
  "summary": "2-3 sentence executive summary of the policy package and its overall effect",
  "tradeoffs": ["tradeoff 1", "tradeoff 2", "tradeoff 3"],
  "risks": ["risk 1", "risk 2"],
  "suggestions": ["suggestion 1", "suggestion 2"]
}}

Be specific, data-driven, and reference the actual numbers. Keep each bullet to 1-2 sentences."""


def fallback_advisory(result: SimulationResult, city_name: str) -> Advisory:
    """Deterministic advisory used when the LLM is unavailable."""
    deltas = score_deltas(result)
    changes = ", ".join(f"{d['label']} {d['delta']:+d}" for d in deltas.values())
    gains = [d["label"] for d in deltas.values() if d["delta"] > 0]
    losses = [d["label"] for d in deltas.values() if d["delta"] < 0]

    tradeoffs = []
    if gains and losses:
        tradeoffs.append(f"Gains in {', '.join(gains)} come at the cost of {', '.join(losses)}.")

    return Advisory(
        summary=(
            f"Over {len(result.projections)} years, {len(result.selected_policies)} policies "
            f"costing ${result.total_cost_per_year:,.0f}M/yr shift {city_name}'s pillar scores: {changes}."
        ),
        tradeoffs=tradeoffs,
        risks=[w["warning"] for w in unique_warnings(result)],
        suggestions=[],
    )


def generate_advisory(
    result: SimulationResult,
    city_name: str,
    catalog: Mapping[str, PolicyDefinition] = POLICY_CATALOG,
    client: Optional[Anthropic] = None,
) -> Advisory:
    """LLM advisory for a simulation result, falling back to a static summary."""
    prompt = build_advisor_prompt(result, city_name, catalog)

    try:
        client = client or Anthropic()
        response = client.messages.create(
            model=LLM_MODEL,
            max_tokens=ADVISOR_MAX_TOKENS,
            messages=[{"role": "user", "content": prompt}],
        )
        return Advisory(**extract_json_object(response.content[0].text))
    except Exception as e:
        logger.warning(f"Advisor LLM failed: {e}, using fallback advisory")
        return fallback_advisory(result, city_name)


def recommendation_agent(state: ScenarioState) -> Dict[str, Any]:
    """Generate the advisory for the AI scenario, with the user scenario as context."""
    logger.info("Recommendation Agent: generating advisory")

    try:
        ai = SimulationResult(**state["ai_result"])
        advisory = generate_advisory(ai, state["city_name"])

        winners = state.get("comparison", {}).get("winners", {})
        ai_leads = [PILLAR_LABELS[p] for p, w in winners.items() if w == "ai"]
        if ai_leads:
            advisory = advisory.model_copy(update={
                "suggestions": advisory.suggestions + [
                    f"The AI bundle outperforms your bundle on {', '.join(ai_leads)}."
                ],
            })

        log_msg = "Recommendation Agent: advisory generated"
        logger.info(log_msg)

        return {
            "advisory": advisory.model_dump(),
            "agent_logs": state.get("agent_logs", []) + [log_msg],
            "status": "completed",
        }
    except Exception as e:
        err = f"Recommendation Agent error: {e}"
        logger.error(err)
        return {
            "status": "error",
            "error": err,
            "agent_logs": state.get("agent_logs", []) + [err],
        }
