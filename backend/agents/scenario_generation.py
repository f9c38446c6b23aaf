"""
Agent 2: Scenario Generation Agent
Asks the LLM for a policy bundle that pursues the planner's goal, then
sanitizes it into PolicyConfig objects the projection engine can run.
"""
import json
import logging
import math
import re
from typing import Any, Dict, List, Mapping, Optional

from anthropic import Anthropic

from core.city_model import clamp, round_half_up
from core.config import LLM_MODEL, SCENARIO_MAX_TOKENS
from core.models import AIScenario, CityState, PolicyConfig, PolicyDefinition
from core.policies import POLICY_CATALOG
from core.state import ScenarioState

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a JSON-only API. Respond with a single valid JSON object. "
    "No markdown, no code fences, no explanation outside the JSON."
)

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```\s*$")
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class ScenarioGenerationError(Exception):
    """The LLM could not produce a usable scenario."""


def extract_json_object(text: str) -> Dict[str, Any]:
    """Parse the first {...} block of an LLM reply, ignoring markdown fences."""
    cleaned = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text.strip())).strip()
    match = _JSON_OBJECT.search(cleaned)
    if not match:
        raise ValueError("No JSON object in response")
    return json.loads(match.group(0))


def _number(value: Any) -> float:
    """Numeric value or 0.0 for anything unusable (callers treat 0 as 'missing')."""
    if isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def _pick(entry: Mapping[str, Any], camel: str, snake: str) -> Any:
    return entry[camel] if camel in entry else entry.get(snake)


def sanitize_policies(
    raw_policies: Any,
    catalog: Mapping[str, PolicyDefinition],
    years: int,
) -> List[PolicyConfig]:
    """
    Turn LLM output into configs the engine can trust.

    Unknown ids are dropped. Years are rounded and kept inside [1, years]
    with start < end whenever the horizon allows it. Budgets are clamped
    into the policy's [min, max] range, defaulting to the reference budget.
    """
    if not isinstance(raw_policies, list):
        return []

    sanitized = []
    for entry in raw_policies:
        if not isinstance(entry, Mapping) or not isinstance(entry.get("id"), str):
            continue
        definition = catalog.get(entry["id"])
        if definition is None:
            continue

        start = max(1, round_half_up(_number(_pick(entry, "startYear", "start_year")) or 1))
        start = min(start, years)
        end = round_half_up(_number(_pick(entry, "endYear", "end_year")) or years)
        end = min(years, max(1, end))
        if years > 1 and start >= end:
            if start < years:
                end = start + 1
            else:
                start, end = years - 1, years

        budget_range = definition.budget_range
        budget = _number(_pick(entry, "budgetPerYear", "budget_per_year")) or budget_range.ref_per_year
        budget = clamp(budget, budget_range.min_per_year, budget_range.max_per_year)

        sanitized.append(PolicyConfig(
            id=definition.id,
            start_year=start,
            end_year=end,
            budget_per_year=budget,
        ))
    return sanitized


def build_scenario_prompt(
    city_name: str,
    city: CityState,
    goal: str,
    years: int,
    catalog: Mapping[str, PolicyDefinition],
) -> str:
    policy_list = "\n".join(
        f'- id="{p.id}" name="{p.name}" category={p.category} '
        f"budgetRange=${p.budget_range.min_per_year:g}M-${p.budget_range.max_per_year:g}M/yr "
        f"(ref ${p.budget_range.ref_per_year:g}M)"
        for p in catalog.values()
    )

    return f"""You are an urban policy advisor for {city_name}. A city planner wants to achieve: "{goal}" within {years} years.

Current city data:
- CO2/capita: {city.co2_per_capita:g} t/yr
- Renewable energy: {city.renewable_energy:g}%
- Public transit: {city.public_transit:g}%
- Air quality AQI: {city.air_quality:g}
- Public trust: {city.public_trust:g}/100
- Debt ratio: {city.debt_ratio:g}% of GDP

Available policies:
{policy_list}

Respond with a JSON object in this EXACT format (no other text):
{{
  "reasoning": "1-2 sentence explanation",
  "policies": [
    {{"id": "policy-id-here", "startYear": 1, "endYear": {years}, "budgetPerYear": 300}},
    {{"id": "policy-id-here", "startYear": 1, "endYear": {years}, "budgetPerYear": 150}}
  ]
}}

Rules:
- Only use IDs from the available policies list above
- Choose 3-5 policies that directly address the goal
- startYear >= 1, endYear <= {years}, budgetPerYear within each policy's stated range
- Do not include any text outside the JSON object"""


def generate_ai_scenario(
    city_name: str,
    city: CityState,
    goal: str,
    years: int,
    catalog: Mapping[str, PolicyDefinition] = POLICY_CATALOG,
    client: Optional[Anthropic] = None,
) -> AIScenario:
    """Ask the LLM for a policy bundle and sanitize it. Raises ScenarioGenerationError."""
    prompt = build_scenario_prompt(city_name, city, goal, years, catalog)

    try:
        client = client or Anthropic()
        response = client.messages.create(
            model=LLM_MODEL,
            max_tokens=SCENARIO_MAX_TOKENS,
            system=SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
        )
        raw = response.content[0].text.strip()
        logger.debug("Scenario LLM raw response (%d chars): %s", len(raw), raw)
        parsed = extract_json_object(raw)
    except Exception as e:
        raise ScenarioGenerationError(f"Failed to generate scenario: {e}") from e

    policies = sanitize_policies(parsed.get("policies"), catalog, years)
    reasoning = parsed.get("reasoning")
    return AIScenario(
        reasoning=reasoning if isinstance(reasoning, str) else "",
        policies=policies,
    )


def scenario_generation_agent(state: ScenarioState) -> Dict[str, Any]:
    """Generate the AI policy bundle for the planner's goal."""
    logger.info("Scenario Generation Agent: requesting AI policy bundle")

    try:
        city = CityState(**state["baseline_city"])
        years = state["simulation_years"]
        scenario = generate_ai_scenario(state["city_name"], city, state["goal"], years)

        log_msg = (
            f"Scenario Generation: AI proposed {len(scenario.policies)} policies "
            f"({', '.join(p.id for p in scenario.policies) or 'none'})"
        )
        logger.info(log_msg)

        return {
            "ai_reasoning": scenario.reasoning,
            "ai_policies": [p.model_dump() for p in scenario.policies],
            "agent_logs": state.get("agent_logs", []) + [log_msg],
            "status": "running",
        }
    except ScenarioGenerationError as e:
        # Fallback: compare against a no-policy AI scenario
        logger.warning(f"{e}, continuing with an empty AI bundle")
        log_msg = "Scenario Generation: AI unavailable, AI scenario has no policies"
        return {
            "ai_reasoning": "",
            "ai_policies": [],
            "agent_logs": state.get("agent_logs", []) + [log_msg],
            "status": "running",
        }
    except Exception as e:
        err = f"Scenario Generation Agent error: {e}"
        logger.error(err)
        return {
            "status": "error",
            "error": err,
            "agent_logs": state.get("agent_logs", []) + [err],
        }
