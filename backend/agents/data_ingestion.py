"""
Agent 1: Data Ingestion Agent
Resolves the city baseline from the reference table. Also hosts the
LLM-backed refresh that pulls newer estimates for a city's metrics.
"""
import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from anthropic import Anthropic
from pydantic.alias_generators import to_camel

from agents.scenario_generation import extract_json_object
from core.city_model import METRIC_BOUNDS, clamp, get_city
from core.config import CITY_REFRESH_MAX_TOKENS, LLM_MODEL
from core.models import CityState
from core.state import ScenarioState

logger = logging.getLogger(__name__)

# Metrics the LLM may update; population/gdp/budget stay with the dataset
REFRESHABLE_METRICS = [
    "co2_per_capita",
    "renewable_energy",
    "public_transit",
    "air_quality",
    "crime_rate",
    "public_trust",
    "debt_ratio",
    "infrastructure_investment",
    "green_investment",
    "healthcare_access",
    "education_index",
    "housing_affordability",
    "digital_connectivity",
]


class CityDataRefreshError(Exception):
    """The LLM could not provide usable city data."""


def sanitize_city_update(raw: Dict[str, Any]) -> Dict[str, float]:
    """Keep known numeric metrics (camelCase or snake_case keys), clamped to range."""
    update = {}
    for field in REFRESHABLE_METRICS:
        value = raw.get(to_camel(field), raw.get(field))
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if math.isnan(value) or math.isinf(value):
            continue
        lo, hi = METRIC_BOUNDS[field]
        update[field] = clamp(value, lo, hi)
    return update


def build_refresh_prompt(city: CityState) -> str:
    return f"""You are an urban data analyst with access to the latest available statistics.

Provide updated 2025/2026 estimates for {city.name}, {city.country} based on real-world data and recent trends.

Current simulation values (for reference):
- CO₂ per capita: {city.co2_per_capita:g} t/yr
- Renewable energy: {city.renewable_energy:g}%
- Public transit usage: {city.public_transit:g}%
- Air quality (AQI): {city.air_quality:g}
- Crime rate: {city.crime_rate:g} per 100k
- Public trust index: {city.public_trust:g}/100
- Debt ratio: {city.debt_ratio:g}% of GDP
- Infrastructure investment: {city.infrastructure_investment:g}% of budget

Return ONLY a JSON object with updated numeric estimates. Keep values realistic and grounded in actual data trends. Only include fields where you have reasonable confidence in an update:

{{
  "co2PerCapita": number,
  "renewableEnergy": number,
  "publicTransit": number,
  "airQuality": number,
  "crimeRate": number,
  "publicTrust": number,
  "debtRatio": number,
  "infrastructureInvestment": number,
  "greenInvestment": number,
  "healthcareAccess": number,
  "educationIndex": number,
  "housingAffordability": number,
  "digitalConnectivity": number
}}"""


def refresh_city_data(
    city: CityState,
    client: Optional[Anthropic] = None,
) -> Tuple[CityState, List[str]]:
    """Return the city with LLM-refreshed metrics and the names of fields updated."""
    try:
        client = client or Anthropic()
        response = client.messages.create(
            model=LLM_MODEL,
            max_tokens=CITY_REFRESH_MAX_TOKENS,
            system="You are a JSON-only API. Respond with a raw JSON object and nothing else.",
            messages=[{"role": "user", "content": build_refresh_prompt(city)}],
        )
        raw = extract_json_object(response.content[0].text)
    except Exception as e:
        raise CityDataRefreshError(f"Failed to refresh city data: {e}") from e

    update = sanitize_city_update(raw)
    logger.info(f"Refreshed {len(update)} metrics for {city.name}")
    return city.model_copy(update=update), sorted(update)


def data_ingestion_agent(state: ScenarioState) -> Dict[str, Any]:
    """Load the baseline city the scenario starts from."""
    logger.info("Data Ingestion Agent: starting")

    try:
        if state.get("baseline_city"):
            city = CityState(**state["baseline_city"])
        else:
            city = get_city(state["city_id"])
            if city is None:
                raise ValueError(f"Unknown city '{state['city_id']}'")

        log_msg = (
            f"Data Ingestion complete: baseline loaded for {city.name or state['city_id']} "
            f"(population {city.population:g}M, budget ${city.annual_budget:g}B)"
        )
        logger.info(log_msg)

        return {
            "city_name": city.name or state.get("city_name", ""),
            "baseline_city": city.model_dump(),
            "agent_logs": state.get("agent_logs", []) + [log_msg],
            "status": "running",
        }
    except Exception as e:
        err = f"Data Ingestion Agent error: {e}"
        logger.error(err)
        return {
            "status": "error",
            "error": err,
            "agent_logs": state.get("agent_logs", []) + [err],
        }
