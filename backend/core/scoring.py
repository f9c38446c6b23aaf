"""
Pillar scoring: maps a city snapshot to four composite 0-100 scores.

Each pillar is a weighted sum of normalized sub-metrics:

    pillar = round( sum( w_i * normalize(metric_i, lo_i, hi_i) ) )

where inverted sub-metrics (lower raw value is better) use
`normalize_inverse`. Weights sum to 1.0 per pillar. Bounds and weights are
fixed constants; changing them changes every published score.
"""
from typing import Dict, List, NamedTuple

from core.city_model import clamp, round_half_up
from core.models import CityState, PillarScores


class ScoreComponent(NamedTuple):
    label: str
    metric: str
    weight: float
    lo: float
    hi: float
    inverse: bool = False


# Derived metric: annual_budget / gdp * 100
BUDGET_TO_GDP = "budget_to_gdp"

PILLAR_COMPONENTS: Dict[str, List[ScoreComponent]] = {
    "sustainability": [
        ScoreComponent("CO₂ per capita (inverted)", "co2_per_capita", 0.30, 0, 20, inverse=True),
        ScoreComponent("Renewable energy %", "renewable_energy", 0.25, 0, 100),
        ScoreComponent("Public transit usage %", "public_transit", 0.15, 0, 100),
        ScoreComponent("Air quality index (inverted)", "air_quality", 0.15, 0, 200, inverse=True),
        ScoreComponent("Green infrastructure investment %", "green_investment", 0.15, 0, 25),
    ],
    "governance": [
        ScoreComponent("Crime rate (inverted)", "crime_rate", 0.30, 0, 300, inverse=True),
        ScoreComponent("Public trust index", "public_trust", 0.25, 0, 100),
        ScoreComponent("Infrastructure investment %", "infrastructure_investment", 0.20, 0, 30),
        ScoreComponent("Debt ratio (inverted)", "debt_ratio", 0.15, 0, 150, inverse=True),
        # green investment doubles as a transparency proxy
        ScoreComponent("Transparency proxy", "green_investment", 0.10, 0, 25),
    ],
    "fiscal_stability": [
        ScoreComponent("Debt ratio (inverted)", "debt_ratio", 0.40, 0, 150, inverse=True),
        ScoreComponent("Infrastructure investment %", "infrastructure_investment", 0.30, 0, 30),
        ScoreComponent("Budget-to-GDP ratio", BUDGET_TO_GDP, 0.30, 5, 40),
    ],
    "public_approval": [
        ScoreComponent("Public trust index", "public_trust", 0.40, 0, 100),
        ScoreComponent("Crime rate (inverted)", "crime_rate", 0.25, 0, 300, inverse=True),
        ScoreComponent("Air quality (inverted)", "air_quality", 0.20, 0, 200, inverse=True),
        ScoreComponent("Transit availability", "public_transit", 0.15, 0, 100),
    ],
}


def normalize(value: float, lo: float, hi: float) -> float:
    """Linear map of [lo, hi] onto [0, 100], saturating outside the range."""
    return clamp(((value - lo) / (hi - lo)) * 100, 0, 100)


def normalize_inverse(value: float, lo: float, hi: float) -> float:
    """Like `normalize`, but lower raw values score higher."""
    return clamp(((hi - value) / (hi - lo)) * 100, 0, 100)


def _raw_value(city: CityState, metric: str) -> float:
    if metric == BUDGET_TO_GDP:
        if city.gdp <= 0:
            return 0.0
        return (city.annual_budget / city.gdp) * 100
    return getattr(city, metric)


def _pillar_score(city: CityState, pillar: str) -> int:
    total = 0.0
    for comp in PILLAR_COMPONENTS[pillar]:
        norm = normalize_inverse if comp.inverse else normalize
        total += norm(_raw_value(city, comp.metric), comp.lo, comp.hi) * comp.weight
    return round_half_up(total)


def calc_sustainability_score(city: CityState) -> int:
    return _pillar_score(city, "sustainability")


def calc_governance_score(city: CityState) -> int:
    return _pillar_score(city, "governance")


def calc_fiscal_stability(city: CityState) -> int:
    return _pillar_score(city, "fiscal_stability")


def calc_public_approval(city: CityState) -> int:
    return _pillar_score(city, "public_approval")


def calc_all_scores(city: CityState) -> PillarScores:
    return PillarScores(
        sustainability=calc_sustainability_score(city),
        governance=calc_governance_score(city),
        fiscal_stability=calc_fiscal_stability(city),
        public_approval=calc_public_approval(city),
    )


def score_formulas() -> Dict[str, List[Dict[str, str]]]:
    """Human-readable breakdown of each pillar, for the dashboard legend."""
    return {
        pillar: [{"label": c.label, "weight": f"{c.weight:.0%}"} for c in components]
        for pillar, components in PILLAR_COMPONENTS.items()
    }
