"""
Projection engine: rolls a city forward year by year under a set of funded
policies, scoring each year and flagging risk thresholds.

Units: PolicyConfig.budget_per_year is USD millions, CityState.annual_budget
is USD billions.
"""
import logging
import math
from collections import defaultdict
from typing import Dict, List, Mapping, Optional, Sequence

from core.city_model import clamp, clamp_metrics
from core.models import (
    CityState,
    PillarScores,
    PolicyConfig,
    PolicyDefinition,
    ScenarioLabel,
    SimulationResult,
    SimulationYear,
)
from core.scoring import calc_all_scores

logger = logging.getLogger(__name__)

# Spending more than this share of the annual budget on active policies
# in one year adds fiscal strain to the debt ratio.
OVERSPEND_THRESHOLD = 0.15
OVERSPEND_DEBT_FACTOR = 0.1

WARNING_DEBT_CRISIS = "Debt Crisis Risk: Debt exceeds GDP"
WARNING_ELEVATED_DEBT = "Elevated Debt: Approaching unsustainable levels"
WARNING_PUBLIC_UNREST = "Public Unrest Risk: Trust index critically low"
WARNING_HEALTH_EMERGENCY = "Health Emergency: Air quality hazardous"
WARNING_FISCAL_COLLAPSE = "Fiscal Collapse Risk: Severe budget stress"


def funding_ratio(config: PolicyConfig, definition: PolicyDefinition) -> float:
    """Budget relative to the reference budget, saturated to the policy's range."""
    budget_range = definition.budget_range
    return clamp(
        config.budget_per_year / budget_range.ref_per_year,
        budget_range.min_ratio,
        budget_range.max_ratio,
    )


def overspend_penalty(active_spend_millions: float, annual_budget_billions: float) -> float:
    """Debt-ratio points added for committing > 15% of the budget in one year."""
    if annual_budget_billions <= 0:
        return 0.0
    spent_fraction = (active_spend_millions / 1000) / annual_budget_billions
    if spent_fraction <= OVERSPEND_THRESHOLD:
        return 0.0
    return (spent_fraction - OVERSPEND_THRESHOLD) * 100 * OVERSPEND_DEBT_FACTOR


def evaluate_warnings(metrics: CityState, scores: PillarScores) -> List[str]:
    warnings = []
    if metrics.debt_ratio > 100:
        warnings.append(WARNING_DEBT_CRISIS)
    elif metrics.debt_ratio > 75:
        warnings.append(WARNING_ELEVATED_DEBT)

    if metrics.public_trust < 25:
        warnings.append(WARNING_PUBLIC_UNREST)
    if metrics.air_quality > 150:
        warnings.append(WARNING_HEALTH_EMERGENCY)
    if scores.fiscal_stability < 20:
        warnings.append(WARNING_FISCAL_COLLAPSE)
    return warnings


def build_year(year: int, metrics: CityState) -> SimulationYear:
    scores = calc_all_scores(metrics)
    return SimulationYear(
        year=year,
        metrics=metrics,
        scores=scores,
        warnings=evaluate_warnings(metrics, scores),
    )


def _apply_year(
    year: int,
    current: Dict[str, Optional[float]],
    policies: Sequence[PolicyConfig],
    catalog: Mapping[str, PolicyDefinition],
    annual_budget: float,
) -> Dict[str, Optional[float]]:
    """One simulated year: sum every active policy's deltas, then clamp once."""
    deltas = defaultdict(list)
    active_spend = 0.0

    for config in policies:
        if not config.active_in(year):
            continue
        definition = catalog.get(config.id)
        if definition is None:
            continue

        active_spend += config.budget_per_year
        ratio = funding_ratio(config, definition)
        for metric, base_delta in definition.base_impact.items():
            deltas[metric].append(base_delta * ratio)

    deltas["debt_ratio"].append(overspend_penalty(active_spend, annual_budget))

    working = dict(current)
    for metric, contributions in deltas.items():
        if working.get(metric) is None:
            continue
        # every contribution is summed before the single clamp below, so
        # policy order cannot change which deltas get saturated
        working[metric] = working[metric] + math.fsum(contributions)

    return clamp_metrics(working)


def run_simulation(
    base_city: CityState,
    policies: Sequence[PolicyConfig],
    catalog: Mapping[str, PolicyDefinition],
    years: int = 10,
    label: ScenarioLabel = "user",
) -> SimulationResult:
    """
    Project `base_city` forward `years` years under `policies`.

    Args:
        base_city: baseline snapshot; never modified
        policies: planner-chosen configs; unknown ids are ignored
        catalog: read-only id -> PolicyDefinition lookup
        years: horizon; callers must pass years >= 1
        label: 'user' or 'ai', for side-by-side scenarios

    Returns:
        SimulationResult with the baseline (year 0) and one snapshot per year.
    """
    baseline = build_year(0, base_city)
    projections = []

    current = base_city.metrics()
    for year in range(1, years + 1):
        current = _apply_year(year, current, policies, catalog, base_city.annual_budget)
        projections.append(build_year(year, base_city.model_copy(update=current)))

    # Snapshot of year-1 commitments, not an average over the horizon
    total_cost_per_year = sum(p.budget_per_year for p in policies if p.active_in(1))

    logger.debug(
        "Simulated %s scenario for %s: %d policies, %d years",
        label, base_city.name or "city", len(policies), years,
    )

    return SimulationResult(
        label=label,
        baseline=baseline,
        projections=projections,
        selected_policies=list(policies),
        total_cost_per_year=total_cost_per_year,
    )
