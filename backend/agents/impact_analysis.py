"""
Agent 4: Impact Analysis Agent
Quantifies baseline -> final pillar-score changes for each scenario and
compares the planner's bundle against the AI bundle.
"""
import logging
from typing import Any, Dict, List

import numpy as np

from core.models import SimulationResult
from core.state import ScenarioState

logger = logging.getLogger(__name__)

PILLAR_LABELS = {
    "sustainability": "Sustainability",
    "governance": "Governance",
    "fiscal_stability": "Fiscal Stability",
    "public_approval": "Public Approval",
}


def _severity(delta: float, direction: str = "higher_is_better") -> str:
    """Categorize impact severity."""
    if direction == "lower_is_better":
        delta = -delta
    if delta > 15:
        return "highly_positive"
    elif delta > 5:
        return "positive"
    elif delta > -5:
        return "neutral"
    elif delta > -15:
        return "negative"
    else:
        return "highly_negative"


def unique_warnings(result: SimulationResult) -> List[Dict[str, Any]]:
    """Each distinct warning once, tagged with the first year it fired."""
    seen = {}
    for year in result.projections:
        for warning in year.warnings:
            seen.setdefault(warning, year.year)
    return [{"year": year, "warning": warning} for warning, year in seen.items()]


def score_deltas(result: SimulationResult) -> Dict[str, Dict[str, Any]]:
    before = result.baseline.scores.model_dump()
    after = result.final.scores.model_dump()
    deltas = {}
    for pillar, label in PILLAR_LABELS.items():
        delta = after[pillar] - before[pillar]
        deltas[pillar] = {
            "label": label,
            "before": before[pillar],
            "after": after[pillar],
            "delta": delta,
            "severity": _severity(delta),
        }
    return deltas


def summarize_result(result: SimulationResult) -> Dict[str, Any]:
    """Headline numbers for one scenario."""
    mean_scores = {}
    for pillar in PILLAR_LABELS:
        values = [getattr(y.scores, pillar) for y in result.projections]
        mean_scores[pillar] = round(float(np.mean(values)), 1) if values else None

    return {
        "label": result.label,
        "policy_count": len(result.selected_policies),
        "total_cost_per_year": result.total_cost_per_year,
        "score_deltas": score_deltas(result),
        "mean_scores": mean_scores,
        "warnings": unique_warnings(result),
    }


def compare_scenarios(user: SimulationResult, ai: SimulationResult) -> Dict[str, Any]:
    """Side-by-side summary; per pillar, which scenario ends higher."""
    user_summary = summarize_result(user)
    ai_summary = summarize_result(ai)

    winners = {}
    for pillar in PILLAR_LABELS:
        user_final = user_summary["score_deltas"][pillar]["after"]
        ai_final = ai_summary["score_deltas"][pillar]["after"]
        if user_final > ai_final:
            winners[pillar] = "user"
        elif ai_final > user_final:
            winners[pillar] = "ai"
        else:
            winners[pillar] = "tie"

    return {"user": user_summary, "ai": ai_summary, "winners": winners}


def impact_analysis_agent(state: ScenarioState) -> Dict[str, Any]:
    """Compare the user and AI projections."""
    logger.info("Impact Analysis Agent: comparing scenarios")

    try:
        user = SimulationResult(**state["user_result"])
        ai = SimulationResult(**state["ai_result"])
        comparison = compare_scenarios(user, ai)

        ai_wins = sum(1 for w in comparison["winners"].values() if w == "ai")
        user_wins = sum(1 for w in comparison["winners"].values() if w == "user")
        log_msg = (
            f"Impact Analysis: user scenario leads on {user_wins} pillars, "
            f"AI scenario on {ai_wins}. "
            f"{len(comparison['user']['warnings'])} user / "
            f"{len(comparison['ai']['warnings'])} AI distinct warnings."
        )
        logger.info(log_msg)

        return {
            "comparison": comparison,
            "agent_logs": state.get("agent_logs", []) + [log_msg],
            "status": "running",
        }
    except Exception as e:
        err = f"Impact Analysis Agent error: {e}"
        logger.error(err)
        return {
            "status": "error",
            "error": err,
            "agent_logs": state.get("agent_logs", []) + [err],
        }
