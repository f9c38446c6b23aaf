"""
Agent 3: Projection Agent
Runs the planner's bundle and the AI bundle through the projection engine
side by side. Both runs start from the same baseline and share the
read-only policy catalog.
"""
import logging
from typing import Any, Dict

from core.models import CityState, PolicyConfig
from core.policies import POLICY_CATALOG
from core.simulation import run_simulation
from core.state import ScenarioState

logger = logging.getLogger(__name__)


def projection_agent(state: ScenarioState) -> Dict[str, Any]:
    """Project the user and AI scenarios over the requested horizon."""
    logger.info("Projection Agent: running user and AI scenarios")

    try:
        city = CityState(**state["baseline_city"])
        years = state["simulation_years"]
        user_policies = [PolicyConfig(**p) for p in state.get("user_policies", [])]
        ai_policies = [PolicyConfig(**p) for p in state.get("ai_policies", [])]

        user_result = run_simulation(city, user_policies, POLICY_CATALOG, years, label="user")
        ai_result = run_simulation(city, ai_policies, POLICY_CATALOG, years, label="ai")

        log_msg = (
            f"Projection: {years}-year horizon. "
            f"User scenario {len(user_policies)} policies "
            f"(${user_result.total_cost_per_year:,.0f}M/yr), "
            f"AI scenario {len(ai_policies)} policies "
            f"(${ai_result.total_cost_per_year:,.0f}M/yr)."
        )
        logger.info(log_msg)

        return {
            "user_result": user_result.model_dump(),
            "ai_result": ai_result.model_dump(),
            "agent_logs": state.get("agent_logs", []) + [log_msg],
            "status": "running",
        }
    except Exception as e:
        err = f"Projection Agent error: {e}"
        logger.error(err)
        return {
            "status": "error",
            "error": err,
            "agent_logs": state.get("agent_logs", []) + [err],
        }
