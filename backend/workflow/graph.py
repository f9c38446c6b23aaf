"""
LangGraph workflow: baseline -> AI scenario -> dual projection -> comparison
-> advisory. Provides a streaming interface for real-time frontend updates.
"""
import logging
from typing import Any, AsyncGenerator, Dict, List, Optional

from langgraph.graph import StateGraph, END

from core.state import ScenarioState
from agents.data_ingestion import data_ingestion_agent
from agents.scenario_generation import scenario_generation_agent
from agents.projection import projection_agent
from agents.impact_analysis import impact_analysis_agent
from agents.recommendation import recommendation_agent

logger = logging.getLogger(__name__)

# Node order; each step routes to END if the previous one failed
PIPELINE = [
    "data_ingestion",
    "scenario_generation",
    "projection",
    "impact_analysis",
    "recommendation",
]

AGENT_NAMES = {
    "data_ingestion": "Data Ingestion",
    "scenario_generation": "Scenario Generation",
    "projection": "Projection",
    "impact_analysis": "Impact Analysis",
    "recommendation": "Recommendation",
}

# Which state key each node contributes to the streamed results
DATA_KEYS = {
    "data_ingestion": "baseline_city",
    "scenario_generation": "ai_policies",
    "impact_analysis": "comparison",
    "recommendation": "advisory",
}


def _route_after(next_node: str):
    def route(state: ScenarioState) -> str:
        return END if state.get("status") == "error" else next_node
    return route


def build_workflow():
    """Build and compile the LangGraph scenario workflow."""
    workflow = StateGraph(ScenarioState)

    workflow.add_node("data_ingestion", data_ingestion_agent)
    workflow.add_node("scenario_generation", scenario_generation_agent)
    workflow.add_node("projection", projection_agent)
    workflow.add_node("impact_analysis", impact_analysis_agent)
    workflow.add_node("recommendation", recommendation_agent)

    workflow.set_entry_point(PIPELINE[0])
    for current, following in zip(PIPELINE, PIPELINE[1:]):
        workflow.add_conditional_edges(
            current,
            _route_after(following),
            {END: END, following: following},
        )
    workflow.add_edge(PIPELINE[-1], END)

    return workflow.compile()


# Singleton compiled workflow
_compiled_workflow = None


def get_workflow():
    global _compiled_workflow
    if _compiled_workflow is None:
        _compiled_workflow = build_workflow()
    return _compiled_workflow


def initial_state(
    city_id: str,
    goal: str,
    simulation_years: int,
    user_policies: List[Dict[str, Any]],
    baseline_city: Optional[Dict[str, Any]] = None,
) -> ScenarioState:
    return {
        "city_id": city_id,
        "city_name": "",
        "goal": goal,
        "simulation_years": simulation_years,
        "baseline_city": baseline_city or {},
        "user_policies": user_policies,
        "ai_reasoning": "",
        "ai_policies": [],
        "user_result": None,
        "ai_result": None,
        "comparison": {},
        "advisory": {},
        "agent_logs": [],
        "status": "running",
        "error": None,
    }


async def run_scenario_stream(
    city_id: str,
    goal: str,
    simulation_years: int,
    user_policies: List[Dict[str, Any]],
    baseline_city: Optional[Dict[str, Any]] = None,
) -> AsyncGenerator[Dict[str, Any], None]:
    """
    Run the full scenario workflow and yield events for SSE streaming.
    Each event has: type, agent, message, data (partial state).
    """
    app = get_workflow()
    state = initial_state(city_id, goal, simulation_years, user_policies, baseline_city)

    yield {
        "type": "start",
        "agent": "orchestrator",
        "message": f"Starting scenario for {city_id}: '{goal}' over {simulation_years} years",
    }

    async for event in app.astream(state, stream_mode="updates"):
        for node_name, node_output in event.items():
            if node_name == "__end__":
                continue

            agent_display = AGENT_NAMES.get(node_name, node_name)
            logs = node_output.get("agent_logs", [])
            last_log = logs[-1] if logs else f"{agent_display} completed"

            yield {
                "type": "agent_complete",
                "agent": node_name,
                "agent_display": agent_display,
                "message": last_log,
                "status": node_output.get("status", "running"),
            }

            if node_output.get("status") == "error":
                yield {"type": "error", "message": node_output.get("error", last_log)}
                return

            if node_name == "projection":
                for key in ("user_result", "ai_result"):
                    yield {"type": "data", "key": key, "data": node_output.get(key)}
            elif node_name in DATA_KEYS:
                key = DATA_KEYS[node_name]
                yield {"type": "data", "key": key, "data": node_output.get(key)}
                if node_name == "scenario_generation":
                    yield {
                        "type": "data",
                        "key": "ai_reasoning",
                        "data": node_output.get("ai_reasoning", ""),
                    }

    yield {"type": "complete", "message": "Scenario completed"}
