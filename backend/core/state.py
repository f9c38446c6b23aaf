from typing import TypedDict, Optional, List, Dict, Any


class ScenarioState(TypedDict):
    city_id: str
    city_name: str
    goal: str
    simulation_years: int
    baseline_city: Dict[str, Any]  # CityState.model_dump()
    user_policies: List[Dict[str, Any]]  # PolicyConfig dumps chosen by the planner
    ai_reasoning: str
    ai_policies: List[Dict[str, Any]]  # sanitized PolicyConfig dumps
    user_result: Optional[Dict[str, Any]]  # SimulationResult.model_dump()
    ai_result: Optional[Dict[str, Any]]
    comparison: Dict[str, Any]
    advisory: Dict[str, Any]
    agent_logs: List[str]
    status: str  # running | completed | error
    error: Optional[str]
