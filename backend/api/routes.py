"""
FastAPI routes: reference data, deterministic simulation, AI endpoints and
SSE streaming for the scenario workflow.
"""
import asyncio
import json
import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import Field

from agents.data_ingestion import CityDataRefreshError, refresh_city_data
from agents.recommendation import generate_advisory
from agents.scenario_generation import ScenarioGenerationError, generate_ai_scenario
from core.city_model import get_city, search_cities
from core.config import DEFAULT_CITY_ID, DEFAULT_SIMULATION_YEARS, MAX_SIMULATION_YEARS
from core.models import (
    AIScenario,
    Advisory,
    CamelModel,
    CityState,
    PillarScores,
    PolicyConfig,
    PolicyDefinition,
    ScenarioLabel,
    SimulationResult,
)
from core.policies import (
    CATEGORY_LABELS,
    POLICY_CATALOG,
    POLICY_CATEGORIES,
    get_policy_by_id,
    policies_by_category,
)
from core.scoring import calc_all_scores, score_formulas
from core.simulation import run_simulation
from workflow.graph import run_scenario_stream

logger = logging.getLogger(__name__)
router = APIRouter()

# In-memory job store; scenarios are recomputed per session, never persisted
_jobs: Dict[str, Dict[str, Any]] = {}


class CityWithScores(CamelModel):
    city: CityState
    scores: PillarScores


class SimulateRequest(CamelModel):
    city_id: Optional[str] = None
    city: Optional[CityState] = None
    policies: List[PolicyConfig] = Field(default_factory=list)
    years: int = Field(default=DEFAULT_SIMULATION_YEARS, ge=1, le=MAX_SIMULATION_YEARS)
    label: ScenarioLabel = "user"


class AIScenarioRequest(CamelModel):
    city_id: Optional[str] = None
    city_name: Optional[str] = None
    current_data: Optional[CityState] = None
    goal: str
    simulation_years: int = Field(default=DEFAULT_SIMULATION_YEARS, ge=1, le=MAX_SIMULATION_YEARS)


class AdvisorRequest(CamelModel):
    result: SimulationResult
    city_name: str


class CityRefreshRequest(CamelModel):
    city_id: Optional[str] = None
    current_data: Optional[CityState] = None


class CityRefreshResponse(CamelModel):
    city: CityState
    updated_fields: List[str]


class ScenarioJobRequest(CamelModel):
    city_id: str
    goal: str
    simulation_years: int = Field(default=DEFAULT_SIMULATION_YEARS, ge=1, le=MAX_SIMULATION_YEARS)
    policies: List[PolicyConfig] = Field(default_factory=list)
    current_data: Optional[CityState] = None


def _resolve_city(city_id: Optional[str], city: Optional[CityState]) -> CityState:
    """Explicit city data wins over a reference-table lookup; no id means the default city."""
    if city is not None:
        return city
    city_id = city_id or DEFAULT_CITY_ID
    found = get_city(city_id)
    if found is None:
        raise HTTPException(status_code=404, detail=f"City '{city_id}' not found")
    return found


# -----------------------------------------------------------------------------
# Reference data
# -----------------------------------------------------------------------------

@router.get("/cities", response_model=List[CityState])
async def list_cities(q: str = ""):
    """Search reference cities by name or country."""
    return search_cities(q)


@router.get("/cities/{city_id}", response_model=CityWithScores)
async def get_city_detail(city_id: str):
    city = _resolve_city(city_id, None)
    return CityWithScores(city=city, scores=calc_all_scores(city))


@router.get("/policies", response_model=List[PolicyDefinition])
async def list_policies(category: Optional[str] = None):
    if category is None:
        return list(POLICY_CATALOG.values())
    if category not in POLICY_CATEGORIES:
        raise HTTPException(status_code=400, detail=f"Unknown policy category '{category}'")
    return policies_by_category(category)


@router.get("/policies/categories")
async def list_policy_categories():
    return [{"id": c, "label": CATEGORY_LABELS[c]} for c in POLICY_CATEGORIES]


@router.get("/policies/{policy_id}", response_model=PolicyDefinition)
async def get_policy(policy_id: str):
    policy = get_policy_by_id(policy_id)
    if policy is None:
        raise HTTPException(status_code=404, detail=f"Policy '{policy_id}' not found")
    return policy


@router.get("/scores/formulas")
async def get_score_formulas():
    return score_formulas()


@router.post("/scores", response_model=PillarScores)
async def score_city(city: CityState):
    return calc_all_scores(city)


# -----------------------------------------------------------------------------
# Simulation
# -----------------------------------------------------------------------------

@router.post("/simulate", response_model=SimulationResult)
async def simulate(req: SimulateRequest):
    """Deterministic multi-year projection for a policy bundle."""
    city = _resolve_city(req.city_id, req.city)
    result = run_simulation(city, req.policies, POLICY_CATALOG, req.years, label=req.label)
    logger.info(
        f"Simulated {req.years} years for {city.name or req.city_id}: "
        f"{len(req.policies)} policies, ${result.total_cost_per_year:,.0f}M/yr"
    )
    return result


@router.post("/ai-scenario", response_model=AIScenario)
def ai_scenario(req: AIScenarioRequest):
    """LLM-proposed policy bundle for a goal, sanitized against the catalog."""
    if not req.goal.strip():
        raise HTTPException(status_code=400, detail="Goal cannot be empty")
    city = _resolve_city(req.city_id, req.current_data)
    city_name = req.city_name or city.name or req.city_id or "the city"
    try:
        return generate_ai_scenario(city_name, city, req.goal, req.simulation_years)
    except ScenarioGenerationError as e:
        logger.error(f"AI scenario error: {e}")
        raise HTTPException(status_code=502, detail="Failed to generate scenario")


@router.post("/advisor", response_model=Advisory)
def advisor(req: AdvisorRequest):
    """Advisory report for a simulation result. Falls back when the LLM is unavailable."""
    return generate_advisory(req.result, req.city_name)


@router.post("/city-data/refresh", response_model=CityRefreshResponse)
def refresh_city(req: CityRefreshRequest):
    city = _resolve_city(req.city_id, req.current_data)
    try:
        updated, fields = refresh_city_data(city)
    except CityDataRefreshError as e:
        logger.error(f"City data refresh error: {e}")
        raise HTTPException(status_code=502, detail="Failed to refresh city data")
    return CityRefreshResponse(city=updated, updated_fields=fields)


# -----------------------------------------------------------------------------
# Scenario workflow (user vs AI)
# -----------------------------------------------------------------------------

@router.post("/scenarios")
async def start_scenario(req: ScenarioJobRequest):
    """Create a scenario job. Returns job_id for status polling and SSE."""
    if not req.goal.strip():
        raise HTTPException(status_code=400, detail="Goal cannot be empty")
    if req.current_data is None and get_city(req.city_id) is None:
        raise HTTPException(status_code=404, detail=f"City '{req.city_id}' not found")

    job_id = str(uuid.uuid4())
    _jobs[job_id] = {
        "id": job_id,
        "city_id": req.city_id,
        "goal": req.goal,
        "simulation_years": req.simulation_years,
        "policies": [p.model_dump() for p in req.policies],
        "current_data": req.current_data.model_dump() if req.current_data else None,
        "status": "queued",
        "result": None,
    }
    logger.info(f"Scenario job created: {job_id}")
    return {"job_id": job_id, "status": "queued"}


@router.get("/scenarios/{job_id}/stream")
async def stream_scenario(job_id: str):
    """SSE endpoint: streams real-time agent updates for a scenario job."""
    if job_id not in _jobs:
        raise HTTPException(status_code=404, detail="Job not found")

    job = _jobs[job_id]

    async def event_generator():
        accumulated = {
            "baseline_city": {},
            "ai_policies": [],
            "ai_reasoning": "",
            "user_result": None,
            "ai_result": None,
            "comparison": {},
            "advisory": {},
        }

        try:
            _jobs[job_id]["status"] = "running"
            async for event in run_scenario_stream(
                job["city_id"],
                job["goal"],
                job["simulation_years"],
                job["policies"],
                job["current_data"],
            ):
                if event.get("type") == "data":
                    key = event.get("key")
                    if key:
                        accumulated[key] = event.get("data")

                if event.get("type") == "error":
                    _jobs[job_id]["status"] = "error"
                    _jobs[job_id]["result"] = accumulated

                if event.get("type") == "complete":
                    _jobs[job_id]["status"] = "completed"
                    _jobs[job_id]["result"] = accumulated

                payload = json.dumps(event)
                yield f"data: {payload}\n\n"
                await asyncio.sleep(0)  # yield control to event loop

        except Exception as e:
            logger.error(f"Stream error for job {job_id}: {e}")
            _jobs[job_id]["status"] = "error"
            error_event = json.dumps({"type": "error", "message": str(e)})
            yield f"data: {error_event}\n\n"

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
            "Access-Control-Allow-Origin": "*",
        },
    )


@router.get("/scenarios/{job_id}/result")
async def get_scenario_result(job_id: str):
    """Return final result for a finished scenario job."""
    if job_id not in _jobs:
        raise HTTPException(status_code=404, detail="Job not found")

    job = _jobs[job_id]
    if job["status"] not in ("completed", "error"):
        raise HTTPException(status_code=202, detail="Scenario still running")

    return job
