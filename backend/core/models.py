"""
Pydantic models for the policy simulator: city metrics, pillar scores,
policy definitions/configurations and simulation output.

Python attributes are snake_case; JSON uses camelCase aliases so payloads
from the dashboard (`annualBudget`, `budgetPerYear`, ...) validate directly.
"""
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


PolicyCategory = Literal[
    "energy",
    "transportation",
    "governance",
    "housing",
    "healthcare",
    "education",
    "digital",
    "business",
    "agriculture",
    "industry",
]
ScenarioLabel = Literal["user", "ai"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# City
# =============================================================================

class CityState(CamelModel):
    """Snapshot of a city's metrics. Units follow the reference table."""
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    name: Optional[str] = None
    country: Optional[str] = None

    population: float = Field(ge=0)  # millions
    gdp: float = Field(ge=0)  # USD billions
    annual_budget: float = Field(ge=0)  # USD billions
    co2_total: float  # Mt/year
    co2_per_capita: float  # t/person/year
    renewable_energy: float  # % of energy mix
    public_transit: float  # % of commuters
    air_quality: float  # AQI, lower is better
    crime_rate: float  # per 100k residents
    infrastructure_investment: float  # % of budget
    public_trust: float  # index 0-100
    debt_ratio: float  # % of GDP
    green_investment: float  # % of budget

    # Extended metrics, only present after a live refresh or for richer datasets
    healthcare_access: Optional[float] = None
    education_index: Optional[float] = None
    housing_affordability: Optional[float] = None
    digital_connectivity: Optional[float] = None

    def metrics(self) -> Dict[str, Optional[float]]:
        """Numeric metrics only, keyed by snake_case name."""
        return self.model_dump(exclude={"id", "name", "country"})


METRIC_FIELDS = tuple(
    name for name in CityState.model_fields if name not in ("id", "name", "country")
)


class PillarScores(CamelModel):
    sustainability: int = Field(ge=0, le=100)
    governance: int = Field(ge=0, le=100)
    fiscal_stability: int = Field(ge=0, le=100)
    public_approval: int = Field(ge=0, le=100)


# =============================================================================
# Policies
# =============================================================================

class PolicyBudgetRange(CamelModel):
    """Budget envelope in USD millions per year."""
    model_config = ConfigDict(frozen=True)

    min_per_year: float = Field(ge=0)
    ref_per_year: float = Field(gt=0)
    max_per_year: float

    @model_validator(mode="after")
    def _check_order(self) -> "PolicyBudgetRange":
        if not self.min_per_year <= self.ref_per_year <= self.max_per_year:
            raise ValueError(
                f"budget range must satisfy min <= ref <= max, got "
                f"{self.min_per_year}/{self.ref_per_year}/{self.max_per_year}"
            )
        return self

    @property
    def min_ratio(self) -> float:
        return self.min_per_year / self.ref_per_year

    @property
    def max_ratio(self) -> float:
        return self.max_per_year / self.ref_per_year


class PolicyDefinition(CamelModel):
    """Catalog entry. `base_impact` is the per-year delta at reference funding."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    category: PolicyCategory
    description: str = ""
    budget_range: PolicyBudgetRange
    base_impact: Dict[str, float]

    @field_validator("base_impact")
    @classmethod
    def _known_metrics(cls, value: Dict[str, float]) -> Dict[str, float]:
        unknown = sorted(set(value) - set(METRIC_FIELDS))
        if unknown:
            raise ValueError(f"unknown metrics in base_impact: {unknown}")
        return value


class PolicyConfig(CamelModel):
    """A policy switched on by the planner for years [start_year, end_year]."""
    model_config = ConfigDict(frozen=True)

    id: str
    start_year: int
    end_year: int
    budget_per_year: float  # USD millions

    def active_in(self, year: int) -> bool:
        return self.start_year <= year <= self.end_year


# =============================================================================
# Simulation output
# =============================================================================

class SimulationYear(CamelModel):
    model_config = ConfigDict(frozen=True)

    year: int
    metrics: CityState
    scores: PillarScores
    warnings: List[str] = Field(default_factory=list)


class SimulationResult(CamelModel):
    model_config = ConfigDict(frozen=True)

    label: ScenarioLabel = "user"
    baseline: SimulationYear
    projections: List[SimulationYear]
    selected_policies: List[PolicyConfig]
    total_cost_per_year: float  # USD millions/yr, policies active in year 1

    @property
    def final(self) -> SimulationYear:
        return self.projections[-1] if self.projections else self.baseline


# =============================================================================
# AI outputs
# =============================================================================

class AIScenario(CamelModel):
    reasoning: str = ""
    policies: List[PolicyConfig] = Field(default_factory=list)


class Advisory(CamelModel):
    summary: str
    tradeoffs: List[str] = Field(default_factory=list)
    risks: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)
