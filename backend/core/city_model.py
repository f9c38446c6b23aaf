"""
City model: metric realism bounds, clamping, and the reference table of
city baselines the planner picks from.
"""
import math
from typing import Dict, List, Optional

import numpy as np

from core.models import CityState


INF = float("inf")

# Closed (min, max) range per metric. Values are clamped into these after
# every simulated year.
METRIC_BOUNDS = {
    "population": (0.0, INF),
    "gdp": (0.0, INF),
    "annual_budget": (0.0, INF),
    "co2_per_capita": (0.1, 30.0),
    "co2_total": (0.1, 400.0),
    "renewable_energy": (0.0, 100.0),
    "public_transit": (0.0, 100.0),
    "air_quality": (5.0, 300.0),
    "crime_rate": (2.0, 500.0),
    "infrastructure_investment": (0.0, 50.0),
    "public_trust": (0.0, 100.0),
    "debt_ratio": (0.0, 250.0),
    "green_investment": (0.0, 40.0),
    "healthcare_access": (0.0, 100.0),
    "education_index": (0.0, 100.0),
    "housing_affordability": (0.0, 100.0),
    "digital_connectivity": (0.0, 100.0),
}


def clamp(value: float, lo: float, hi: float) -> float:
    return float(np.clip(value, lo, hi))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_metrics(values: Dict[str, Optional[float]]) -> Dict[str, Optional[float]]:
    """Return a copy with every bounded metric saturated to its range.

    Missing optional metrics (None) stay None; keys without bounds pass through.
    """
    clamped = dict(values)
    for key, (lo, hi) in METRIC_BOUNDS.items():
        if clamped.get(key) is not None:
            clamped[key] = clamp(clamped[key], lo, hi)
    return clamped


# Reference baselines. population in millions, gdp/annual_budget in USD
# billions, co2_total in Mt/yr, percentages 0-100.
_REFERENCE_CITIES = [
    {
        "id": "amsterdam", "name": "Amsterdam", "country": "Netherlands",
        "population": 0.93, "gdp": 170, "annual_budget": 7.5,
        "co2_total": 4.5, "co2_per_capita": 4.9,
        "renewable_energy": 18, "public_transit": 35, "air_quality": 28,
        "crime_rate": 65, "infrastructure_investment": 14, "public_trust": 68,
        "debt_ratio": 48, "green_investment": 9,
        "healthcare_access": 92, "education_index": 88,
        "housing_affordability": 34, "digital_connectivity": 95,
    },
    {
        "id": "copenhagen", "name": "Copenhagen", "country": "Denmark",
        "population": 0.66, "gdp": 110, "annual_budget": 6.8,
        "co2_total": 1.6, "co2_per_capita": 2.4,
        "renewable_energy": 60, "public_transit": 33, "air_quality": 22,
        "crime_rate": 48, "infrastructure_investment": 12, "public_trust": 74,
        "debt_ratio": 30, "green_investment": 12,
        "healthcare_access": 94, "education_index": 90,
        "housing_affordability": 38, "digital_connectivity": 96,
    },
    {
        "id": "singapore", "name": "Singapore", "country": "Singapore",
        "population": 5.9, "gdp": 500, "annual_budget": 80,
        "co2_total": 52, "co2_per_capita": 8.8,
        "renewable_energy": 4, "public_transit": 60, "air_quality": 40,
        "crime_rate": 35, "infrastructure_investment": 18, "public_trust": 70,
        "debt_ratio": 130, "green_investment": 7,
    },
    {
        "id": "new-york", "name": "New York", "country": "United States",
        "population": 8.3, "gdp": 1200, "annual_budget": 107,
        "co2_total": 50, "co2_per_capita": 6.0,
        "renewable_energy": 22, "public_transit": 56, "air_quality": 42,
        "crime_rate": 420, "infrastructure_investment": 10, "public_trust": 45,
        "debt_ratio": 40, "green_investment": 5,
    },
    {
        "id": "tokyo", "name": "Tokyo", "country": "Japan",
        "population": 14.0, "gdp": 1100, "annual_budget": 120,
        "co2_total": 60, "co2_per_capita": 4.3,
        "renewable_energy": 20, "public_transit": 57, "air_quality": 30,
        "crime_rate": 35, "infrastructure_investment": 11, "public_trust": 55,
        "debt_ratio": 62, "green_investment": 6,
    },
    {
        "id": "sao-paulo", "name": "São Paulo", "country": "Brazil",
        "population": 12.3, "gdp": 330, "annual_budget": 21,
        "co2_total": 16, "co2_per_capita": 1.3,
        "renewable_energy": 48, "public_transit": 38, "air_quality": 55,
        "crime_rate": 330, "infrastructure_investment": 7, "public_trust": 36,
        "debt_ratio": 76, "green_investment": 5,
    },
    {
        "id": "delhi", "name": "Delhi", "country": "India",
        "population": 21.0, "gdp": 290, "annual_budget": 9.5,
        "co2_total": 40, "co2_per_capita": 1.9,
        "renewable_energy": 12, "public_transit": 35, "air_quality": 180,
        "crime_rate": 240, "infrastructure_investment": 8, "public_trust": 42,
        "debt_ratio": 26, "green_investment": 4,
    },
    {
        "id": "lagos", "name": "Lagos", "country": "Nigeria",
        "population": 15.4, "gdp": 90, "annual_budget": 1.7,
        "co2_total": 30, "co2_per_capita": 1.9,
        "renewable_energy": 18, "public_transit": 12, "air_quality": 160,
        "crime_rate": 210, "infrastructure_investment": 6, "public_trust": 24,
        "debt_ratio": 35, "green_investment": 2,
    },
]

CITIES: List[CityState] = [CityState(**data) for data in _REFERENCE_CITIES]
_CITIES_BY_ID = {city.id: city for city in CITIES}


def get_city(city_id: str) -> Optional[CityState]:
    return _CITIES_BY_ID.get(city_id)


def search_cities(query: str = "") -> List[CityState]:
    """Case-insensitive substring match on city name or country."""
    q = query.strip().lower()
    if not q:
        return list(CITIES)
    return [
        c for c in CITIES
        if q in (c.name or "").lower() or q in (c.country or "").lower()
    ]
