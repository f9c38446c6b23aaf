from types import SimpleNamespace

import pytest

from core.models import CityState, PolicyDefinition


class FakeMessages:
    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(content=[SimpleNamespace(text=self.text)])


class FakeAnthropic:
    """Stands in for anthropic.Anthropic; replies with canned text."""

    def __init__(self, text=None, error=None):
        self.messages = FakeMessages(text, error)


@pytest.fixture
def fake_llm():
    return FakeAnthropic


@pytest.fixture
def city():
    return CityState(
        id="testville",
        name="Testville",
        country="Nowhere",
        population=1.0,
        gdp=100,
        annual_budget=10,
        co2_total=10,
        co2_per_capita=5,
        renewable_energy=20,
        public_transit=30,
        air_quality=50,
        crime_rate=100,
        infrastructure_investment=10,
        public_trust=60,
        debt_ratio=50,
        green_investment=5,
    )


@pytest.fixture
def make_policy():
    def _make(policy_id, base_impact, ref=400, lo=50, hi=1500, category="energy"):
        return PolicyDefinition(
            id=policy_id,
            name=policy_id.replace("-", " ").title(),
            category=category,
            budget_range={"min_per_year": lo, "ref_per_year": ref, "max_per_year": hi},
            base_impact=base_impact,
        )
    return _make
