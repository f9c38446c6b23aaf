"""
Policy catalog: every intervention a planner (or the AI advisor) can switch on.

`base_impact` is the delta applied per active year when the policy is funded
at exactly `ref_per_year`. Budget ranges are USD millions per year.
"""
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from core.models import PolicyDefinition

_POLICY_DATA = [
    # ─── ENERGY ───────────────────────────────────────────────────────────
    {
        "id": "renewable-expansion",
        "name": "Renewable Energy Expansion",
        "category": "energy",
        "description": "Fund large-scale solar, wind, and geothermal projects to displace fossil fuels from the grid.",
        "budget_range": {"min_per_year": 50, "ref_per_year": 400, "max_per_year": 1500},
        "base_impact": {
            "renewable_energy": 5,
            "co2_per_capita": -0.6,
            "co2_total": -4,
            "debt_ratio": 1.5,
            "green_investment": 1,
        },
    },
    {
        "id": "carbon-tax",
        "name": "Carbon Pricing & Tax",
        "category": "energy",
        "description": "Introduce a carbon price on industrial and commercial emissions, returning revenue to citizens.",
        "budget_range": {"min_per_year": 10, "ref_per_year": 80, "max_per_year": 300},
        "base_impact": {
            "co2_per_capita": -0.4,
            "co2_total": -3,
            "public_trust": -3,
            "debt_ratio": -2,  # generates revenue
        },
    },
    {
        "id": "building-retrofit",
        "name": "Building Energy Retrofit",
        "category": "energy",
        "description": "Subsidise insulation, heat pumps, and smart HVAC upgrades across residential and commercial buildings.",
        "budget_range": {"min_per_year": 30, "ref_per_year": 200, "max_per_year": 800},
        "base_impact": {
            "co2_per_capita": -0.3,
            "co2_total": -2,
            "air_quality": -5,
            "public_trust": 2,
        },
    },
    {
        "id": "nuclear-energy",
        "name": "Nuclear Energy Programme",
        "category": "energy",
        "description": "Invest in next-generation nuclear power plants for reliable low-carbon baseload electricity.",
        "budget_range": {"min_per_year": 200, "ref_per_year": 1200, "max_per_year": 4000},
        "base_impact": {
            "renewable_energy": 8,
            "co2_per_capita": -0.8,
            "co2_total": -6,
            "debt_ratio": 3,
            "public_trust": -2,
        },
    },
    # ─── TRANSPORTATION ───────────────────────────────────────────────────
    {
        "id": "expand-transit",
        "name": "Public Transit Expansion",
        "category": "transportation",
        "description": "Build new metro lines, BRT corridors, and expand bus networks to increase transit mode share.",
        "budget_range": {"min_per_year": 80, "ref_per_year": 500, "max_per_year": 2000},
        "base_impact": {
            "public_transit": 5,
            "co2_per_capita": -0.3,
            "co2_total": -2,
            "public_trust": 4,
            "debt_ratio": 2,
        },
    },
    {
        "id": "congestion-pricing",
        "name": "Congestion Pricing",
        "category": "transportation",
        "description": "Charge vehicles for entering high-density city zones, reinvesting revenue in public transport.",
        "budget_range": {"min_per_year": 10, "ref_per_year": 60, "max_per_year": 200},
        "base_impact": {
            "public_transit": 3,
            "co2_per_capita": -0.2,
            "co2_total": -1.5,
            "public_trust": -4,
            "debt_ratio": -1.5,
        },
    },
    {
        "id": "ev-subsidy",
        "name": "Electric Vehicle Subsidy",
        "category": "transportation",
        "description": "Subsidise EV purchase and charging infrastructure to accelerate fleet electrification.",
        "budget_range": {"min_per_year": 20, "ref_per_year": 150, "max_per_year": 500},
        "base_impact": {
            "co2_per_capita": -0.2,
            "co2_total": -1.5,
            "air_quality": -6,
            "public_trust": 3,
            "debt_ratio": 1,
        },
    },
    {
        "id": "cycling-infrastructure",
        "name": "Cycling & Micromobility Network",
        "category": "transportation",
        "description": "Build protected bike lanes, shared e-bike systems, and pedestrian zones across the city.",
        "budget_range": {"min_per_year": 10, "ref_per_year": 80, "max_per_year": 300},
        "base_impact": {
            "public_transit": 2,
            "co2_per_capita": -0.1,
            "air_quality": -4,
            "public_trust": 5,
            "crime_rate": -3,
        },
    },
    # ─── GOVERNANCE ───────────────────────────────────────────────────────
    {
        "id": "anti-corruption",
        "name": "Anti-Corruption Reform",
        "category": "governance",
        "description": "Strengthen transparency agencies, whistleblower protections, and public procurement audits.",
        "budget_range": {"min_per_year": 15, "ref_per_year": 100, "max_per_year": 350},
        "base_impact": {
            "public_trust": 6,
            "crime_rate": -10,
            "infrastructure_investment": 0.5,
        },
    },
    {
        "id": "infra-modernisation",
        "name": "Infrastructure Modernisation",
        "category": "governance",
        "description": "Upgrade roads, water systems, bridges, and digital backbone through a multi-year capital plan.",
        "budget_range": {"min_per_year": 100, "ref_per_year": 600, "max_per_year": 2500},
        "base_impact": {
            "infrastructure_investment": 3,
            "public_trust": 4,
            "crime_rate": -5,
            "debt_ratio": 2,
        },
    },
    {
        "id": "open-data-portal",
        "name": "Open Government Data Portal",
        "category": "governance",
        "description": "Publish city datasets and performance metrics in real time, enabling civic oversight and innovation.",
        "budget_range": {"min_per_year": 5, "ref_per_year": 30, "max_per_year": 100},
        "base_impact": {
            "public_trust": 4,
            "green_investment": 0.5,
        },
    },
    # ─── HOUSING ──────────────────────────────────────────────────────────
    {
        "id": "social-housing",
        "name": "Social & Affordable Housing",
        "category": "housing",
        "description": "Build or subsidise below-market housing to reduce homelessness and housing cost burden.",
        "budget_range": {"min_per_year": 50, "ref_per_year": 350, "max_per_year": 1500},
        "base_impact": {
            "public_trust": 5,
            "crime_rate": -8,
            "housing_affordability": 5,
            "debt_ratio": 2,
        },
    },
    {
        "id": "rent-control",
        "name": "Rent Stabilisation Policy",
        "category": "housing",
        "description": "Cap annual rent increases and strengthen tenant protections to prevent displacement.",
        "budget_range": {"min_per_year": 5, "ref_per_year": 25, "max_per_year": 80},
        "base_impact": {
            "housing_affordability": 4,
            "public_trust": 3,
        },
    },
    {
        "id": "zoning-reform",
        "name": "Zoning & Density Reform",
        "category": "housing",
        "description": "Upzone transit corridors and allow mixed-use development to increase housing supply.",
        "budget_range": {"min_per_year": 10, "ref_per_year": 60, "max_per_year": 200},
        "base_impact": {
            "housing_affordability": 3,
            "public_transit": 1,
            "public_trust": 2,
        },
    },
    {
        "id": "homelessness-reduction",
        "name": "Homelessness Reduction Programme",
        "category": "housing",
        "description": "Housing-first programmes combined with wraparound services to end chronic homelessness.",
        "budget_range": {"min_per_year": 20, "ref_per_year": 120, "max_per_year": 450},
        "base_impact": {
            "crime_rate": -10,
            "public_trust": 4,
            "housing_affordability": 2,
        },
    },
    # ─── HEALTHCARE ───────────────────────────────────────────────────────
    {
        "id": "universal-primary-care",
        "name": "Universal Primary Healthcare",
        "category": "healthcare",
        "description": "Fund community health centres providing free or subsidised primary and preventive care for all residents.",
        "budget_range": {"min_per_year": 50, "ref_per_year": 300, "max_per_year": 1200},
        "base_impact": {
            "public_trust": 6,
            "healthcare_access": 8,
            "crime_rate": -3,
        },
    },
    {
        "id": "mental-health-expansion",
        "name": "Mental Health Services Expansion",
        "category": "healthcare",
        "description": "Increase community mental health clinics, crisis response teams, and telehealth access.",
        "budget_range": {"min_per_year": 20, "ref_per_year": 130, "max_per_year": 500},
        "base_impact": {
            "public_trust": 4,
            "healthcare_access": 5,
            "crime_rate": -6,
        },
    },
    {
        "id": "preventive-screening",
        "name": "Preventive Health Screening",
        "category": "healthcare",
        "description": "Mass screening programmes for chronic disease, vaccination drives, and public health campaigns.",
        "budget_range": {"min_per_year": 15, "ref_per_year": 90, "max_per_year": 350},
        "base_impact": {
            "public_trust": 3,
            "healthcare_access": 4,
        },
    },
    # ─── EDUCATION ────────────────────────────────────────────────────────
    {
        "id": "early-childhood-edu",
        "name": "Early Childhood Education",
        "category": "education",
        "description": "Universal pre-K and subsidised childcare to improve long-term outcomes and labour force participation.",
        "budget_range": {"min_per_year": 30, "ref_per_year": 200, "max_per_year": 800},
        "base_impact": {
            "education_index": 5,
            "public_trust": 4,
            "crime_rate": -4,
        },
    },
    {
        "id": "vocational-training",
        "name": "Vocational & Skills Training",
        "category": "education",
        "description": "Fund trade schools, apprenticeships, and reskilling programmes aligned with local industry needs.",
        "budget_range": {"min_per_year": 20, "ref_per_year": 120, "max_per_year": 500},
        "base_impact": {
            "education_index": 4,
            "public_trust": 3,
            "infrastructure_investment": 0.5,
        },
    },
    {
        "id": "digital-literacy",
        "name": "Digital Literacy Initiative",
        "category": "education",
        "description": "Equip residents with digital skills through school programmes and adult learning centres.",
        "budget_range": {"min_per_year": 10, "ref_per_year": 60, "max_per_year": 250},
        "base_impact": {
            "education_index": 3,
            "digital_connectivity": 3,
            "public_trust": 2,
        },
    },
    # ─── DIGITAL / SMART CITY ─────────────────────────────────────────────
    {
        "id": "smart-grid",
        "name": "Smart Energy Grid",
        "category": "digital",
        "description": "Upgrade the electricity grid with IoT sensors, demand response, and AI-driven load balancing.",
        "budget_range": {"min_per_year": 40, "ref_per_year": 250, "max_per_year": 1000},
        "base_impact": {
            "renewable_energy": 3,
            "co2_per_capita": -0.2,
            "digital_connectivity": 4,
            "infrastructure_investment": 1,
        },
    },
    {
        "id": "fiber-broadband",
        "name": "Universal Fibre Broadband",
        "category": "digital",
        "description": "Roll out gigabit fibre to all homes and businesses, closing the digital divide.",
        "budget_range": {"min_per_year": 30, "ref_per_year": 200, "max_per_year": 800},
        "base_impact": {
            "digital_connectivity": 8,
            "public_trust": 3,
            "infrastructure_investment": 1,
            "debt_ratio": 1,
        },
    },
    {
        "id": "iot-sensors",
        "name": "City-Wide IoT Sensor Network",
        "category": "digital",
        "description": "Deploy environmental, traffic, and utility sensors to enable data-driven urban management.",
        "budget_range": {"min_per_year": 15, "ref_per_year": 80, "max_per_year": 300},
        "base_impact": {
            "air_quality": -3,
            "crime_rate": -4,
            "digital_connectivity": 3,
        },
    },
    {
        "id": "digital-gov-services",
        "name": "Digital Government Services",
        "category": "digital",
        "description": "Migrate public services online with single-sign-on portals, e-permits, and automated processing.",
        "budget_range": {"min_per_year": 10, "ref_per_year": 60, "max_per_year": 250},
        "base_impact": {
            "public_trust": 5,
            "digital_connectivity": 4,
            "crime_rate": -2,
        },
    },
    # ─── BUSINESS ─────────────────────────────────────────────────────────
    {
        "id": "startup-grants",
        "name": "Startup & SME Grants",
        "category": "business",
        "description": "Provide grants, co-working spaces, and mentorship programmes to support new businesses.",
        "budget_range": {"min_per_year": 15, "ref_per_year": 100, "max_per_year": 400},
        "base_impact": {
            "public_trust": 3,
            "infrastructure_investment": 0.5,
            "green_investment": 0.5,
        },
    },
    {
        "id": "trade-zone",
        "name": "Special Economic & Trade Zone",
        "category": "business",
        "description": "Designate low-regulation, tax-advantaged zones to attract foreign direct investment.",
        "budget_range": {"min_per_year": 30, "ref_per_year": 200, "max_per_year": 800},
        "base_impact": {
            "infrastructure_investment": 2,
            "public_trust": 2,
            "debt_ratio": -1,
        },
    },
    {
        "id": "r-and-d-incentives",
        "name": "R&D Tax Incentives",
        "category": "business",
        "description": "Offer tax credits and grants for private-sector research and development investment.",
        "budget_range": {"min_per_year": 20, "ref_per_year": 120, "max_per_year": 500},
        "base_impact": {
            "green_investment": 1,
            "digital_connectivity": 2,
            "public_trust": 2,
        },
    },
    # ─── AGRICULTURE ──────────────────────────────────────────────────────
    {
        "id": "urban-farming",
        "name": "Urban Agriculture & Vertical Farms",
        "category": "agriculture",
        "description": "Fund rooftop gardens, community plots, and vertical farm facilities to localise food production.",
        "budget_range": {"min_per_year": 10, "ref_per_year": 60, "max_per_year": 250},
        "base_impact": {
            "co2_total": -0.5,
            "air_quality": -4,
            "public_trust": 3,
            "green_investment": 0.5,
        },
    },
    {
        "id": "food-waste-reduction",
        "name": "Food Waste Reduction Programme",
        "category": "agriculture",
        "description": "Implement smart supply-chain tracking, composting mandates, and surplus food redistribution.",
        "budget_range": {"min_per_year": 8, "ref_per_year": 50, "max_per_year": 200},
        "base_impact": {
            "co2_total": -1,
            "co2_per_capita": -0.1,
            "public_trust": 2,
        },
    },
    {
        "id": "sustainable-supply-chain",
        "name": "Sustainable Agricultural Supply Chain",
        "category": "agriculture",
        "description": "Certify and subsidise sustainable farming practices and reduce pesticide and water usage.",
        "budget_range": {"min_per_year": 15, "ref_per_year": 90, "max_per_year": 350},
        "base_impact": {
            "co2_total": -1.5,
            "co2_per_capita": -0.15,
            "air_quality": -3,
            "public_trust": 2,
        },
    },
    # ─── INDUSTRY ─────────────────────────────────────────────────────────
    {
        "id": "clean-manufacturing",
        "name": "Clean Manufacturing Standards",
        "category": "industry",
        "description": "Enforce and subsidise adoption of clean production technologies in heavy manufacturing.",
        "budget_range": {"min_per_year": 40, "ref_per_year": 250, "max_per_year": 1000},
        "base_impact": {
            "co2_total": -3,
            "co2_per_capita": -0.3,
            "air_quality": -10,
            "public_trust": 2,
        },
    },
    {
        "id": "industrial-decarbonisation",
        "name": "Industrial Decarbonisation Fund",
        "category": "industry",
        "description": "Co-finance green hydrogen, electrification, and carbon capture in steel, cement, and chemicals.",
        "budget_range": {"min_per_year": 100, "ref_per_year": 700, "max_per_year": 3000},
        "base_impact": {
            "co2_total": -5,
            "co2_per_capita": -0.5,
            "renewable_energy": 2,
            "debt_ratio": 2,
        },
    },
    {
        "id": "circular-economy",
        "name": "Circular Economy Initiative",
        "category": "industry",
        "description": "Promote product design for reuse, extended producer responsibility, and industrial symbiosis.",
        "budget_range": {"min_per_year": 15, "ref_per_year": 100, "max_per_year": 400},
        "base_impact": {
            "co2_total": -1.5,
            "air_quality": -4,
            "green_investment": 1,
            "public_trust": 3,
        },
    },
]

POLICIES: List[PolicyDefinition] = [PolicyDefinition(**data) for data in _POLICY_DATA]

# Read-only id -> definition lookup handed to the projection engine
POLICY_CATALOG: Mapping[str, PolicyDefinition] = MappingProxyType(
    {p.id: p for p in POLICIES}
)

POLICY_CATEGORIES = [
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

CATEGORY_LABELS: Dict[str, str] = {
    "energy": "Energy",
    "transportation": "Transport",
    "governance": "Governance",
    "housing": "Housing",
    "healthcare": "Healthcare",
    "education": "Education",
    "digital": "Digital",
    "business": "Business",
    "agriculture": "Agriculture",
    "industry": "Industry",
}


def get_policy_by_id(
    policy_id: str,
    catalog: Mapping[str, PolicyDefinition] = POLICY_CATALOG,
) -> Optional[PolicyDefinition]:
    return catalog.get(policy_id)


def policies_by_category(
    category: str,
    catalog: Mapping[str, PolicyDefinition] = POLICY_CATALOG,
) -> List[PolicyDefinition]:
    return [p for p in catalog.values() if p.category == category]
