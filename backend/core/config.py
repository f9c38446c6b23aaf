"""
Runtime settings for Polis AI, read from the environment.

Values are resolved at import time, so `load_dotenv()` must run before this
module is imported (main.py does this first).
"""
import os

LLM_MODEL = os.getenv("POLIS_LLM_MODEL", "claude-sonnet-4-6")

# Simulation horizon limits (years)
DEFAULT_SIMULATION_YEARS = int(os.getenv("POLIS_DEFAULT_YEARS", 10))
MAX_SIMULATION_YEARS = int(os.getenv("POLIS_MAX_YEARS", 50))

DEFAULT_CITY_ID = os.getenv("POLIS_DEFAULT_CITY", "amsterdam")

# Token budgets per LLM call
SCENARIO_MAX_TOKENS = 2000
ADVISOR_MAX_TOKENS = 1024
CITY_REFRESH_MAX_TOKENS = 600
