"""
Polis AI Backend - FastAPI application entry point.
"""
import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

from api.routes import router
from core.config import DEFAULT_CITY_ID, LLM_MODEL, MAX_SIMULATION_YEARS
from core.policies import POLICY_CATALOG

app = FastAPI(
    title="Polis AI",
    description="Urban Policy Simulator: multi-year what-if projections for city policy bundles",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    return {
        "name": "Polis AI",
        "version": "1.0.0",
        "default_city": DEFAULT_CITY_ID,
        "policies": len(POLICY_CATALOG),
        "max_simulation_years": MAX_SIMULATION_YEARS,
        "status": "operational",
        "docs": "/docs",
    }


@app.on_event("startup")
async def startup():
    logger.info("Polis AI backend starting up...")
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        logger.warning("ANTHROPIC_API_KEY not set: AI scenario and advisor endpoints will use fallbacks or fail")
    else:
        logger.info(f"Anthropic API key loaded, model {LLM_MODEL}")


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=True)
