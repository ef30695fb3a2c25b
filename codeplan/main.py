import logging
import sys
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from codeplan.api.routes import router
from codeplan.config import get_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)]
)

# Set DEBUG level for our app modules
logging.getLogger("codeplan").setLevel(logging.DEBUG)

logger = logging.getLogger(__name__)
settings = get_settings()

app = FastAPI(
    title="Code Plan API",
    description="Turns natural language change requests into execution plans and applies them",
    version="0.1.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api/v1/plan", tags=["plan"])


@app.on_event("startup")
async def startup_event():
    logger.info("Starting Code Plan API")
    logger.info(f"LLM Base URL: {settings.llm_base_url}")
    logger.info(f"Models - Planner: {settings.model_planner}, Executor: {settings.model_executor}")
    logger.info(f"Projects path: {settings.projects_base_path}")
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set, LLM calls will fail")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "models": {
            "planner": settings.model_planner,
            "executor": settings.model_executor
        }
    }
