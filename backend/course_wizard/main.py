import logging
from typing import Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .evaluate_routes import router as evaluate_router
from .logging_config import configure_logging
from .wizard_routes import router as wizard_router


configure_logging()
logger = logging.getLogger(__name__)
settings_snapshot = get_settings()

app = FastAPI(title="Course Design Wizard Backend", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings_snapshot.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(evaluate_router)
app.include_router(wizard_router)

logger.info("Backend starting with evaluation model: %s", settings_snapshot.model)
logger.info("OpenAI API key configured: %s", bool(settings_snapshot.openai_api_key))
logger.info("Wizard state file: %s", settings_snapshot.state_path or "memory only")


@app.get("/healthz")
def health() -> Dict[str, str]:
    return {"status": "ok", "model": settings_snapshot.model}
