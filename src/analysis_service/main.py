from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import router
from .config import get_settings

settings = get_settings()

# Configure logging for the entire analysis_service package
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logging.getLogger("analysis_service").setLevel(settings.log_level.upper())

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Analysis service starting up (model=%s)", ", ".join(settings.model_ids))
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; analysis requests will fail")
    yield
    logger.info("Analysis service shutting down")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Analysis Service",
        description="Streaming document analysis with Gemini",
        version="0.1.0",
        lifespan=lifespan,
        debug=settings.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    return app


app = create_app()
