"""
Recipe Intake - FastAPI application.

Serves the import pipeline over HTTP for the app frontend.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recipe_intake import __version__
from recipe_intake.config import settings, setup_logging
from recipe_intake.web.recipe_import_routes import router as recipe_import_router

logger = logging.getLogger(__name__)

app = FastAPI(title="Recipe Intake", version=__version__)


@app.on_event("startup")
async def startup_event():
    """Configure logging and report optional features on startup."""
    setup_logging()
    logger.info("Recipe Intake starting up...")
    logger.info(f"  AI features: {'enabled' if settings.ai_enabled else 'disabled (no OPENAI_API_KEY)'}")
    logger.info(f"  Prompt file logging: {settings.intake_log_prompts}")


# CORS middleware for the frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",  # Vite dev server
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(recipe_import_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__, "service": "recipe-intake"}
