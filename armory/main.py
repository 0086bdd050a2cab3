"""Armory Analytics - FastAPI Backend.

Weapon balance analytics: derived metrics, composite scores and rankings
for a weapon sheet.
"""

import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .api import api_router
from .services.data_loader import load_weapon_records

settings = get_settings()

logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown."""
    # Startup
    print("Starting Armory Analytics API...")

    # Load the weapon sheet (optional - run with an empty dataset if missing)
    try:
        app.state.weapons = load_weapon_records(settings.weapons_csv_path)
        print(f"Loaded {len(app.state.weapons)} weapons")
    except (FileNotFoundError, OSError) as e:
        print(f"Weapon sheet unavailable, running without data: {e}")
        app.state.weapons = []

    yield

    # Shutdown
    print("Shutting down Armory Analytics API...")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="""
    Armory Analytics API - weapon balance analytics.

    Features:
    - Zone/armor resolved TTK and STK
    - Sustained DPS, handling, armor and reload metrics
    - Weighted composite score with presets
    - Role dominance, outlier, counter and skill floor/ceiling rankings
    - Distance-band suitability
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# CORS configuration - allow deployed frontend and localhost
cors_origins = [
    "http://localhost:3000",
    "http://localhost:3001",
    "http://127.0.0.1:3000",
]

# Add deployed frontend URL from env var
frontend_url = os.environ.get("FRONTEND_URL")
if frontend_url:
    cors_origins.append(frontend_url)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix=f"/api/{settings.api_version}")


@app.get("/")
async def root():
    """Root endpoint - API info."""
    return {
        "name": settings.app_name,
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# For running with uvicorn directly
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "armory.main:app",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 8000)),
        reload=True,
    )
