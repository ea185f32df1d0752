"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.routes import climbs, sessions, uploads
from db import init_db
from services.metadata_extractor import register_heif_opener
from settings import settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Register HEIF/HEIC opener at startup (for iPhone photos)
heif_available = register_heif_opener()


# Create app
app = FastAPI(
    title="Route Topo API",
    description="API for uploading boulder photos and drawing climbing routes on them",
    version="0.1.0",
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount static files for uploaded photos
media_path = Path(settings.MEDIA_ROOT)
media_path.mkdir(parents=True, exist_ok=True)
app.mount("/media", StaticFiles(directory=str(media_path)), name="media")

# Include routers
app.include_router(uploads.router, prefix="/uploads", tags=["uploads"])
app.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
app.include_router(climbs.router, prefix="/climbs", tags=["climbs"])


@app.on_event("startup")
def startup_event():
    """Initialize database tables on startup."""
    init_db()
    logger.info("[startup] heif support: %s", heif_available)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Route Topo API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
