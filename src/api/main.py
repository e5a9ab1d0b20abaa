"""FastAPI application entry point."""

import os
import sys
import logging
import tomllib
from contextlib import asynccontextmanager
from pathlib import Path
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load environment variables from .env file
# Must be called before importing modules that read env vars (storage, identity provider)
load_dotenv()

# main.py is at <root>/src/api/main.py; src is two levels up
_src_path = Path(__file__).parent.parent
sys.path.insert(0, str(_src_path))

from adapter.mongodb.connection import close_client
from api.dependencies import build_services, init_storage
from api.errors import register_exception_handlers
from api.routes import auth, health, users
from utils.logging import setup_structured_logging

setup_structured_logging()

logger = logging.getLogger(__name__)

# Read version from pyproject.toml (single source of truth)
_project_root = _src_path.parent
with open(_project_root / "pyproject.toml", "rb") as f:
    VERSION = tomllib.load(f)["project"]["version"]

SERVICE_NAME = "Clinic Auth API"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: pick storage once, build the services on top of it."""
    storage = init_storage()
    auth_service, user_service = build_services(storage)
    app.state.storage = storage
    app.state.auth_service = auth_service
    app.state.user_service = user_service
    logger.info("Auth service ready", extra={"backend": storage.backend})

    yield  # App runs here

    close_client()


app = FastAPI(
    title=SERVICE_NAME,
    description="Session authentication for the clinic desktop app: local accounts and Google sign-in",
    version=VERSION,
    lifespan=lifespan,
)

# The desktop shell talks to the API from a file:// or localhost origin.
# Session ids travel in the Authorization header, so credentials are never needed with "*".
cors_origins_env = os.getenv("CORS_ORIGINS", "*")

if cors_origins_env == "*":
    cors_origins = ["*"]
    allow_credentials = False
    logger.warning("CORS configured with wildcard origin ('*'). Set CORS_ORIGINS to restrict it.")
else:
    cors_origins = [origin.strip() for origin in cors_origins_env.split(",")]
    allow_credentials = True
    logger.info(f"CORS configured with specific origins: {cors_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(health.router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": SERVICE_NAME,
        "version": VERSION,
        "status": "running"
    }
