"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from robo_rumble.config import settings
from robo_rumble.api.routes.admin import router as admin_router
from robo_rumble.api.routes.profiles import router as profiles_router
from robo_rumble.api.routes.roles import router as roles_router
from robo_rumble.api.routes.scores import router as scores_router
from robo_rumble.api.routes.teams import router as teams_router
from robo_rumble.errors import (
    CompetitionError,
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
)
from robo_rumble.repositories.competition_repository import CompetitionRepository

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# Database path - use settings or default to data/roborumble.duckdb in repo root
def get_database_path() -> Path:
    """Get the database path from settings or default location."""
    repo_root = Path(__file__).parent.parent.parent.parent
    if settings.database_path:
        db_path = Path(settings.database_path)
        if db_path.is_absolute():
            return db_path
        # Relative path - resolve from repo root
        return repo_root / settings.database_path
    return repo_root / "data" / "roborumble.duckdb"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    owns_repository = False
    if not hasattr(app.state, "repository"):
        app.state.repository = CompetitionRepository(
            get_database_path(), default_max_members=settings.default_max_members
        )
        owns_repository = True
    yield
    if owns_repository:
        app.state.repository.close()
        del app.state.repository


app = FastAPI(
    title="RoboRumble",
    description="Robotics competition backend - teams, roles, judging and leaderboard",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CompetitionError)
async def competition_error_handler(request: Request, exc: CompetitionError):
    """Translate domain errors raised by services into HTTP responses."""
    if isinstance(exc, NotFoundError):
        status_code = 404
    elif isinstance(exc, PermissionDeniedError):
        status_code = 403
    elif isinstance(exc, InvalidInputError):
        status_code = 422
    else:
        status_code = 409
    logger.info(f"{request.method} {request.url.path} -> {status_code} {exc.code}")
    return JSONResponse(status_code=status_code, content={"detail": exc.to_dict()})


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "robo-rumble"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "RoboRumble API",
        "version": "0.1.0",
        "docs": "/docs",
    }


# Register routers
app.include_router(roles_router)
app.include_router(teams_router)
app.include_router(scores_router)
app.include_router(admin_router)
app.include_router(profiles_router)
