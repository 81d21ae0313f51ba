"""
FastAPI application entry point for the job board.

This is the main app that:
- Initializes FastAPI with CORS
- Runs the authentication gateway on every request
- Renders domain errors as {"kind", "detail"} responses
- Registers all API routers
"""
import logging
from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobboard.config import settings
from jobboard.database import engine
from jobboard.errors import JobBoardError
# Import API routers
from jobboard.api import applications, auth, companies, jobs, skills, users
from jobboard.api.auth import get_current_identity

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    On shutdown: Close database connections gracefully
    """
    # Startup
    logger.info("Starting Job Board API...")
    logger.info(f"Database: {settings.database_url.split('@')[1] if '@' in settings.database_url else 'configured'}")
    logger.info(f"Debug mode: {settings.debug}")

    yield

    # Shutdown
    logger.info("Shutting down Job Board API...")
    await engine.dispose()


# Initialize FastAPI app; the gateway dependency guards every route
app = FastAPI(
    title="Job Board API",
    description="Job board with role-based access for candidates, recruiters and employers",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
    dependencies=[Depends(get_current_identity)],
)

# Configure CORS
# Set ALLOWED_ORIGINS environment variable with comma-separated domains
allowed_origins = [
    "http://localhost:3000",  # Local development
]

if settings.allowed_origins:
    allowed_origins.extend(origin.strip() for origin in settings.allowed_origins.split(','))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(JobBoardError)
async def job_board_error_handler(request: Request, exc: JobBoardError):
    """Render domain errors with their kind and status."""
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"kind": exc.kind, "detail": exc.message},
        headers=headers,
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    """Simple health check endpoint."""
    return {
        "status": "healthy",
        "service": "Job Board API",
        "version": "1.0.0",
    }


# Root endpoint
@app.get("/")
async def root():
    """API root with basic info."""
    return {
        "message": "Job Board API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


# Register API routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(companies.router, prefix="/api/companies", tags=["companies"])
app.include_router(jobs.router, prefix="/api/jobs", tags=["jobs"])
app.include_router(applications.router, prefix="/api/applications", tags=["applications"])
app.include_router(skills.router, prefix="/api/skills", tags=["skills"])
