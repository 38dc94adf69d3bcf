"""
Driving School Matching - FastAPI Application Entry Point
Student-instructor matching, allocation and instructor performance reporting.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from app.config import get_settings
from app.routers import health, matching, reports

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Runs startup and shutdown logic.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.app_env}, tie-break: {settings.matching_tie_break}")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="""
## Driving School Matching API

Fair allocation of driving students to instructors.

### Modules

- **Matching Engine** - Eligibility, quota planning and allocation
- **Match Adjustments** - Student transfers and applying a matching
- **Reports** - Instructor success rates, rankings and trends

### Key Features

- Even quota split with optional gender balancing
- Unmatched students always reported with a reason
- Month-over-month instructor performance trends
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# CORS middleware for cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(health.router, tags=["Health"])
app.include_router(
    matching.router,
    prefix=settings.api_prefix,
    tags=["Matching Engine"]
)
app.include_router(
    reports.router,
    prefix=settings.api_prefix,
    tags=["Instructor Reports"]
)


@app.get("/", tags=["Root"])
async def root():
    """
    Welcome endpoint with API information.
    """
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
