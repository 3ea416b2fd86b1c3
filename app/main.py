"""PlanTogether event planning API."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.database import create_db_and_tables
from app.core.scheduler import shutdown_scheduler, start_scheduler
from app.core.store import ConflictError, DocumentNotFoundError
from app.planning.errors import PlanningError
from app.routes import events, notifications, users

# Configure logging
log_dir = Path.home() / ".logs" / "plantogether"
log_dir.mkdir(parents=True, exist_ok=True)
log_file = log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    # Startup
    logger.info("Starting PlanTogether application")
    create_db_and_tables()
    if settings.scheduler_enabled:
        start_scheduler()
    yield
    # Shutdown
    if settings.scheduler_enabled:
        shutdown_scheduler()
    logger.info("PlanTogether application shut down")


app = FastAPI(
    title=settings.app_name,
    description="Plan events together: vote on dates and items, comment, and RSVP",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for the browser client
origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PlanningError)
@app.exception_handler(DocumentNotFoundError)
@app.exception_handler(ConflictError)
async def domain_error_handler(request: Request, exc: Exception):
    """Turn planning and store errors into JSON responses."""
    logger.info(f"{request.method} {request.url.path} rejected: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "detail": exc.detail},
    )


# Include routers
app.include_router(users.router)
app.include_router(events.router)
app.include_router(notifications.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}
