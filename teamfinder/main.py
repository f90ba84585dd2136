"""Team Finder match completion service."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from teamfinder.core.config import settings
from teamfinder.core.database import create_db_and_tables
from teamfinder.core.errors import CompletionError
from teamfinder.core.scheduler import shutdown_scheduler, start_scheduler
from teamfinder.routes import completions, stories

# Configure logging
log_dir = Path.home() / ".logs" / "teamfinder"
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
    logger.info("Starting match completion service")
    create_db_and_tables()
    if settings.reconcile_enabled:
        start_scheduler()
    yield
    # Shutdown
    shutdown_scheduler()
    logger.info("Match completion service shut down")


app = FastAPI(
    title=settings.app_name,
    description="Two-party confirmation of team/player placements and their success stories",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for the web frontend
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

# Include routers
app.include_router(completions.router)
app.include_router(stories.router)


@app.exception_handler(CompletionError)
async def completion_error_handler(request: Request, exc: CompletionError):
    """Render workflow errors in the same shape as HTTPException."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(
            f"{request.method} {request.url.path} rejected "
            f"({exc.status_code}): {exc.message}"
        )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and query parameters are client errors (400)."""
    return JSONResponse(
        status_code=400, content={"detail": jsonable_encoder(exc.errors())}
    )


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}
