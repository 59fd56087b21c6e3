"""Catering staffing web application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from caterstaff.core.config import settings
from caterstaff.core.database import create_db_and_tables
from caterstaff.core.scheduler import shutdown_scheduler, start_scheduler
from caterstaff.routes import announcements, confirmations, events, notifications, public, team
from caterstaff.routes import settings as settings_routes
from caterstaff.staffing.errors import InvalidTransition, NotFound, ValidationError

# Configure logging
log_dir = settings.log_dir
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
    logger.info("Starting Caterstaff application")
    create_db_and_tables()
    if settings.scheduler_enabled:
        start_scheduler()
    yield
    # Shutdown
    if settings.scheduler_enabled:
        shutdown_scheduler()
    logger.info("Caterstaff application shut down")


app = FastAPI(
    title=settings.app_name,
    description="Staffing needs, confirmation tracking and follow-ups for catering events",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for external access
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


# Operator-facing errors. The public pages handle their own outcomes.
@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(InvalidTransition)
async def invalid_transition_handler(request: Request, exc: InvalidTransition):
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc), "current_status": exc.current_status},
    )


# Include routers
app.include_router(events.router)
app.include_router(team.router)
app.include_router(settings_routes.router)
app.include_router(confirmations.router)
app.include_router(announcements.router)
app.include_router(notifications.router)
app.include_router(public.router)


@app.get("/")
async def root(request: Request):
    """Redirect root to the events list."""
    rp = request.scope.get("root_path", "")
    return RedirectResponse(f"{rp}/events")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}
