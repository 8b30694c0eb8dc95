"""Family Organizer API - FastAPI backend for shared family lists and tasks"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .errors import InvalidQueryError, OrganizerError
from .routes import activity, families, folders, lists, members, notifications, search, shopping, subtasks, tasks
from .services.database import db

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Family Organizer API...")
    db.initialize()
    cutoff = datetime.utcnow() - timedelta(days=settings.activity_retention_days)
    db.prune_activity(cutoff)
    yield
    logger.info("Shutting down Family Organizer API...")
    db.close()


app = FastAPI(
    title=settings.app_name,
    description="Shared task lists, shopping lists and folders for families",
    version="1.0.0",
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(OrganizerError)
async def organizer_error_handler(request: Request, exc: OrganizerError):
    """Map domain errors to HTTP responses"""
    if isinstance(exc, InvalidQueryError):
        logger.warning(f"{request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    # Bad enum values in stored data; never shown to the caller verbatim
    logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": "Internal server error"})


app.include_router(families.router, prefix="/families", tags=["families"])
app.include_router(members.router, prefix="/members", tags=["members"])
app.include_router(folders.router, prefix="/folders", tags=["folders"])
app.include_router(lists.router, prefix="/lists", tags=["lists"])
app.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
app.include_router(subtasks.router, prefix="/tasks", tags=["subtasks"])
app.include_router(shopping.router, prefix="/shopping/items", tags=["shopping"])
app.include_router(search.router, tags=["search"])
app.include_router(activity.router, prefix="/activity", tags=["activity"])
app.include_router(notifications.router, prefix="/notifications", tags=["notifications"])


@app.get("/health")
async def health():
    return {"status": "healthy"}


def run():
    """Serve the API with uvicorn"""
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
