"""FastAPI application entry point. Registers middleware, API routers and the query cache."""

import logging
import time
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from scoutplan.config import settings
from scoutplan.database import Base, engine, get_db
import scoutplan.models  # noqa: F401 - registers model metadata
from scoutplan.routers import auth, activities, taxonomies, programs
from scoutplan.utils.query_cache import QueryCache

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()

app = FastAPI(
    title="Scout Program Builder",
    description="Activity catalogue and time-scheduled program builder for scout leaders",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.state.query_cache = QueryCache(ttl_seconds=settings.QUERY_CACHE_TTL_SECONDS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register all routers
app.include_router(auth.router)
app.include_router(activities.router)
app.include_router(taxonomies.router)
app.include_router(programs.router)


@app.on_event("startup")
def ensure_schema():
    Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check(db: Session = Depends(get_db)):
    started = time.monotonic()
    try:
        db.execute(text("SELECT 1"))
        database = {"status": "healthy", "response_time_ms": int((time.monotonic() - started) * 1000)}
    except SQLAlchemyError as exc:
        logger.warning("[health] database check failed: %s", exc)
        database = {"status": "unhealthy", "response_time_ms": 0}

    status = "ok" if database["status"] == "healthy" else "degraded"
    payload = {
        "status": status,
        "service": "Scout Program Builder",
        "version": app.version,
        "uptime_seconds": int(time.monotonic() - STARTED_AT),
        "services": {"database": database},
    }
    return JSONResponse(
        payload,
        status_code=200 if status == "ok" else 503,
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )
