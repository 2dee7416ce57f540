# backend/mentorship/main.py
"""
FastAPI application entrypoint.

Run locally with:
    uvicorn mentorship.main:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
import json
import logging
from typing import Any, AsyncGenerator, Dict

from fastapi import APIRouter, FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from .core.config import settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .core.request_context import attach_request_id_filter
from .database import init_db
from .errors import register_error_handlers
from .middleware.request_context import RequestContextMiddleware
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes.v1 import goals as goals_v1, mentors as mentors_v1, sessions as sessions_v1


class StructuredFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", None),
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_obj)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
    )
    if settings.structured_logs:
        handler = logging.StreamHandler()
        handler.setFormatter(StructuredFormatter())
        logging.root.handlers = [handler]
    attach_request_id_filter()

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.INFO)


configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}")

    if settings.is_sqlite and not settings.is_testing:
        # SQLite has no migration history; create tables in place.
        init_db()
        logger.info("SQLite schema ensured")

    yield

    logger.info(f"{BRAND_NAME} API shutting down...")


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    lifespan=app_lifespan,
)

register_error_handlers(app)

if settings.cors_origin_list:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PATCH"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    logger.info("CORS allow_origins=%s", settings.cors_origin_list)

app.add_middleware(RequestContextMiddleware)

api_v1 = APIRouter(prefix=settings.api_v1_prefix)
api_v1.include_router(sessions_v1.router, prefix="/sessions")
api_v1.include_router(mentors_v1.router, prefix="/mentors")
api_v1.include_router(goals_v1.router, prefix="/goals")
app.include_router(api_v1)


@app.get("/health", include_in_schema=False)
async def health() -> Dict[str, str]:
    return {"status": "healthy", "service": API_TITLE, "version": API_VERSION}


@app.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
    )
