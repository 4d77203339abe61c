import logging

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from api import state
from storage import db

router = APIRouter(tags=["ops"])
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint for container orchestration."""
    health = {
        "status": "healthy",
        "store": state.store_backend,
        "llm_enabled": bool(
            state.task_service and state.task_service.enricher.llm.provider is not None
        ),
    }

    if state.store_backend == "postgres":
        db_health = await db.health_check()
        health["database"] = db_health
        if db_health["status"] != "healthy":
            health["status"] = "degraded"

    return health


@router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus scrape endpoint.
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
