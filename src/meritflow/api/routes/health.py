"""Health check endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request

from meritflow.core.exceptions import CacheError

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
async def ready(request: Request) -> dict[str, str]:
    try:
        request.app.state.cache.get("meritflow:ready")
    except CacheError as exc:
        logger.warning("Cache not reachable: %s", exc)
        return {"status": "degraded", "cache": "unreachable"}
    return {"status": "ready", "cache": "ok"}
