"""
FastAPI routes exposing the executive analytics engine.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from preflight.dependencies import get_app_settings, get_preflight_engine

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck(
    settings: Annotated[Any, Depends(get_app_settings)],
) -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok", "environment": settings.environment}


@router.get("/analysis/ceo", status_code=HTTPStatus.OK)
async def get_ceo_analysis(
    engine: Annotated[Any, Depends(get_preflight_engine)],
    force_refresh: bool = Query(
        default=False,
        description="Skip the hourly cache and regenerate the analysis.",
    ),
) -> dict:
    """
    Return the executive analysis for today.

    The body is a cached analysis (``isCached`` true), a fresh one
    (``isCached`` false, with trends and recommendations), or raw live data
    without ``key_metrics`` when generation failed.
    """
    payload = await engine.get_ceo_analysis(force_refresh=force_refresh)
    if "key_metrics" not in payload:
        logger.warning("Serving live data without analytics")
    return payload


@router.get("/analysis/live", status_code=HTTPStatus.OK)
async def get_live_data(
    engine: Annotated[Any, Depends(get_preflight_engine)],
    query: str = Query(default="", description="Free-text context recorded in metadata."),
) -> dict:
    """Return the merged live snapshot without analytics."""
    snapshot = await engine.fetch_all_live_data(query)
    return snapshot.to_payload()
