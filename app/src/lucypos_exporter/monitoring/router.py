"""Health check and metrics API routes."""

import logging
from typing import Dict

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST

from lucypos_exporter.monitoring.exposition import render
from lucypos_exporter.monitoring.pipeline import ScrapePipeline

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> Dict[str, str]:
    """
    Liveness probe.

    Returns 200 if the process is running. Touches no backend.
    """
    return {"status": "alive"}


def get_pipeline(request: Request) -> ScrapePipeline:
    """Return the pipeline attached to the application."""
    return request.app.state.pipeline


async def prometheus_metrics(request: Request) -> Response:
    """
    Prometheus scrape endpoint.

    Runs one scrape cycle and returns its samples in Prometheus text format.
    Probe failures show up as sentinel samples, never as an error response.
    """
    pipeline = get_pipeline(request)
    snapshot = await pipeline.run_cycle()
    return Response(
        content=render(snapshot, pipeline.metrics),
        media_type=CONTENT_TYPE_LATEST,
    )
