"""Scrape pipeline and metrics exposition for the exporter."""

from lucypos_exporter.monitoring.exposition import SnapshotCollector, render
from lucypos_exporter.monitoring.metrics import MetricsRegistry, metrics
from lucypos_exporter.monitoring.pipeline import (
    PROBE_ORDER,
    Sample,
    ScrapeConfig,
    ScrapePipeline,
    ScrapeSnapshot,
)
from lucypos_exporter.monitoring.router import prometheus_metrics
from lucypos_exporter.monitoring.router import router as health_router

__all__ = [
    "PROBE_ORDER",
    "MetricsRegistry",
    "Sample",
    "ScrapeConfig",
    "ScrapePipeline",
    "ScrapeSnapshot",
    "SnapshotCollector",
    "health_router",
    "metrics",
    "prometheus_metrics",
    "render",
]
