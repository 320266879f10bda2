"""Render scrape snapshots in Prometheus text format."""

from typing import Iterable, Iterator

from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client.core import GaugeMetricFamily, Metric

from lucypos_exporter.monitoring.metrics import MetricsRegistry
from lucypos_exporter.monitoring.pipeline import Sample

LABEL_NAME = "name"


class SnapshotCollector:
    """Exposes the samples of one scrape cycle as gauges labelled by name."""

    def __init__(self, samples: Iterable[Sample]):
        self.samples = tuple(samples)

    def collect(self) -> Iterator[Metric]:
        for sample in self.samples:
            family = GaugeMetricFamily(sample.metric_name, sample.description, labels=[LABEL_NAME])
            family.add_metric([sample.label], sample.value)
            yield family


def render(samples: Iterable[Sample], exporter_metrics: MetricsRegistry) -> bytes:
    """Format a snapshot followed by the exporter's own metrics."""
    registry = CollectorRegistry()
    registry.register(SnapshotCollector(samples))
    return generate_latest(registry) + generate_latest(exporter_metrics.registry)
