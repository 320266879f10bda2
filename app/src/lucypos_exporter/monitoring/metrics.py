"""
Prometheus metrics describing the exporter itself.

Kept in a dedicated registry so the scrape output only contains what this
exporter defines, without the default process collectors.
"""

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram


class MetricsRegistry:
    """Registry for the exporter's own metrics."""

    def __init__(self, namespace: str = "lucypos_exporter"):
        self.registry = CollectorRegistry()

        self.probe_failures = Counter(
            "probe_failures_total",
            "Total probe failures by probe",
            ["probe"],
            namespace=namespace,
            registry=self.registry,
        )
        self.scrape_duration = Histogram(
            "scrape_duration_seconds",
            "Duration of a full scrape cycle in seconds",
            namespace=namespace,
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
            registry=self.registry,
        )
        self.last_scrape_time = Gauge(
            "last_scrape_timestamp_seconds",
            "Timestamp of the last completed scrape cycle",
            namespace=namespace,
            registry=self.registry,
        )


# Global metrics registry
metrics = MetricsRegistry()
