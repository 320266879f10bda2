"""
Scrape collection pipeline.

One cycle runs every probe in a fixed order and always returns one sample
per probe. A failing probe is logged and replaced by a sentinel sample so
the set of exported metrics never changes between scrapes.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional, Tuple, TypeVar

from lucypos_exporter.backup.scanner import BackupEntry, scan_backups
from lucypos_exporter.db.probes import SyncStatus, probe_audit_lag, probe_sync_error
from lucypos_exporter.errors import ProbeError, ProbeTimeout
from lucypos_exporter.monitoring.metrics import MetricsRegistry, metrics as default_metrics

logger = logging.getLogger(__name__)

T = TypeVar("T")

SENTINEL_VALUE = 0.0
SENTINEL_LABEL = "n/a"
AUDIT_LABEL = "audit"

# Probe names, in the order they run
BACKUP_SIZE = "backup_size"
BACKUP_DATE = "backup_date"
AUDIT_LAG = "audit_lag"
SYNC_ERROR = "sync_error"
PROBE_ORDER = (BACKUP_SIZE, BACKUP_DATE, AUDIT_LAG, SYNC_ERROR)


@dataclass(frozen=True)
class Sample:
    """One measurement produced by a probe."""

    metric_name: str
    value: float
    label: str
    description: str = ""


ScrapeSnapshot = Tuple[Sample, ...]


@dataclass(frozen=True)
class MetricDef:
    """Name and help text of an exported metric."""

    name: str
    description: str


def metric_defs(namespace: str) -> dict:
    """Return the exported metric for each probe."""
    prefix = f"{namespace}_" if namespace else ""
    return {
        BACKUP_SIZE: MetricDef(f"{prefix}backup_file_size", "Size of the last backup file in bytes"),
        BACKUP_DATE: MetricDef(f"{prefix}backup_file_date", "Modification time of the last backup file"),
        AUDIT_LAG: MetricDef(f"{prefix}last_audit_timestamp", "Timestamp of the newest audit log row"),
        SYNC_ERROR: MetricDef(f"{prefix}sync_error", "1 if a synchronization batch is in error"),
    }


@dataclass(frozen=True)
class ScrapeConfig:
    """Everything a scrape cycle needs. Immutable once built."""

    backup_dir: Path
    audit_database_url: str
    sync_database_url: str
    backup_extension: str = ".tar"
    probe_timeout: float = 5.0
    namespace: str = "lucypos"


class ScrapePipeline:
    """
    Runs scrape cycles one at a time.

    The lock only schedules cycles: concurrent scrapes wait for the running
    cycle instead of hitting the database and filesystem in parallel.
    """

    def __init__(self, config: ScrapeConfig, registry: Optional[MetricsRegistry] = None):
        self.config = config
        self.metrics = registry or default_metrics
        self.metric_defs = metric_defs(config.namespace)
        self._lock = asyncio.Lock()

    async def run_cycle(self) -> ScrapeSnapshot:
        """Run every probe and return exactly one sample per probe."""
        async with self._lock:
            start = time.time()
            logger.debug("Starting scrape cycle")

            samples = list(await self._collect_backup())
            samples.append(await self._collect_audit())
            samples.append(await self._collect_sync())

            elapsed = time.time() - start
            self.metrics.scrape_duration.observe(elapsed)
            self.metrics.last_scrape_time.set(time.time())
            logger.debug(f"Scrape cycle completed in {elapsed:.3f}s")

            return tuple(samples)

    async def _guarded(self, probe: str, call: Callable[[], Awaitable[T]]) -> Optional[T]:
        """
        Run one probe with a timeout. Returns None if it failed.

        Failures never propagate: they are counted, logged and left for the
        caller to turn into a sentinel sample.
        """
        timeout = self.config.probe_timeout
        try:
            return await asyncio.wait_for(call(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error(f"Probe {probe} failed: {ProbeTimeout(probe, timeout)}")
        except ProbeError as e:
            logger.error(f"Probe {probe} failed: {e}")
        except Exception as e:
            logger.exception(f"Probe {probe} raised an unexpected error: {e}")

        self.metrics.probe_failures.labels(probe=probe).inc()
        return None

    def _sample(self, probe: str, value: float, label: str) -> Sample:
        metric = self.metric_defs[probe]
        return Sample(metric_name=metric.name, value=float(value), label=label, description=metric.description)

    def _sentinel(self, probe: str, label: str = SENTINEL_LABEL) -> Sample:
        return self._sample(probe, SENTINEL_VALUE, label)

    async def _collect_backup(self) -> Tuple[Sample, Sample]:
        """Backup size and date, both taken from the same directory scan."""

        async def scan() -> BackupEntry:
            return await asyncio.to_thread(
                scan_backups, self.config.backup_dir, self.config.backup_extension
            )

        entry = await self._guarded(BACKUP_SIZE, scan)
        if entry is None:
            # The date probe shares the failed scan
            self.metrics.probe_failures.labels(probe=BACKUP_DATE).inc()
            return self._sentinel(BACKUP_SIZE), self._sentinel(BACKUP_DATE)

        return (
            self._sample(BACKUP_SIZE, entry.size_bytes, entry.name),
            self._sample(BACKUP_DATE, entry.modified_timestamp, entry.name),
        )

    async def _collect_audit(self) -> Sample:
        last_audit = await self._guarded(
            AUDIT_LAG, lambda: probe_audit_lag(self.config.audit_database_url)
        )
        if last_audit is None:
            return self._sentinel(AUDIT_LAG, AUDIT_LABEL)
        return self._sample(AUDIT_LAG, last_audit, AUDIT_LABEL)

    async def _collect_sync(self) -> Sample:
        status: Optional[SyncStatus] = await self._guarded(
            SYNC_ERROR, lambda: probe_sync_error(self.config.sync_database_url)
        )
        if status is None:
            return self._sentinel(SYNC_ERROR)
        return self._sample(SYNC_ERROR, 1.0 if status.errored else 0.0, status.message)
