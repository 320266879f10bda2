"""Tests for the scrape collection pipeline."""

import asyncio
from datetime import datetime, timezone
from pathlib import Path

import pytest

from lucypos_exporter.backup.scanner import BackupEntry
from lucypos_exporter.db.probes import SyncStatus
from lucypos_exporter.errors import QueryError
from lucypos_exporter.monitoring import pipeline as pipeline_module
from lucypos_exporter.monitoring.pipeline import ScrapeConfig, ScrapePipeline
from tests.conftest import sqlite_url

METRIC_NAMES = [
    "lucypos_backup_file_size",
    "lucypos_backup_file_date",
    "lucypos_last_audit_timestamp",
    "lucypos_sync_error",
]


def _failures(exporter_metrics, probe: str) -> float:
    value = exporter_metrics.registry.get_sample_value(
        "lucypos_exporter_probe_failures_total", {"probe": probe}
    )
    return value or 0.0


@pytest.fixture
def broken_config(tmp_path: Path) -> ScrapeConfig:
    """Config where every probe fails."""
    return ScrapeConfig(
        backup_dir=tmp_path / "missing",
        audit_database_url=sqlite_url(tmp_path / "nowhere" / "audit.db"),
        sync_database_url=sqlite_url(tmp_path / "nowhere" / "sync.db"),
    )


class TestRunCycle:
    @pytest.mark.asyncio
    async def test_healthy_cycle(self, backup_dir, audit_db, sync_db, exporter_metrics):
        config = ScrapeConfig(backup_dir=backup_dir, audit_database_url=audit_db, sync_database_url=sync_db)
        snapshot = await ScrapePipeline(config, exporter_metrics).run_cycle()

        assert [s.metric_name for s in snapshot] == METRIC_NAMES
        size, date, audit, sync = snapshot
        assert (size.value, size.label) == (2048.0, "lucypos-2024-01-02.tar")
        assert (date.value, date.label) == (1_704_153_600.0, "lucypos-2024-01-02.tar")
        assert audit.label == "audit"
        assert audit.value == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc).timestamp()
        assert (sync.value, sync.label) == (0.0, "")
        assert exporter_metrics.registry.get_sample_value("lucypos_exporter_scrape_duration_seconds_count") == 1

    @pytest.mark.asyncio
    async def test_every_probe_failing_still_yields_four_samples(self, broken_config, exporter_metrics):
        snapshot = await ScrapePipeline(broken_config, exporter_metrics).run_cycle()

        assert [s.metric_name for s in snapshot] == METRIC_NAMES
        assert [s.value for s in snapshot] == [0.0, 0.0, 0.0, 0.0]
        assert [s.label for s in snapshot] == ["n/a", "n/a", "audit", "n/a"]
        for probe in pipeline_module.PROBE_ORDER:
            assert _failures(exporter_metrics, probe) == 1

    @pytest.mark.asyncio
    async def test_early_failure_does_not_stop_later_probes(self, tmp_path, audit_db, sync_db, exporter_metrics):
        config = ScrapeConfig(
            backup_dir=tmp_path / "missing",
            audit_database_url=audit_db,
            sync_database_url=sync_db,
        )
        size, date, audit, sync = await ScrapePipeline(config, exporter_metrics).run_cycle()

        assert size.label == date.label == "n/a"
        assert audit.value > 0
        assert sync.label == ""
        assert _failures(exporter_metrics, "audit_lag") == 0

    @pytest.mark.asyncio
    async def test_custom_namespace(self, broken_config, exporter_metrics):
        config = ScrapeConfig(
            backup_dir=broken_config.backup_dir,
            audit_database_url=broken_config.audit_database_url,
            sync_database_url=broken_config.sync_database_url,
            namespace="store7",
        )
        snapshot = await ScrapePipeline(config, exporter_metrics).run_cycle()
        assert snapshot[0].metric_name == "store7_backup_file_size"

    @pytest.mark.asyncio
    async def test_sync_error_reported_with_message(self, broken_config, exporter_metrics, monkeypatch):
        async def errored(url):
            return SyncStatus(errored=True, message="Duplicate entry")

        monkeypatch.setattr(pipeline_module, "probe_sync_error", errored)
        snapshot = await ScrapePipeline(broken_config, exporter_metrics).run_cycle()

        assert (snapshot[3].value, snapshot[3].label) == (1.0, "Duplicate entry")

    @pytest.mark.asyncio
    async def test_timeout_becomes_sentinel(self, backup_dir, sync_db, exporter_metrics, monkeypatch):
        async def hangs(url):
            await asyncio.sleep(10)

        monkeypatch.setattr(pipeline_module, "probe_audit_lag", hangs)
        config = ScrapeConfig(
            backup_dir=backup_dir,
            audit_database_url="unused",
            sync_database_url=sync_db,
            probe_timeout=0.05,
        )
        size, _, audit, sync = await ScrapePipeline(config, exporter_metrics).run_cycle()

        assert (audit.value, audit.label) == (0.0, "audit")
        assert size.value == 2048.0
        assert sync.label == ""
        assert _failures(exporter_metrics, "audit_lag") == 1

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_sentinel(self, broken_config, exporter_metrics, monkeypatch):
        async def explodes(url):
            raise RuntimeError("driver bug")

        monkeypatch.setattr(pipeline_module, "probe_sync_error", explodes)
        snapshot = await ScrapePipeline(broken_config, exporter_metrics).run_cycle()

        assert snapshot[3].label == "n/a"
        assert len(snapshot) == 4

    @pytest.mark.asyncio
    async def test_lock_released_after_failures(self, broken_config, exporter_metrics):
        pipeline = ScrapePipeline(broken_config, exporter_metrics)
        await pipeline.run_cycle()
        assert not pipeline._lock.locked()
        assert len(await pipeline.run_cycle()) == 4


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_cycles_do_not_interleave(self, tmp_path, exporter_metrics, monkeypatch):
        events = []
        in_flight = 0
        max_in_flight = 0

        def track(name):
            nonlocal in_flight, max_in_flight
            events.append(name)
            in_flight += 1
            max_in_flight = max(max_in_flight, in_flight)

        def scan(directory, extension):
            track("scan")
            in_flight_done()
            return BackupEntry("a.tar", 1, datetime.fromtimestamp(1, tz=timezone.utc))

        def in_flight_done():
            nonlocal in_flight
            in_flight -= 1

        async def audit(url):
            track("audit")
            await asyncio.sleep(0.01)
            in_flight_done()
            return 1.0

        async def sync(url):
            track("sync")
            await asyncio.sleep(0.01)
            in_flight_done()
            raise QueryError("sync schema down")

        monkeypatch.setattr(pipeline_module, "scan_backups", scan)
        monkeypatch.setattr(pipeline_module, "probe_audit_lag", audit)
        monkeypatch.setattr(pipeline_module, "probe_sync_error", sync)

        config = ScrapeConfig(backup_dir=tmp_path, audit_database_url="a", sync_database_url="s")
        pipeline = ScrapePipeline(config, exporter_metrics)

        first, second = await asyncio.gather(pipeline.run_cycle(), pipeline.run_cycle())

        assert events == ["scan", "audit", "sync", "scan", "audit", "sync"]
        assert max_in_flight == 1
        assert first == second
        assert len(first) == 4
