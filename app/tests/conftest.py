"""Shared fixtures for exporter tests."""

import os
from datetime import datetime
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import create_async_engine

from lucypos_exporter.config import get_settings
from lucypos_exporter.db.models import AuditEntry, Base, IncomingBatch, OutgoingBatch
from lucypos_exporter.monitoring.metrics import MetricsRegistry

TENANT_ID = "shop-042"
PASSPHRASE = "correct horse battery staple 1234567890"


def make_file(directory: Path, name: str, mtime: float, size: int = 0) -> Path:
    """Create a file of the given size and modification time."""
    path = directory / name
    path.write_bytes(b"\0" * size)
    os.utime(path, (mtime, mtime))
    return path


def sqlite_url(path: Path) -> str:
    return f"sqlite+aiosqlite:///{path}"


async def create_database(path: Path, rows: dict | None = None) -> str:
    """Create a SQLite database with the probed tables and optional rows per model."""
    url = sqlite_url(path)
    engine = create_async_engine(url)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
            for model, values in (rows or {}).items():
                if values:
                    await conn.execute(insert(model), values)
    finally:
        await engine.dispose()
    return url


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Settings are cached per process; tests change the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove exporter env vars that leak between tests."""
    for key in list(os.environ):
        if key.startswith("EXPORTER_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def exporter_metrics() -> MetricsRegistry:
    """A fresh self-metrics registry, isolated from the global one."""
    return MetricsRegistry()


@pytest.fixture
def backup_dir(tmp_path: Path) -> Path:
    """Backup directory holding one archive and newer unrelated files."""
    directory = tmp_path / "backups"
    directory.mkdir()
    make_file(directory, "lucypos-2024-01-01.tar", mtime=1_704_067_200, size=1024)
    make_file(directory, "lucypos-2024-01-02.tar", mtime=1_704_153_600, size=2048)
    make_file(directory, "backup.log", mtime=1_704_160_000, size=10)
    return directory


@pytest_asyncio.fixture
async def audit_db(tmp_path: Path) -> str:
    """Audit database with a few rows, newest at 2024-01-02 03:04:05 UTC."""
    return await create_database(
        tmp_path / "audit.db",
        {
            AuditEntry: [
                {"time": datetime(2024, 1, 1, 12, 0, 0)},
                {"time": datetime(2024, 1, 2, 3, 4, 5)},
                {"time": datetime(2023, 12, 31, 23, 59, 59)},
            ],
        },
    )


@pytest_asyncio.fixture
async def sync_db(tmp_path: Path) -> str:
    """Sync database with only healthy batches."""
    return await create_database(
        tmp_path / "sync.db",
        {
            OutgoingBatch: [
                {"batch_id": 1, "node_id": "store-1", "status": "OK", "error_flag": 0},
                {"batch_id": 2, "node_id": "store-1", "status": "OK", "error_flag": 0},
            ],
            IncomingBatch: [
                {"batch_id": 10, "node_id": "server", "status": "OK", "error_flag": 0},
            ],
        },
    )
