"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from lucypos_exporter import __version__
from lucypos_exporter.config import Settings, get_settings
from lucypos_exporter.monitoring import ScrapeConfig, ScrapePipeline, health_router, prometheus_metrics
from lucypos_exporter.vault import reveal_secret

logger = logging.getLogger(__name__)


def build_scrape_config(settings: Settings) -> ScrapeConfig:
    """
    Resolve credentials and build the immutable scrape configuration.

    Raises VaultError if the stored password cannot be decrypted; callers
    must treat that as fatal rather than connect with an empty password.
    """
    audit_url = settings.audit_database_url
    sync_url = settings.sync_database_url

    if audit_url is None or sync_url is None:
        password = reveal_secret(settings.db_password, settings.tenant_id, settings.vault_passphrase)
        audit_url = audit_url or settings.database_url(settings.audit_schema, password)
        sync_url = sync_url or settings.database_url(settings.sync_schema, password)

    return ScrapeConfig(
        backup_dir=settings.backup_dir,
        audit_database_url=audit_url,
        sync_database_url=sync_url,
        backup_extension=settings.backup_extension,
        probe_timeout=settings.probe_timeout,
        namespace=settings.metrics_namespace,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup and shutdown."""
    config = app.state.pipeline.config
    logger.info(
        f"Exporter ready: backup_dir={config.backup_dir}, "
        f"probe_timeout={config.probe_timeout}s"
    )

    yield

    logger.info("Exporter stopped")


def create_app(pipeline: ScrapePipeline | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Without an explicit pipeline one is built from settings, which resolves
    the database password through the vault.
    """
    settings = settings or get_settings()
    if pipeline is None:
        pipeline = ScrapePipeline(build_scrape_config(settings))

    app = FastAPI(
        title="LucyPOS Exporter",
        description="Backup freshness and data synchronization metrics for LucyPOS",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.pipeline = pipeline

    app.include_router(health_router)
    app.add_api_route(
        settings.metrics_path,
        prometheus_metrics,
        methods=["GET"],
        tags=["metrics"],
        include_in_schema=True,
    )

    return app
