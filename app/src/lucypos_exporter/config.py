"""Configuration settings for the LucyPOS exporter."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_prefix="EXPORTER_", extra="ignore")

    # Backup directory
    backup_dir: Path = Path("/data/backups")
    backup_extension: str = ".tar"

    # Database configuration
    db_driver: str = "mysql+aiomysql"
    db_user: str = "exporter"
    db_password: str = ""  # plaintext or crypt:// token
    db_host: str = "127.0.0.1"
    db_port: int = 3306
    audit_schema: str = "lucypos"
    sync_schema: str = "symmetricds"

    # Full URLs take precedence over the discrete fields above
    audit_database_url: str | None = None
    sync_database_url: str | None = None

    # Credential vault
    tenant_id: str = ""
    vault_passphrase: str = ""

    # Scrape configuration
    probe_timeout: float = 5.0
    metrics_namespace: str = "lucypos"
    metrics_path: str = "/metrics"

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 9118

    log_level: str = "INFO"

    def database_url(self, schema: str, password: str) -> str:
        """Build a connection URL for one schema from the discrete credential fields."""
        url = URL.create(
            self.db_driver,
            username=self.db_user,
            password=password or None,
            host=self.db_host,
            port=self.db_port,
            database=schema,
        )
        return url.render_as_string(hide_password=False)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
