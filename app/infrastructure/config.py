"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # API
    service_name: str = "catalog-core"
    api_version: str = "1.0.0"
    debug: bool = False

    # Database
    database_url: str = "postgresql+asyncpg://catalog:catalog_dev_password@db:5432/catalog"

    # Inventory service
    inventory_service_url: str = "http://inventory-service:8081"
    inventory_timeout_seconds: float = 2.0
    inventory_max_concurrency: int = 8
    inventory_batch_lookup: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = True


settings = Settings()
