from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # make it absolute so reload/CWD doesn't break it
        env_file=Path(__file__).resolve().parents[1] / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="LocalObjectStore", validation_alias="APP_NAME")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        validation_alias="APP_ENV",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_dir: Path = Field(
        default=Path(__file__).resolve().parents[1] / "logs",
        validation_alias="LOG_DIR",
    )

    # API
    api_host: str = Field(default="127.0.0.1", validation_alias="API_HOST")
    api_port: int = Field(default=8000, validation_alias="API_PORT")

    # Object storage
    local_storage_dir: Path = Field(
        default_factory=lambda: Path.cwd() / "storage",
        validation_alias="LOCAL_STORAGE_DIR",
    )
    public_storage_dir: Path | None = Field(
        default=None,
        validation_alias="PUBLIC_STORAGE_DIR",
        description="Defaults to <LOCAL_STORAGE_DIR>/public when unset.",
    )
    storage_base_url: str = Field(
        default="/storage",
        min_length=1,
        validation_alias="STORAGE_BASE_URL",
    )
    storage_cache_ttl_seconds: int = Field(
        default=3600,
        ge=0,
        validation_alias="STORAGE_CACHE_TTL_SECONDS",
    )
    max_upload_size_bytes: int = Field(
        default=100 * 1024 * 1024,
        gt=0,
        validation_alias="MAX_UPLOAD_SIZE_BYTES",
    )


# Global settings instance
settings = Settings()
