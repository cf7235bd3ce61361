"""Application configuration using pydantic settings with structured sections."""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 5001
    reload: bool = False
    # 仅在反向代理之后部署时开启
    trust_proxy: bool = False


class DatabaseSettings(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./catalogue.db", alias="url")
    echo: bool = False
    pool_size: Optional[int] = None
    max_overflow: Optional[int] = None
    busy_timeout_seconds: float = 30.0


class SecuritySettings(BaseModel):
    secret_key: str = Field(default="change-me", min_length=8)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7


class StorageSettings(BaseModel):
    catalogue_dir: Path = Field(default=Path("storage/catalogue"))
    max_upload_bytes: int = 50 * 1024 * 1024
    allowed_mime_types: list[str] = Field(default_factory=lambda: ["application/pdf"])
    chunk_size: int = 64 * 1024


class MailSettings(BaseModel):
    enabled: bool = False
    host: str = "smtp.gmail.com"
    port: int = 465
    fallback_port: int = 587
    username: Optional[str] = None
    password: Optional[str] = None
    sender: str = "no-reply@example.com"
    operator_recipients: list[str] = Field(default_factory=list)
    timeout: float = 30.0
    retries: int = 3
    retry_backoff_seconds: float = 2.0
    subject_prefix: str = "[Catalogue Admin]"


class CatalogueSettings(BaseModel):
    product_map_path: Optional[Path] = None
    dedupe_window_hours: int = 24


class LoggingSettings(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - [%(levelname)s] - %(message)s"


class Settings(BaseSettings):
    """Top-level application settings with nested sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    environment: Literal["development", "staging", "production", "test"] = "development"
    debug: bool = False
    project_name: str = "Catalogue Admin Server"
    api_prefix: str = "/api"

    server: ServerSettings = ServerSettings()
    database: DatabaseSettings = DatabaseSettings()
    security: SecuritySettings = SecuritySettings()
    storage: StorageSettings = StorageSettings()
    mail: MailSettings = MailSettings()
    catalogue: CatalogueSettings = CatalogueSettings()
    logging: LoggingSettings = LoggingSettings()

    frontend_dir: Path = Path("frontend/dist")

    @property
    def database_url(self) -> str:
        return self.database.url

    @property
    def secret_key(self) -> str:
        return self.security.secret_key

    @property
    def algorithm(self) -> str:
        return self.security.algorithm

    @property
    def access_token_expire_minutes(self) -> int:
        return self.security.access_token_expire_minutes

    @property
    def catalogue_storage_dir(self) -> str:
        return str(self.storage.catalogue_dir)

    @property
    def dedupe_window_hours(self) -> int:
        return self.catalogue.dedupe_window_hours


@lru_cache()
def get_settings() -> Settings:
    return Settings()
