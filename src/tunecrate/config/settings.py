"""Application settings loaded from environment variables and .env files."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ADMIN_PASSWORD = "dev-admin-password"


class DatabaseSettings(BaseSettings):
    """Relational store connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_", env_file=".env", extra="ignore"
    )

    url: str = Field(
        default="sqlite+aiosqlite:///./data/tunecrate.db",
        description="SQLAlchemy database URL",
    )
    echo: bool = Field(default=False, description="Log every SQL statement")
    ssl: bool = Field(
        default=False, description="Require SSL for PostgreSQL connections"
    )
    pool_size: int = Field(default=5, ge=1)
    max_overflow: int = Field(default=10, ge=0)
    pool_timeout: int = Field(default=30, ge=1)
    pool_recycle: int = Field(default=1800, ge=-1)
    pool_pre_ping: bool = True

    # Hey future me - hosting providers (Render, Supabase, Neon) hand out plain
    # postgres:// URLs. SQLAlchemy's async engine needs the driver in the scheme,
    # so we rewrite them here once instead of at every engine construction.
    @field_validator("url")
    @classmethod
    def normalize_async_driver(cls, value: str) -> str:
        """Rewrite sync URLs to their async driver equivalents."""
        if value.startswith("postgres://"):
            return "postgresql+asyncpg://" + value[len("postgres://") :]
        if value.startswith("postgresql://"):
            return "postgresql+asyncpg://" + value[len("postgresql://") :]
        if value.startswith("sqlite:///"):
            return "sqlite+aiosqlite:///" + value[len("sqlite:///") :]
        return value

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_postgresql(self) -> bool:
        return self.url.startswith("postgresql")


class StorageSettings(BaseSettings):
    """Local upload directory settings."""

    model_config = SettingsConfigDict(
        env_prefix="UPLOADS_", env_file=".env", extra="ignore"
    )

    dir: Path = Field(
        default=Path("./uploads"), description="Staging and local-serving directory"
    )
    default_extension: str = ".mp3"
    default_content_type: str = "audio/mpeg"


class ObjectStorageSettings(BaseSettings):
    """Supabase Storage settings. Both url and service_key are needed to enable it."""

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_", env_file=".env", extra="ignore"
    )

    url: str = ""
    service_key: str = ""
    bucket: str = "music"
    timeout: float = Field(default=60.0, gt=0)

    @property
    def is_configured(self) -> bool:
        return bool(self.url.strip() and self.service_key.strip())

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")


class SecuritySettings(BaseSettings):
    """Admin secret and password hashing settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    admin_password: str = Field(
        default=DEFAULT_ADMIN_PASSWORD, description="Shared secret for mutations"
    )
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    @property
    def uses_default_admin_password(self) -> bool:
        return self.admin_password == DEFAULT_ADMIN_PASSWORD


class ObservabilitySettings(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_", env_file=".env", extra="ignore"
    )

    json_format: bool = False
    request_body: bool = False


class Settings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "tunecrate"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000

    # Listen up, the nested sections read their own env prefixes (DATABASE_*, SUPABASE_*,
    # UPLOADS_*, LOG_*). default_factory makes each section load from env at construction.
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    object_storage: ObjectStorageSettings = Field(default_factory=ObjectStorageSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    def ensure_directories(self) -> None:
        """Create the upload directory and the SQLite parent directory."""
        self.storage.dir.mkdir(parents=True, exist_ok=True)
        db_path = self.sqlite_db_path()
        if db_path is not None and str(db_path.parent) != ".":
            db_path.parent.mkdir(parents=True, exist_ok=True)

    def sqlite_db_path(self) -> Path | None:
        """Return the SQLite file path, or None for in-memory and non-SQLite URLs."""
        if not self.database.is_sqlite:
            return None
        _, _, raw_path = self.database.url.partition(":///")
        if not raw_path or raw_path.startswith(":memory:"):
            return None
        return Path(raw_path.split("?", 1)[0])


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
