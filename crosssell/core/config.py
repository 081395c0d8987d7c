"""Application configuration."""

import os
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qs, urlencode

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from crosssell.services.scoring.configs.scoring import DEFAULT_BLEND_WEIGHT, DEFAULT_MIN_BASE_SCORE
from crosssell.utils.logging import get_logger

LOGGER = get_logger(__name__)


def find_env_file() -> Optional[Path]:
    """Find .env file in the package directory, its parent or the repo root."""
    current_dir = os.path.dirname(os.path.abspath(__file__))

    possible_paths = [
        os.path.join(current_dir, ".env"),
        os.path.join(os.path.dirname(current_dir), ".env"),
        os.path.join(os.path.dirname(os.path.dirname(current_dir)), ".env"),
    ]

    for path_str in possible_paths:
        if os.path.exists(path_str):
            path = Path(path_str)
            LOGGER.info(f"Found .env file at: {path}")
            return path

    LOGGER.debug("No .env file found in expected locations")
    return None


ENV_FILE = find_env_file()


class DatabaseSettings(BaseSettings):
    """Database connection and pool settings."""
    url: str = Field(default="sqlite+aiosqlite:///./crosssell.db", validation_alias="DATABASE_URL")
    pool_size: int = Field(default=10, validation_alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(default=20, validation_alias="DATABASE_MAX_OVERFLOW")
    echo: bool = Field(default=False, validation_alias="DATABASE_ECHO")
    insert_batch_size: int = Field(default=100, validation_alias="DATABASE_INSERT_BATCH_SIZE")

    @property
    def connection_url(self) -> str:
        """Get the connection URL with an async driver prefix."""
        raw_url = self.url
        if not raw_url:
            return ""

        if raw_url.startswith("postgres://") or raw_url.startswith("postgresql://"):
            _, rest = raw_url.split("://", 1)

            if "?" in rest:
                path, query = rest.split("?", 1)
                params = parse_qs(query)

                # asyncpg understands "ssl", not libpq's "sslmode"
                if "sslmode" in params:
                    params["ssl"] = params.pop("sslmode")

                rest = f"{path}?{urlencode(params, doseq=True)}"

            return f"postgresql+asyncpg://{rest}"

        return raw_url

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="",
    )


class ScoringSettings(BaseSettings):
    """Defaults applied when a caller does not pass scoring options."""
    use_lead_scoring: bool = Field(default=False, validation_alias="SCORING_USE_LEAD_SCORING")
    blend_weight: float = Field(default=DEFAULT_BLEND_WEIGHT, ge=0.0, le=1.0, validation_alias="SCORING_BLEND_WEIGHT")
    min_base_score_for_enhancement: int = Field(
        default=DEFAULT_MIN_BASE_SCORE, validation_alias="SCORING_MIN_BASE_SCORE_FOR_ENHANCEMENT"
    )
    default_limit: int = Field(default=50, validation_alias="SCORING_DEFAULT_LIMIT")
    max_batch_size: int = Field(default=1000, validation_alias="SCORING_MAX_BATCH_SIZE")
    fuzzy_name_threshold: float = Field(default=90.0, validation_alias="CUSTOMER_MATCH_FUZZY_THRESHOLD")

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="",
    )


class Settings(BaseSettings):
    """Unified application settings with nested models."""

    # Application Settings
    app_name: str = Field(default="Agency Cross-Sell Scoring", validation_alias="APP_NAME")
    app_version: str = "0.1.0"
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    debug: bool = Field(default=True, validation_alias="DEBUG")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        validation_alias="CORS_ORIGINS"
    )

    # API Settings
    api_v1_prefix: str = "/api/v1"
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=8000, validation_alias="PORT")
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, validation_alias="MAX_UPLOAD_BYTES")

    # Nested Settings
    db: DatabaseSettings = Field(default_factory=lambda: DatabaseSettings())
    scoring: ScoringSettings = Field(default_factory=lambda: ScoringSettings())

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def database_url(self) -> str:
        return self.db.connection_url

    @property
    def database_pool_size(self) -> int:
        return self.db.pool_size

    @property
    def database_max_overflow(self) -> int:
        return self.db.max_overflow

    @property
    def database_echo(self) -> bool:
        return self.db.echo

    @property
    def insert_batch_size(self) -> int:
        return self.db.insert_batch_size


# Initialize settings
settings = Settings()

LOGGER.info(f"Settings initialized with environment: {settings.environment}")
LOGGER.info(
    f"Scoring defaults: lead_scoring={settings.scoring.use_lead_scoring}, "
    f"blend_weight={settings.scoring.blend_weight}"
)
