"""Configuration management for the context store."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.domain.exceptions import InvalidConfigurationError
from ..core.domain.utils import normalize_collection_name


def _sanitize_secret(value: str) -> str:
    """Remove BOM characters and whitespace from secrets.

    Secrets copied from cloud consoles or .env files may carry BOM
    characters that break HTTP headers.
    """
    if not value:
        return value
    return value.lstrip("\ufeff").strip()


class StoreSettings(BaseSettings):
    """Store settings loaded from environment variables.

    Instances are immutable; build one at startup and pass it to the store.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Qdrant connection
    qdrant_host: str = "localhost"
    qdrant_port: int = 6333
    qdrant_grpc_port: int = 6334
    qdrant_prefer_grpc: bool = False
    qdrant_https: bool = False
    qdrant_api_key: str = ""

    # ":memory:" or a directory path selects the in-process backend
    qdrant_location: str | None = None

    # Prefix for every physical collection and the catalog
    qdrant_namespace: str = "embeddings"

    # Query defaults
    search_top_k: int = 10
    query_limit: int = 100

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    @field_validator("qdrant_api_key", "qdrant_host", mode="after")
    @classmethod
    def sanitize_secrets(cls, value: str) -> str:
        """Remove BOM and whitespace from secret values."""
        return _sanitize_secret(value)

    @field_validator("qdrant_port", "qdrant_grpc_port", mode="after")
    @classmethod
    def validate_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise InvalidConfigurationError(f"Invalid port: {value}", context={"port": value})
        return value

    @field_validator("qdrant_namespace", mode="after")
    @classmethod
    def normalize_namespace(cls, value: str) -> str:
        return normalize_collection_name(value)

    @field_validator("search_top_k", "query_limit", mode="after")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise InvalidConfigurationError(f"Limit must be positive, got {value}")
        return value

    @property
    def in_process(self) -> bool:
        """True when the backend runs inside this process."""
        return bool(self.qdrant_location)

    @property
    def qdrant_url(self) -> str:
        scheme = "https" if self.qdrant_https else "http"
        return f"{scheme}://{self.qdrant_host}:{self.qdrant_port}"


@lru_cache
def get_settings() -> StoreSettings:
    """Build the settings once per process."""
    return StoreSettings()
