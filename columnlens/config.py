"""ColumnLens configuration loaded from environment variables."""
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Server and analyzer settings.

    All values can be overridden via environment variables prefixed with
    ``COLUMNLENS_`` (e.g. ``COLUMNLENS_PORT=9000``) or through a ``.env`` file
    in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="COLUMNLENS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False
    log_level: str = "info"

    # Print analyzer traces to stderr.
    debug_logging: bool = False

    # Remove SQL comments before analyzing a query.
    strip_comments: bool = True

    # Origins permitted by the CORS middleware.
    cors_origins: List[str] = ["*"]


@lru_cache
def get_settings() -> Settings:
    return Settings()
