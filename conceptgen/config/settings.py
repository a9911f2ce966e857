"""Application settings using Pydantic."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Source indexing
    source_dir: str = "src"
    source_extensions: list[str] = [".py"]

    # Snippet budget per enrichment call
    snippet_max_files: int = 30
    snippet_max_chars: int = 2000

    # Discovery
    max_discovery_iterations: int = 5

    # Output
    out_dir: str = "docs/domain/concepts"
    viewer_models_dir: Path = Path("viewer/public/models")

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
