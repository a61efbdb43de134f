"""Application configuration and feature flags."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # API
    app_name: str = "Hybrid-Ops Mind Service"
    debug: bool = False
    log_level: str = "INFO"

    # Heuristics configuration document (hot-reloaded)
    config_path: str = str(PACKAGE_DIR / "configuration" / "heuristics.yaml")
    watch_interval_seconds: float = 1.0

    # Mind artifacts: co-located directory first, legacy directory second
    mind_name: str = "operations_mind"
    minds_dir: str = str(PACKAGE_DIR / "minds")
    legacy_minds_dir: str = "outputs/minds"

    # Sessions
    session_ttl_hours: float = 8.0
    session_sweep_interval_seconds: float = 300.0

    # Axiom validation history
    history_limit: int = 100

    model_config = SettingsConfigDict(
        env_prefix="HYBRIDOPS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
