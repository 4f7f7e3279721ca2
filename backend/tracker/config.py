"""Application settings, read from the environment and optional .env files."""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

_config_logger = logging.getLogger(__name__)

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)
_DIRECTORY_BACKENDS = frozenset({"database", "http"})
_CACHE_BACKENDS = frozenset({"memory", "redis"})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Project Tracker Query API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    database_url: str = "sqlite:///data/tracker.db"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Task/project directory used by the query pipeline
    directory_backend: str = "database"     # "database" | "http"
    tracker_api_base_url: str = "http://localhost:8020/api/v1"
    tracker_api_timeout: float = 30.0

    # Key-value cache for the entity directory
    cache_backend: str = "memory"           # "memory" | "redis"
    redis_url: str = "redis://localhost:6379/0"
    cache_key_prefix: str = "tracker:"

    # Entity discovery
    entity_cache_ttl_seconds: int = 300
    entity_cache_stale_ttl_seconds: int = 86400
    fuzzy_match_threshold: float = 0.6
    query_debug_mode: bool = False

    # Startup
    seed_demo_data: bool = False

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_sql: str = "WARNING"           # sqlalchemy.engine — SQL queries
    log_level_http: str = "WARNING"          # httpx / httpcore — outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_query: str = "INFO"            # NL query pipeline services

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
    }

    def model_post_init(self, __context: object) -> None:
        """Fall back to the default backends when an unknown one is configured."""
        if self.directory_backend not in _DIRECTORY_BACKENDS:
            _config_logger.warning(
                "Unknown directory_backend %r — falling back to 'database'",
                self.directory_backend,
            )
            object.__setattr__(self, "directory_backend", "database")
        if self.cache_backend not in _CACHE_BACKENDS:
            _config_logger.warning(
                "Unknown cache_backend %r — falling back to 'memory'",
                self.cache_backend,
            )
            object.__setattr__(self, "cache_backend", "memory")


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
