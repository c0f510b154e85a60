from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API Keys
    anthropic_api_key: str = ""  # Empty means reports come from the mock generator

    # Report generation
    llm_model: str = "claude-sonnet-4-20250514"
    llm_max_tokens: int = 8192
    force_mock_reports: bool = False

    # Scorecard engine
    coverage_epsilon_seconds: float = 0.05
    leveling_role: str = "Software Engineer"

    # Local review cache
    review_cache_path: str = ".cache/review_cache.json"

    # App config
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
