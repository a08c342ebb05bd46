from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Pivot Workflow Engine"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    json_logs: bool = True

    # Decision record store
    redis_url: str = "redis://localhost:6379"
    redis_key_prefix: str = "pivot"  # env: REDIS_KEY_PREFIX

    # Autosave quiet period before the latest snapshot is written
    autosave_debounce_seconds: float = 1.0  # env: AUTOSAVE_DEBOUNCE_SECONDS

    # Starting value for the founder's overall confidence slider
    default_confidence_level: int = 50


@lru_cache
def get_settings() -> Settings:
    return Settings()
