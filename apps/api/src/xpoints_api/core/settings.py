from functools import lru_cache
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="allow")

    environment: Literal["development", "staging", "production"] = "development"
    database_url: str = "sqlite+aiosqlite:///./xpoints.db"
    database_auto_create: bool = True
    tracing_enabled: bool = True

    # Internal API security (rate sync + telemetry); empty disables the check
    admin_api_key: str = ""

    # Valuation
    preview_dollar_value: float = 0.015

    # Published exchange rates
    exchange_rate_sync_on_startup: bool = True
    exchange_rate_sync_worker_enabled: bool = False
    exchange_rate_sync_interval_seconds: int = 24 * 60 * 60

    # Wallet history
    transaction_history_limit: int = 50

    @field_validator("preview_dollar_value")
    @classmethod
    def _require_positive_value(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("preview_dollar_value must be positive")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]


settings = get_settings()
