"""Runtime configuration for the booking worker and client."""

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Settings(BaseSettings):
    """Runtime settings loaded from ``DOGWALK_*`` environment variables."""

    # Temporal
    temporal_address: str = "localhost:7233"
    temporal_namespace: str = "default"
    task_queue: str = "walk-bookings"

    # Payments
    currency: str = "USD"
    gateway_timeout_seconds: float = 10.0
    gateway_latency_seconds: float = 0.5
    gateway_failure_rate: float = 0.0

    # Pricing, smallest currency unit
    base_walk_price_cents: int = 1500
    extra_dog_price_cents: int = 500
    included_minutes: int = 30
    extra_minutes_block: int = 15
    extra_block_price_cents: int = 400

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="DOGWALK_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=(level or get_settings().log_level).upper(), format=LOG_FORMAT)
