"""Application settings, read from ``EVENTCAL_*`` environment variables."""

from __future__ import annotations

import logging

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EVENTCAL_",
        case_sensitive=False,
        extra="ignore",
    )

    app_title: str = Field("Event Calendar Service", description="OpenAPI title")
    log_level: str = Field("INFO", description="Root logging level")
    seed_sample_data: bool = Field(
        True, description="Pre-load the in-memory store with sample events"
    )
    default_color: str = Field("#007bff", description="Color for new events")
    default_category: str = Field("Other", description="Category for new events")


settings = Settings()
log.debug("Settings loaded: seed_sample_data=%s", settings.seed_sample_data)
