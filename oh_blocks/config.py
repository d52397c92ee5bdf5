"""Application configuration settings.

This module defines the ``Settings`` class using ``pydantic-settings`` to
load configuration from environment variables. It centralises all
runtime configuration for the application, such as the data file backing
the opening hours provider, the default viewer time zone and the UI
language.

The default data file is the sample document shipped inside the package,
resolved relative to this module so the service starts from any working
directory. The sample holds one fixed week of occurrences (18 to 24
October 2026) and shows every day as closed outside it; point
``OH_DATA_FILE`` at a document produced by your opening hours source.
"""

import os
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_DATA_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data", "opening_hours.json")


class Settings(BaseSettings):
    """Configuration values loaded from environment variables.

    Environment variable names map to fields by alias. Every value has a
    default so the service starts without any environment; point
    ``OH_DATA_FILE`` at a JSON document to serve real opening hours.
    """

    # Opening hours provider
    data_file: str = Field(
        default=DEFAULT_DATA_FILE,
        alias="OH_DATA_FILE",
        description="Path to the JSON document holding entities and their occurrences.",
    )

    # Rendering
    timezone: str = Field(
        default="UTC",
        alias="OH_TIMEZONE",
        description="IANA time zone used when the viewer does not supply one.",
    )
    language: str = Field(
        default="en",
        alias="OH_LANGUAGE",
        description="Language code for UI strings. 'en' uses the source strings.",
    )
    translations_dir: Optional[str] = Field(
        default=None,
        alias="OH_TRANSLATIONS_DIR",
        description="Directory holding '<language>.json' catalogs of translated UI strings.",
    )

    # HTTP
    enable_cors: bool = Field(
        default=False,
        alias="OH_ENABLE_CORS",
        description="Allow cross-origin GET requests to the block endpoints.",
    )

    # Logging
    log_level: str = Field(default="INFO", alias="OH_LOG_LEVEL")

    class Config:
        extra = "ignore"

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
            raise ValueError(f"unknown time zone: {value!r}") from exc
        return value


# Instantiate settings at module import time. This allows other modules to
# import ``settings`` directly without repeatedly reading environment variables.
settings = Settings()
