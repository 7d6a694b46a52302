"""
Settings
========

Runtime configuration loaded from environment variables (prefix
``SMARTGRID_``) or a local ``.env`` file.
"""

from typing import Dict

from pydantic import Field, PositiveFloat, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class GridSettings(BaseSettings):
    """Controller configuration."""

    # Logging
    log_level: str = "INFO"

    # Fixed length of every maintenance window
    maintenance_window_seconds: PositiveInt = 3600

    # Substations the controller boots with (id -> capacity MW)
    default_substations: Dict[str, PositiveFloat] = Field(
        default_factory=lambda: {"S01": 50.0, "S02": 40.0, "S03": 60.0}
    )

    model_config = SettingsConfigDict(
        env_prefix="SMARTGRID_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = GridSettings()
