"""
config.py – Runtime settings, read from MODERATION_* environment variables.
Policy constants (points, tiers, thresholds) live next to the code that uses them.
"""

import os
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MODERATION_")

    storage_backend: str = "memory"  # "memory" or "json"
    data_dir: str = DEFAULT_DATA_DIR
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
