from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    tick_interval_sec: float = 1.0
    recipes_file: Optional[str] = None
    log_level: str = "INFO"
    cors_origins: List[str] = ["*"]

    model_config = {
        "env_file": ".env",
        "env_prefix": "COOKCLOCK_",
        "extra": "ignore",
    }

@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()
