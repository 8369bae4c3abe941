# backend/config.py
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "PMFBY Crop Health Monitor"
    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    # satellite revisit is ~3 days (259200s); the demo sweeps every 5 minutes
    MONITOR_ENABLED: bool = True
    MONITOR_INTERVAL_SECONDS: float = 300

    SEED_ON_STARTUP: bool = True
    DEFAULT_SIMULATION_DAYS: int = 60
    RANDOM_SEED: Optional[int] = None

    class Config:
        env_file = ".env"


settings = Settings()
