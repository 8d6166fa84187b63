"""
Configuration settings for the bandit engine
"""
import logging
import os
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Engine settings"""

    # Policy
    BANDIT_ARMS: int = int(os.getenv("BANDIT_ARMS", "2"))
    BANDIT_EXPLORATION: float = float(os.getenv("BANDIT_EXPLORATION", "2.0"))

    # State backend: "memory" (single owner) or "redis" (shared across engines)
    STATE_BACKEND: str = os.getenv("STATE_BACKEND", "memory")

    # Redis
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", "6379"))
    REDIS_PASSWORD: Optional[str] = os.getenv("REDIS_PASSWORD")
    REDIS_DB: int = int(os.getenv("REDIS_DB", "0"))
    REDIS_KEY_PREFIX: str = os.getenv("REDIS_KEY_PREFIX", "bandit")

    # Upper bound for a single store call, 0 disables
    STORAGE_TIMEOUT_SEC: float = float(os.getenv("STORAGE_TIMEOUT_SEC", "0"))

    # Logging & Monitoring
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    ENABLE_METRICS: bool = os.getenv("ENABLE_METRICS", "true").lower() == "true"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# Global settings instance
settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging from LOG_LEVEL."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def redis_config(config: Optional[Settings] = None) -> dict:
    """Connection kwargs for RedisStateStore taken from settings."""
    config = config or settings
    return {
        "host": config.REDIS_HOST,
        "port": config.REDIS_PORT,
        "password": config.REDIS_PASSWORD,
        "db": config.REDIS_DB,
        "key_prefix": config.REDIS_KEY_PREFIX,
    }
