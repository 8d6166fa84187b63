"""
Build the configured state store.
"""
import logging
from typing import Optional

from bandit_engine.config.settings import Settings, redis_config, settings as default_settings
from bandit_engine.core.errors import ConfigurationError
from bandit_engine.services.state_store import MemoryStateStore, StateStore

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("memory", "redis")


def build_state_store(arms: int, config: Optional[Settings] = None) -> StateStore:
    """Return a store for `arms` arms according to STATE_BACKEND."""
    config = config or default_settings
    backend = config.STATE_BACKEND.lower()

    if backend == "memory":
        return MemoryStateStore(arms)
    if backend == "redis":
        from bandit_engine.services.redis_store import RedisStateStore

        logger.info(
            "Using Redis state store at %s:%s (prefix=%s)",
            config.REDIS_HOST, config.REDIS_PORT, config.REDIS_KEY_PREFIX,
        )
        return RedisStateStore(arms, **redis_config(config))

    raise ConfigurationError(
        f"Unsupported STATE_BACKEND {config.STATE_BACKEND!r}; expected one of {SUPPORTED_BACKENDS}"
    )
