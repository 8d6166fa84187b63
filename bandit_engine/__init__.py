"""
Bandit Engine

Multi-armed bandit decision engine with pluggable, optionally shared state.
Uses randomized cold-start exploration followed by UCB1 selection.
"""
from .core.engine import BanditEngine
from .core.errors import (
    BanditEngineError,
    ConfigurationError,
    InvalidArmError,
    InvalidRewardError,
    StorageError,
)
from .models.engine_schemas import ArmStats, EngineConfig, EnginePhase, EngineSnapshot
from .services.state_store import MemoryStateStore, StateStore

__all__ = [
    "BanditEngine",
    "BanditEngineError",
    "ConfigurationError",
    "InvalidArmError",
    "InvalidRewardError",
    "StorageError",
    "ArmStats",
    "EngineConfig",
    "EnginePhase",
    "EngineSnapshot",
    "MemoryStateStore",
    "StateStore",
]
