"""
Error taxonomy for the bandit engine.

Every error raised by the engine derives from BanditEngineError so callers
can catch the whole family in one place.
"""
from typing import Optional


class BanditEngineError(Exception):
    """Base class for all bandit engine errors."""


class ConfigurationError(BanditEngineError):
    """Invalid construction input (arm count, seeded state, settings)."""


class InvalidArmError(BanditEngineError):
    """Reward reported for an arm index outside [0, arms)."""

    def __init__(self, arm, arms: int):
        super().__init__(f"Invalid arm {arm!r}: expected an integer in [0, {arms})")
        self.arm = arm
        self.arms = arms


class InvalidRewardError(BanditEngineError):
    """Reward value is not a finite real number."""

    def __init__(self, value):
        super().__init__(f"Invalid reward {value!r}: expected a finite number")
        self.value = value


class StorageError(BanditEngineError):
    """Backing state store failed to read or write."""

    def __init__(self, operation: str, message: Optional[str] = None):
        super().__init__(message or f"State store failed during {operation}")
        self.operation = operation
