"""
Multi-armed bandit decision engine.

Callers repeatedly await select(), pull the returned arm, then await
reward(arm, value). Arm statistics live in a StateStore so several engines
can share one logical bandit through a networked backend.
"""
from __future__ import annotations

import asyncio
import logging
import math
import numbers
import random
import time
from typing import Any, List, Mapping, Optional, Union

from pydantic import ValidationError

from bandit_engine.config.settings import Settings, settings as default_settings
from bandit_engine.core import policy
from bandit_engine.core.errors import (
    ConfigurationError,
    InvalidArmError,
    InvalidRewardError,
    StorageError,
)
from bandit_engine.models.engine_schemas import (
    ArmStats,
    EngineConfig,
    EnginePhase,
    EngineSnapshot,
)
from bandit_engine.services import metrics
from bandit_engine.services.state_store import MemoryStateStore, StateStore
from bandit_engine.services.store_factory import build_state_store

logger = logging.getLogger(__name__)


def _parse_config(config: Union[EngineConfig, Mapping[str, Any]]) -> EngineConfig:
    if isinstance(config, EngineConfig):
        return config
    if not isinstance(config, Mapping):
        raise ConfigurationError(f"Engine config must be a mapping, got {type(config).__name__}")
    try:
        return EngineConfig(**config)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid engine config: {exc}") from exc


class BanditEngine:
    """UCB1 bandit with randomized cold-start and tie-breaking."""

    def __init__(
        self,
        config: Union[EngineConfig, Mapping[str, Any]],
        *,
        store: Optional[StateStore] = None,
        rng: Optional[random.Random] = None,
        exploration: Optional[float] = None,
        storage_timeout: Optional[float] = None,
    ):
        self.config = _parse_config(config)
        arms = self.config.arms
        seeded = self.config.counts is not None or self.config.values is not None

        if store is None:
            store = MemoryStateStore(arms, self.config.initial_stats())
        elif store.arms != arms:
            raise ConfigurationError(f"Store holds {store.arms} arms but engine expects {arms}")
        elif seeded:
            raise ConfigurationError("Seed a shared store with load() instead of counts/values")

        if exploration is None:
            exploration = default_settings.BANDIT_EXPLORATION
        if not isinstance(exploration, numbers.Real) or not math.isfinite(exploration) or exploration <= 0:
            raise ConfigurationError(f"exploration must be a positive number, got {exploration!r}")
        if storage_timeout is not None and (
            not isinstance(storage_timeout, numbers.Real) or not math.isfinite(storage_timeout) or storage_timeout < 0
        ):
            raise ConfigurationError(f"storage_timeout must be >= 0, got {storage_timeout!r}")

        self.store = store
        self.rng = rng or random.Random()
        self.exploration = float(exploration)
        self.storage_timeout = storage_timeout or None

        logger.info(
            "Bandit engine ready: arms=%d store=%s exploration=%.3f",
            arms, type(store).__name__, self.exploration,
        )

    @classmethod
    def from_settings(
        cls,
        config: Optional[Settings] = None,
        *,
        rng: Optional[random.Random] = None,
    ) -> "BanditEngine":
        """Build an engine and its store from environment settings."""
        config = config or default_settings
        engine_config = _parse_config({"arms": config.BANDIT_ARMS})
        return cls(
            engine_config,
            store=build_state_store(engine_config.arms, config),
            rng=rng,
            exploration=config.BANDIT_EXPLORATION,
            storage_timeout=config.STORAGE_TIMEOUT_SEC,
        )

    @property
    def arms(self) -> int:
        return self.config.arms

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    async def select(self) -> int:
        """Return the next arm to pull."""
        stats = await self._call_store("snapshot", self.store.snapshot())
        phase = policy.phase_of(stats)
        arm = policy.select_arm(stats, self.rng, self.exploration)
        metrics.record_select(phase.value)
        logger.debug("Selected arm %d (%s)", arm, phase.value)
        return arm

    async def reward(self, arm: int, value: float) -> None:
        """Record the observed reward for a previously selected arm."""
        if isinstance(arm, bool) or not isinstance(arm, numbers.Integral) or not 0 <= arm < self.arms:
            metrics.record_error("invalid_arm")
            logger.warning("Rejected reward for invalid arm %r (arms=%d)", arm, self.arms)
            raise InvalidArmError(arm, self.arms)
        if not isinstance(value, numbers.Real) or not math.isfinite(value):
            metrics.record_error("invalid_reward")
            logger.warning("Rejected non-finite reward %r for arm %d", value, arm)
            raise InvalidRewardError(value)

        updated = await self._call_store("record", self.store.record(int(arm), float(value)))
        metrics.record_reward(int(arm))
        logger.debug("Arm %d rewarded %.4f -> count=%d value=%.4f", arm, value, updated.count, updated.value)

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    async def stats(self) -> List[ArmStats]:
        return await self._call_store("snapshot", self.store.snapshot())

    async def counts(self) -> List[int]:
        return [st.count for st in await self.stats()]

    async def values(self) -> List[float]:
        return [st.value for st in await self.stats()]

    async def phase(self) -> EnginePhase:
        return policy.phase_of(await self.stats())

    async def serialize(self) -> EngineSnapshot:
        """Dump the current state so it can be restored with load()."""
        return EngineSnapshot.from_stats(await self.stats())

    async def load(self, snapshot: Union[EngineSnapshot, Mapping[str, Any]]) -> None:
        """Replace the current state with a previously serialized one."""
        if not isinstance(snapshot, EngineSnapshot):
            try:
                snapshot = EngineSnapshot(**snapshot)
            except ValidationError as exc:
                raise ConfigurationError(f"Invalid engine snapshot: {exc}") from exc
        if snapshot.arms != self.arms:
            raise ConfigurationError(f"Snapshot has {snapshot.arms} arms but engine expects {self.arms}")
        if any(c < 0 for c in snapshot.counts):
            raise ConfigurationError("Snapshot counts must be non-negative")

        await self._call_store("replace", self.store.replace(snapshot.to_stats()))
        logger.info("Engine state loaded (%d pulls)", sum(snapshot.counts))

    async def close(self) -> None:
        await self.store.close()

    # ------------------------------------------------------------------
    # Store access
    # ------------------------------------------------------------------

    async def _call_store(self, operation: str, awaitable):
        started = time.perf_counter()
        try:
            if self.storage_timeout:
                return await asyncio.wait_for(awaitable, self.storage_timeout)
            return await awaitable
        except asyncio.TimeoutError as exc:
            metrics.record_error("storage")
            logger.warning("State store %s timed out after %.3fs", operation, self.storage_timeout)
            raise StorageError(operation, f"State store {operation} timed out") from exc
        except StorageError as exc:
            metrics.record_error("storage")
            logger.warning("State store %s failed: %s", operation, exc)
            raise
        except Exception as exc:
            metrics.record_error("storage")
            logger.warning("State store %s failed: %s", operation, exc)
            raise StorageError(operation, f"State store {operation} failed: {exc}") from exc
        finally:
            metrics.observe_store_call(operation, time.perf_counter() - started)
