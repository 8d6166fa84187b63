"""
State store interface for per-arm statistics, plus the in-memory backend.

A store owns the ArmStats of one logical bandit. Engines only read consistent
snapshots and submit rewards; every mutation is a single atomic
read-modify-write inside the store.
"""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from bandit_engine.models.engine_schemas import ArmStats

logger = logging.getLogger(__name__)


class StateStore(ABC):
    """Asynchronous storage boundary used by BanditEngine."""

    def __init__(self, arms: int):
        self.arms = arms

    @abstractmethod
    async def snapshot(self) -> List[ArmStats]:
        """Return a consistent copy of every arm's statistics."""

    @abstractmethod
    async def record(self, arm: int, reward: float) -> ArmStats:
        """
        Atomically increment the arm's count and fold reward into its
        running average.

        Returns:
            The arm's statistics after the update.
        """

    @abstractmethod
    async def replace(self, stats: Sequence[ArmStats]) -> None:
        """Overwrite the statistics of every arm."""

    async def close(self) -> None:
        """Release any held resources."""


class MemoryStateStore(StateStore):
    """Thread-safe store for engines that exclusively own their state."""

    def __init__(self, arms: int, initial: Optional[Sequence[ArmStats]] = None):
        super().__init__(arms)
        self._lock = threading.Lock()
        if initial is None:
            self._stats = [ArmStats() for _ in range(arms)]
        else:
            self._stats = [st.copy() for st in initial]

    async def snapshot(self) -> List[ArmStats]:
        with self._lock:
            return [st.copy() for st in self._stats]

    async def record(self, arm: int, reward: float) -> ArmStats:
        with self._lock:
            st = self._stats[arm]
            st.count += 1
            # stays finite for any finite rewards
            st.value = st.value + reward / st.count - st.value / st.count
            return st.copy()

    async def replace(self, stats: Sequence[ArmStats]) -> None:
        with self._lock:
            self._stats = [st.copy() for st in stats]
        logger.debug("Memory store replaced with %d arms", len(stats))
