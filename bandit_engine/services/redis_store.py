"""
Redis-backed state store shared by every engine using the same key prefix.

Layout (hash field = arm index):
    {prefix}:counts  pull count per arm   (HINCRBY)
    {prefix}:totals  reward sum per arm   (HINCRBYFLOAT)

The running average is derived as total / count on read, so a reward is a
pair of increments committed together in one MULTI/EXEC transaction.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

import redis.asyncio as redis
from redis.exceptions import RedisError

from bandit_engine.core.errors import StorageError
from bandit_engine.models.engine_schemas import ArmStats
from bandit_engine.services.state_store import StateStore

logger = logging.getLogger(__name__)


def _as_text(raw) -> str:
    return raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)


def _decode_hash(raw: Optional[Dict]) -> Dict[str, str]:
    return {_as_text(k): _as_text(v) for k, v in (raw or {}).items()}


class RedisStateStore(StateStore):
    """Shared arm statistics stored in two Redis hashes."""

    def __init__(
        self,
        arms: int,
        client: Optional[redis.Redis] = None,
        *,
        key_prefix: str = "bandit",
        host: str = "localhost",
        port: int = 6379,
        password: Optional[str] = None,
        db: int = 0,
    ):
        super().__init__(arms)
        self.client = client or redis.Redis(
            host=host,
            port=port,
            password=password or None,
            db=db,
            decode_responses=True,
        )
        self.key_prefix = key_prefix
        self.counts_key = f"{key_prefix}:counts"
        self.totals_key = f"{key_prefix}:totals"

    async def ping(self) -> bool:
        try:
            await self.client.ping()
        except RedisError as exc:
            logger.error("Redis connection error: %s", exc)
            raise StorageError("ping", f"Redis unreachable: {exc}") from exc
        logger.info("Connected to Redis (prefix=%s)", self.key_prefix)
        return True

    async def snapshot(self) -> List[ArmStats]:
        try:
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.hgetall(self.counts_key)
                pipe.hgetall(self.totals_key)
                counts_raw, totals_raw = await pipe.execute()
        except RedisError as exc:
            raise StorageError("snapshot", f"Failed to read arm statistics: {exc}") from exc

        counts = _decode_hash(counts_raw)
        totals = _decode_hash(totals_raw)
        return [self._stats_for(arm, counts, totals) for arm in range(self.arms)]

    async def record(self, arm: int, reward: float) -> ArmStats:
        """
        Add one pull and its reward in a single MULTI/EXEC.

        A caller-side timeout that fires after EXEC has run does not roll the
        reward back: the caller sees StorageError while the pull is already
        counted.
        """
        field = str(arm)
        try:
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.hincrby(self.counts_key, field, 1)
                pipe.hincrbyfloat(self.totals_key, field, float(reward))
                count, total = await pipe.execute()
        except RedisError as exc:
            raise StorageError("record", f"Failed to record reward for arm {arm}: {exc}") from exc

        count = int(count)
        return ArmStats(count=count, value=float(total) / count)

    async def replace(self, stats: Sequence[ArmStats]) -> None:
        counts = {str(arm): st.count for arm, st in enumerate(stats)}
        # value is only recoverable from the total once the arm has been pulled
        totals = {str(arm): repr(st.value * st.count) for arm, st in enumerate(stats)}
        try:
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.delete(self.counts_key, self.totals_key)
                pipe.hset(self.counts_key, mapping=counts)
                pipe.hset(self.totals_key, mapping=totals)
                await pipe.execute()
        except RedisError as exc:
            raise StorageError("replace", f"Failed to overwrite arm statistics: {exc}") from exc

    async def close(self) -> None:
        await self.client.aclose()

    @staticmethod
    def _stats_for(arm: int, counts: Dict[str, str], totals: Dict[str, str]) -> ArmStats:
        field = str(arm)
        count = int(counts.get(field, 0))
        if count <= 0:
            return ArmStats()
        return ArmStats(count=count, value=float(totals.get(field, 0.0)) / count)
