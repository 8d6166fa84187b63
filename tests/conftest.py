"""Shared fixtures for the bandit engine test-suite."""
from __future__ import annotations

import asyncio
import random
from typing import Callable, Dict, List, Optional

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from bandit_engine import BanditEngine, MemoryStateStore
from bandit_engine.models.engine_schemas import ArmStats
from bandit_engine.services.state_store import StateStore


# ---------------------------------------------------------------------------
# In-process stand-ins for the storage collaborator
# ---------------------------------------------------------------------------


class _FakePipeline:
    """Buffers commands and applies them together on execute()."""

    def __init__(self, client: "FakeRedis"):
        self.client = client
        self.commands: List[tuple] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.commands.clear()

    def hgetall(self, key):
        self.commands.append(("hgetall", key))
        return self

    def hincrby(self, key, field, amount=1):
        self.commands.append(("hincrby", key, field, amount))
        return self

    def hincrbyfloat(self, key, field, amount=1.0):
        self.commands.append(("hincrbyfloat", key, field, amount))
        return self

    def hset(self, key, mapping=None):
        self.commands.append(("hset", key, mapping or {}))
        return self

    def delete(self, *keys):
        self.commands.append(("delete", *keys))
        return self

    async def execute(self):
        if self.client.fail:
            raise RedisConnectionError("Connection refused")
        self.client.executed += 1
        results = [self.client.apply(cmd) for cmd in self.commands]
        if self.client.reply_delay:
            await asyncio.sleep(self.client.reply_delay)
        return results


class FakeRedis:
    """Minimal async client holding hashes the way decode_responses=True returns them."""

    def __init__(self):
        self.hashes: Dict[str, Dict[str, str]] = {}
        self.fail = False
        self.closed = False
        self.executed = 0
        self.reply_delay = 0.0  # seconds to wait after applying a transaction

    def pipeline(self, transaction: bool = True) -> _FakePipeline:
        return _FakePipeline(self)

    async def ping(self):
        if self.fail:
            raise RedisConnectionError("Connection refused")
        return True

    async def aclose(self):
        self.closed = True

    def apply(self, cmd):
        op, key = cmd[0], cmd[1]
        if op == "hgetall":
            return dict(self.hashes.get(key, {}))
        if op == "hincrby":
            h = self.hashes.setdefault(key, {})
            h[cmd[2]] = str(int(h.get(cmd[2], "0")) + cmd[3])
            return int(h[cmd[2]])
        if op == "hincrbyfloat":
            h = self.hashes.setdefault(key, {})
            h[cmd[2]] = repr(float(h.get(cmd[2], "0")) + cmd[3])
            return float(h[cmd[2]])
        if op == "hset":
            h = self.hashes.setdefault(key, {})
            h.update({k: str(v) for k, v in cmd[2].items()})
            return len(cmd[2])
        if op == "delete":
            return sum(1 for k in cmd[1:] if self.hashes.pop(k, None) is not None)
        raise AssertionError(f"unexpected command {op}")


class FailingStore(StateStore):
    """Store whose backend is unreachable."""

    def __init__(self, arms: int, exc: Optional[Exception] = None):
        super().__init__(arms)
        self.exc = exc or ConnectionError("backend unreachable")

    async def snapshot(self):
        raise self.exc

    async def record(self, arm, reward):
        raise self.exc

    async def replace(self, stats):
        raise self.exc


class SlowStore(StateStore):
    """Delays every call before delegating to an in-memory store."""

    def __init__(self, arms: int, delay: float):
        super().__init__(arms)
        self.inner = MemoryStateStore(arms)
        self.delay = delay

    async def snapshot(self):
        await asyncio.sleep(self.delay)
        return await self.inner.snapshot()

    async def record(self, arm, reward):
        await asyncio.sleep(self.delay)
        return await self.inner.record(arm, reward)

    async def replace(self, stats):
        await asyncio.sleep(self.delay)
        await self.inner.replace(stats)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def make_engine(rng) -> Callable[..., BanditEngine]:
    """Factory for engines that share the seeded rng."""

    def _make(arms: int, counts=None, values=None, **kwargs) -> BanditEngine:
        config = {"arms": arms}
        if counts is not None:
            config["counts"] = counts
        if values is not None:
            config["values"] = values
        kwargs.setdefault("rng", rng)
        return BanditEngine(config, **kwargs)

    return _make


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


def run_pulls(engine: BanditEngine, trials: int, payout: Callable[[int], float]) -> None:
    """Run sequential select -> reward cycles."""

    async def _run():
        for _ in range(trials):
            arm = await engine.select()
            await engine.reward(arm, payout(arm))

    asyncio.run(_run())


def stats_of(counts, values=None) -> List[ArmStats]:
    values = values or [0.0] * len(counts)
    return [ArmStats(count=c, value=v) for c, v in zip(counts, values)]
