"""
Data models for the bandit engine: construction config, per-arm statistics
and serialized snapshots.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Annotated, List, Optional, Union

from pydantic import AllowInfNan, BaseModel, Field, FiniteFloat, Strict, StrictInt, model_validator

StrictFiniteFloat = Annotated[float, Strict(), AllowInfNan(False)]


class EnginePhase(str, Enum):
    """Selection phase derived from the arm counts"""
    COLD = "cold"   # at least one arm has never been pulled
    WARM = "warm"   # every arm has been pulled at least once


@dataclass
class ArmStats:
    count: int = 0      # completed pulls
    value: float = 0.0  # running average reward

    def copy(self) -> "ArmStats":
        return ArmStats(count=self.count, value=self.value)


class EngineConfig(BaseModel):
    """Construction input for BanditEngine"""
    arms: StrictInt = Field(..., gt=0, description="Number of available arms")
    counts: Optional[List[StrictInt]] = Field(
        default=None, description="Seeded pull counts, one per arm"
    )
    values: Optional[List[Union[StrictInt, StrictFiniteFloat]]] = Field(
        default=None, description="Seeded reward estimates, one per arm"
    )

    @model_validator(mode="after")
    def _check_seeded_state(self) -> "EngineConfig":
        for name in ("counts", "values"):
            seeded = getattr(self, name)
            if seeded is not None and len(seeded) != self.arms:
                raise ValueError(f"{name} must have exactly {self.arms} entries, got {len(seeded)}")
        if self.counts is not None and any(c < 0 for c in self.counts):
            raise ValueError("counts must be non-negative")
        return self

    def initial_stats(self) -> List[ArmStats]:
        counts = self.counts or [0] * self.arms
        values = self.values or [0.0] * self.arms
        return [ArmStats(count=c, value=float(v)) for c, v in zip(counts, values)]


class EngineSnapshot(BaseModel):
    """Serializable dump of the engine state"""
    arms: int = Field(..., gt=0, description="Number of arms")
    counts: List[int] = Field(..., description="Pull count per arm")
    values: List[FiniteFloat] = Field(..., description="Running average reward per arm")

    @model_validator(mode="after")
    def _check_lengths(self) -> "EngineSnapshot":
        if len(self.counts) != self.arms or len(self.values) != self.arms:
            raise ValueError(f"counts and values must have exactly {self.arms} entries")
        return self

    @classmethod
    def from_stats(cls, stats: List[ArmStats]) -> "EngineSnapshot":
        return cls(
            arms=len(stats),
            counts=[s.count for s in stats],
            values=[s.value for s in stats],
        )

    def to_stats(self) -> List[ArmStats]:
        return [ArmStats(count=c, value=v) for c, v in zip(self.counts, self.values)]
