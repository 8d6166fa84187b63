"""
Selection policy: cold-start exploration followed by UCB1.

The functions here are pure over a snapshot of arm statistics so the engine
can apply them to state read from any store.
"""
from __future__ import annotations

import math
from typing import List, Sequence

from bandit_engine.models.engine_schemas import ArmStats, EnginePhase

# Scores closer than this are treated as tied
TIE_TOLERANCE = 1e-12


def empty_arms(stats: Sequence[ArmStats]) -> List[int]:
    """Indices of arms that have never been pulled."""
    return [idx for idx, st in enumerate(stats) if st.count == 0]


def phase_of(stats: Sequence[ArmStats]) -> EnginePhase:
    return EnginePhase.COLD if empty_arms(stats) else EnginePhase.WARM


def ucb_scores(stats: Sequence[ArmStats], exploration: float = 2.0) -> List[float]:
    """
    UCB1 score per arm: value + sqrt(exploration * ln(total) / count).

    Only meaningful once every arm has count >= 1.
    """
    total = sum(st.count for st in stats)
    log_total = math.log(max(total, 1))
    return [
        st.value + math.sqrt(exploration * log_total / st.count)
        for st in stats
    ]


def select_arm(stats: Sequence[ArmStats], rng, exploration: float = 2.0) -> int:
    """Pick the next arm to pull; ties are broken uniformly with rng."""
    empty = empty_arms(stats)
    if len(empty) == 1:
        return empty[0]
    if empty:
        return rng.choice(empty)

    scores = ucb_scores(stats, exploration)
    best = max(scores)
    leaders = [
        idx for idx, score in enumerate(scores)
        if score == best or score >= best - TIE_TOLERANCE
    ]
    if not leaders:
        # no comparable maximum (NaN scores)
        leaders = list(range(len(scores)))
    if len(leaders) == 1:
        return leaders[0]
    return rng.choice(leaders)
