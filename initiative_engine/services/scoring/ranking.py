# product_lifecycle_engine/initiative_engine/services/scoring/ranking.py
"""
Deterministic orderings over initiatives.

Backlog: RICE score descending, ties broken by title (case-insensitive) then id,
so two recomputations over the same inputs always produce the same order.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timezone
from typing import List, Sequence

from initiative_engine.schemas.initiative import ExperimentResult, InitiativeRead
from initiative_engine.services.scoring.engines.rice import RiceScoringEngine
from initiative_engine.services.scoring.interfaces import ScoreInputs, ScoreResult

_ENGINE = RiceScoringEngine()


@dataclass(frozen=True)
class RankedInitiative:
    rank: int
    score: float
    initiative: InitiativeRead


def score_initiative(initiative: InitiativeRead) -> ScoreResult:
    inputs = ScoreInputs(
        reach=initiative.rice_reach,
        impact=initiative.rice_impact,
        confidence=initiative.rice_confidence,
        effort=initiative.rice_effort,
    )
    return _ENGINE.compute(inputs)


def rank_backlog(items: Sequence[InitiativeRead]) -> List[RankedInitiative]:
    scored = [(score_initiative(i).overall_score, i) for i in items]
    scored.sort(key=lambda pair: (-pair[0], pair[1].title.casefold(), pair[1].id))
    return [
        RankedInitiative(rank=idx + 1, score=score, initiative=item)
        for idx, (score, item) in enumerate(scored)
    ]


_CLOSED_RESULTS = {ExperimentResult.WON, ExperimentResult.LOST}


def _created_ts(initiative: InitiativeRead) -> float:
    created = initiative.created_at
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created.timestamp()


def order_experiments(items: Sequence[InitiativeRead]) -> List[InitiativeRead]:
    """Open experiments first, won/lost last; newest first inside each group."""
    return sorted(
        items,
        key=lambda i: (
            i.experiment.effective_result in _CLOSED_RESULTS,
            -_created_ts(i),
            i.id,
        ),
    )


__all__ = ["RankedInitiative", "score_initiative", "rank_backlog", "order_experiments"]
