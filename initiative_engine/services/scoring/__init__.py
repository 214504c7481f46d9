from .interfaces import (
    ScoreInputs,
    ScoreResult,
    ScoringEngine,
)
from .engines import RiceScoringEngine, rice_score
from .ranking import (
    RankedInitiative,
    score_initiative,
    rank_backlog,
    order_experiments,
)

__all__ = [
    "ScoreInputs",
    "ScoreResult",
    "ScoringEngine",
    "RiceScoringEngine",
    "rice_score",
    "RankedInitiative",
    "score_initiative",
    "rank_backlog",
    "order_experiments",
]
