# product_lifecycle_engine/initiative_engine/services/scoring/interfaces.py

from __future__ import annotations

from typing import Any, Dict, Protocol

from pydantic import BaseModel, Field


class ScoreInputs(BaseModel):
    """Raw RICE inputs as stored on an initiative.

    Range checks ([1, 10]) belong to the caller; the engine scores whatever it
    receives, only guarding the effort denominator.
    """
    reach: int
    impact: int
    confidence: int
    effort: int


class ScoreResult(BaseModel):
    """Result returned by a scoring engine.

    overall_score: the primary prioritization metric (sortable)
    components: raw components used to derive the score (for audit / transparency)
    """
    value_score: float
    effort_score: float
    overall_score: float

    components: Dict[str, Any] = Field(default_factory=dict)


class ScoringEngine(Protocol):
    """Protocol that all scoring engines must satisfy."""

    def compute(self, inputs: ScoreInputs) -> ScoreResult:  # pragma: no cover - interface only
        ...


__all__ = [
    "ScoreInputs",
    "ScoreResult",
    "ScoringEngine",
]
