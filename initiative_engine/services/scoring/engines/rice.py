# product_lifecycle_engine/initiative_engine/services/scoring/engines/rice.py

from __future__ import annotations

from initiative_engine.services.scoring.interfaces import ScoreInputs, ScoreResult
from initiative_engine.services.scoring.utils import effective_effort


def rice_score(reach: int, impact: int, confidence: int, effort: int) -> float:
    """(reach * impact * confidence) / max(effort, 1). Total; never raises on ints."""
    return (reach * impact * confidence) / effective_effort(effort)


class RiceScoringEngine:
    """RICE scoring engine.

    RICE formula: (Reach * Impact * Confidence) / Effort
    - All four inputs are expected on a 1-10 scale
    - Effort of 0 is scored as 1
    """

    def compute(self, inputs: ScoreInputs) -> ScoreResult:
        value = float(inputs.reach * inputs.impact * inputs.confidence)
        effort = effective_effort(inputs.effort)

        return ScoreResult(
            value_score=value,
            effort_score=float(effort),
            overall_score=rice_score(inputs.reach, inputs.impact, inputs.confidence, inputs.effort),
            components={
                "reach": inputs.reach,
                "impact": inputs.impact,
                "confidence": inputs.confidence,
                "effort": inputs.effort,
                "effort_used": effort,
            },
        )


__all__ = ["RiceScoringEngine", "rice_score"]
