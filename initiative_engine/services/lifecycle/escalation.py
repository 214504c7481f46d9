# product_lifecycle_engine/initiative_engine/services/lifecycle/escalation.py
"""
Derivation of a delivery feature from a won experiment.

Eligibility: discovery phase, item_type experiment, status completed,
experiment result won. The derived record starts in delivery.design and links
back through parent_id. This is the only code path that sets parent_id.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from initiative_engine.errors import DuplicateEscalationError, ValidationError
from initiative_engine.schemas.initiative import (
    ExperimentResult,
    InitiativeRead,
    ItemType,
    Phase,
    Status,
)
from initiative_engine.services.lifecycle.state_machine import ensure_not_finalized

# Fields carried from the experiment to the derived feature
INHERITED_FIELDS = (
    "title",
    "problem_statement",
    "owner_id",
    "project_id",
    "period_type",
    "period_value",
    "experiment_data",
)


def check_escalation_eligible(experiment: InitiativeRead) -> None:
    ensure_not_finalized(experiment)
    reasons: List[str] = []
    if experiment.item_type != ItemType.EXPERIMENT:
        reasons.append(f"item_type is {experiment.item_type.value}, expected experiment")
    if experiment.phase != Phase.DISCOVERY:
        reasons.append(f"phase is {experiment.phase.value}, expected discovery")
    if experiment.status != Status.COMPLETED:
        reasons.append(f"status is {experiment.status.value}, expected completed")
    result = experiment.experiment.effective_result
    if result != ExperimentResult.WON:
        reasons.append(f"experiment result is {result.value}, expected won")
    if reasons:
        raise ValidationError(
            f"Initiative {experiment.id} cannot be escalated: " + "; ".join(reasons),
            initiative_id=experiment.id,
        )


def ensure_not_escalated(experiment: InitiativeRead, children: Sequence[InitiativeRead]) -> None:
    if children:
        raise DuplicateEscalationError(experiment.id, existing_ids=[c.id for c in children])


def build_feature_fields(experiment: InitiativeRead) -> Dict[str, Any]:
    """Creation fields for the derived feature."""
    fields: Dict[str, Any] = {}
    for name in INHERITED_FIELDS:
        value = getattr(experiment, name)
        if name == "experiment_data" and value is not None:
            value = value.to_storage()
        elif name == "period_type" and value is not None:
            value = value.value
        fields[name] = value
    fields.update(
        {
            "item_type": ItemType.FEATURE.value,
            "phase": Phase.DELIVERY.value,
            "status": Status.DESIGN.value,
            "parent_id": experiment.id,
            "tags": list(experiment.tags),
        }
    )
    return fields


__all__ = [
    "INHERITED_FIELDS",
    "check_escalation_eligible",
    "ensure_not_escalated",
    "build_feature_fields",
]
