# product_lifecycle_engine/initiative_engine/services/lifecycle/state_machine.py
"""
Lifecycle state machine for product initiatives.

States are (phase, status) pairs:

    backlog.pending
    discovery.{design, running, completed, paused}
    delivery.{design, running, completed, paused}
    finalized                                   (terminal)

Transitions:

1. promote            backlog -> discovery|delivery, status=design
2. status change      any-to-any inside discovery/delivery
3. return to backlog  discovery|delivery -> backlog.pending, window cleared
4. finalize           <work phase>.completed -> finalized

Every `plan_*` function is pure: it validates against the current record and
returns the complete field patch for the transition. The caller writes that
patch in a single store update, so a transition is applied entirely or not at
all. Violations raise ValidationError before anything is written.
"""

from __future__ import annotations

from typing import Any, Dict, FrozenSet, Mapping, Optional, Union

from initiative_engine.errors import ValidationError
from initiative_engine.schemas.initiative import InitiativeRead, PeriodType, Phase, Status
from initiative_engine.schemas.transitions import PromoteRequest
from initiative_engine.services.lifecycle.owner_policy import OwnerPolicy
from initiative_engine.utils.periods import build_period_value, default_window_end

WORK_PHASES: FrozenSet[Phase] = frozenset({Phase.DISCOVERY, Phase.DELIVERY})
WORK_STATUSES: FrozenSet[Status] = frozenset(
    {Status.DESIGN, Status.RUNNING, Status.COMPLETED, Status.PAUSED}
)

PHASE_STATUSES: Mapping[Phase, FrozenSet[Status]] = {
    Phase.BACKLOG: frozenset({Status.PENDING}),
    Phase.DISCOVERY: WORK_STATUSES,
    Phase.DELIVERY: WORK_STATUSES,
    Phase.FINALIZED: frozenset(),
}

# Intra-phase moves are deliberately unordered: every work status may move to
# every other work status (design -> completed, completed -> running, ...).
STATUS_TRANSITIONS: Mapping[Status, FrozenSet[Status]] = {
    s: WORK_STATUSES - {s} for s in WORK_STATUSES
}


def _coerce_phase(value: Union[Phase, str], initiative_id: Optional[int] = None) -> Phase:
    try:
        return Phase(value)
    except ValueError:
        raise ValidationError(f"Unknown phase: {value!r}", initiative_id=initiative_id, field="phase") from None


def _coerce_status(value: Union[Status, str], initiative_id: Optional[int] = None) -> Status:
    try:
        return Status(value)
    except ValueError:
        raise ValidationError(f"Unknown status: {value!r}", initiative_id=initiative_id, field="status") from None


def ensure_not_finalized(initiative: InitiativeRead) -> None:
    """Terminal guard shared by every mutation entry point."""
    if initiative.phase == Phase.FINALIZED:
        raise ValidationError(
            f"Initiative {initiative.id} is finalized and can no longer change",
            initiative_id=initiative.id,
            field="phase",
        )


def is_status_valid_for_phase(phase: Phase, status: Status) -> bool:
    return status in PHASE_STATUSES.get(phase, frozenset())


def plan_promotion(
    initiative: InitiativeRead,
    request: PromoteRequest,
    owner_policy: OwnerPolicy,
    default_period_type: PeriodType = PeriodType.WEEK,
    default_window_days: int = 14,
) -> Dict[str, Any]:
    """Validate backlog -> discovery|delivery and build the patch."""
    ensure_not_finalized(initiative)
    destination = _coerce_phase(request.destination, initiative.id)

    if initiative.phase != Phase.BACKLOG:
        raise ValidationError(
            f"Only backlog items can be promoted (current phase: {initiative.phase.value})",
            initiative_id=initiative.id,
            field="phase",
        )
    if destination not in WORK_PHASES:
        raise ValidationError(
            f"Promotion destination must be discovery or delivery, got {destination.value}",
            initiative_id=initiative.id,
            field="destination",
        )

    owner_id = (request.owner_id or initiative.owner_id or "").strip()
    if not owner_id:
        raise ValidationError(
            "An owner is required before leaving the backlog",
            initiative_id=initiative.id,
            field="owner_id",
        )
    if not owner_policy.is_acceptable(owner_id):
        raise ValidationError(
            f"Owner {owner_id!r} is not a known member",
            initiative_id=initiative.id,
            field="owner_id",
        )

    start = (request.start_date or "").strip()
    end = (request.end_date or "").strip()
    if destination == Phase.DISCOVERY:
        if not start:
            raise ValidationError(
                "Discovery requires a start date",
                initiative_id=initiative.id,
                field="start_date",
            )
        period_value = build_period_value(start, end or default_window_end(start, default_window_days))
    else:
        if not end:
            raise ValidationError(
                "Delivery requires an end (target) date",
                initiative_id=initiative.id,
                field="end_date",
            )
        period_value = end

    period_type = request.period_type or default_period_type
    return {
        "phase": destination.value,
        "status": Status.DESIGN.value,
        "owner_id": owner_id,
        "period_type": PeriodType(period_type).value,
        "period_value": period_value,
    }


def plan_status_change(
    initiative: InitiativeRead,
    target: Union[Status, str],
) -> Optional[Dict[str, Any]]:
    """Validate a move inside discovery/delivery. Returns None for a no-op."""
    ensure_not_finalized(initiative)
    status = _coerce_status(target, initiative.id)

    if initiative.phase not in WORK_PHASES:
        raise ValidationError(
            f"Status changes are only allowed in discovery or delivery (current phase: {initiative.phase.value})",
            initiative_id=initiative.id,
            field="phase",
        )
    if not is_status_valid_for_phase(initiative.phase, status):
        raise ValidationError(
            f"Status {status.value} is not valid in phase {initiative.phase.value}",
            initiative_id=initiative.id,
            field="status",
        )
    if status == initiative.status:
        return None
    # A record in an out-of-vocabulary status (e.g. legacy data) may still move
    # into the vocabulary.
    allowed = STATUS_TRANSITIONS.get(initiative.status, WORK_STATUSES)
    if status not in allowed:
        raise ValidationError(
            f"Transition {initiative.status.value} -> {status.value} is not allowed",
            initiative_id=initiative.id,
            field="status",
        )
    return {"status": status.value}


def plan_return_to_backlog(initiative: InitiativeRead) -> Dict[str, Any]:
    ensure_not_finalized(initiative)
    if initiative.phase not in WORK_PHASES:
        raise ValidationError(
            f"Only discovery or delivery items can return to the backlog (current phase: {initiative.phase.value})",
            initiative_id=initiative.id,
            field="phase",
        )
    return {
        "phase": Phase.BACKLOG.value,
        "status": Status.PENDING.value,
        "period_type": None,
        "period_value": None,
    }


def plan_finalize(initiative: InitiativeRead) -> Dict[str, Any]:
    ensure_not_finalized(initiative)
    if initiative.phase not in WORK_PHASES:
        raise ValidationError(
            f"Only discovery or delivery items can be finalized (current phase: {initiative.phase.value})",
            initiative_id=initiative.id,
            field="phase",
        )
    if initiative.status != Status.COMPLETED:
        raise ValidationError(
            f"Finalize requires status completed (current status: {initiative.status.value})",
            initiative_id=initiative.id,
            field="status",
        )
    return {"phase": Phase.FINALIZED.value}


__all__ = [
    "WORK_PHASES",
    "WORK_STATUSES",
    "PHASE_STATUSES",
    "STATUS_TRANSITIONS",
    "ensure_not_finalized",
    "is_status_valid_for_phase",
    "plan_promotion",
    "plan_status_change",
    "plan_return_to_backlog",
    "plan_finalize",
]
