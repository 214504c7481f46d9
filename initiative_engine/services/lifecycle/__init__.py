from .state_machine import (
    WORK_PHASES,
    WORK_STATUSES,
    PHASE_STATUSES,
    STATUS_TRANSITIONS,
    ensure_not_finalized,
    is_status_valid_for_phase,
    plan_promotion,
    plan_status_change,
    plan_return_to_backlog,
    plan_finalize,
)
from .escalation import check_escalation_eligible, ensure_not_escalated, build_feature_fields
from .reconciliation import SweepReport, needs_repair, repair_items, sweep_delivery
from .announcement import build_announcement_body, build_announcement_request, extract_first_url
from .owner_policy import OwnerPolicy, PresenceOwnerPolicy, RosterOwnerPolicy, build_owner_policy

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
    "check_escalation_eligible",
    "ensure_not_escalated",
    "build_feature_fields",
    "SweepReport",
    "needs_repair",
    "repair_items",
    "sweep_delivery",
    "build_announcement_body",
    "build_announcement_request",
    "extract_first_url",
    "OwnerPolicy",
    "PresenceOwnerPolicy",
    "RosterOwnerPolicy",
    "build_owner_policy",
]
