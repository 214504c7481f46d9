# product_lifecycle_engine/initiative_engine/utils/provenance.py
from __future__ import annotations

from enum import Enum
from typing import Optional


class Provenance(str, Enum):
    """Canonical provenance tokens stamped on initiative writes."""

    # Creation
    CREATE_BACKLOG = "lifecycle.create_backlog"
    CREATE_IN_PHASE = "lifecycle.create_in_phase"

    # Free-form edits
    EDIT_FIELDS = "edit.fields"
    EDIT_RICE = "edit.rice"
    EDIT_EXPERIMENT = "edit.experiment_data"
    EDIT_PERIOD = "edit.period"
    EDIT_OWNER = "edit.owner"
    EDIT_PROJECT = "edit.project"

    # State machine
    PROMOTE = "lifecycle.promote"
    STATUS_CHANGE = "lifecycle.status_change"
    RETURN_TO_BACKLOG = "lifecycle.return_to_backlog"
    FINALIZE = "lifecycle.finalize"

    # Derivation / repair
    ESCALATE = "lifecycle.escalate"
    SWEEP_DELIVERY = "sweep.delivery_paused"


def token(prov: Provenance, run_id: Optional[str] = None) -> str:
    """Render a provenance token, optionally appending a run identifier."""

    return prov.value if not run_id else f"{prov.value}#{run_id}"


__all__ = ["Provenance", "token"]
