# product_lifecycle_engine/initiative_engine/jobs/delivery_sweep_job.py

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from initiative_engine.services.lifecycle.owner_policy import PresenceOwnerPolicy
from initiative_engine.services.lifecycle.reconciliation import SweepReport
from initiative_engine.services.lifecycle_service import InitiativeLifecycleService

logger = logging.getLogger(__name__)


def _make_run_id() -> str:
    # Example: sweep_20261018T120102Z_a1b2c3d4
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return f"sweep_{ts}_{uuid.uuid4().hex[:8]}"


def run_delivery_sweep(db: Session, limit: Optional[int] = None) -> SweepReport:
    """Repair paused delivery items in one pass.

    The sweep never promotes, so owner validation is irrelevant here and the
    roster is not loaded.
    """
    service = InitiativeLifecycleService.from_session(db, owner_policy=PresenceOwnerPolicy())
    run_id = _make_run_id()
    logger.info("sweep.job.start", extra={"reason": run_id})
    return service.sweep(limit=limit, run_id=run_id)
