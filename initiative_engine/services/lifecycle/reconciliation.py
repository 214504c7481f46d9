# product_lifecycle_engine/initiative_engine/services/lifecycle/reconciliation.py
"""
Reconciliation sweep for states the delivery board cannot show.

The delivery board has no "paused" lane, so any delivery-phase initiative with
status=paused is rewritten to design. Each repair is an independent,
idempotent single-record write: a failure on one record is logged and recorded
in the report, and the sweep carries on with the rest.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from initiative_engine.errors import ExternalFailure, NotFoundError
from initiative_engine.schemas.initiative import InitiativeFilter, InitiativeRead, Phase, Status
from initiative_engine.services.ports import InitiativeStore

logger = logging.getLogger(__name__)

REPAIR_FROM = Status.PAUSED
REPAIR_STATUS = Status.DESIGN


@dataclass
class SweepReport:
    scanned: int = 0
    repaired: List[int] = field(default_factory=list)
    failed: Dict[int, str] = field(default_factory=dict)

    @property
    def clean(self) -> bool:
        return not self.failed

    def as_dict(self) -> Dict[str, object]:
        return {
            "scanned": self.scanned,
            "repaired": list(self.repaired),
            "failed": {str(k): v for k, v in self.failed.items()},
        }


def needs_repair(initiative: InitiativeRead) -> bool:
    return initiative.phase == Phase.DELIVERY and initiative.status == REPAIR_FROM


def repair_items(
    store: InitiativeStore,
    items: Iterable[InitiativeRead],
    source: Optional[str] = None,
) -> SweepReport:
    """Repair the given (already loaded) records."""
    report = SweepReport()
    for item in items:
        report.scanned += 1
        if not needs_repair(item):
            continue
        patch: Dict[str, object] = {"status": REPAIR_STATUS.value}
        if source:
            patch["updated_source"] = source
        try:
            store.update(item.id, patch)
        except (NotFoundError, ExternalFailure) as e:
            report.failed[item.id] = str(e)
            logger.warning(
                "sweep.repair_failed",
                extra={"initiative_id": item.id, "error": str(e)},
            )
            continue
        report.repaired.append(item.id)
        logger.info(
            "sweep.repaired",
            extra={
                "initiative_id": item.id,
                "from_status": REPAIR_FROM.value,
                "to_status": REPAIR_STATUS.value,
            },
        )

    logger.info(
        "sweep.done",
        extra={
            "scanned": report.scanned,
            "repaired": len(report.repaired),
            "failed": len(report.failed),
        },
    )
    return report


def sweep_delivery(
    store: InitiativeStore,
    source: Optional[str] = None,
    limit: Optional[int] = None,
) -> SweepReport:
    """Repair paused delivery items; `limit` caps how many are repaired in one pass.

    Only paused records are loaded, so a limit can never hide an older paused
    item behind newer healthy ones. Loading errors propagate.
    """
    items = store.list(InitiativeFilter(phase=Phase.DELIVERY, status=REPAIR_FROM, limit=limit))
    return repair_items(store, items, source=source)


__all__ = ["SweepReport", "REPAIR_FROM", "REPAIR_STATUS", "needs_repair", "repair_items", "sweep_delivery"]
