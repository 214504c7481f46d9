# product_lifecycle_engine/initiative_engine/services/lifecycle_service.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from initiative_engine.config import settings
from initiative_engine.errors import (
    DuplicateEscalationError,
    LifecycleError,
    UniqueConstraintViolation,
    ValidationError,
)
from initiative_engine.schemas.announcement import AnnouncementRecord
from initiative_engine.schemas.initiative import (
    RICE_MAX,
    RICE_MIN,
    ExperimentData,
    InitiativeCreate,
    InitiativeFilter,
    InitiativeRead,
    InitiativeUpdate,
    ItemType,
    PeriodType,
    Phase,
    Status,
)
from initiative_engine.schemas.transitions import FinalizeRequest, PeriodUpdate, PromoteRequest, RiceUpdate
from initiative_engine.services.announcement_persistence import SqlAnnouncementSink
from initiative_engine.services.initiative_persistence import SqlInitiativeStore
from initiative_engine.services.lifecycle.announcement import build_announcement_request
from initiative_engine.services.lifecycle.escalation import (
    build_feature_fields,
    check_escalation_eligible,
    ensure_not_escalated,
)
from initiative_engine.services.lifecycle.owner_policy import OwnerPolicy, build_owner_policy
from initiative_engine.services.lifecycle.reconciliation import SweepReport, repair_items, sweep_delivery
from initiative_engine.services.lifecycle.state_machine import (
    WORK_PHASES,
    ensure_not_finalized,
    plan_finalize,
    plan_promotion,
    plan_return_to_backlog,
    plan_status_change,
)
from initiative_engine.services.member_roster import SqlMemberRoster
from initiative_engine.services.ports import AnnouncementSink, InitiativeStore
from initiative_engine.services.scoring.ranking import RankedInitiative, order_experiments, rank_backlog
from initiative_engine.utils.periods import build_period_value, parse_period_value, target_date
from initiative_engine.utils.provenance import Provenance, token

logger = logging.getLogger(__name__)

RICE_FIELDS = {
    "reach": "rice_reach",
    "impact": "rice_impact",
    "confidence": "rice_confidence",
    "effort": "rice_effort",
}

# Item type used when an initiative is created directly inside a work phase
IN_PHASE_ITEM_TYPES = {
    Phase.DISCOVERY: ItemType.EXPERIMENT,
    Phase.DELIVERY: ItemType.FEATURE,
}


@dataclass(frozen=True)
class FinalizeOutcome:
    initiative: InitiativeRead
    announcement: AnnouncementRecord


class InitiativeLifecycleService:
    """
    Entry point for every initiative mutation.

    Responsibilities:
    - Validate requests against the current record (pure planners in services/lifecycle)
    - Write each transition as a single store update
    - Emit the finalize announcement
    - Derive features from won experiments
    - Repair delivery items the board cannot show
    """

    def __init__(
        self,
        store: InitiativeStore,
        announcer: AnnouncementSink,
        owner_policy: OwnerPolicy,
        default_period_type: Optional[str] = None,
        default_window_days: Optional[int] = None,
        announcement_category: Optional[str] = None,
        announcement_source: Optional[str] = None,
        sweep_on_board_load: Optional[bool] = None,
    ) -> None:
        self.store = store
        self.announcer = announcer
        self.owner_policy = owner_policy
        self.default_period_type = PeriodType(default_period_type or settings.LIFECYCLE_DEFAULT_PERIOD_TYPE)
        self.default_window_days = (
            settings.LIFECYCLE_DEFAULT_WINDOW_DAYS if default_window_days is None else default_window_days
        )
        self.announcement_category = announcement_category or settings.ANNOUNCEMENT.category
        self.announcement_source = announcement_source or settings.ANNOUNCEMENT.source
        self.sweep_on_board_load = settings.SWEEP_ON_BOARD_LOAD if sweep_on_board_load is None else sweep_on_board_load

    @classmethod
    def from_session(cls, db: Session, owner_policy: Optional[OwnerPolicy] = None) -> "InitiativeLifecycleService":
        """Wire the SQL-backed collaborators for one session."""
        policy = owner_policy or build_owner_policy(settings.LIFECYCLE_OWNER_POLICY, SqlMemberRoster(db))
        return cls(
            store=SqlInitiativeStore(db),
            announcer=SqlAnnouncementSink(db, commit=False),
            owner_policy=policy,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, initiative_id: int) -> InitiativeRead:
        return self.store.get(initiative_id)

    def list_phase(self, phase: Phase) -> List[InitiativeRead]:
        return self.store.list(InitiativeFilter(phase=phase))

    def rank_backlog(self) -> List[RankedInitiative]:
        return rank_backlog(self.list_phase(Phase.BACKLOG))

    def list_experiments(self) -> List[InitiativeRead]:
        return order_experiments(self.list_phase(Phase.DISCOVERY))

    def load_delivery_board(self) -> Tuple[List[InitiativeRead], Optional[SweepReport]]:
        """Delivery items, repaired first when SWEEP_ON_BOARD_LOAD is on."""
        items = self.list_phase(Phase.DELIVERY)
        if not self.sweep_on_board_load:
            return items, None
        report = repair_items(self.store, items, source=token(Provenance.SWEEP_DELIVERY))
        if report.repaired:
            items = self.list_phase(Phase.DELIVERY)
        return items, report

    # ------------------------------------------------------------------
    # Creation / deletion
    # ------------------------------------------------------------------

    def create(self, data: Union[InitiativeCreate, Mapping[str, Any]]) -> InitiativeRead:
        """Quick create: new ideas always enter as backlog.pending."""
        if not isinstance(data, InitiativeCreate):
            try:
                data = InitiativeCreate.model_validate(dict(data))
            except PydanticValidationError as e:
                first = e.errors()[0]
                loc = first.get("loc") or ()
                raise ValidationError(
                    f"Invalid initiative: {first.get('msg', e)}",
                    field=str(loc[0]) if loc else None,
                ) from e
        fields = data.model_dump(mode="json")
        if data.experiment_data is not None:
            fields["experiment_data"] = data.experiment_data.to_storage()
        if not fields.get("tags") and settings.LIFECYCLE_DEFAULT_TAGS:
            fields["tags"] = list(settings.LIFECYCLE_DEFAULT_TAGS)
        fields.update(
            {
                "phase": Phase.BACKLOG.value,
                "status": Status.PENDING.value,
                "updated_source": token(Provenance.CREATE_BACKLOG),
            }
        )
        created = self.store.create(fields)
        logger.info(
            "lifecycle.create.done",
            extra={"initiative_id": created.id, "phase": created.phase.value, "status": created.status.value},
        )
        return created

    def create_in_phase(
        self,
        title: str,
        phase: Union[Phase, str],
        owner_id: Optional[str] = None,
        item_type: Optional[ItemType] = None,
    ) -> InitiativeRead:
        """In-context creation on a discovery/delivery board, status design."""
        try:
            target = Phase(phase)
        except ValueError:
            raise ValidationError(f"Unknown phase: {phase!r}", field="phase") from None
        if target not in WORK_PHASES:
            raise ValidationError(
                f"In-phase creation is only possible in discovery or delivery, got {target.value}",
                field="phase",
            )
        title = (title or "").strip()
        if not title:
            raise ValidationError("title must not be empty", field="title")

        created = self.store.create(
            {
                "title": title,
                "item_type": (item_type or IN_PHASE_ITEM_TYPES[target]).value,
                "phase": target.value,
                "status": Status.DESIGN.value,
                "owner_id": owner_id,
                "tags": list(settings.LIFECYCLE_DEFAULT_TAGS),
                "updated_source": token(Provenance.CREATE_IN_PHASE),
            }
        )
        logger.info(
            "lifecycle.create_in_phase.done",
            extra={"initiative_id": created.id, "phase": target.value, "status": Status.DESIGN.value},
        )
        return created

    def delete(self, initiative_id: int) -> None:
        self.store.delete(initiative_id)
        logger.info("lifecycle.delete.done", extra={"initiative_id": initiative_id})

    # ------------------------------------------------------------------
    # Free-form edits (never touch phase/status/parent_id)
    # ------------------------------------------------------------------

    def _mutable(self, initiative_id: int) -> InitiativeRead:
        initiative = self.store.get(initiative_id)
        ensure_not_finalized(initiative)
        return initiative

    def update_fields(self, initiative_id: int, data: InitiativeUpdate) -> InitiativeRead:
        self._mutable(initiative_id)
        patch = data.model_dump(exclude_unset=True, mode="json")
        if not patch:
            return self.store.get(initiative_id)
        if "title" in patch:
            title = (patch["title"] or "").strip()
            if not title:
                raise ValidationError("title must not be empty", initiative_id=initiative_id, field="title")
            patch["title"] = title
        if "experiment_data" in patch and data.experiment_data is not None:
            patch["experiment_data"] = data.experiment_data.to_storage()
        if "tags" in patch and patch["tags"] is None:
            patch["tags"] = []
        patch["updated_source"] = token(Provenance.EDIT_FIELDS)
        return self.store.update(initiative_id, patch)

    def update_rice(self, initiative_id: int, data: RiceUpdate) -> InitiativeRead:
        self._mutable(initiative_id)
        patch: Dict[str, Any] = {}
        for name, column in RICE_FIELDS.items():
            value = getattr(data, name)
            if value is None:
                continue
            if isinstance(value, bool) or not (RICE_MIN <= value <= RICE_MAX):
                raise ValidationError(
                    f"{name} must be an integer between {RICE_MIN} and {RICE_MAX}, got {value!r}",
                    initiative_id=initiative_id,
                    field=column,
                )
            patch[column] = value
        if not patch:
            return self.store.get(initiative_id)
        patch["updated_source"] = token(Provenance.EDIT_RICE)
        return self.store.update(initiative_id, patch)

    def update_experiment_data(self, initiative_id: int, changes: Mapping[str, Any]) -> InitiativeRead:
        """Merge `changes` into the stored experiment record."""
        initiative = self._mutable(initiative_id)
        merged = {**initiative.experiment.to_storage(), **dict(changes)}
        try:
            experiment = ExperimentData.model_validate(merged)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid experiment data: {e.errors()[0].get('msg', e)}",
                initiative_id=initiative_id,
                field="experiment_data",
            ) from e
        return self.store.update(
            initiative_id,
            {"experiment_data": experiment.to_storage(), "updated_source": token(Provenance.EDIT_EXPERIMENT)},
        )

    def update_period(self, initiative_id: int, data: PeriodUpdate) -> InitiativeRead:
        """Edit the scheduling window of a discovery/delivery item."""
        initiative = self._mutable(initiative_id)
        if initiative.phase not in WORK_PHASES:
            raise ValidationError(
                "Only discovery or delivery items carry a scheduling window",
                initiative_id=initiative_id,
                field="period_value",
            )
        if initiative.phase == Phase.DISCOVERY:
            current = parse_period_value(initiative.period_value)
            start = data.start_date if data.start_date is not None else current.start
            end = data.end_date if data.end_date is not None else (current.end if current.has_end else "")
            if not (start or "").strip():
                raise ValidationError(
                    "Discovery requires a start date", initiative_id=initiative_id, field="start_date"
                )
            period_value = build_period_value(start, end)
        else:
            end = data.end_date if data.end_date is not None else target_date(initiative.period_value)
            if not (end or "").strip():
                raise ValidationError(
                    "Delivery requires an end (target) date", initiative_id=initiative_id, field="end_date"
                )
            period_value = end.strip()

        period_type = data.period_type or initiative.period_type or self.default_period_type
        return self.store.update(
            initiative_id,
            {
                "period_type": PeriodType(period_type).value,
                "period_value": period_value,
                "updated_source": token(Provenance.EDIT_PERIOD),
            },
        )

    def assign_owner(self, initiative_id: int, owner_id: Optional[str]) -> InitiativeRead:
        self._mutable(initiative_id)
        owner_id = (owner_id or "").strip() or None
        if owner_id is not None and not self.owner_policy.is_acceptable(owner_id):
            raise ValidationError(
                f"Owner {owner_id!r} is not a known member", initiative_id=initiative_id, field="owner_id"
            )
        return self.store.update(
            initiative_id, {"owner_id": owner_id, "updated_source": token(Provenance.EDIT_OWNER)}
        )

    def link_project(self, initiative_id: int, project_id: Optional[int]) -> InitiativeRead:
        self._mutable(initiative_id)
        return self.store.update(
            initiative_id, {"project_id": project_id, "updated_source": token(Provenance.EDIT_PROJECT)}
        )

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    def promote(self, initiative_id: int, request: PromoteRequest) -> InitiativeRead:
        initiative = self.store.get(initiative_id)
        try:
            patch = plan_promotion(
                initiative,
                request,
                self.owner_policy,
                default_period_type=self.default_period_type,
                default_window_days=self.default_window_days,
            )
        except ValidationError as e:
            logger.info("lifecycle.promote.rejected", extra={"initiative_id": initiative_id, "reason": str(e)})
            raise
        patch["updated_source"] = token(Provenance.PROMOTE)
        updated = self.store.update(initiative_id, patch)
        logger.info(
            "lifecycle.promote.done",
            extra={
                "initiative_id": initiative_id,
                "from_phase": initiative.phase.value,
                "to_phase": updated.phase.value,
                "status": updated.status.value,
            },
        )
        return updated

    def change_status(self, initiative_id: int, status: Union[Status, str]) -> InitiativeRead:
        initiative = self.store.get(initiative_id)
        patch = plan_status_change(initiative, status)
        if patch is None:
            return initiative
        patch["updated_source"] = token(Provenance.STATUS_CHANGE)
        updated = self.store.update(initiative_id, patch)
        logger.info(
            "lifecycle.status.done",
            extra={
                "initiative_id": initiative_id,
                "phase": updated.phase.value,
                "from_status": initiative.status.value,
                "to_status": updated.status.value,
            },
        )
        return updated

    def return_to_backlog(self, initiative_id: int) -> InitiativeRead:
        initiative = self.store.get(initiative_id)
        patch = plan_return_to_backlog(initiative)
        patch["updated_source"] = token(Provenance.RETURN_TO_BACKLOG)
        updated = self.store.update(initiative_id, patch)
        logger.info(
            "lifecycle.return_to_backlog.done",
            extra={"initiative_id": initiative_id, "from_phase": initiative.phase.value},
        )
        return updated

    def finalize(self, initiative_id: int, request: Optional[FinalizeRequest] = None) -> FinalizeOutcome:
        """
        completed -> finalized, emitting the announcement.

        The announcement is emitted before the phase write: if the sink fails
        nothing has been written and the whole call can be retried. If the phase
        write fails the announcement is discarded, so a retry announces once.
        """
        request = request or FinalizeRequest()
        initiative = self.store.get(initiative_id)
        patch = plan_finalize(initiative)

        on_date: Optional[date] = None
        if request.date:
            try:
                on_date = date.fromisoformat(request.date.strip())
            except ValueError:
                raise ValidationError(
                    f"Invalid announcement date: {request.date!r}", initiative_id=initiative_id, field="date"
                ) from None

        announcement_req = build_announcement_request(
            initiative,
            category=self.announcement_category,
            source=self.announcement_source,
            on_date=on_date,
            title=request.title,
            body=request.body,
            requested_by=request.requested_by,
        )
        record = self.announcer.announce(announcement_req)

        patch["updated_source"] = token(Provenance.FINALIZE)
        try:
            updated = self.store.update(initiative_id, patch)
        except LifecycleError as e:
            logger.warning("lifecycle.finalize.write_failed", extra={"initiative_id": initiative_id, "error": str(e)})
            self.announcer.discard(record)
            raise
        logger.info(
            "lifecycle.finalize.done",
            extra={"initiative_id": initiative_id, "from_phase": initiative.phase.value, "to_phase": updated.phase.value},
        )
        return FinalizeOutcome(initiative=updated, announcement=record)

    # ------------------------------------------------------------------
    # Escalation
    # ------------------------------------------------------------------

    def escalate(self, experiment_id: int) -> InitiativeRead:
        """
        Create the delivery feature for a won experiment.

        The children query is only a pre-check; the store's unique index on
        parent_id decides when two requests race.
        """
        experiment = self.store.get(experiment_id)
        check_escalation_eligible(experiment)

        children = self.store.list(InitiativeFilter(parent_id=experiment_id))
        try:
            ensure_not_escalated(experiment, children)
        except DuplicateEscalationError:
            logger.info("lifecycle.escalate.duplicate", extra={"initiative_id": experiment_id})
            raise

        fields = build_feature_fields(experiment)
        fields["updated_source"] = token(Provenance.ESCALATE)
        try:
            feature = self.store.create(fields)
        except UniqueConstraintViolation as e:
            logger.info(
                "lifecycle.escalate.duplicate", extra={"initiative_id": experiment_id, "reason": "constraint"}
            )
            raise DuplicateEscalationError(experiment_id) from e

        logger.info(
            "lifecycle.escalate.done",
            extra={"initiative_id": feature.id, "parent_id": experiment_id, "phase": feature.phase.value},
        )
        return feature

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def sweep(self, limit: Optional[int] = None, run_id: Optional[str] = None) -> SweepReport:
        return sweep_delivery(
            self.store,
            source=token(Provenance.SWEEP_DELIVERY, run_id),
            limit=limit if limit is not None else settings.SWEEP_LIMIT,
        )


__all__ = ["InitiativeLifecycleService", "FinalizeOutcome"]
