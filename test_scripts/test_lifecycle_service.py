# End-to-end lifecycle scenarios against the SQL store (in-memory SQLite)
import pydantic
import pytest
from sqlalchemy import func, select

from initiative_engine.db.models import CompanyEvent
from initiative_engine.errors import ExternalFailure, LifecycleError, NotFoundError, ValidationError
from initiative_engine.schemas.initiative import InitiativeCreate, InitiativeUpdate
from initiative_engine.schemas.transitions import FinalizeRequest, PeriodUpdate, PromoteRequest, RiceUpdate
from initiative_engine.services.announcement_persistence import SqlAnnouncementSink
from initiative_engine.services.initiative_persistence import SqlInitiativeStore
from initiative_engine.services.lifecycle_service import InitiativeLifecycleService


def _event_count(db) -> int:
    return db.execute(select(func.count()).select_from(CompanyEvent)).scalar_one()


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------

def test_quick_create_enters_backlog_pending(service):
    created = service.create(InitiativeCreate(title="  Dark mode ", rice_reach=8, rice_impact=7, rice_confidence=6, rice_effort=4))
    assert created.phase.value == "backlog"
    assert created.status.value == "pending"
    assert created.title == "Dark mode"
    assert created.updated_source == "lifecycle.create_backlog"


def test_blank_title_is_rejected_before_store():
    with pytest.raises(pydantic.ValidationError):
        InitiativeCreate(title="   ")


def test_rice_out_of_range_rejected_on_create():
    with pytest.raises(pydantic.ValidationError):
        InitiativeCreate(title="x", rice_effort=0)


def test_service_create_reports_engine_validation_error(service):
    with pytest.raises(LifecycleError) as exc:
        service.create({"title": "Dark mode", "rice_effort": 0})
    assert isinstance(exc.value, ValidationError)
    assert exc.value.field == "rice_effort"

    with pytest.raises(ValidationError) as exc:
        service.create({"title": "   "})
    assert exc.value.field == "title"
    assert service.list_phase("backlog") == []

    created = service.create({"title": "Dark mode", "rice_reach": 8})
    assert (created.phase.value, created.rice_reach) == ("backlog", 8)


def test_create_in_phase(service):
    exp = service.create_in_phase("Pricing test", "discovery", owner_id="U1")
    assert (exp.item_type.value, exp.phase.value, exp.status.value) == ("experiment", "discovery", "design")
    feat = service.create_in_phase("Bulk export", "delivery")
    assert (feat.item_type.value, feat.phase.value, feat.status.value) == ("feature", "delivery", "design")

    with pytest.raises(ValidationError):
        service.create_in_phase("Nope", "backlog")
    with pytest.raises(ValidationError):
        service.create_in_phase("Nope", "shipped")
    with pytest.raises(ValidationError):
        service.create_in_phase("  ", "delivery")


def test_rank_backlog_only_ranks_backlog_items(service, make_initiative):
    make_initiative(title="Low", rice_reach=1)
    make_initiative(title="Dark mode", rice_reach=8, rice_impact=7, rice_confidence=6, rice_effort=4)
    make_initiative(title="Elsewhere", phase="delivery", status="design", rice_reach=10)
    ranked = service.rank_backlog()
    assert [r.initiative.title for r in ranked] == ["Dark mode", "Low"]
    assert ranked[0].score == pytest.approx(84.0)


# ---------------------------------------------------------------------------
# Promotion / status / return
# ---------------------------------------------------------------------------

def test_promote_to_discovery_with_roster_owner(service, make_initiative):
    item = make_initiative(title="Checkout")
    promoted = service.promote(item.id, PromoteRequest(destination="discovery", owner_id="U1", start_date="2026-02-01"))
    assert promoted.phase.value == "discovery"
    assert promoted.status.value == "design"
    assert promoted.owner_id == "U1"
    assert promoted.period_type.value == "week"
    assert promoted.period_value == "2026-02-01 → 2026-02-15"
    assert promoted.updated_source == "lifecycle.promote"


@pytest.mark.parametrize("owner_id", ["U404", "U9", None])
def test_promote_rejects_unknown_inactive_or_missing_owner(service, make_initiative, owner_id):
    item = make_initiative()
    with pytest.raises(ValidationError) as exc:
        service.promote(item.id, PromoteRequest(destination="delivery", owner_id=owner_id, end_date="2026-03-31"))
    assert exc.value.field == "owner_id"
    unchanged = service.get(item.id)
    assert unchanged.phase.value == "backlog"
    assert unchanged.status.value == "pending"


def test_promote_missing_id(service):
    with pytest.raises(NotFoundError):
        service.promote(999, PromoteRequest(destination="delivery", owner_id="U1", end_date="2026-03-31"))


def test_change_status_and_noop(service, make_initiative):
    item = make_initiative(phase="delivery", status="design")
    running = service.change_status(item.id, "running")
    assert running.status.value == "running"
    assert running.updated_source == "lifecycle.status_change"
    same = service.change_status(item.id, "running")
    assert same.updated_at == running.updated_at


def test_return_to_backlog_clears_window(service, make_initiative):
    item = make_initiative(phase="discovery", status="running", period_type="week", period_value="2026-02-01 → ...")
    back = service.return_to_backlog(item.id)
    assert (back.phase.value, back.status.value) == ("backlog", "pending")
    assert back.period_type is None
    assert back.period_value is None


# ---------------------------------------------------------------------------
# Finalize
# ---------------------------------------------------------------------------

def test_full_discovery_flow_ends_finalized_with_one_announcement(db, service, make_initiative):
    item = make_initiative(
        title="Onboarding v2",
        item_type="experiment",
        problem_statement="Activation is flat. https://videos.example.com/v",
    )
    service.promote(item.id, PromoteRequest(destination="discovery", owner_id="U2", start_date="2026-02-01"))
    service.change_status(item.id, "running")
    service.update_experiment_data(item.id, {"hypothesis": "Shorter flow", "result": "lost", "next_steps": "discard"})
    service.change_status(item.id, "completed")

    outcome = service.finalize(item.id, FinalizeRequest(date="2026-02-20", requested_by="U2"))

    assert outcome.initiative.phase.value == "finalized"
    assert outcome.initiative.updated_source == "lifecycle.finalize"
    assert outcome.announcement.title == "Onboarding v2"
    assert outcome.announcement.team == "Producto"
    assert outcome.announcement.video_link == "https://videos.example.com/v"
    assert "Experiment result: Lost" in outcome.announcement.description
    assert outcome.announcement.custom_data == {"initiative_id": item.id, "source": "producto_module"}
    assert _event_count(db) == 1

    # Terminal: nothing moves any more
    with pytest.raises(ValidationError):
        service.finalize(item.id)
    with pytest.raises(ValidationError):
        service.change_status(item.id, "running")
    with pytest.raises(ValidationError):
        service.return_to_backlog(item.id)
    with pytest.raises(ValidationError):
        service.update_fields(item.id, InitiativeUpdate(title="Renamed"))
    with pytest.raises(ValidationError):
        service.update_rice(item.id, RiceUpdate(reach=5))
    assert _event_count(db) == 1

    service.delete(item.id)
    with pytest.raises(NotFoundError):
        service.get(item.id)


def test_finalize_requires_completed(db, service, make_initiative):
    item = make_initiative(phase="delivery", status="running")
    with pytest.raises(ValidationError):
        service.finalize(item.id)
    assert _event_count(db) == 0


def test_finalize_rejects_bad_date(db, service, make_initiative):
    item = make_initiative(phase="delivery", status="completed")
    with pytest.raises(ValidationError) as exc:
        service.finalize(item.id, FinalizeRequest(date="20th of May"))
    assert exc.value.field == "date"
    assert service.get(item.id).phase.value == "delivery"


class FailingSink:
    def announce(self, request):
        raise ExternalFailure("calendar unavailable")

    def discard(self, record):
        raise AssertionError("nothing was announced")


def test_failed_announcement_leaves_initiative_untouched(db, store, service, make_initiative):
    item = make_initiative(phase="delivery", status="completed")
    failing = InitiativeLifecycleService(store=store, announcer=FailingSink(), owner_policy=service.owner_policy)
    with pytest.raises(ExternalFailure):
        failing.finalize(item.id)
    assert service.get(item.id).phase.value == "delivery"

    # Retry with a healthy sink succeeds
    assert service.finalize(item.id).initiative.phase.value == "finalized"
    assert _event_count(db) == 1


class BrokenUpdateStore(SqlInitiativeStore):
    """SQL store whose updates fail after the announcement was emitted."""

    def __init__(self, db, error):
        super().__init__(db)
        self.error = error

    def update(self, initiative_id, fields):
        raise self.error


@pytest.mark.parametrize("commit", [False, True])
@pytest.mark.parametrize("error", [ExternalFailure("write rejected"), NotFoundError(1)])
def test_failed_phase_write_leaves_no_announcement(db, service, make_initiative, commit, error):
    item = make_initiative(phase="delivery", status="completed")
    broken = InitiativeLifecycleService(
        store=BrokenUpdateStore(db, error),
        announcer=SqlAnnouncementSink(db, commit=commit),
        owner_policy=service.owner_policy,
    )
    with pytest.raises(type(error)):
        broken.finalize(item.id)
    assert _event_count(db) == 0
    assert service.get(item.id).phase.value == "delivery"

    # Retry announces exactly once
    assert service.finalize(item.id).initiative.phase.value == "finalized"
    assert _event_count(db) == 1


# ---------------------------------------------------------------------------
# Edits
# ---------------------------------------------------------------------------

def test_update_rice(service, make_initiative):
    item = make_initiative()
    updated = service.update_rice(item.id, RiceUpdate(reach=9, effort=2))
    assert (updated.rice_reach, updated.rice_effort, updated.rice_impact) == (9, 2, 1)
    assert updated.updated_source == "edit.rice"

    for bad in (RiceUpdate(reach=11), RiceUpdate(effort=0), RiceUpdate(impact=-3)):
        with pytest.raises(ValidationError):
            service.update_rice(item.id, bad)
    assert service.get(item.id).rice_reach == 9


def test_update_fields_never_touches_lifecycle_columns(service, make_initiative):
    item = make_initiative(phase="discovery", status="running")
    updated = service.update_fields(item.id, InitiativeUpdate(title="New name", tags=["growth"]))
    assert updated.title == "New name"
    assert updated.tags == ["growth"]
    assert (updated.phase.value, updated.status.value) == ("discovery", "running")

    with pytest.raises(pydantic.ValidationError):
        InitiativeUpdate(phase="finalized")


def test_update_experiment_data_merges(service, make_initiative):
    item = make_initiative(item_type="experiment", phase="discovery", status="running",
                           experiment_data={"hypothesis": "H1", "metric_base": "10%"})
    updated = service.update_experiment_data(item.id, {"metric_target": "12%", "statistical_significance": True})
    assert updated.experiment.hypothesis == "H1"
    assert updated.experiment.metric_target == "12%"
    assert updated.experiment.statistical_significance == "true"

    with pytest.raises(ValidationError) as exc:
        service.update_experiment_data(item.id, {"result": "maybe"})
    assert exc.value.field == "experiment_data"


def test_update_period(service, make_initiative):
    exp = make_initiative(phase="discovery", status="design", period_type="week", period_value="2026-02-01 → ...")
    updated = service.update_period(exp.id, PeriodUpdate(end_date="2026-02-28"))
    assert updated.period_value == "2026-02-01 → 2026-02-28"

    feat = make_initiative(phase="delivery", status="design", period_value="2026-03-31")
    moved = service.update_period(feat.id, PeriodUpdate(end_date="2026-04-30", period_type="month"))
    assert moved.period_value == "2026-04-30"
    assert moved.period_type.value == "month"

    backlog = make_initiative()
    with pytest.raises(ValidationError):
        service.update_period(backlog.id, PeriodUpdate(end_date="2026-04-30"))


def test_assign_owner_and_link_project(service, make_initiative):
    item = make_initiative()
    assert service.assign_owner(item.id, "U2").owner_id == "U2"
    with pytest.raises(ValidationError):
        service.assign_owner(item.id, "U404")
    assert service.assign_owner(item.id, "  ").owner_id is None
    assert service.link_project(item.id, 7).project_id == 7
    assert service.link_project(item.id, None).project_id is None


def test_list_experiments_orders_open_first(service, make_initiative):
    won = make_initiative(title="Won", item_type="experiment", phase="discovery", status="completed",
                          experiment_data={"result": "won"})
    open_ = make_initiative(title="Open", item_type="experiment", phase="discovery", status="running")
    assert [i.id for i in service.list_experiments()] == [open_.id, won.id]
