# Delivery-board sweep: paused delivery items are rewritten to design
from datetime import datetime
from typing import Dict, List

from initiative_engine.errors import ExternalFailure, NotFoundError
from initiative_engine.jobs.delivery_sweep_job import run_delivery_sweep
from initiative_engine.schemas.initiative import InitiativeFilter, InitiativeRead, Phase, Status
from initiative_engine.services.lifecycle.reconciliation import needs_repair, repair_items, sweep_delivery
from initiative_engine.services.initiative_persistence import SqlInitiativeStore


class FlakyStore:
    """In-memory store whose updates fail for selected ids."""

    def __init__(self, items: List[InitiativeRead], failing: Dict[int, Exception]):
        self.items = {i.id: i for i in items}
        self.failing = failing
        self.updates: List[int] = []

    def list(self, flt: InitiativeFilter) -> List[InitiativeRead]:
        rows = [
            i for i in self.items.values()
            if (flt.phase is None or i.phase == flt.phase) and (flt.status is None or i.status == flt.status)
        ]
        return rows[: flt.limit] if flt.limit else rows

    def update(self, initiative_id: int, fields):
        if initiative_id in self.failing:
            raise self.failing[initiative_id]
        self.updates.append(initiative_id)
        updated = InitiativeRead.model_validate({**self.items[initiative_id].model_dump(), **fields})
        self.items[initiative_id] = updated
        return updated


def _init(id: int, phase: str, status: str) -> InitiativeRead:
    return InitiativeRead(id=id, title=f"item {id}", phase=phase, status=status, created_at=datetime(2026, 1, id))


def test_needs_repair_only_for_paused_delivery():
    assert needs_repair(_init(1, "delivery", "paused"))
    assert not needs_repair(_init(2, "discovery", "paused"))
    assert not needs_repair(_init(3, "delivery", "running"))


def test_sweep_repairs_paused_delivery_items(db, service, make_initiative):
    paused = make_initiative(title="Paused", phase="delivery", status="paused")
    running = make_initiative(title="Running", phase="delivery", status="running")
    discovery_paused = make_initiative(title="Exp", item_type="experiment", phase="discovery", status="paused")

    report = service.sweep()

    assert report.scanned == 1
    assert report.repaired == [paused.id]
    assert report.clean
    repaired = service.get(paused.id)
    assert repaired.status.value == "design"
    assert repaired.updated_source == "sweep.delivery_paused"
    assert service.get(running.id).status.value == "running"
    assert service.get(discovery_paused.id).status.value == "paused"


def test_sweep_is_idempotent(service, make_initiative):
    make_initiative(phase="delivery", status="paused")
    first = service.sweep()
    second = service.sweep()
    assert len(first.repaired) == 1
    assert second.repaired == []
    assert second.scanned == 0
    assert second.clean


def test_failure_on_one_record_does_not_stop_the_sweep():
    items = [_init(1, "delivery", "paused"), _init(2, "delivery", "paused"), _init(3, "delivery", "paused")]
    store = FlakyStore(items, failing={2: ExternalFailure("db down"), 3: NotFoundError(3)})

    report = sweep_delivery(store, source="sweep.delivery_paused#test")

    assert report.scanned == 3
    assert report.repaired == [1]
    assert set(report.failed) == {2, 3}
    assert not report.clean
    assert store.items[1].status.value == "design"
    assert report.as_dict()["failed"] == {"2": "db down", "3": "Initiative 3 not found"}


def test_repair_items_without_source_only_touches_status():
    store = FlakyStore([_init(1, "delivery", "paused")], failing={})
    repair_items(store, store.list(InitiativeFilter(phase=Phase.DELIVERY)))
    assert store.items[1].status.value == "design"
    assert store.items[1].updated_source is None


def test_delivery_board_load_runs_sweep(service, make_initiative):
    paused = make_initiative(phase="delivery", status="paused")
    items, report = service.load_delivery_board()
    assert report is not None and report.repaired == [paused.id]
    assert [i.status.value for i in items] == ["design"]


def test_delivery_board_without_sweep(service, make_initiative):
    make_initiative(phase="delivery", status="paused")
    service.sweep_on_board_load = False
    items, report = service.load_delivery_board()
    assert report is None
    assert [i.status.value for i in items] == ["paused"]


def test_sweep_job_stamps_run_id(db, make_initiative):
    paused = make_initiative(phase="delivery", status="paused", owner_id="not-in-roster")
    report = run_delivery_sweep(db)
    assert report.repaired == [paused.id]
    source = SqlInitiativeStore(db).get(paused.id).updated_source
    assert source.startswith("sweep.delivery_paused#sweep_")


def test_limited_sweep_reaches_older_paused_items(service, make_initiative):
    old_paused = make_initiative(title="old paused", phase="delivery", status="paused")
    make_initiative(title="new running", phase="delivery", status="running")
    make_initiative(title="newer design", phase="delivery", status="design")

    report = service.sweep(limit=1)

    assert report.repaired == [old_paused.id]
    left = service.store.list(InitiativeFilter(phase=Phase.DELIVERY, status=Status.PAUSED))
    assert left == []


def test_limit_caps_repairs_per_pass(service, make_initiative):
    for n in range(3):
        make_initiative(title=f"paused {n}", phase="delivery", status="paused")

    assert len(service.sweep(limit=2).repaired) == 2
    assert len(service.sweep(limit=2).repaired) == 1
    assert service.store.list(InitiativeFilter(phase=Phase.DELIVERY, status=Status.PAUSED)) == []
