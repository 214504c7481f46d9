# product_lifecycle_engine/initiative_engine/api/routes/initiatives.py

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from initiative_engine.api.deps import get_lifecycle_service, require_shared_secret
from initiative_engine.api.schemas.initiatives import (
    CreateInPhaseRequest,
    DeliveryBoardResponse,
    FinalizeResponse,
    OwnerAssignRequest,
    ProjectLinkRequest,
    RankedInitiativeResponse,
    SweepResponse,
)
from initiative_engine.errors import (
    DuplicateEscalationError,
    ExternalFailure,
    LifecycleError,
    NotFoundError,
    ValidationError,
)
from initiative_engine.schemas.initiative import InitiativeCreate, InitiativeRead, InitiativeUpdate
from initiative_engine.schemas.transitions import (
    FinalizeRequest,
    PeriodUpdate,
    PromoteRequest,
    RiceUpdate,
    StatusChangeRequest,
)
from initiative_engine.services.lifecycle_service import InitiativeLifecycleService


router = APIRouter(
    prefix="/initiatives",
    tags=["initiatives"],
    dependencies=[Depends(require_shared_secret)],
)


@contextmanager
def _translate_errors() -> Iterator[None]:
    """Map engine errors onto HTTP status codes."""
    try:
        yield
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={"message": str(e), "field": e.field}) from e
    except DuplicateEscalationError as e:
        raise HTTPException(
            status_code=409,
            detail={"message": str(e), "existing_ids": e.existing_ids},
        ) from e
    except ExternalFailure as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    except LifecycleError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


# ---------------------------------------------------------------------------
# Boards / lists
# ---------------------------------------------------------------------------

@router.get("/backlog", response_model=List[RankedInitiativeResponse])
def get_backlog(service: InitiativeLifecycleService = Depends(get_lifecycle_service)) -> List[RankedInitiativeResponse]:
    """Backlog ranked by RICE score."""
    with _translate_errors():
        ranked = service.rank_backlog()
    return [RankedInitiativeResponse(rank=r.rank, score=r.score, initiative=r.initiative) for r in ranked]


@router.get("/experiments", response_model=List[InitiativeRead])
def get_experiments(service: InitiativeLifecycleService = Depends(get_lifecycle_service)) -> List[InitiativeRead]:
    with _translate_errors():
        return service.list_experiments()


@router.get("/delivery", response_model=DeliveryBoardResponse)
def get_delivery_board(service: InitiativeLifecycleService = Depends(get_lifecycle_service)) -> DeliveryBoardResponse:
    """Delivery board; paused items are repaired before the board is returned."""
    with _translate_errors():
        items, report = service.load_delivery_board()
    sweep = SweepResponse(**report.as_dict()) if report is not None else None
    return DeliveryBoardResponse(items=items, sweep=sweep)


@router.post("/sweep", response_model=SweepResponse)
def run_sweep(service: InitiativeLifecycleService = Depends(get_lifecycle_service)) -> SweepResponse:
    with _translate_errors():
        report = service.sweep()
    return SweepResponse(**report.as_dict())


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------

@router.post("", response_model=InitiativeRead, status_code=201)
def create_initiative(
    req: InitiativeCreate,
    service: InitiativeLifecycleService = Depends(get_lifecycle_service),
) -> InitiativeRead:
    with _translate_errors():
        return service.create(req)


@router.post("/in-phase", response_model=InitiativeRead, status_code=201)
def create_in_phase(
    req: CreateInPhaseRequest,
    service: InitiativeLifecycleService = Depends(get_lifecycle_service),
) -> InitiativeRead:
    with _translate_errors():
        return service.create_in_phase(req.title, req.phase, owner_id=req.owner_id, item_type=req.item_type)


@router.get("/{initiative_id}", response_model=InitiativeRead)
def get_initiative(
    initiative_id: int,
    service: InitiativeLifecycleService = Depends(get_lifecycle_service),
) -> InitiativeRead:
    with _translate_errors():
        return service.get(initiative_id)


@router.patch("/{initiative_id}", response_model=InitiativeRead)
def edit_initiative(
    initiative_id: int,
    req: InitiativeUpdate,
    service: InitiativeLifecycleService = Depends(get_lifecycle_service),
) -> InitiativeRead:
    with _translate_errors():
        return service.update_fields(initiative_id, req)


@router.put("/{initiative_id}/rice", response_model=InitiativeRead)
def edit_rice(
    initiative_id: int,
    req: RiceUpdate,
    service: InitiativeLifecycleService = Depends(get_lifecycle_service),
) -> InitiativeRead:
    with _translate_errors():
        return service.update_rice(initiative_id, req)


@router.patch("/{initiative_id}/experiment", response_model=InitiativeRead)
def edit_experiment(
    initiative_id: int,
    changes: Dict[str, Any],
    service: InitiativeLifecycleService = Depends(get_lifecycle_service),
) -> InitiativeRead:
    with _translate_errors():
        return service.update_experiment_data(initiative_id, changes)


@router.put("/{initiative_id}/period", response_model=InitiativeRead)
def edit_period(
    initiative_id: int,
    req: PeriodUpdate,
    service: InitiativeLifecycleService = Depends(get_lifecycle_service),
) -> InitiativeRead:
    with _translate_errors():
        return service.update_period(initiative_id, req)


@router.put("/{initiative_id}/owner", response_model=InitiativeRead)
def assign_owner(
    initiative_id: int,
    req: OwnerAssignRequest,
    service: InitiativeLifecycleService = Depends(get_lifecycle_service),
) -> InitiativeRead:
    with _translate_errors():
        return service.assign_owner(initiative_id, req.owner_id)


@router.put("/{initiative_id}/project", response_model=InitiativeRead)
def link_project(
    initiative_id: int,
    req: ProjectLinkRequest,
    service: InitiativeLifecycleService = Depends(get_lifecycle_service),
) -> InitiativeRead:
    with _translate_errors():
        return service.link_project(initiative_id, req.project_id)


@router.delete("/{initiative_id}", status_code=204)
def delete_initiative(
    initiative_id: int,
    service: InitiativeLifecycleService = Depends(get_lifecycle_service),
) -> Response:
    with _translate_errors():
        service.delete(initiative_id)
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

@router.post("/{initiative_id}/promote", response_model=InitiativeRead)
def promote(
    initiative_id: int,
    req: PromoteRequest,
    service: InitiativeLifecycleService = Depends(get_lifecycle_service),
) -> InitiativeRead:
    with _translate_errors():
        return service.promote(initiative_id, req)


@router.post("/{initiative_id}/status", response_model=InitiativeRead)
def change_status(
    initiative_id: int,
    req: StatusChangeRequest,
    service: InitiativeLifecycleService = Depends(get_lifecycle_service),
) -> InitiativeRead:
    with _translate_errors():
        return service.change_status(initiative_id, req.status)


@router.post("/{initiative_id}/return-to-backlog", response_model=InitiativeRead)
def return_to_backlog(
    initiative_id: int,
    service: InitiativeLifecycleService = Depends(get_lifecycle_service),
) -> InitiativeRead:
    with _translate_errors():
        return service.return_to_backlog(initiative_id)


@router.post("/{initiative_id}/finalize", response_model=FinalizeResponse)
def finalize(
    initiative_id: int,
    req: Optional[FinalizeRequest] = None,
    service: InitiativeLifecycleService = Depends(get_lifecycle_service),
) -> FinalizeResponse:
    with _translate_errors():
        outcome = service.finalize(initiative_id, req)
    return FinalizeResponse(initiative=outcome.initiative, announcement=outcome.announcement)


@router.post("/{initiative_id}/escalate", response_model=InitiativeRead, status_code=201)
def escalate(
    initiative_id: int,
    service: InitiativeLifecycleService = Depends(get_lifecycle_service),
) -> InitiativeRead:
    with _translate_errors():
        return service.escalate(initiative_id)
