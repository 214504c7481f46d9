# product_lifecycle_engine/initiative_engine/api/schemas/initiatives.py

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from initiative_engine.schemas.announcement import AnnouncementRecord
from initiative_engine.schemas.initiative import InitiativeRead, ItemType, Phase


class CreateInPhaseRequest(BaseModel):
    title: str = Field(..., min_length=1)
    phase: Phase
    owner_id: Optional[str] = None
    item_type: Optional[ItemType] = None


class OwnerAssignRequest(BaseModel):
    owner_id: Optional[str] = None


class ProjectLinkRequest(BaseModel):
    project_id: Optional[int] = None


class RankedInitiativeResponse(BaseModel):
    rank: int
    score: float
    initiative: InitiativeRead


class SweepResponse(BaseModel):
    scanned: int
    repaired: List[int]
    failed: Dict[str, str]


class DeliveryBoardResponse(BaseModel):
    items: List[InitiativeRead]
    sweep: Optional[SweepResponse] = None


class FinalizeResponse(BaseModel):
    initiative: InitiativeRead
    announcement: AnnouncementRecord
