# product_lifecycle_engine/initiative_engine/schemas/transitions.py

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from initiative_engine.schemas.initiative import Phase, PeriodType, Status


class PromoteRequest(BaseModel):
    """Backlog -> discovery/delivery. Dates are free text (ISO expected)."""

    destination: Phase
    owner_id: Optional[str] = None  # falls back to the initiative's owner
    start_date: Optional[str] = None  # required for discovery
    end_date: Optional[str] = None  # required for delivery
    period_type: Optional[PeriodType] = None


class StatusChangeRequest(BaseModel):
    status: Status


class RiceUpdate(BaseModel):
    """Partial RICE edit; range is checked by the lifecycle service."""

    reach: Optional[int] = None
    impact: Optional[int] = None
    confidence: Optional[int] = None
    effort: Optional[int] = None


class PeriodUpdate(BaseModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    period_type: Optional[PeriodType] = None


class FinalizeRequest(BaseModel):
    """Overrides for the announcement emitted on finalize."""

    title: Optional[str] = Field(None, min_length=1)
    body: Optional[str] = None
    date: Optional[str] = None  # ISO date; defaults to today
    requested_by: Optional[str] = None
