# product_lifecycle_engine/initiative_engine/schemas/announcement.py

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class AnnouncementRequest(BaseModel):
    """Outbound request emitted when an initiative is finalized."""

    title: str = Field(..., min_length=1)
    body: str = ""
    date: dt.date
    category: str

    video_link: Optional[str] = None
    requested_by: Optional[str] = None
    custom_data: Dict[str, Any] = Field(default_factory=dict)


class AnnouncementRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    start_date: dt.date
    team: str
    video_link: Optional[str] = None
    custom_data: Optional[Dict[str, Any]] = None
