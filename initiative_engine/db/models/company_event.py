# product_lifecycle_engine/initiative_engine/db/models/company_event.py

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Integer, String, Text

from initiative_engine.db.base import Base


class CompanyEvent(Base):
    """Calendar/announcement record created when an initiative is finalized."""

    __tablename__ = "company_events"

    id = Column(Integer, primary_key=True, index=True)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)

    # Routing
    team = Column(String(100), nullable=False)
    user_id = Column(String(100), nullable=True)
    is_draft = Column(Boolean, nullable=False, default=False)

    video_link = Column(String(500), nullable=True)
    # {"initiative_id": ..., "source": ...}
    custom_data = Column(JSON, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
