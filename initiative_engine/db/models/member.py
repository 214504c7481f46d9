# product_lifecycle_engine/initiative_engine/db/models/member.py

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from initiative_engine.db.base import Base


class TeamMember(Base):
    """Roster entry for people who can own an initiative."""

    __tablename__ = "team_members"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(String(100), unique=True, index=True, nullable=False)
    display_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
