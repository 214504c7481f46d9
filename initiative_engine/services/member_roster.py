# product_lifecycle_engine/initiative_engine/services/member_roster.py

from __future__ import annotations

from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from initiative_engine.db.models.member import TeamMember
from initiative_engine.errors import ExternalFailure
from initiative_engine.schemas.member import Member


class SqlMemberRoster:
    """MemberRoster over active team_members rows."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def list(self) -> List[Member]:
        stmt = (
            select(TeamMember)
            .where(TeamMember.active.is_(True))
            .order_by(TeamMember.display_name, TeamMember.user_id)
        )
        try:
            rows = self.db.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            raise ExternalFailure(f"Failed to load member roster: {e}") from e
        return [Member(id=r.user_id, display_name=r.display_name) for r in rows]


__all__ = ["SqlMemberRoster"]
