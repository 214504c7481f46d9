# product_lifecycle_engine/initiative_engine/services/announcement_persistence.py

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from initiative_engine.db.models.company_event import CompanyEvent
from initiative_engine.errors import ExternalFailure
from initiative_engine.schemas.announcement import AnnouncementRecord, AnnouncementRequest

logger = logging.getLogger(__name__)


class SqlAnnouncementSink:
    """AnnouncementSink that writes a company calendar event.

    With `commit=False` the event is only flushed: it becomes durable with the
    next commit on the same session (the finalize phase write) and disappears
    if that write is rolled back.
    """

    def __init__(self, db: Session, commit: bool = True) -> None:
        self.db = db
        self.commit = commit

    def announce(self, request: AnnouncementRequest) -> AnnouncementRecord:
        event = CompanyEvent(
            title=request.title,
            description=request.body,
            start_date=request.date,
            end_date=None,
            team=request.category,
            user_id=request.requested_by,
            is_draft=False,
            video_link=request.video_link,
            custom_data=dict(request.custom_data),
        )
        self.db.add(event)
        try:
            if self.commit:
                self.db.commit()
            else:
                self.db.flush()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception(
                "announcement.create_failed",
                extra={"initiative_id": request.custom_data.get("initiative_id")},
            )
            raise ExternalFailure(f"Failed to create announcement: {e}") from e
        self.db.refresh(event)
        return AnnouncementRecord.model_validate(event)

    def discard(self, record: AnnouncementRecord) -> None:
        """Withdraw an announcement whose initiative write did not go through."""
        try:
            if self.commit:
                event = self.db.get(CompanyEvent, record.id)
                if event is not None:
                    self.db.delete(event)
                    self.db.commit()
            else:
                self.db.rollback()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise ExternalFailure(f"Failed to discard announcement {record.id}: {e}") from e
        logger.info("announcement.discarded", extra={"initiative_id": (record.custom_data or {}).get("initiative_id")})


__all__ = ["SqlAnnouncementSink"]
