# product_lifecycle_engine/initiative_engine/services/ports.py
"""
Collaborator contracts consumed by the lifecycle engine.

The engine never talks to a database or calendar directly; it is handed
objects satisfying these protocols. SQLAlchemy-backed implementations live in
initiative_persistence.py, announcement_persistence.py and member_roster.py.
"""

from __future__ import annotations

from typing import Any, Dict, List, Protocol, Sequence

from initiative_engine.schemas.announcement import AnnouncementRecord, AnnouncementRequest
from initiative_engine.schemas.initiative import InitiativeFilter, InitiativeRead
from initiative_engine.schemas.member import Member


class InitiativeStore(Protocol):
    """Persistence collaborator.

    get/update/delete raise NotFoundError for unknown ids. Any backend failure
    is raised as ExternalFailure; uniqueness rejections as
    UniqueConstraintViolation.
    """

    def get(self, initiative_id: int) -> InitiativeRead:  # pragma: no cover - interface only
        ...

    def list(self, flt: InitiativeFilter) -> List[InitiativeRead]:  # pragma: no cover - interface only
        ...

    def create(self, fields: Dict[str, Any]) -> InitiativeRead:  # pragma: no cover - interface only
        ...

    def update(self, initiative_id: int, fields: Dict[str, Any]) -> InitiativeRead:  # pragma: no cover - interface only
        ...

    def delete(self, initiative_id: int) -> None:  # pragma: no cover - interface only
        ...


class AnnouncementSink(Protocol):
    """Receives the calendar/announcement request emitted on finalize.

    `discard` withdraws a record when the finalize write fails afterwards.
    """

    def announce(self, request: AnnouncementRequest) -> AnnouncementRecord:  # pragma: no cover - interface only
        ...

    def discard(self, record: AnnouncementRecord) -> None:  # pragma: no cover - interface only
        ...


class MemberRoster(Protocol):
    """Lists people eligible to own an initiative."""

    def list(self) -> Sequence[Member]:  # pragma: no cover - interface only
        ...


__all__ = ["InitiativeStore", "AnnouncementSink", "MemberRoster"]
