# Shared fixtures: every test gets a fresh in-memory SQLite database
from __future__ import annotations

from typing import Any, Callable, Dict

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from initiative_engine.db.base import Base
from initiative_engine.db.models import TeamMember
from initiative_engine.schemas.initiative import InitiativeRead
from initiative_engine.services.announcement_persistence import SqlAnnouncementSink
from initiative_engine.services.initiative_persistence import SqlInitiativeStore
from initiative_engine.services.lifecycle.owner_policy import RosterOwnerPolicy
from initiative_engine.services.lifecycle_service import InitiativeLifecycleService
from initiative_engine.services.member_roster import SqlMemberRoster


@pytest.fixture()
def engine():
    # StaticPool keeps one connection so the in-memory DB survives across sessions/threads
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture()
def db(session_factory) -> Session:
    session = session_factory()
    session.add_all(
        [
            TeamMember(user_id="U1", display_name="Ana"),
            TeamMember(user_id="U2", display_name="Bruno"),
            TeamMember(user_id="U9", display_name="Former", active=False),
        ]
    )
    session.commit()
    yield session
    session.close()


@pytest.fixture()
def store(db) -> SqlInitiativeStore:
    return SqlInitiativeStore(db)


@pytest.fixture()
def announcer(db) -> SqlAnnouncementSink:
    # Same wiring as InitiativeLifecycleService.from_session
    return SqlAnnouncementSink(db, commit=False)


@pytest.fixture()
def service(db, store, announcer) -> InitiativeLifecycleService:
    return InitiativeLifecycleService(
        store=store,
        announcer=announcer,
        owner_policy=RosterOwnerPolicy(SqlMemberRoster(db)),
        default_period_type="week",
        default_window_days=14,
        announcement_category="Producto",
        announcement_source="producto_module",
        sweep_on_board_load=True,
    )


@pytest.fixture()
def make_initiative(store) -> Callable[..., InitiativeRead]:
    """Insert a row directly through the store, bypassing lifecycle rules."""

    def _make(**overrides: Any) -> InitiativeRead:
        fields: Dict[str, Any] = {
            "title": "Initiative",
            "item_type": "feature",
            "phase": "backlog",
            "status": "pending",
            "tags": [],
        }
        fields.update(overrides)
        return store.create(fields)

    return _make
