from __future__ import annotations

from typing import Generator

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from initiative_engine.config import settings
from initiative_engine.db.session import SessionLocal
from initiative_engine.services.lifecycle_service import InitiativeLifecycleService


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_lifecycle_service(db: Session = Depends(get_db)) -> InitiativeLifecycleService:
    return InitiativeLifecycleService.from_session(db)


def require_shared_secret(x_lifecycle_secret: str | None = Header(default=None)) -> None:
    """
    v1 security: shared secret header from the dashboard backend.
    Header name: X-LIFECYCLE-SECRET
    """
    expected = settings.API_SHARED_SECRET
    if not expected:
        # If secret isn't configured, fail closed.
        raise HTTPException(status_code=500, detail="API_SHARED_SECRET is not configured")

    if not x_lifecycle_secret or x_lifecycle_secret != expected:
        raise HTTPException(status_code=401, detail="Unauthorized")
