# product_lifecycle_engine/initiative_engine/services/initiative_persistence.py

from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from initiative_engine.db.models.initiative import ProductInitiative
from initiative_engine.errors import ExternalFailure, NotFoundError, UniqueConstraintViolation
from initiative_engine.schemas.initiative import InitiativeFilter, InitiativeRead

logger = logging.getLogger(__name__)

# id / created_at / updated_at are owned by the store
WRITABLE_COLUMNS = frozenset(
    {
        "title",
        "problem_statement",
        "item_type",
        "phase",
        "status",
        "rice_reach",
        "rice_impact",
        "rice_confidence",
        "rice_effort",
        "owner_id",
        "project_id",
        "parent_id",
        "period_type",
        "period_value",
        "experiment_data",
        "tags",
        "updated_source",
    }
)


def _check_columns(fields: Dict[str, Any]) -> None:
    unknown = set(fields) - WRITABLE_COLUMNS
    if unknown:
        raise ValueError(f"Unknown or read-only initiative fields: {sorted(unknown)}")


class SqlInitiativeStore:
    """InitiativeStore backed by the product_initiatives table.

    Every write commits immediately; on failure the session is rolled back and
    the error is raised as ExternalFailure (UniqueConstraintViolation for
    integrity errors).
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def _load(self, initiative_id: int) -> ProductInitiative:
        try:
            row = self.db.get(ProductInitiative, initiative_id)
        except SQLAlchemyError as e:
            raise ExternalFailure(f"Failed to load initiative {initiative_id}: {e}") from e
        if row is None:
            raise NotFoundError(initiative_id)
        return row

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning("store.integrity_error", extra={"reason": action, "error": str(e.orig)})
            raise UniqueConstraintViolation(f"{action} rejected by store constraint: {e.orig}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("store.commit_failed", extra={"reason": action})
            raise ExternalFailure(f"{action} failed: {e}") from e

    def get(self, initiative_id: int) -> InitiativeRead:
        return InitiativeRead.model_validate(self._load(initiative_id))

    def list(self, flt: InitiativeFilter) -> List[InitiativeRead]:
        stmt = select(ProductInitiative)
        if flt.phase is not None:
            stmt = stmt.where(ProductInitiative.phase == flt.phase.value)
        if flt.status is not None:
            stmt = stmt.where(ProductInitiative.status == flt.status.value)
        if flt.item_type is not None:
            stmt = stmt.where(ProductInitiative.item_type == flt.item_type.value)
        if flt.parent_id is not None:
            stmt = stmt.where(ProductInitiative.parent_id == flt.parent_id)
        if flt.ids is not None:
            stmt = stmt.where(ProductInitiative.id.in_(flt.ids))
        stmt = stmt.order_by(ProductInitiative.created_at.desc(), ProductInitiative.id.desc())
        if flt.limit:
            stmt = stmt.limit(flt.limit)

        try:
            rows = self.db.execute(stmt).scalars().all()
        except SQLAlchemyError as e:
            raise ExternalFailure(f"Failed to list initiatives: {e}") from e
        return [InitiativeRead.model_validate(r) for r in rows]

    def create(self, fields: Dict[str, Any]) -> InitiativeRead:
        _check_columns(fields)
        row = ProductInitiative(**fields)
        self.db.add(row)
        self._commit("create")
        self.db.refresh(row)
        return InitiativeRead.model_validate(row)

    def update(self, initiative_id: int, fields: Dict[str, Any]) -> InitiativeRead:
        _check_columns(fields)
        row = self._load(initiative_id)
        for field_name, value in fields.items():
            setattr(row, field_name, value)
        self._commit("update")
        self.db.refresh(row)
        return InitiativeRead.model_validate(row)

    def delete(self, initiative_id: int) -> None:
        row = self._load(initiative_id)
        self.db.delete(row)
        self._commit("delete")


__all__ = ["SqlInitiativeStore", "WRITABLE_COLUMNS"]
