from datetime import datetime, timezone
from sqlalchemy import (
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    JSON,
    ForeignKey,
    text,
)

from initiative_engine.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductInitiative(Base):
    __tablename__ = "product_initiatives"

    id = Column(Integer, primary_key=True, index=True)

    # A. Identity & description
    title = Column(String(255), nullable=False)
    problem_statement = Column(Text, nullable=True)  # may embed media references
    item_type = Column(String(20), nullable=False, default="feature")

    # B. Lifecycle
    phase = Column(String(20), nullable=False, default="backlog", index=True)
    status = Column(String(20), nullable=False, default="pending")

    # C. RICE inputs (1-10)
    rice_reach = Column(Integer, nullable=False, default=1)
    rice_impact = Column(Integer, nullable=False, default=1)
    rice_confidence = Column(Integer, nullable=False, default=1)
    rice_effort = Column(Integer, nullable=False, default=1)

    # D. Ownership & links
    owner_id = Column(String(100), nullable=True)
    project_id = Column(Integer, nullable=True)
    # Set only by escalation: delivery feature -> discovery experiment
    parent_id = Column(Integer, ForeignKey("product_initiatives.id", ondelete="SET NULL"), nullable=True)

    # E. Scheduling window (free text, e.g. "2024-02-01 → 2024-02-14")
    period_type = Column(String(10), nullable=True)
    period_value = Column(String(100), nullable=True)

    # F. Experiment record + labels
    experiment_data = Column(JSON, nullable=True)
    tags = Column(JSON, nullable=False, default=list)

    # G. Audit
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
    # Engine operation that last wrote this row (e.g. "lifecycle.promote")
    updated_source = Column(String(100), nullable=True)

    __table_args__ = (
        # At most one derived feature per experiment
        Index(
            "uq_product_initiatives_parent_id",
            "parent_id",
            unique=True,
            postgresql_where=text("parent_id IS NOT NULL"),
            sqlite_where=text("parent_id IS NOT NULL"),
        ),
    )

    def __repr__(self) -> str:
        return f"<ProductInitiative id={self.id} phase={self.phase} status={self.status} title={self.title!r}>"
