from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ItemType(str, Enum):
    EXPERIMENT = "experiment"
    FEATURE = "feature"
    TECH_DEBT = "tech_debt"
    BUG = "bug"


class Phase(str, Enum):
    BACKLOG = "backlog"
    DISCOVERY = "discovery"
    DELIVERY = "delivery"
    FINALIZED = "finalized"


class Status(str, Enum):
    PENDING = "pending"
    DESIGN = "design"
    RUNNING = "running"
    COMPLETED = "completed"
    PAUSED = "paused"


class ExperimentResult(str, Enum):
    PENDING = "pending"
    WON = "won"
    LOST = "lost"
    INCONCLUSIVE = "inconclusive"


class NextSteps(str, Enum):
    NONE = "none"
    DISCARD = "discard"
    SCALE = "scale"
    ITERATE = "iterate"


class ExperimentPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PeriodType(str, Enum):
    WEEK = "week"
    MONTH = "month"


RICE_MIN = 1
RICE_MAX = 10


class ExperimentData(BaseModel):
    """Structured experiment record embedded in an initiative."""

    hypothesis: Optional[str] = None
    funnel_stage: Optional[str] = None
    dashboard_link: Optional[str] = None
    metric_base: Optional[str] = None
    metric_target: Optional[str] = None
    metric_result: Optional[str] = None
    statistical_significance: Optional[str] = None  # "true" / "false"
    result: Optional[ExperimentResult] = None  # None means pending
    next_steps: Optional[NextSteps] = None
    priority: Optional[ExperimentPriority] = None

    @field_validator("result", "next_steps", "priority", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("statistical_significance", mode="before")
    @classmethod
    def bool_to_text(cls, v: Any) -> Any:
        if isinstance(v, bool):
            return "true" if v else "false"
        return v

    @property
    def effective_result(self) -> ExperimentResult:
        return self.result or ExperimentResult.PENDING

    @property
    def ready_to_scale(self) -> bool:
        return self.result == ExperimentResult.WON and self.next_steps == NextSteps.SCALE

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class InitiativeBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    problem_statement: Optional[str] = None
    item_type: ItemType = ItemType.FEATURE

    rice_reach: int = Field(RICE_MIN, ge=RICE_MIN, le=RICE_MAX)
    rice_impact: int = Field(RICE_MIN, ge=RICE_MIN, le=RICE_MAX)
    rice_confidence: int = Field(RICE_MIN, ge=RICE_MIN, le=RICE_MAX)
    rice_effort: int = Field(RICE_MIN, ge=RICE_MIN, le=RICE_MAX)

    owner_id: Optional[str] = None
    project_id: Optional[int] = None

    period_type: Optional[PeriodType] = None
    period_value: Optional[str] = None

    experiment_data: Optional[ExperimentData] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be empty")
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def none_tags(cls, v: Any) -> Any:
        return [] if v is None else v


class InitiativeCreate(InitiativeBase):
    pass


class InitiativeUpdate(BaseModel):
    """Free-form edit. Lifecycle fields (phase, status, parent_id) are not editable here."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    problem_statement: Optional[str] = None
    tags: Optional[List[str]] = None
    experiment_data: Optional[ExperimentData] = None


class InitiativeRead(InitiativeBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    phase: Phase
    status: Status
    parent_id: Optional[int] = None

    # Stored values are not re-validated; legacy rows may carry effort=0
    rice_reach: int = RICE_MIN
    rice_impact: int = RICE_MIN
    rice_confidence: int = RICE_MIN
    rice_effort: int = RICE_MIN

    created_at: datetime
    updated_at: Optional[datetime] = None
    updated_source: Optional[str] = None

    @property
    def experiment(self) -> ExperimentData:
        return self.experiment_data or ExperimentData()

    @property
    def is_finalized(self) -> bool:
        return self.phase == Phase.FINALIZED


class InitiativeFilter(BaseModel):
    """Query filter understood by every InitiativeStore."""

    phase: Optional[Phase] = None
    status: Optional[Status] = None
    item_type: Optional[ItemType] = None
    parent_id: Optional[int] = None
    ids: Optional[List[int]] = None
    limit: Optional[int] = Field(None, ge=1)
