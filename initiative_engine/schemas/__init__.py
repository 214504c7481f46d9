from .initiative import (
    ItemType,
    Phase,
    Status,
    ExperimentResult,
    NextSteps,
    ExperimentPriority,
    PeriodType,
    RICE_MIN,
    RICE_MAX,
    ExperimentData,
    InitiativeCreate,
    InitiativeUpdate,
    InitiativeRead,
    InitiativeFilter,
)
from .announcement import AnnouncementRequest, AnnouncementRecord
from .transitions import PromoteRequest, StatusChangeRequest, RiceUpdate, PeriodUpdate, FinalizeRequest
from .member import Member

__all__ = [
    "ItemType",
    "Phase",
    "Status",
    "ExperimentResult",
    "NextSteps",
    "ExperimentPriority",
    "PeriodType",
    "RICE_MIN",
    "RICE_MAX",
    "ExperimentData",
    "InitiativeCreate",
    "InitiativeUpdate",
    "InitiativeRead",
    "InitiativeFilter",
    "PromoteRequest",
    "StatusChangeRequest",
    "RiceUpdate",
    "PeriodUpdate",
    "FinalizeRequest",
    "AnnouncementRequest",
    "AnnouncementRecord",
    "Member",
]
