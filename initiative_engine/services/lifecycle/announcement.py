# product_lifecycle_engine/initiative_engine/services/lifecycle/announcement.py
"""
Announcement request emitted on finalize.

The body is the problem statement followed, for experiments, by a structured
summary (hypothesis, result, metric delta, next steps), joined as paragraphs.
"""

from __future__ import annotations

import re
from datetime import date
from typing import List, Optional

from initiative_engine.schemas.announcement import AnnouncementRequest
from initiative_engine.schemas.initiative import (
    ExperimentResult,
    InitiativeRead,
    ItemType,
    NextSteps,
)

_URL_RE = re.compile(r"https?://[^\s<>\"')\]]+")

RESULT_LABELS = {
    ExperimentResult.WON: "Won",
    ExperimentResult.LOST: "Lost",
    ExperimentResult.INCONCLUSIVE: "Inconclusive",
    ExperimentResult.PENDING: "Pending",
}

NEXT_STEPS_LABELS = {
    NextSteps.NONE: "None",
    NextSteps.DISCARD: "Discard",
    NextSteps.SCALE: "Scale to everyone",
    NextSteps.ITERATE: "Iterate",
}


def extract_first_url(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    match = _URL_RE.search(text)
    return match.group(0) if match else None


def _metric_delta(base: Optional[str], target: Optional[str], result: Optional[str]) -> Optional[str]:
    if not (base and target):
        return None
    delta = f"{base} → {target}"
    if result:
        delta += f" (result: {result})"
    return delta


def build_announcement_body(initiative: InitiativeRead) -> str:
    parts: List[str] = []
    if initiative.problem_statement:
        parts.append(f"Problem: {initiative.problem_statement}")

    if initiative.item_type == ItemType.EXPERIMENT or initiative.experiment_data is not None:
        exp = initiative.experiment
        if exp.hypothesis:
            parts.append(f"Hypothesis: {exp.hypothesis}")
        if exp.result is not None:
            parts.append(f"Experiment result: {RESULT_LABELS[exp.result]}")
        delta = _metric_delta(exp.metric_base, exp.metric_target, exp.metric_result)
        if delta:
            parts.append(f"Metrics: {delta}")
        if exp.next_steps is not None:
            parts.append(f"Next steps: {NEXT_STEPS_LABELS[exp.next_steps]}")

    return "\n\n".join(parts)


def build_announcement_request(
    initiative: InitiativeRead,
    category: str,
    source: str,
    on_date: Optional[date] = None,
    title: Optional[str] = None,
    body: Optional[str] = None,
    requested_by: Optional[str] = None,
) -> AnnouncementRequest:
    return AnnouncementRequest(
        title=(title or initiative.title).strip(),
        body=(body if body is not None else build_announcement_body(initiative)).strip(),
        date=on_date or date.today(),
        category=category,
        video_link=extract_first_url(initiative.problem_statement),
        requested_by=requested_by,
        custom_data={"initiative_id": initiative.id, "source": source},
    )


__all__ = [
    "extract_first_url",
    "build_announcement_body",
    "build_announcement_request",
]
