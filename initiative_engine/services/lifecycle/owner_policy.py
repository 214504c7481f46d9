# product_lifecycle_engine/initiative_engine/services/lifecycle/owner_policy.py
"""
Owner checks used before promotion.

The roster is consulted only to confirm an owner id is a plausible reference;
no authorization (team/project membership) is enforced here.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from initiative_engine.services.ports import MemberRoster

logger = logging.getLogger(__name__)


class OwnerPolicy(Protocol):
    def is_acceptable(self, owner_id: str) -> bool:  # pragma: no cover - interface only
        ...


class PresenceOwnerPolicy:
    """Any non-blank owner id is accepted."""

    def is_acceptable(self, owner_id: str) -> bool:
        return bool(owner_id and owner_id.strip())


class RosterOwnerPolicy:
    """Owner id must appear in the member roster."""

    def __init__(self, roster: MemberRoster) -> None:
        self.roster = roster

    def is_acceptable(self, owner_id: str) -> bool:
        if not PresenceOwnerPolicy().is_acceptable(owner_id):
            return False
        known = {m.id for m in self.roster.list()}
        if owner_id not in known:
            logger.info("owner_policy.unknown_owner", extra={"reason": "not_in_roster"})
            return False
        return True


def build_owner_policy(mode: str, roster: Optional[MemberRoster]) -> OwnerPolicy:
    """Resolve LIFECYCLE_OWNER_POLICY into a policy object."""
    if mode == "roster":
        if roster is None:
            raise ValueError("LIFECYCLE_OWNER_POLICY=roster requires a member roster")
        return RosterOwnerPolicy(roster)
    if mode == "presence":
        return PresenceOwnerPolicy()
    raise ValueError(f"Unknown owner policy: {mode}")


__all__ = ["OwnerPolicy", "PresenceOwnerPolicy", "RosterOwnerPolicy", "build_owner_policy"]
