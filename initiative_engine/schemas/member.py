# product_lifecycle_engine/initiative_engine/schemas/member.py

from __future__ import annotations

from pydantic import BaseModel


class Member(BaseModel):
    """Eligible initiative owner as listed by the roster."""

    id: str
    display_name: str
