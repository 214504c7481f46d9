# initiative_engine/db/models/__init__.py

from .initiative import ProductInitiative
from .member import TeamMember
from .company_event import CompanyEvent

__all__ = [
    "ProductInitiative",
    "TeamMember",
    "CompanyEvent",
]
