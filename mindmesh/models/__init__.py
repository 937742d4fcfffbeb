"""
All database models. Imported here so Base.metadata sees them for create_all().
"""

from .base import UserOwnedBase
from .memory import Memory
from .resume import Resume
from .event import Event

__all__ = [
    "UserOwnedBase",
    "Memory",
    "Resume",
    "Event",
]
