"""
Client analytics events (page actions, feature usage).
"""

from sqlalchemy import String, JSON
from sqlalchemy.orm import Mapped, mapped_column

from .base import UserOwnedBase


class Event(UserOwnedBase):
    __tablename__ = "events"

    category: Mapped[str] = mapped_column(String, nullable=False, index=True)
    action: Mapped[str] = mapped_column(String, nullable=False)
    context: Mapped[dict] = mapped_column(JSON, nullable=True)
