"""
Parsed resumes.
"""

from sqlalchemy import Text, JSON
from sqlalchemy.orm import Mapped, mapped_column

from .base import UserOwnedBase


class Resume(UserOwnedBase):
    __tablename__ = "resumes"

    data: Mapped[dict] = mapped_column(JSON, nullable=True, default=dict)
    raw_text: Mapped[str] = mapped_column(Text, nullable=True)
