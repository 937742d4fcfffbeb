"""
Base model with per-user ownership. Every model inherits from this.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base


def utcnow():
    return datetime.now(timezone.utc)


def new_uuid():
    return str(uuid.uuid4())


class UserOwnedBase(Base):
    """Abstract base with user_id on every row. Rows are append-only."""

    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String, primary_key=True, default=new_uuid
    )
    user_id: Mapped[str] = mapped_column(
        String, nullable=False, index=True
    )
    # Client-side default keeps microsecond ordering on SQLite as well.
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
