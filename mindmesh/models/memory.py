"""
Mentor memory persistence.

Append-only, timestamped text records keyed by user. The metadata column
carries a `type` discriminator; see models/metadata.py for the variants.
"""

from sqlalchemy import Text, JSON
from sqlalchemy.orm import Mapped, mapped_column

from .base import UserOwnedBase


class Memory(UserOwnedBase):
    __tablename__ = "memories"

    content: Mapped[str] = mapped_column(Text, nullable=False)
    metadata_: Mapped[dict] = mapped_column(
        "metadata", JSON, nullable=True, default=dict
    )
