"""
Mentor memory. Load, save, and format per-user memory records.

Every function takes the session explicitly; records are always scoped to
one user_id and returned newest-first.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.memory import Memory
from ..models.metadata import (
    MemoryMetadata,
    MentorAdviceMeta,
    ReflectionMeta,
    dump_metadata,
    parse_metadata,
)

logger = logging.getLogger(__name__)

NO_MEMORIES_PLACEHOLDER = "No past memories available. This appears to be an early conversation."
LESSONS_HEADER = "## PAST MISTAKES & LESSONS (CRITICAL)"
HISTORY_HEADER = "## RECENT CONVERSATION HISTORY"


@dataclass(frozen=True)
class MemoryRecord:
    id: str
    user_id: str
    content: str
    created_at: datetime
    metadata: dict = field(default_factory=dict)

    @property
    def type(self) -> Optional[str]:
        return (self.metadata or {}).get("type")

    @property
    def meta(self) -> Optional[MemoryMetadata]:
        """Typed view of the metadata, None for untyped records."""
        return parse_metadata(self.metadata)

    @property
    def is_reflection(self) -> bool:
        return isinstance(self.meta, ReflectionMeta)

    @classmethod
    def from_row(cls, row: Memory) -> "MemoryRecord":
        return cls(
            id=row.id,
            user_id=row.user_id,
            content=row.content,
            created_at=row.created_at,
            metadata=dict(row.metadata_ or {}),
        )


async def fetch_recent_memories(
    db: AsyncSession,
    user_id: str,
    limit: int = 8,
) -> list[MemoryRecord]:
    """Most recent memories for a user, newest first. Empty list on failure."""
    try:
        result = await db.execute(
            select(Memory)
            .where(Memory.user_id == user_id)
            .order_by(Memory.created_at.desc())
            .limit(limit)
        )
        return [MemoryRecord.from_row(m) for m in result.scalars().all()]
    except Exception as e:
        logger.warning("Failed to load memories for user=%s: %s", user_id, e)
        return []


async def store_memory(
    db: AsyncSession,
    user_id: str,
    content: str,
    metadata: MemoryMetadata,
) -> Optional[MemoryRecord]:
    """
    Append a memory record and commit it on its own.

    Each insert is independent of the rest of the request, so an input
    stays recorded even if a later step fails. Returns None (and logs) if
    the insert fails.
    """
    try:
        row = Memory(
            user_id=user_id,
            content=content,
            metadata_=dump_metadata(metadata),
        )
        db.add(row)
        await db.commit()
        logger.debug("Stored %s memory for user=%s: %s", metadata.type, user_id, content[:50])
        return MemoryRecord.from_row(row)
    except Exception as e:
        await db.rollback()
        logger.warning("Failed to store %s memory: %s", metadata.type, e)
        return None


def _format_date(value: datetime) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def format_memories_for_prompt(memories: list[MemoryRecord]) -> str:
    """
    Render memories (newest-first) as a prompt section.

    Reflections are listed first as lessons, in the order given. Everything
    else becomes chronological history, oldest first; only mentor_advice is
    labelled "Mentor", every other type (or none) is "User".
    """
    if not memories:
        return NO_MEMORIES_PLACEHOLDER

    reflections = [m for m in memories if m.is_reflection]
    history = [m for m in memories if not m.is_reflection]

    parts = []
    if reflections:
        lessons = "\n".join(f"- [LESSON LEARNED]: {m.content}" for m in reflections)
        parts.append(f"{LESSONS_HEADER}\n{lessons}\n\n")

    lines = []
    for m in reversed(history):
        label = "Mentor" if isinstance(m.meta, MentorAdviceMeta) else "User"
        lines.append(f"[{_format_date(m.created_at)}] {label}: {m.content}")
    parts.append(f"{HISTORY_HEADER}\n" + "\n".join(lines))

    return "".join(parts)
